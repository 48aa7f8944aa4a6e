import logging
from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from resume_enhancer.api.dependencies import (
    get_document_ai,
    get_pdf_renderer,
    get_resume_enhancer,
    get_supabase_service,
)
from resume_enhancer.core.auth_dependency import AuthenticatedUser, get_current_user
from resume_enhancer.core.exceptions import (
    DocumentExtractionError,
    EnhancementError,
    PdfRenderError,
    StorageError,
)
from resume_enhancer.core.rate_limit import check_rate_limit
from resume_enhancer.db.session import get_db
from resume_enhancer.db.models.profile import Profile
from resume_enhancer.db.models.resume import Resume
from resume_enhancer.schemas.resume import (
    ConvertToPdfRequest,
    ConvertToPdfResponse,
    ProcessResumeRequest,
    ProcessResumeResponse,
    UpdateResumeRequest,
    UpdateResumeResponse,
)
from resume_enhancer.services.ai_service import ResumeEnhancer
from resume_enhancer.services.resume_parser import UnsupportedFileType, extract_resume_text, guess_mime_type
from resume_enhancer.services.resume_renderer import load_preview, render_resume_html, render_resume_text
from resume_enhancer.services.supabase_service import SupabaseService, processed_file_path

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Resume"])


def _get_user_resume(db: Session, resume_id: str, user_id: str) -> Resume:
    """Resumes are only visible to their owner; anything else is a 404."""
    resume = db.query(Resume).filter(
        Resume.id == resume_id,
        Resume.user_id == user_id,
    ).first()
    if not resume:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Resume not found")
    return resume


def _mark_failed(db: Session, resume: Resume) -> None:
    db.rollback()
    resume.status = "failed"
    db.commit()


@router.post("/convert-to-pdf", response_model=ConvertToPdfResponse, response_model_by_alias=True)
async def convert_to_pdf(
    body: ConvertToPdfRequest,
    request: Request,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    storage: SupabaseService = Depends(get_supabase_service),
    renderer=Depends(get_pdf_renderer),
):
    check_rate_limit(request, "pdf", current_user.id)

    if not body.resume_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Resume ID is required")

    resume = _get_user_resume(db, body.resume_id, current_user.id)

    html = body.rendered_html
    if not html and resume.resume_preview_json:
        try:
            html = render_resume_html(resume.resume_preview_json)
        except ValueError:
            logger.warning(f"Stored preview JSON unreadable: resume_id={resume.id}")
    if not html:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Resume design data not found")

    try:
        pdf_bytes = await renderer.render(html)
    except PdfRenderError as e:
        logger.error(f"PDF conversion failed: resume_id={resume.id}, error={e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to generate PDF")

    pdf_path = processed_file_path(current_user.id, resume.id, "pdf")
    try:
        storage.upload(pdf_path, pdf_bytes, "application/pdf", upsert=True)
    except StorageError:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to upload PDF")

    try:
        download_url = storage.create_signed_url(pdf_path)
    except StorageError:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to create download URL")

    logger.info(f"Converted resume to PDF: user_id={current_user.id}, resume_id={resume.id}")
    return ConvertToPdfResponse(pdf_path=pdf_path, download_url=download_url)


@router.post("/update-resume", response_model=UpdateResumeResponse, response_model_by_alias=True)
def update_resume(
    body: UpdateResumeRequest,
    request: Request,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Replace the editable content of a resume, keeping its design."""
    check_rate_limit(request, "api", current_user.id)

    if not body.resume_id or not body.updated_content:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Resume ID and updated content are required")

    resume = _get_user_resume(db, body.resume_id, current_user.id)

    try:
        preview = load_preview(resume.resume_preview_json)
    except ValueError:
        logger.warning(f"Stored preview JSON unreadable, replacing it: resume_id={resume.id}")
        preview = {}

    updated_preview = {**preview, "content": body.updated_content}
    resume.resume_preview_json = updated_preview
    db.commit()

    logger.info(f"Updated resume content: user_id={current_user.id}, resume_id={resume.id}")
    return UpdateResumeResponse(updated_data=updated_preview)


@router.post(
    "/process-resume",
    response_model=ProcessResumeResponse,
    response_model_by_alias=True,
    response_model_exclude_none=True,
)
async def process_resume(
    body: ProcessResumeRequest,
    request: Request,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    storage: SupabaseService = Depends(get_supabase_service),
    document_ai=Depends(get_document_ai),
    enhancer: ResumeEnhancer = Depends(get_resume_enhancer),
):
    """
    Extract the text of an uploaded resume and restyle it with the AI model.

    With ``extractOnly`` the extracted text is returned and nothing is stored.
    Every failure after the resume enters ``processing`` leaves it ``failed``.
    """
    check_rate_limit(request, "upload", current_user.id)

    if not body.resume_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Resume ID is required")

    profile = db.query(Profile).filter(Profile.id == current_user.id).first()
    if not profile:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User profile not found")

    if profile.resumes_used >= profile.resumes_limit:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Resume limit reached for your subscription")

    resume = _get_user_resume(db, body.resume_id, current_user.id)
    previous_status = resume.status

    resume.status = "processing"
    db.commit()

    # Download
    try:
        if not resume.original_file_path:
            raise StorageError("Resume has no original file")
        content = storage.download(resume.original_file_path)
    except StorageError as e:
        logger.error(f"Resume download failed: resume_id={resume.id}, error={e}")
        _mark_failed(db, resume)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to download resume file")

    # Extract
    try:
        resume_text = await extract_resume_text(
            content,
            guess_mime_type(resume.original_file_path),
            document_ai,
        )
    except UnsupportedFileType as e:
        _mark_failed(db, resume)
        raise HTTPException(status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE, detail=str(e))
    except DocumentExtractionError as e:
        logger.error(f"Text extraction failed: resume_id={resume.id}, error={e}", exc_info=True)
        _mark_failed(db, resume)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to extract text from resume")

    if not resume_text:
        _mark_failed(db, resume)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to extract meaningful text from the resume. The file might be empty or corrupted.",
        )

    if body.extract_only:
        resume.status = previous_status
        db.commit()
        return ProcessResumeResponse(extracted_text=resume_text)

    # Enhance
    try:
        resume_json = await run_in_threadpool(
            enhancer.enhance,
            resume_text,
            body.enhancement_styles,
            body.custom_instructions,
        )
        text_path = processed_file_path(current_user.id, resume.id, "txt")
        storage.upload(text_path, render_resume_text(resume_json).encode("utf-8"), "text/plain", upsert=True)
    except (EnhancementError, StorageError) as e:
        logger.error(f"Resume enhancement failed: resume_id={resume.id}, error={e}", exc_info=True)
        _mark_failed(db, resume)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to process resume with AI")

    resume.processed_file_path = text_path
    resume.resume_preview_json = resume_json
    resume.enhancement_styles = body.enhancement_styles
    resume.custom_instructions = body.custom_instructions
    resume.status = "completed"
    profile.resumes_used = profile.resumes_used + 1
    db.commit()

    logger.info(f"Processed resume: user_id={current_user.id}, resume_id={resume.id}, resumes_used={profile.resumes_used}")
    return ProcessResumeResponse(
        resume_id=resume.id,
        status="completed",
        processed_path=text_path,
    )
