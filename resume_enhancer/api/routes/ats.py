import logging
from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from resume_enhancer.api.dependencies import get_ats_analyzer
from resume_enhancer.core.auth_dependency import AuthenticatedUser, get_current_user
from resume_enhancer.core.exceptions import EnhancementError
from resume_enhancer.core.rate_limit import check_rate_limit
from resume_enhancer.db.session import get_db
from resume_enhancer.db.models.profile import Profile
from resume_enhancer.schemas.ats import ATSAnalyzeRequest, ATSAnalyzeResponse
from resume_enhancer.services.ats_service import ATSAnalyzer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["ATS"])


@router.post("/ats-analyze", response_model=ATSAnalyzeResponse, response_model_by_alias=True)
async def ats_analyze(
    body: ATSAnalyzeRequest,
    request: Request,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    analyzer: ATSAnalyzer = Depends(get_ats_analyzer),
):
    """
    Score a resume's ATS compatibility, optionally against a job description.

    Counts against the profile's ATS analysis allowance only when scoring succeeds.
    """
    check_rate_limit(request, "api", current_user.id)

    if not body.resume_text or not body.resume_text.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Resume text is required and cannot be empty")

    profile = db.query(Profile).filter(Profile.id == current_user.id).first()
    if not profile:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User profile not found")

    if profile.ats_analyses_used >= profile.ats_analyses_limit:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="ATS analysis limit reached for your subscription")

    try:
        analysis = await run_in_threadpool(analyzer.analyze, body.resume_text, body.job_description)
    except EnhancementError as e:
        logger.error(f"ATS analysis failed: user_id={current_user.id}, error={e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to analyze ATS score")

    profile.ats_analyses_used = profile.ats_analyses_used + 1
    db.commit()

    logger.info(f"ATS analysis: user_id={current_user.id}, overall_score={analysis.overall_score}, used={profile.ats_analyses_used}")
    return ATSAnalyzeResponse(
        analysis=analysis,
        ats_analyses_used=profile.ats_analyses_used,
        ats_analyses_limit=profile.ats_analyses_limit,
    )
