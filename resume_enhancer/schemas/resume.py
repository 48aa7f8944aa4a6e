"""
Pydantic schemas for resume endpoints.
"""
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class ConvertToPdfRequest(BaseModel):
    resume_id: Optional[str] = Field(None, alias="resumeId")
    rendered_html: Optional[str] = Field(None, alias="renderedHtml", description="HTML rendered by the client preview")

    class Config:
        populate_by_name = True


class ConvertToPdfResponse(BaseModel):
    success: bool = True
    message: str = "PDF conversion completed"
    pdf_path: str = Field(..., alias="pdfPath")
    download_url: Optional[str] = Field(None, alias="downloadUrl", description="Signed URL valid for one hour")

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "success": True,
                "message": "PDF conversion completed",
                "pdfPath": "processed/<user-id>/<resume-id>.pdf",
                "downloadUrl": "https://<project>.supabase.co/storage/v1/object/sign/resumes/..."
            }
        }


class UpdateResumeRequest(BaseModel):
    resume_id: Optional[str] = Field(None, alias="resumeId")
    updated_content: Optional[Dict[str, Any]] = Field(None, alias="updatedContent")

    class Config:
        populate_by_name = True


class UpdateResumeResponse(BaseModel):
    success: bool = True
    message: str = "Resume updated successfully"
    updated_data: Dict[str, Any] = Field(..., alias="updatedData")

    class Config:
        populate_by_name = True


class ProcessResumeRequest(BaseModel):
    resume_id: Optional[str] = Field(None, alias="resumeId")
    enhancement_styles: List[str] = Field(default_factory=list, alias="enhancementStyles")
    custom_instructions: Optional[str] = Field(None, alias="customInstructions", max_length=2000)
    extract_only: bool = Field(False, alias="extractOnly")

    class Config:
        populate_by_name = True


class ProcessResumeResponse(BaseModel):
    success: bool = True
    resume_id: Optional[str] = Field(None, alias="resumeId")
    status: Optional[str] = None
    processed_path: Optional[str] = Field(None, alias="processedPath")
    extracted_text: Optional[str] = Field(None, alias="extractedText")

    class Config:
        populate_by_name = True
