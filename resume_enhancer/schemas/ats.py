"""
Pydantic schemas for ATS compatibility analysis.
"""
from typing import List, Optional
from pydantic import BaseModel, Field


class ATSAnalyzeRequest(BaseModel):
    resume_text: Optional[str] = Field(None, alias="resumeText")
    job_description: Optional[str] = Field(None, alias="jobDescription", max_length=20000)

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "resumeText": "Ada Lovelace\nAnalyst\n...",
                "jobDescription": "We are hiring a data analyst..."
            }
        }


class ATSAnalysis(BaseModel):
    """Sub-scores are 0-100; overall is their weighted average."""
    keyword_match: int = Field(..., alias="keywordMatch")
    format_score: int = Field(..., alias="formatScore")
    content_quality: int = Field(..., alias="contentQuality")
    readability_score: int = Field(..., alias="readabilityScore")
    structure_score: int = Field(..., alias="structureScore")
    overall_score: int = Field(..., alias="overallScore")
    recommendations: List[str] = Field(default_factory=list)

    class Config:
        populate_by_name = True


class ATSAnalyzeResponse(BaseModel):
    success: bool = True
    analysis: ATSAnalysis
    ats_analyses_used: int = Field(..., alias="atsAnalysesUsed")
    ats_analyses_limit: int = Field(..., alias="atsAnalysesLimit")

    class Config:
        populate_by_name = True
