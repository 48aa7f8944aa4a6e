"""
Client dependencies for the route handlers.

Each external integration is built from config per request and can be
swapped in tests through ``app.dependency_overrides``.
"""
import logging
from typing import Optional

from fastapi import HTTPException, status

from resume_enhancer.core import config
from resume_enhancer.core.exceptions import ConfigurationError, DocumentExtractionError
from resume_enhancer.llm.openai_provider import OpenAIProvider
from resume_enhancer.services.ai_service import ResumeEnhancer
from resume_enhancer.services.ats_service import ATSAnalyzer
from resume_enhancer.services.document_ai import DocumentAIClient
from resume_enhancer.services.pdf_renderer import PdfRenderer
from resume_enhancer.services.stripe_service import StripeBillingClient
from resume_enhancer.services.supabase_service import SupabaseService

logger = logging.getLogger(__name__)


def get_billing_client() -> StripeBillingClient:
    return StripeBillingClient(config.STRIPE_SECRET_KEY, config.STRIPE_WEBHOOK_SECRET)


def get_supabase_service() -> SupabaseService:
    try:
        return SupabaseService.from_config(
            config.SUPABASE_URL,
            config.SUPABASE_SERVICE_ROLE_KEY,
            config.SUPABASE_STORAGE_BUCKET,
        )
    except ConfigurationError as e:
        logger.error(str(e))
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Storage not configured")


def get_pdf_renderer() -> PdfRenderer:
    return PdfRenderer()


def get_document_ai() -> Optional[DocumentAIClient]:
    """Document AI client, or None when no processor is configured."""
    if not config.GOOGLE_PROCESSOR_ID:
        return None
    try:
        return DocumentAIClient.from_credentials_file(
            config.GOOGLE_APPLICATION_CREDENTIALS,
            config.GOOGLE_PROCESSOR_ID,
            config.GOOGLE_PROCESSOR_LOCATION,
        )
    except DocumentExtractionError as e:
        logger.error(f"Document AI unavailable: {e}")
        return None


def get_resume_enhancer() -> ResumeEnhancer:
    try:
        provider = OpenAIProvider()
    except ValueError as e:
        logger.error(str(e))
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="AI service not configured")
    return ResumeEnhancer(provider, config.OPENAI_MODEL)


def get_ats_analyzer() -> ATSAnalyzer:
    try:
        provider = OpenAIProvider()
    except ValueError as e:
        logger.error(str(e))
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="AI service not configured")
    return ATSAnalyzer(provider, config.OPENAI_MODEL)
