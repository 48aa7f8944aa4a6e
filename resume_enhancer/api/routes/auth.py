import logging
from typing import Optional
from urllib.parse import urljoin, urlparse

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse

from resume_enhancer.api.dependencies import get_supabase_service
from resume_enhancer.core.rate_limit import check_rate_limit
from resume_enhancer.services.supabase_service import SupabaseService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


def resolve_redirect(base_url: str, target: str) -> str:
    """Resolve a redirect target against the request origin; other hosts fall back to '/'."""
    resolved = urljoin(base_url, target or "/")
    if urlparse(resolved).netloc != urlparse(base_url).netloc:
        logger.warning(f"Off-origin redirect target ignored: {target}")
        resolved = urljoin(base_url, "/")
    return resolved


# ✅ OAUTH / MAGIC LINK / EMAIL CONFIRMATION CALLBACK
@router.get("/callback")
def auth_callback(
    request: Request,
    code: Optional[str] = None,
    next: str = "/",
    type: Optional[str] = None,
    supabase: SupabaseService = Depends(get_supabase_service),
):
    check_rate_limit(request, "auth")

    if code:
        try:
            supabase.exchange_code_for_session(code)
        except Exception as e:
            # The user still lands on the site and can sign in again
            logger.error(f"Auth code exchange failed: {e}")

    base_url = str(request.base_url)
    if type == "signup":
        return RedirectResponse(resolve_redirect(base_url, "/auth/welcome"))

    return RedirectResponse(resolve_redirect(base_url, next))
