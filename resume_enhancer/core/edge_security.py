"""
Request-level security filter applied before routing.

Adds security headers, stamps a request id, blocks obvious automation on
API paths and rejects oversized payloads. Holds no state between requests.
"""
import logging
import re
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response

from resume_enhancer.core.rate_limit import get_client_ip

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-DNS-Prefetch-Control": "off",
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "camera=(), microphone=(), geolocation=(), browsing-topics=()",
}
HSTS_VALUE = "max-age=31536000; includeSubDomains; preload"
NO_STORE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate, proxy-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}

SUSPICIOUS_USER_AGENTS = [
    re.compile(pattern, re.IGNORECASE)
    for pattern in (r"python-requests", r"curl", r"wget", r"bot", r"scanner", r"spider")
]
ALLOWED_CRAWLERS = ("Googlebot", "bingbot")

UPLOAD_MAX_BYTES = 10 * 1024 * 1024
DEFAULT_MAX_BYTES = 1024 * 1024


def is_suspicious_user_agent(user_agent: str) -> bool:
    if any(crawler in user_agent for crawler in ALLOWED_CRAWLERS):
        return False
    return any(pattern.search(user_agent) for pattern in SUSPICIOUS_USER_AGENTS)


def max_payload_size(path: str) -> int:
    return UPLOAD_MAX_BYTES if "upload" in path else DEFAULT_MAX_BYTES


class EdgeSecurityMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, production: bool = False):
        super().__init__(app)
        self.production = production

    async def dispatch(self, request: Request, call_next) -> Response:
        path = request.url.path
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        request.scope["headers"] = [
            (name, value) for name, value in request.scope["headers"] if name != b"x-request-id"
        ] + [(b"x-request-id", request_id.encode("latin-1"))]

        user_agent = request.headers.get("user-agent", "")
        if is_suspicious_user_agent(user_agent):
            logger.warning(f"Suspicious user agent blocked: {user_agent} from {get_client_ip(request)}")
            if path.startswith("/api/"):
                return self._finalize(PlainTextResponse("Forbidden", status_code=403), path, request_id)

        content_length = request.headers.get("content-length")
        if content_length:
            try:
                size = int(content_length)
            except ValueError:
                size = 0
            if size > max_payload_size(path):
                logger.warning(f"Request too large: {size} bytes from {get_client_ip(request)}")
                return self._finalize(PlainTextResponse("Payload Too Large", status_code=413), path, request_id)

        response = await call_next(request)
        return self._finalize(response, path, request_id)

    def _finalize(self, response: Response, path: str, request_id: str) -> Response:
        response.headers.update(SECURITY_HEADERS)
        if self.production:
            response.headers["Strict-Transport-Security"] = HSTS_VALUE
        response.headers["X-Request-ID"] = request_id

        if path.startswith("/api/"):
            response.headers["X-RateLimit-Policy"] = "API endpoints are rate-limited"
        if path.startswith("/auth/"):
            response.headers.update(NO_STORE_HEADERS)
        return response
