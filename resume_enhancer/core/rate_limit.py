"""
Simple in-memory rate limiter for API endpoints.

Best effort only: counters live in the worker process and reset on restart.
"""
import logging
import time
from collections import defaultdict
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple
from fastapi import Request, HTTPException, status

logger = logging.getLogger(__name__)

# limit name -> (max requests, window seconds)
RATE_LIMITS: Dict[str, Tuple[int, int]] = {
    "api": (30, 60),
    "auth": (5, 60),
    "upload": (10, 60 * 60),
    "pdf": (20, 60 * 60),
}

# Store for rate limit tracking: {"pdf:user:<id>": [timestamps]}
rate_limit_store: Dict[str, List[float]] = defaultdict(list)

# Keys of clients that stopped sending requests are swept at most once a minute
SWEEP_INTERVAL_SECONDS = 60
_last_sweep = [0.0]


def prune_rate_limit_store(now: Optional[float] = None) -> int:
    """Drop keys whose timestamps have all left their bucket's window. Returns the number removed."""
    now = now if now is not None else time.time()
    expired = []
    for key, timestamps in rate_limit_store.items():
        window_seconds = RATE_LIMITS.get(key.split(":", 1)[0], (0, 0))[1]
        if not timestamps or timestamps[-1] <= now - window_seconds:
            expired.append(key)

    for key in expired:
        del rate_limit_store[key]

    _last_sweep[0] = now
    if expired:
        logger.debug(f"Pruned {len(expired)} idle rate limit keys")
    return len(expired)


def get_client_ip(request: Request) -> str:
    """Extract client IP address from request."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # Take the first IP in the chain
        return forwarded.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP") or request.headers.get("CF-Connecting-IP")
    if real_ip:
        return real_ip.strip()

    if request.client:
        return request.client.host

    return "unknown"


def get_client_identifier(request: Request, user_id: Optional[str] = None) -> str:
    """Prefer the authenticated user over the IP address."""
    if user_id:
        return f"user:{user_id}"
    return f"ip:{get_client_ip(request)}"


def check_rate_limit(request: Request, limit_type: str = "api", user_id: Optional[str] = None) -> None:
    """
    Check if client has exceeded the named rate limit.

    Args:
        request: FastAPI request object
        limit_type: One of RATE_LIMITS keys
        user_id: Authenticated user, if any

    Raises:
        HTTPException: 429 if rate limit exceeded
    """
    max_requests, window_seconds = RATE_LIMITS[limit_type]
    identifier = get_client_identifier(request, user_id)
    key = f"{limit_type}:{identifier}"
    now = time.time()

    if now - _last_sweep[0] >= SWEEP_INTERVAL_SECONDS:
        prune_rate_limit_store(now)

    cutoff = now - window_seconds
    rate_limit_store[key] = [
        timestamp for timestamp in rate_limit_store.get(key, [])
        if timestamp > cutoff
    ]

    request_count = len(rate_limit_store[key])

    if request_count >= max_requests:
        reset_at = rate_limit_store[key][0] + window_seconds
        logger.warning(f"Rate limit exceeded for {identifier} on '{limit_type}' ({request_count} requests in {window_seconds}s)")
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many requests. Please try again later.",
            headers={
                "X-RateLimit-Limit": str(max_requests),
                "X-RateLimit-Remaining": "0",
                "X-RateLimit-Reset": datetime.fromtimestamp(reset_at, tz=timezone.utc).isoformat(),
            },
        )

    rate_limit_store[key].append(now)

    logger.debug(f"Rate limit check passed for {identifier} on '{limit_type}' ({request_count + 1}/{max_requests})")
