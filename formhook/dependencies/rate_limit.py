"""
Rate limit dependency for public submission routes.
"""
from fastapi import Request, HTTPException, status
from formhook.config import settings
from formhook.routes.metrics import track_rate_limit_exceeded
from formhook.services.rate_limiter import rate_limiter


def get_client_ip(request: Request) -> str:
    """
    Client IP used for rate limiting and stored on submissions.

    X-Forwarded-For is only read when the connecting peer is listed in
    TRUSTED_PROXIES; the nearest hop that is not itself a trusted proxy
    is taken. Otherwise the socket address is used.
    """
    peer = request.client.host if request.client else "unknown"
    trusted = settings.TRUSTED_PROXIES

    forwarded = request.headers.get("x-forwarded-for")
    if not forwarded or peer not in trusted:
        return peer

    hops = [hop.strip() for hop in forwarded.split(",") if hop.strip()]
    for hop in reversed(hops):
        if hop not in trusted:
            return hop
    return hops[0] if hops else peer


async def check_submission_rate_limit(request: Request):
    """
    Check the submission rate limit for the calling IP.

    Raises 429 if limit exceeded.
    """
    allowed, retry_after = await rate_limiter.is_allowed(get_client_ip(request))

    if not allowed:
        track_rate_limit_exceeded()
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many submissions from this IP, please try again later",
            headers={"Retry-After": str(retry_after)}
        )
