"""Fixed-window rate limiting backed by Redis.

Groups and default limits (per minute, configurable in settings):
  - auth:  /auth/* endpoints, keyed by client IP
  - write: other POST/PUT/PATCH/DELETE, keyed by user (or IP if anonymous)
  - read:  everything else, keyed the same way

Key pattern: ``ratelimit:{group}:{identity}:{window}``. The first INCR in a
window sets the expiry. Over-limit requests get a 429 envelope with code 9001
and a Retry-After header. If Redis is unreachable the request is let through
and a warning is logged.
"""

import logging
import time

from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from config.settings import settings
from src.ap_common.errors import AppError, RateLimitError
from src.ap_common.redis_client import get_redis
from src.ap_common.response import error_response
from src.ap_gateway.auth.jwt_handler import decode_token

logger = logging.getLogger("ap.request")

WINDOW_SECONDS = 60
_EXEMPT_PATHS = frozenset({"/health", "/docs", "/openapi.json", "/redoc"})
_WRITE_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})


def classify_request(method: str, path: str) -> tuple[str, int] | None:
    """Return (group, limit-per-window) for a request, or None if exempt."""
    if path in _EXEMPT_PATHS:
        return None
    if "/auth/" in path and not path.endswith("/auth/me"):
        return "auth", settings.RATE_LIMIT_AUTH_PER_MIN
    if method.upper() in _WRITE_METHODS:
        return "write", settings.RATE_LIMIT_WRITE_PER_MIN
    return "read", settings.RATE_LIMIT_READ_PER_MIN


def client_ip(request: Request) -> str:
    """Socket peer, or the last untrusted X-Forwarded-For hop behind a trusted proxy."""
    peer = request.client.host if request.client else "unknown"
    trusted = set(settings.TRUSTED_PROXIES)
    if peer not in trusted:
        return peer
    forwarded_for = request.headers.get("X-Forwarded-For", "")
    hops = [hop.strip() for hop in forwarded_for.split(",") if hop.strip()]
    for hop in reversed(hops):
        if hop not in trusted:
            return hop
    return hops[0] if hops else peer


def identity_of(request: Request, group: str) -> str:
    """User id from a valid Bearer token, else the client IP."""
    if group != "auth":
        auth = request.headers.get("Authorization", "")
        if auth.startswith("Bearer "):
            try:
                payload = decode_token(auth[7:], expected_type="access")
                return f"user:{payload['sub']}"
            except AppError:
                pass
    return f"ip:{client_ip(request)}"


def window_key(group: str, identity: str, now: float) -> tuple[str, int]:
    """Return (redis key, seconds until the window resets)."""
    window = int(now // WINDOW_SECONDS)
    retry_after = WINDOW_SECONDS - int(now % WINDOW_SECONDS)
    return f"ratelimit:{group}:{identity}:{window}", retry_after


class RateLimitMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if not settings.RATE_LIMIT_ENABLED:
            return await call_next(request)

        rule = classify_request(request.method, request.url.path)
        if rule is None:
            return await call_next(request)
        group, limit = rule

        key, retry_after = window_key(group, identity_of(request, group), time.time())
        try:
            redis = await get_redis()
            count = await redis.incr(key)
            if count == 1:
                await redis.expire(key, WINDOW_SECONDS)
        except RedisError:
            logger.warning("rate limit check skipped, redis unavailable key=%s", key)
            return await call_next(request)

        if count > limit:
            err = RateLimitError(retry_after)
            body = error_response(err.code, err.message, err.details)
            return JSONResponse(
                status_code=err.http_status,
                content=body.model_dump(),
                headers={"Retry-After": str(retry_after)},
            )
        return await call_next(request)
