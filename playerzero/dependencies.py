from __future__ import annotations

import hmac
import hashlib
import json
import logging
from datetime import timedelta

import redis.asyncio as redis
from redis.exceptions import RedisError
from fastapi import Depends, Header, HTTPException, Request
from pydantic import BaseModel

from playerzero.config import Settings
from playerzero.models import ErrorCode
from playerzero.services.clock import utcnow
from playerzero.services.feature_flags import FreeModeFlag, FreeModeRefresher

settings = Settings()
redis_client = redis.from_url(settings.redis_url, encoding="utf-8", decode_responses=True)


logger = logging.getLogger(__name__)


class ErrorResponse(BaseModel):
    code: str
    message: str


def raise_error(status_code: int, code: ErrorCode, message: str, **extra) -> None:
    err = ErrorResponse(code=code, message=message)
    raise HTTPException(status_code=status_code, detail=err.model_dump() | extra)


async def require_api_headers(
    x_api_key: str = Header(..., alias="X-API-Key"),
    x_api_ver: str | None = Header(None, alias="X-API-Ver"),
    x_user_id: int | None = Header(None, alias="X-User-ID"),
) -> int:
    if x_api_ver is None:
        raise_error(426, ErrorCode.UPGRADE_REQUIRED, "Missing API version")

    if x_api_ver != "v1":
        raise_error(426, ErrorCode.UPGRADE_REQUIRED, "Invalid API version")

    if not hmac.compare_digest(x_api_key, settings.api_key):
        raise_error(401, ErrorCode.UNAUTHORIZED, "Invalid API key")

    if x_user_id is None:
        raise_error(401, ErrorCode.UNAUTHORIZED, "Missing user ID")

    return x_user_id


def client_ip(request: Request) -> str:
    """Caller address; ``X-Forwarded-For`` is honoured only through trusted proxies."""
    client_host = request.client.host if request.client else ""
    xff = request.headers.get("X-Forwarded-For")
    if not xff or client_host not in settings.trusted_proxies:
        return client_host
    hops = [h.strip() for h in xff.split(",") if h.strip()]
    if not hops:
        return client_host
    if all(p in settings.trusted_proxies for p in hops[1:]):
        return hops[0]
    return client_host


async def _hit(*keys: str) -> list[int]:
    window = settings.rate_limit_window_s
    pipe = redis_client.pipeline()
    for key in keys:
        pipe.incr(key)
        pipe.expire(key, window)
    results = await pipe.execute()
    return results[::2]


async def rate_limit(request: Request, user_id: int = Depends(require_api_headers)) -> int:
    """Throttle requests per caller IP and per user within a fixed window."""
    try:
        ip_count, user_count = await _hit(
            f"pz:rate:ip:{client_ip(request)}", f"pz:rate:user:{user_id}"
        )
    except RedisError as exc:
        logger.exception("Redis unavailable for rate limiting: %s", exc)
        err = ErrorResponse(
            code=ErrorCode.SERVICE_UNAVAILABLE, message="Rate limiter unavailable"
        )
        raise HTTPException(status_code=503, detail=err.model_dump()) from exc
    if ip_count > settings.rate_limit_ip or user_count > settings.rate_limit_user:
        raise_error(429, ErrorCode.TOO_MANY_REQUESTS, "Rate limit exceeded")

    return user_id


def compute_signature(secret: str, payload: dict) -> str:
    body = json.dumps(payload, separators=(",", ":"), sort_keys=True).encode()
    return hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()


def verify_admin_signature(payload: dict, x_sign: str | None) -> None:
    """Reject admin requests whose ``X-Sign`` does not match the payload."""
    expected = compute_signature(settings.hmac_secret, payload)
    if not x_sign or not hmac.compare_digest(expected, x_sign):
        logger.warning("audit: invalid admin signature")
        raise_error(401, ErrorCode.UNAUTHORIZED, "Invalid signature")


def get_refresher(request: Request) -> FreeModeRefresher:
    return request.app.state.free_mode_refresher


async def get_free_mode(
    refresher: FreeModeRefresher = Depends(get_refresher),
) -> FreeModeFlag:
    """Last published flag, reloaded when the poller has fallen behind."""
    flag = refresher.current
    max_age = timedelta(seconds=2 * settings.free_mode_refresh_s)
    if flag.is_stale(utcnow(), max_age):
        logger.warning("free mode flag stale (fetched_at=%s), reloading", flag.fetched_at)
        flag = await refresher.refresh()
    return flag
