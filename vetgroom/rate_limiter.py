"""
Rate limiting for public booking traffic.

Fixed windows are counted in process memory and written back to Redis every
few seconds, so several workers converge on one count without a Redis round
trip per request. Keys are scoped by tenant and client IP: one busy clinic
cannot exhaust another clinic's booking quota.
"""

import logging
import os
import time
from threading import Lock
from typing import Optional

import redis
from fastapi import HTTPException, Request, status

from .config import RATE_LIMIT_ENABLED

logger = logging.getLogger(__name__)

redis_client: Optional[redis.Redis] = None

# {key: {"count": int, "reset_time": int, "synced_at": int}}
windows: dict[str, dict] = {}
windows_lock = Lock()

SYNC_INTERVAL_SECONDS = 10
PRUNE_INTERVAL_SECONDS = 60
_last_prune = 0

_CONNECTION_OPTIONS = {
    "decode_responses": True,
    "socket_connect_timeout": 5,
    "socket_timeout": 10,
    "retry_on_timeout": True,
    "health_check_interval": 30,
    "max_connections": 20,
}


def _masked(url: str) -> str:
    if "@" not in url:
        return "****"
    scheme = url.split(":", 1)[0]
    return f"{scheme}://****@{url.rsplit('@', 1)[1]}"


def get_redis_client() -> redis.Redis:
    """Shared Redis connection from REDIS_URL, or REDIS_HOST/PORT/DB/PASSWORD/SSL"""
    global redis_client
    if redis_client is not None:
        return redis_client

    redis_url = os.getenv("REDIS_URL")
    if redis_url:
        target = _masked(redis_url)
        client = redis.from_url(redis_url, **_CONNECTION_OPTIONS)
    else:
        host = os.getenv("REDIS_HOST", "localhost")
        port = int(os.getenv("REDIS_PORT", "6379"))
        target = f"{host}:{port}"
        client = redis.Redis(
            host=host,
            port=port,
            db=int(os.getenv("REDIS_DB", "0")),
            password=os.getenv("REDIS_PASSWORD") or None,
            ssl=os.getenv("REDIS_SSL", "false").lower() == "true",
            **_CONNECTION_OPTIONS,
        )

    try:
        client.ping()
    except redis.RedisError as e:
        logger.error(f"❌ Redis unreachable at {target}: {e}")
        raise

    logger.info(f"✅ Redis connected at {target}")
    redis_client = client
    return redis_client


def _prune_windows(now: int) -> None:
    global _last_prune
    if now - _last_prune < PRUNE_INTERVAL_SECONDS:
        return
    expired = [k for k, w in windows.items() if now >= w["reset_time"]]
    for k in expired:
        del windows[k]
    if expired:
        logger.debug(f"🧹 Dropped {len(expired)} expired rate limit windows")
    _last_prune = now


def _load_window(key: str, window_seconds: int, client: redis.Redis, now: int) -> dict:
    """Start a window, picking up a count another worker already wrote"""
    try:
        count = client.get(key)
        ttl = client.ttl(key)
    except redis.RedisError as e:
        logger.warning(f"⚠️ Could not read {key} from Redis, counting locally: {e}")
        count, ttl = None, -1

    if count and ttl > 0:
        return {"count": int(count), "reset_time": now + ttl, "synced_at": now}
    return {"count": 0, "reset_time": now + window_seconds, "synced_at": now}


def hit(key: str, limit: int, window_seconds: int, client: redis.Redis) -> tuple[bool, int, int]:
    """
    Count one request against a fixed window.

    Returns:
        (allowed, count, seconds until the window resets)
    """
    now = int(time.time())
    with windows_lock:
        _prune_windows(now)

        window = windows.get(key)
        if window is None:
            window = windows[key] = _load_window(key, window_seconds, client, now)
        elif now >= window["reset_time"]:
            window.update(count=0, reset_time=now + window_seconds, synced_at=0)

        allowed = window["count"] < limit
        if allowed:
            window["count"] += 1

        if now - window["synced_at"] >= SYNC_INTERVAL_SECONDS:
            try:
                client.set(key, window["count"], ex=window_seconds)
                window["synced_at"] = now
            except redis.RedisError as e:
                logger.warning(f"⚠️ Could not sync {key} to Redis: {e}")

        return allowed, window["count"], max(0, window["reset_time"] - now)


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def rate_limit_key(request: Request, key_prefix: str, use_ip: bool = True) -> str:
    tenant_id = request.path_params.get("tenant_id", "global")
    who = client_ip(request) if use_ip else "all"
    return f"{key_prefix}:tenant:{tenant_id}:{who}"


def create_rate_limiter(
    limit: int, window_seconds: int, key_prefix: str = "rate_limit", use_ip: bool = True
):
    """
    Build a rate limit dependency.

        booking_rate_limit = create_rate_limiter(limit=20, window_seconds=60, key_prefix="bookings")

        @router.post("/bookings")
        async def create_booking(..., _: None = Depends(booking_rate_limit)):

    Fails closed: if Redis cannot be reached the request gets a 503.
    """

    async def rate_limiter(request: Request):
        if not RATE_LIMIT_ENABLED:
            return

        key = rate_limit_key(request, key_prefix, use_ip)
        try:
            allowed, count, retry_after = hit(key, limit, window_seconds, get_redis_client())
        except redis.RedisError as e:
            logger.error(f"🔒 Rate limiter unavailable, rejecting {key}: {e}")
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Rate limiting service temporarily unavailable",
            ) from e

        if not allowed:
            logger.warning(f"🚫 Rate limit exceeded for {key} ({count}/{limit})")
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail={
                    "message": f"Demasiadas solicitudes. Máximo {limit} cada {window_seconds} segundos.",
                    "retry_after": retry_after,
                },
                headers={"Retry-After": str(retry_after)},
            )

        request.state.rate_limit_remaining = limit - count

    return rate_limiter
