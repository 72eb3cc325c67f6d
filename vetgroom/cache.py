"""
Redis cache for tenant configuration that is read on every availability
check: business hours and the service catalogue.

Keys live under `tenant:<id>:`. Without Redis (or with CACHE_ENABLED=false)
every call is a miss and writes are dropped. After a connection failure the
cache stays off for RECONNECT_BACKOFF_SECONDS before trying Redis again.
"""
import json
import logging
import time
from typing import Any, Callable, Optional

import redis

from .config import CACHE_ENABLED
from .rate_limiter import get_redis_client

logger = logging.getLogger(__name__)

BUSINESS_HOURS_TTL = 3600
SERVICES_TTL = 600
RECONNECT_BACKOFF_SECONDS = 30


class TenantCache:
    """JSON values in Redis, namespaced per tenant"""

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self._client: Optional[redis.Redis] = None
        self._retry_at = 0.0

    @staticmethod
    def key(tenant_id: int, name: str) -> str:
        return f"tenant:{tenant_id}:{name}"

    def _connect(self) -> Optional[redis.Redis]:
        if not self.enabled:
            return None
        if self._client is None:
            if time.monotonic() < self._retry_at:
                return None
            try:
                self._client = get_redis_client()
            except redis.RedisError as e:
                logger.warning(f"⚠️ Redis cache unavailable, retrying in {RECONNECT_BACKOFF_SECONDS}s: {e}")
                self._back_off()
                return None
        return self._client

    def _back_off(self):
        self._client = None
        self._retry_at = time.monotonic() + RECONNECT_BACKOFF_SECONDS

    def _run(self, action: str, key: str, fn: Callable[[redis.Redis], Any], default: Any):
        client = self._connect()
        if client is None:
            return default
        try:
            return fn(client)
        except (redis.ConnectionError, redis.TimeoutError) as e:
            logger.error(f"❌ Cache {action} lost Redis for {key}: {e}")
            self._back_off()
            return default
        except redis.RedisError as e:
            logger.error(f"❌ Cache {action} failed for {key}: {e}")
            return default

    def get(self, tenant_id: int, name: str) -> Optional[Any]:
        key = self.key(tenant_id, name)
        raw = self._run("get", key, lambda c: c.get(key), None)
        if raw is None:
            return None
        logger.debug(f"✅ Cache hit: {key}")
        return json.loads(raw)

    def set(self, tenant_id: int, name: str, value: Any, ttl: int) -> bool:
        key = self.key(tenant_id, name)
        return self._run("set", key, lambda c: bool(c.setex(key, ttl, json.dumps(value))), False)

    def delete(self, tenant_id: int, name: str) -> bool:
        key = self.key(tenant_id, name)
        return self._run("delete", key, lambda c: bool(c.delete(key)), False)

    def clear_tenant(self, tenant_id: int) -> int:
        pattern = self.key(tenant_id, "*")

        def _clear(client: redis.Redis) -> int:
            keys = list(client.scan_iter(match=pattern))
            return client.delete(*keys) if keys else 0

        deleted = self._run("clear", pattern, _clear, 0)
        if deleted:
            logger.debug(f"🧹 Cleared {deleted} cached entries for tenant {tenant_id}")
        return deleted


cache = TenantCache(enabled=CACHE_ENABLED)


def get_business_hours_cached(tenant_id: int) -> Optional[list]:
    return cache.get(tenant_id, "business_hours")


def set_business_hours_cached(tenant_id: int, hours: list) -> bool:
    return cache.set(tenant_id, "business_hours", hours, BUSINESS_HOURS_TTL)


def invalidate_business_hours_cache(tenant_id: int) -> bool:
    return cache.delete(tenant_id, "business_hours")


def get_services_cached(tenant_id: int) -> Optional[list]:
    return cache.get(tenant_id, "services")


def set_services_cached(tenant_id: int, services: list) -> bool:
    return cache.set(tenant_id, "services", services, SERVICES_TTL)


def invalidate_services_cache(tenant_id: int) -> bool:
    return cache.delete(tenant_id, "services")


def invalidate_tenant_cache(tenant_id: int) -> int:
    """Drop everything cached for a tenant, e.g. after its settings change"""
    return cache.clear_tenant(tenant_id)
