"""Tenant cache behaviour when Redis is up, down or flaky"""

import json
from types import SimpleNamespace

import pytest
import redis

from vetgroom import cache as cache_module
from vetgroom.cache import TenantCache
from vetgroom.domain.scheduling.availability_service import AvailabilityService


class FakeRedis:
    def __init__(self):
        self.data = {}

    def get(self, key):
        return self.data.get(key)

    def setex(self, key, ttl, value):
        self.data[key] = value
        return True

    def delete(self, *keys):
        return sum(1 for k in keys if self.data.pop(k, None) is not None)


@pytest.fixture
def clock(monkeypatch):
    now = SimpleNamespace(value=1000.0)
    monkeypatch.setattr(cache_module, "time", SimpleNamespace(monotonic=lambda: now.value))
    return now


@pytest.fixture
def unreachable(monkeypatch):
    attempts = []

    def connect():
        attempts.append(1)
        raise redis.ConnectionError("Connection refused")

    monkeypatch.setattr(cache_module, "get_redis_client", connect)
    return attempts


def test_values_are_namespaced_per_tenant(monkeypatch):
    fake = FakeRedis()
    monkeypatch.setattr(cache_module, "get_redis_client", lambda: fake)
    tenant_cache = TenantCache()

    assert tenant_cache.set(3, "services", [{"id": 1}], ttl=60) is True

    assert json.loads(fake.data["tenant:3:services"]) == [{"id": 1}]
    assert tenant_cache.get(3, "services") == [{"id": 1}]
    assert tenant_cache.get(4, "services") is None
    assert tenant_cache.delete(3, "services") is True


def test_disabled_cache_never_connects(unreachable):
    tenant_cache = TenantCache(enabled=False)

    assert tenant_cache.get(1, "business_hours") is None
    assert tenant_cache.set(1, "business_hours", [], ttl=60) is False
    assert unreachable == []


def test_failed_connection_is_not_retried_until_backoff_passes(clock, unreachable):
    tenant_cache = TenantCache()

    for _ in range(5):
        assert tenant_cache.get(1, "business_hours") is None
    assert len(unreachable) == 1

    clock.value += cache_module.RECONNECT_BACKOFF_SECONDS + 1
    tenant_cache.get(1, "business_hours")
    assert len(unreachable) == 2


def test_lost_connection_backs_off(clock, monkeypatch):
    calls = []

    class DroppingRedis(FakeRedis):
        def get(self, key):
            calls.append(key)
            raise redis.ConnectionError("Connection reset by peer")

    monkeypatch.setattr(cache_module, "get_redis_client", DroppingRedis)
    tenant_cache = TenantCache()

    assert tenant_cache.get(1, "services") is None
    assert tenant_cache.get(1, "services") is None
    assert calls == ["tenant:1:services"]


def test_availability_check_connects_once_while_redis_is_down(
    db, tenant, booking_day, clock, unreachable, monkeypatch
):
    monkeypatch.setattr(cache_module, "cache", TenantCache(enabled=True))

    result = AvailabilityService(db, tenant).check_availability(booking_day, "16:30", 60, 30)

    assert result.available is False
    assert result.alternatives
    assert len(unreachable) == 1
