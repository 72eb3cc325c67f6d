"""Fixed-window rate limiting"""

from starlette.requests import Request

from vetgroom.rate_limiter import hit, rate_limit_key


class FakeRedis:
    def __init__(self, stored=None, ttl=-2):
        self.stored = stored
        self.remaining = ttl
        self.writes = []

    def get(self, key):
        return self.stored

    def ttl(self, key):
        return self.remaining

    def set(self, key, value, ex=None):
        self.writes.append((key, value, ex))


def _request(path_params, headers=None):
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": ("10.0.0.1", 1234),
        "path_params": path_params,
    }
    return Request(scope)


def test_window_blocks_after_limit():
    client = FakeRedis()

    results = [hit("test:block", 2, 60, client)[0] for _ in range(3)]

    assert results == [True, True, False]


def test_window_resumes_count_written_by_another_worker():
    client = FakeRedis(stored="4", ttl=30)

    allowed, count, retry_after = hit("test:resume", 5, 60, client)

    assert allowed is True
    assert count == 5
    assert 0 < retry_after <= 30
    assert hit("test:resume", 5, 60, client)[0] is False


def test_key_is_scoped_by_tenant_and_forwarded_ip():
    request = _request({"tenant_id": "7"}, {"X-Forwarded-For": "201.1.1.1, 10.0.0.2"})

    assert rate_limit_key(request, "bookings") == "bookings:tenant:7:201.1.1.1"
    assert rate_limit_key(request, "bookings", use_ip=False) == "bookings:tenant:7:all"
    assert rate_limit_key(_request({}), "ai") == "ai:tenant:global:10.0.0.1"
