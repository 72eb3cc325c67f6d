"""Health endpoints and security headers"""

from fastapi import FastAPI
from fastapi.responses import HTMLResponse
from fastapi.testclient import TestClient

from vetgroom.main import app
from vetgroom.security_headers import API_CSP, RECEIPT_CSP, SecurityHeadersMiddleware


def test_root():
    client = TestClient(app)
    response = client.get("/")

    assert response.status_code == 200
    assert response.json() == {"message": "VetGroom API is running"}


def test_health():
    client = TestClient(app)
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["service"] == "vetgroom-api"
    assert body["version"]
    assert "timestamp" in body


def test_protected_routes_need_a_token():
    client = TestClient(app)

    assert client.get("/tenants").status_code in (401, 403)


def _headers_app() -> TestClient:
    demo = FastAPI()
    demo.add_middleware(SecurityHeadersMiddleware, exclude_paths=["/health"])

    @demo.get("/json")
    def json_route():
        return {"ok": True}

    @demo.get("/receipt", response_class=HTMLResponse)
    def receipt_route():
        return "<p>Recibo</p>"

    @demo.get("/health")
    def health_route():
        return {"status": "healthy"}

    return TestClient(demo)


def test_json_responses_are_locked_down():
    response = _headers_app().get("/json")

    assert response.headers["Content-Security-Policy"] == API_CSP
    assert response.headers["X-Frame-Options"] == "DENY"
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["Cache-Control"] == "no-store, no-cache, must-revalidate"
    assert "Strict-Transport-Security" not in response.headers


def test_receipts_can_be_framed_and_styled():
    response = _headers_app().get("/receipt")

    assert response.headers["Content-Security-Policy"] == RECEIPT_CSP
    assert response.headers["X-Frame-Options"] == "SAMEORIGIN"


def test_excluded_paths_are_untouched():
    response = _headers_app().get("/health")

    assert "Content-Security-Policy" not in response.headers
