"""Firebase ID token verification"""

import asyncio
import base64
import json
import time
from datetime import datetime, timedelta, timezone

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.x509.oid import NameOID
from fastapi import HTTPException

from vetgroom import auth

PROJECT = "vetgroom-test"


def _b64(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode()


@pytest.fixture(scope="module")
def signing_key():
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "securetoken")])
    now = datetime.now(timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(days=1))
        .not_valid_after(now + timedelta(days=1))
        .sign(key, hashes.SHA256())
    )
    return key, cert.public_bytes(serialization.Encoding.PEM).decode()


@pytest.fixture
def firebase(monkeypatch, signing_key):
    _, pem = signing_key

    async def fake_keys(force_refresh=False):
        return {"kid-1": pem}

    monkeypatch.setattr(auth, "FIREBASE_PROJECT_ID", PROJECT)
    monkeypatch.setattr(auth, "get_google_public_keys", fake_keys)


def make_token(key, header=None, **claims) -> str:
    now = int(time.time())
    body = {
        "aud": PROJECT,
        "iss": f"https://securetoken.google.com/{PROJECT}",
        "sub": "uid-123",
        "email": "vet@clinicademo.mx",
        "iat": now - 10,
        "exp": now + 3600,
        "auth_time": now - 10,
    }
    body.update(claims)
    head = _b64(json.dumps(header or {"alg": "RS256", "kid": "kid-1"}).encode())
    payload = _b64(json.dumps(body).encode())
    signature = key.sign(f"{head}.{payload}".encode(), padding.PKCS1v15(), hashes.SHA256())
    return f"{head}.{payload}.{_b64(signature)}"


def _verify(token):
    return asyncio.run(auth.verify_firebase_token(token))


def test_valid_token_returns_claims(firebase, signing_key):
    claims = _verify(make_token(signing_key[0]))

    assert claims["sub"] == "uid-123"
    assert claims["email"] == "vet@clinicademo.mx"


@pytest.mark.parametrize(
    "claims",
    [
        {"aud": "other-project"},
        {"iss": "https://securetoken.google.com/other-project"},
        {"exp": 1},
        {"iat": int(time.time()) + 3600},
    ],
)
def test_bad_claims_are_rejected(firebase, signing_key, claims):
    with pytest.raises(HTTPException) as exc:
        _verify(make_token(signing_key[0], **claims))

    assert exc.value.status_code == 401


def test_tampered_payload_is_rejected(firebase, signing_key):
    head, _, signature = make_token(signing_key[0]).split(".")
    forged = _b64(json.dumps({"sub": "someone-else"}).encode())

    with pytest.raises(HTTPException) as exc:
        _verify(f"{head}.{forged}.{signature}")

    assert exc.value.detail == "Invalid token signature"


def test_wrong_algorithm_and_unknown_key(firebase, signing_key):
    with pytest.raises(HTTPException):
        _verify(make_token(signing_key[0], header={"alg": "HS256", "kid": "kid-1"}))
    with pytest.raises(HTTPException) as exc:
        _verify(make_token(signing_key[0], header={"alg": "RS256", "kid": "kid-9"}))

    assert exc.value.detail == "Unable to verify token signature"


def test_malformed_token(firebase):
    with pytest.raises(HTTPException) as exc:
        _verify("not-a-jwt")

    assert exc.value.detail == "Invalid token format"
