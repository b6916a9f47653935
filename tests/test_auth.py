"""
Google ID token verification with locally signed RS256 tokens.
"""
import time

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials
from jose import jwk, jwt

from app.utils import auth as auth_mod
from app.utils.auth import Identity, TokenVerificationError, get_current_user, verify_id_token

CLIENT_ID = "test-client.apps.googleusercontent.com"
KID = "test-key"


def _keypair():
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    )
    public_pem = key.public_key().public_bytes(
        serialization.Encoding.PEM,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return private_pem, public_pem


PRIVATE_PEM, PUBLIC_PEM = _keypair()


class _StaticJWKS:
    def __init__(self, kid=KID):
        public = jwk.construct(PUBLIC_PEM, algorithm="RS256").to_dict()
        public["kid"] = kid
        self.jwks = {"keys": [public]}

    def get(self):
        return self.jwks


def _token(kid=KID, **overrides):
    now = int(time.time())
    claims = {
        "iss": "https://accounts.google.com",
        "aud": CLIENT_ID,
        "sub": "1234567890",
        "email": "alice@example.com",
        "name": "Alice",
        "picture": "https://example.com/alice.png",
        "iat": now,
        "exp": now + 3600,
    }
    claims.update(overrides)
    claims = {k: v for k, v in claims.items() if v is not None}
    return jwt.encode(claims, PRIVATE_PEM, algorithm="RS256", headers={"kid": kid})


def test_valid_token_returns_identity():
    identity = verify_id_token(_token(), CLIENT_ID, cache=_StaticJWKS())
    assert identity == Identity(
        email="alice@example.com", name="Alice", picture="https://example.com/alice.png"
    )


def test_short_issuer_is_accepted():
    identity = verify_id_token(_token(iss="accounts.google.com"), CLIENT_ID, cache=_StaticJWKS())
    assert identity.email == "alice@example.com"


@pytest.mark.parametrize(
    "overrides, code",
    [
        ({"aud": "someone-else"}, "invalid_token"),
        ({"exp": int(time.time()) - 600}, "invalid_token"),
        ({"iss": "https://evil.example.com"}, "invalid_issuer"),
        ({"email": None}, "missing_email"),
    ],
)
def test_bad_claims_are_rejected(overrides, code):
    with pytest.raises(TokenVerificationError) as exc_info:
        verify_id_token(_token(**overrides), CLIENT_ID, cache=_StaticJWKS())
    assert exc_info.value.code == code


def test_unknown_kid_is_rejected():
    with pytest.raises(TokenVerificationError) as exc_info:
        verify_id_token(_token(kid="rotated"), CLIENT_ID, cache=_StaticJWKS())
    assert exc_info.value.code == "unknown_kid"


def test_garbage_token_is_rejected():
    with pytest.raises(TokenVerificationError) as exc_info:
        verify_id_token("not-a-jwt", CLIENT_ID, cache=_StaticJWKS())
    assert exc_info.value.code == "malformed_token"


def test_dependency_maps_failures_to_401(monkeypatch):
    monkeypatch.setattr(auth_mod, "JWKS_CACHE", _StaticJWKS())
    monkeypatch.setattr(auth_mod.settings, "GOOGLE_CLIENT_ID", CLIENT_ID)

    ok = HTTPAuthorizationCredentials(scheme="Bearer", credentials=_token())
    assert get_current_user(ok).email == "alice@example.com"

    with pytest.raises(HTTPException) as exc_info:
        get_current_user(None)
    assert exc_info.value.status_code == 401

    bad = HTTPAuthorizationCredentials(scheme="Bearer", credentials=_token(aud="other"))
    with pytest.raises(HTTPException) as exc_info:
        get_current_user(bad)
    assert exc_info.value.status_code == 401


class _FakeResponse:
    def __init__(self, status_code, payload):
        self.status_code = status_code
        self._payload = payload

    def json(self):
        return self._payload


def test_jwks_cache_fetches_once_within_ttl(monkeypatch):
    calls = []

    def fake_get(url, timeout):
        calls.append(url)
        return _FakeResponse(200, {"keys": []})

    monkeypatch.setattr(auth_mod.requests, "get", fake_get)
    cache = auth_mod.JWKSCache("https://certs.example.com", ttl_seconds=300)
    assert cache.get() == {"keys": []}
    assert cache.get() == {"keys": []}
    assert calls == ["https://certs.example.com"]


def test_jwks_cache_reports_fetch_failure(monkeypatch):
    monkeypatch.setattr(auth_mod.requests, "get", lambda url, timeout: _FakeResponse(503, {}))
    cache = auth_mod.JWKSCache("https://certs.example.com")
    with pytest.raises(TokenVerificationError) as exc_info:
        cache.get()
    assert exc_info.value.code == "jwks_fetch_failed"
