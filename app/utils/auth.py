"""
Google ID token verification.

The client signs in with Google and sends the raw ID token as a bearer
credential. We check the signature against Google's published JWKS, plus
issuer, audience and expiry, and hand the route an Identity.
"""
from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Dict, Optional

import requests
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import jwt
from jose.exceptions import JOSEError

from app.config import settings

logger = logging.getLogger("app.auth")

GOOGLE_ISSUERS = ("accounts.google.com", "https://accounts.google.com")

bearer_scheme = HTTPBearer(auto_error=False)


class TokenVerificationError(Exception):
    """Raised when an ID token fails verification."""

    def __init__(self, code: str):
        super().__init__(code)
        self.code = code


@dataclass(frozen=True)
class Identity:
    email: str
    name: Optional[str] = None
    picture: Optional[str] = None


class JWKSCache:
    """In-memory cache for the identity provider's signing keys."""

    def __init__(self, url: str, ttl_seconds: int = 300):
        self.url = url
        self.ttl_seconds = ttl_seconds
        self._jwks: Optional[Dict[str, object]] = None
        self._expires_at = 0.0
        self._lock = threading.Lock()

    def get(self) -> Dict[str, object]:
        with self._lock:
            now = time.time()
            if self._jwks is not None and self._expires_at > now:
                return self._jwks
            self._jwks = self._fetch()
            self._expires_at = now + self.ttl_seconds
            return self._jwks

    def _fetch(self) -> Dict[str, object]:
        try:
            resp = requests.get(self.url, timeout=5)
        except requests.RequestException as exc:
            raise TokenVerificationError("jwks_fetch_failed") from exc
        if resp.status_code != 200:
            raise TokenVerificationError("jwks_fetch_failed")
        try:
            jwks = resp.json()
        except ValueError as exc:
            raise TokenVerificationError("jwks_invalid") from exc
        if not isinstance(jwks, dict) or "keys" not in jwks:
            raise TokenVerificationError("jwks_invalid")
        return jwks


JWKS_CACHE = JWKSCache(settings.GOOGLE_CERTS_URL, ttl_seconds=settings.JWKS_CACHE_TTL)


def _find_key(jwks: Dict[str, object], kid: str) -> Optional[Dict[str, object]]:
    keys = jwks.get("keys")
    if not isinstance(keys, list):
        return None
    for key in keys:
        if isinstance(key, dict) and key.get("kid") == kid:
            return key
    return None


def verify_id_token(token: str, client_id: str, cache: Optional[JWKSCache] = None) -> Identity:
    """
    Validate a Google ID token and return who it belongs to.

    Raises TokenVerificationError on any failure (bad signature, unknown key,
    wrong audience/issuer, expired, missing email).
    """
    cache = cache or JWKS_CACHE
    try:
        header = jwt.get_unverified_header(token)
    except JOSEError as exc:
        raise TokenVerificationError("malformed_token") from exc

    kid = header.get("kid")
    if not kid:
        raise TokenVerificationError("missing_kid")
    key = _find_key(cache.get(), kid)
    if key is None:
        raise TokenVerificationError("unknown_kid")

    try:
        claims = jwt.decode(
            token,
            key,
            algorithms=[key.get("alg", "RS256")],
            audience=client_id,
            options={"verify_at_hash": False},
        )
    except JOSEError as exc:
        raise TokenVerificationError("invalid_token") from exc

    if claims.get("iss") not in GOOGLE_ISSUERS:
        raise TokenVerificationError("invalid_issuer")

    email = claims.get("email")
    if not isinstance(email, str) or not email:
        raise TokenVerificationError("missing_email")

    return Identity(email=email, name=claims.get("name"), picture=claims.get("picture"))


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Identity:
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise HTTPException(status_code=401, detail="Unauthorized")
    try:
        return verify_id_token(credentials.credentials, settings.GOOGLE_CLIENT_ID)
    except TokenVerificationError as exc:
        logger.warning("Authentication error: %s", exc.code)
        raise HTTPException(status_code=401, detail="Unauthorized")
