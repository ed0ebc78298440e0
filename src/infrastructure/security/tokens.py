"""
Signed bearer tokens and one-time account tokens.

Access token layout: ``base64url(json claims) + "." + base64url(hmac_sha256)``.
Claims carry the user id (``sub``), the role and an expiry (``exp``, unix
seconds).
"""

import base64
import hashlib
import hmac
import json
import secrets
import time
from dataclasses import dataclass

from src.config import get_settings
from src.core.exceptions import AuthenticationError


@dataclass(frozen=True)
class TokenClaims:
    user_id: int
    role: str
    expires_at: int


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _b64decode(text: str) -> bytes:
    padding = "=" * (-len(text) % 4)
    return base64.urlsafe_b64decode(text + padding)


def _sign(payload: str, secret: str) -> str:
    digest = hmac.new(secret.encode(), payload.encode(), hashlib.sha256).digest()
    return _b64encode(digest)


def create_access_token(
    user_id: int,
    role: str,
    ttl_minutes: int | None = None,
    secret: str | None = None,
) -> str:
    """Create a signed access token for ``user_id``."""
    settings = get_settings()
    ttl = ttl_minutes if ttl_minutes is not None else settings.auth.token_ttl_minutes
    claims = {"sub": user_id, "role": role, "exp": int(time.time()) + ttl * 60}
    payload = _b64encode(json.dumps(claims, separators=(",", ":")).encode())
    return f"{payload}.{_sign(payload, secret or settings.auth.secret_key)}"


def decode_access_token(token: str, secret: str | None = None) -> TokenClaims:
    """
    Verify signature and expiry.

    Raises:
        AuthenticationError: malformed, tampered or expired token
    """
    secret = secret or get_settings().auth.secret_key
    payload, _, signature = token.partition(".")
    if not payload or not signature:
        raise AuthenticationError("Malformed token")

    if not hmac.compare_digest(signature, _sign(payload, secret)):
        raise AuthenticationError("Invalid token signature")

    try:
        claims = json.loads(_b64decode(payload))
        result = TokenClaims(
            user_id=int(claims["sub"]),
            role=str(claims["role"]),
            expires_at=int(claims["exp"]),
        )
    except (ValueError, KeyError, TypeError) as e:
        raise AuthenticationError("Malformed token") from e

    if result.expires_at < int(time.time()):
        raise AuthenticationError("Token expired")
    return result


def generate_token() -> str:
    """Random URL-safe token for email verification or password reset."""
    return secrets.token_urlsafe(32)


def digest_token(token: str) -> str:
    """SHA-256 hex digest; only digests of one-time tokens are stored."""
    return hashlib.sha256(token.encode()).hexdigest()
