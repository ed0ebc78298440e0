"""Password hashing and signed session tokens."""

from src.infrastructure.security.passwords import hash_password, verify_password
from src.infrastructure.security.tokens import (
    TokenClaims,
    create_access_token,
    decode_access_token,
    digest_token,
    generate_token,
)

__all__ = [
    "hash_password",
    "verify_password",
    "TokenClaims",
    "create_access_token",
    "decode_access_token",
    "digest_token",
    "generate_token",
]
