"""Tests for access tokens, one-time tokens and password hashing."""

import pytest

from src.core.exceptions import AuthenticationError
from src.infrastructure.security import (
    create_access_token,
    decode_access_token,
    digest_token,
    generate_token,
    hash_password,
    verify_password,
)


class TestAccessTokens:
    def test_round_trip(self):
        token = create_access_token(7, "seller")

        claims = decode_access_token(token)

        assert claims.user_id == 7
        assert claims.role == "seller"

    def test_signed_with_configured_secret(self):
        token = create_access_token(7, "admin")

        with pytest.raises(AuthenticationError, match="signature"):
            decode_access_token(token, secret="another-secret")

    def test_tampered_payload_rejected(self):
        token = create_access_token(7, "customer")
        forged = create_access_token(7, "admin", secret="attacker")
        tampered = f"{forged.split('.')[0]}.{token.split('.')[1]}"

        with pytest.raises(AuthenticationError):
            decode_access_token(tampered)

    def test_expired_token_rejected(self):
        token = create_access_token(7, "seller", ttl_minutes=-1)

        with pytest.raises(AuthenticationError, match="expired"):
            decode_access_token(token)

    @pytest.mark.parametrize("token", ["", "no-dot", ".sig", "payload."])
    def test_malformed(self, token):
        with pytest.raises(AuthenticationError):
            decode_access_token(token)


class TestOneTimeTokens:
    def test_generated_tokens_are_unique(self):
        assert generate_token() != generate_token()

    def test_digest_is_stable_sha256(self):
        assert digest_token("abc") == (
            "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
        )


class TestPasswords:
    def test_hash_and_verify(self):
        hashed = hash_password("s3cret!")

        assert hashed != "s3cret!"
        assert verify_password("s3cret!", hashed)
        assert not verify_password("wrong", hashed)

    def test_malformed_hash_never_matches(self):
        assert not verify_password("s3cret!", "not-a-hash")
