"""User account entity."""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field


class UserRole(str, Enum):
    """Access roles."""

    ADMIN = "admin"
    SELLER = "seller"
    CUSTOMER = "customer"


class User(BaseModel):
    """
    An account able to sign in.

    Verification and reset tokens are stored as SHA-256 digests only.
    """

    id: int | None = None
    name: str
    email: str
    password_hash: str
    role: UserRole = UserRole.CUSTOMER
    phone: str | None = None
    email_verified: bool = False
    verification_token_hash: str | None = None
    verification_expires_at: datetime | None = None
    reset_token_hash: str | None = None
    reset_expires_at: datetime | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
