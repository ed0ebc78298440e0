"""Client domain entity."""

from datetime import UTC, datetime

from pydantic import BaseModel, Field


class Client(BaseModel):
    """A customer that sales are recorded against."""

    id: int | None = None
    name: str
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    notes: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
