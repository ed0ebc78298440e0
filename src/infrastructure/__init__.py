"""Infrastructure layer implementations."""

from src.infrastructure import email, security, storage

__all__ = ["storage", "security", "email"]
