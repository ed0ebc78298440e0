"""Abstract interface for user account storage."""

from abc import ABC, abstractmethod

from src.core.entities.user import User, UserRole


class IUserStore(ABC):
    """Interface for user persistence."""

    @abstractmethod
    async def create_user(self, user: User) -> User:
        """Create a user. Raises DuplicateEmailError if the email is taken."""
        pass

    @abstractmethod
    async def get_user(self, user_id: int) -> User | None:
        """Get user by ID."""
        pass

    @abstractmethod
    async def get_user_by_email(self, email: str) -> User | None:
        """Get user by email, case-insensitive."""
        pass

    @abstractmethod
    async def get_user_by_verification_token(self, token_hash: str) -> User | None:
        """Get user holding the given verification token digest."""
        pass

    @abstractmethod
    async def get_user_by_reset_token(self, token_hash: str) -> User | None:
        """Get user holding the given reset token digest."""
        pass

    @abstractmethod
    async def update_user(self, user: User) -> User:
        """Persist every mutable user field."""
        pass

    @abstractmethod
    async def list_users(
        self,
        search: str | None = None,
        role: UserRole | None = None,
        limit: int = 10,
        offset: int = 0,
    ) -> tuple[list[User], int]:
        """List users newest first. ``search`` matches name, email or phone."""
        pass
