"""Shared fixtures for API tests."""

from collections.abc import AsyncGenerator, Callable
from itertools import count

import pytest
from httpx import ASGITransport, AsyncClient

from src.api.dependencies import Actor, get_current_actor
from src.api.main import app
from src.core.entities.user import User, UserRole
from src.core.exceptions import DuplicateEmailError


@pytest.fixture
async def api_client() -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def act_as() -> Callable[..., Actor]:
    """Authenticate every request as the given role without a token."""

    def _act_as(role: UserRole = UserRole.ADMIN, user_id: int = 1) -> Actor:
        actor = Actor(user_id=user_id, role=role)
        app.dependency_overrides[get_current_actor] = lambda: actor
        return actor

    return _act_as


class InMemoryUserStore:
    """Dict-backed user store with the SQLite store's email rules."""

    def __init__(self):
        self.users: dict[int, User] = {}
        self._ids = count(1)

    async def create_user(self, user: User) -> User:
        user.email = user.email.strip().lower()
        if any(u.email == user.email for u in self.users.values()):
            raise DuplicateEmailError(user.email)
        user.id = next(self._ids)
        self.users[user.id] = user
        return user

    async def get_user(self, user_id: int) -> User | None:
        return self.users.get(user_id)

    async def get_user_by_email(self, email: str) -> User | None:
        email = email.strip().lower()
        return next((u for u in self.users.values() if u.email == email), None)

    async def get_user_by_verification_token(self, token_hash: str) -> User | None:
        return next(
            (u for u in self.users.values() if u.verification_token_hash == token_hash), None
        )

    async def get_user_by_reset_token(self, token_hash: str) -> User | None:
        return next((u for u in self.users.values() if u.reset_token_hash == token_hash), None)

    async def update_user(self, user: User) -> User:
        self.users[user.id] = user  # type: ignore[index]
        return user

    async def list_users(self, search=None, role=None, limit=10, offset=0):
        users = list(self.users.values())
        if search:
            needle = search.lower()
            users = [
                u
                for u in users
                if any(needle in (field or "").lower() for field in (u.name, u.email, u.phone))
            ]
        if role is not None:
            users = [u for u in users if u.role is role]
        users.sort(key=lambda u: (u.created_at, u.id), reverse=True)
        return users[offset : offset + limit], len(users)


@pytest.fixture
def user_store() -> InMemoryUserStore:
    return InMemoryUserStore()
