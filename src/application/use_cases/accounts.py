"""
Account use cases: registration, email verification, sign-in, password
reset and the admin user listing.

One-time tokens are handed to the email dispatcher in clear text and only
their SHA-256 digest is stored. A failed dispatch never loses the account:
the pending token is cleared and the caller is told no email went out.
"""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from src.application.dto.requests import (
    CreateUserRequest,
    ForgotPasswordRequest,
    ListUsersRequest,
    LoginRequest,
    RegisterRequest,
    ResendVerificationRequest,
    ResetPasswordRequest,
)
from src.application.dto.responses import (
    PaginationMeta,
    PasswordResetRequestedResponse,
    RegisterResponse,
    SessionResponse,
    UserListResponse,
    UserResponse,
    VerificationResentResponse,
)
from src.config import get_logger, get_settings
from src.core.entities.user import User, UserRole
from src.core.exceptions import (
    AuthenticationError,
    EmailAlreadyVerifiedError,
    EmailDeliveryError,
    EmailNotVerifiedError,
    InvalidTokenError,
    UserNotFoundError,
    ValidationError,
)
from src.core.interfaces.email import IEmailDispatcher
from src.core.interfaces.user_store import IUserStore
from src.infrastructure.security import (
    create_access_token,
    digest_token,
    generate_token,
    hash_password,
    verify_password,
)

logger = get_logger(__name__)


def _check_password(password: str) -> None:
    minimum = get_settings().auth.min_password_length
    if len(password) < minimum:
        raise ValidationError("password", f"must be at least {minimum} characters")


def _session(user: User) -> SessionResponse:
    token = create_access_token(user.id, user.role.value)  # type: ignore[arg-type]
    return SessionResponse(user=UserResponse.model_validate(user), token=token)


class _AccountUseCase:
    def __init__(
        self,
        user_store: IUserStore | None = None,
        email_dispatcher: IEmailDispatcher | None = None,
    ):
        self._user_store = user_store
        self._email_dispatcher = email_dispatcher

    async def _get_user_store(self) -> IUserStore:
        if self._user_store is None:
            from src.infrastructure.storage.sqlite import get_user_store

            self._user_store = await get_user_store()
        return self._user_store

    def _get_email_dispatcher(self) -> IEmailDispatcher:
        if self._email_dispatcher is None:
            from src.infrastructure.email import get_email_dispatcher

            self._email_dispatcher = get_email_dispatcher()
        return self._email_dispatcher


@dataclass
class RegisterResult:
    user: User
    email_sent: bool
    verification_url: str | None = None


class RegisterUseCase(_AccountUseCase):
    """Public self-registration. New accounts are customers and unverified."""

    async def execute(self, request: RegisterRequest) -> RegisterResult:
        _check_password(request.password)
        store = await self._get_user_store()
        settings = get_settings()

        token = generate_token()
        user = User(
            name=request.name,
            email=request.email,
            password_hash=hash_password(request.password),
            role=UserRole.CUSTOMER,
            phone=request.phone,
            verification_token_hash=digest_token(token),
            verification_expires_at=datetime.now(UTC)
            + timedelta(hours=settings.auth.verification_ttl_hours),
        )
        user = await store.create_user(user)
        logger.info("user_registered", user_id=user.id, role=user.role.value)

        try:
            dispatched = await self._get_email_dispatcher().send_verification(user.email, token)
        except EmailDeliveryError as e:
            logger.warning("verification_email_failed", user_id=user.id, error=e.message)
            user.verification_token_hash = None
            user.verification_expires_at = None
            user = await store.update_user(user)
            return RegisterResult(user=user, email_sent=False)

        return RegisterResult(
            user=user,
            email_sent=True,
            verification_url=dispatched.link if dispatched.dev_mode else None,
        )

    def to_response(self, result: RegisterResult) -> RegisterResponse:
        return RegisterResponse(
            user=UserResponse.model_validate(result.user),
            requires_verification=True,
            email_sent=result.email_sent,
            verification_url=result.verification_url,
        )


class CreateUserUseCase(_AccountUseCase):
    """Admin-created account with an explicit role. No verification needed."""

    async def execute(self, request: CreateUserRequest) -> User:
        _check_password(request.password)
        store = await self._get_user_store()
        user = await store.create_user(
            User(
                name=request.name,
                email=request.email,
                password_hash=hash_password(request.password),
                role=request.role,
                phone=request.phone,
                email_verified=True,
            )
        )
        logger.info("user_created", user_id=user.id, role=user.role.value)
        return user

    def to_response(self, user: User) -> UserResponse:
        return UserResponse.model_validate(user)


class VerifyEmailUseCase(_AccountUseCase):
    async def execute(self, token: str) -> User:
        store = await self._get_user_store()
        user = await store.get_user_by_verification_token(digest_token(token))
        if (
            user is None
            or user.verification_expires_at is None
            or user.verification_expires_at < datetime.now(UTC)
        ):
            raise InvalidTokenError("verification")

        user.email_verified = True
        user.verification_token_hash = None
        user.verification_expires_at = None
        user = await store.update_user(user)
        logger.info("email_verified", user_id=user.id)
        return user

    def to_response(self, user: User) -> SessionResponse:
        return _session(user)


class ResendVerificationUseCase(_AccountUseCase):
    """
    Replace the pending verification token and email it again.

    Unknown addresses get the same answer as known ones. A failed dispatch
    clears the new token and raises.
    """

    async def execute(self, request: ResendVerificationRequest) -> VerificationResentResponse:
        store = await self._get_user_store()
        user = await store.get_user_by_email(request.email)
        if user is None:
            logger.info("verification_resend_unknown_email")
            return VerificationResentResponse()
        if user.email_verified:
            raise EmailAlreadyVerifiedError(user.email)

        token = generate_token()
        user.verification_token_hash = digest_token(token)
        user.verification_expires_at = datetime.now(UTC) + timedelta(
            hours=get_settings().auth.verification_ttl_hours
        )
        user = await store.update_user(user)

        try:
            dispatched = await self._get_email_dispatcher().send_verification(user.email, token)
        except EmailDeliveryError:
            user.verification_token_hash = None
            user.verification_expires_at = None
            await store.update_user(user)
            raise

        logger.info("verification_resent", user_id=user.id)
        return VerificationResentResponse(
            dev_mode=dispatched.dev_mode,
            verification_url=dispatched.link if dispatched.dev_mode else None,
        )


class LoginUseCase(_AccountUseCase):
    """Password sign-in. Unverified accounts are refused."""

    async def execute(self, request: LoginRequest) -> User:
        store = await self._get_user_store()
        user = await store.get_user_by_email(request.email)
        if user is None or not verify_password(request.password, user.password_hash):
            logger.info("login_failed", email=request.email)
            raise AuthenticationError("Invalid email or password")
        if not user.email_verified:
            raise EmailNotVerifiedError(user.email)

        logger.info("login_succeeded", user_id=user.id)
        return user

    def to_response(self, user: User) -> SessionResponse:
        return _session(user)


class ForgotPasswordUseCase(_AccountUseCase):
    """
    Issue a short-lived reset token.

    Unknown addresses get the same answer as known ones.
    """

    async def execute(self, request: ForgotPasswordRequest) -> PasswordResetRequestedResponse:
        store = await self._get_user_store()
        user = await store.get_user_by_email(request.email)
        if user is None:
            logger.info("password_reset_unknown_email")
            return PasswordResetRequestedResponse()

        token = generate_token()
        user.reset_token_hash = digest_token(token)
        user.reset_expires_at = datetime.now(UTC) + timedelta(
            minutes=get_settings().auth.reset_ttl_minutes
        )
        user = await store.update_user(user)

        try:
            dispatched = await self._get_email_dispatcher().send_password_reset(user.email, token)
        except EmailDeliveryError:
            user.reset_token_hash = None
            user.reset_expires_at = None
            await store.update_user(user)
            raise

        logger.info("password_reset_requested", user_id=user.id)
        return PasswordResetRequestedResponse(
            dev_mode=dispatched.dev_mode,
            reset_url=dispatched.link if dispatched.dev_mode else None,
        )


class ResetPasswordUseCase(_AccountUseCase):
    async def execute(self, token: str, request: ResetPasswordRequest) -> User:
        store = await self._get_user_store()
        user = await store.get_user_by_reset_token(digest_token(token))
        if (
            user is None
            or user.reset_expires_at is None
            or user.reset_expires_at < datetime.now(UTC)
        ):
            raise InvalidTokenError("password reset")
        _check_password(request.password)

        user.password_hash = hash_password(request.password)
        user.reset_token_hash = None
        user.reset_expires_at = None
        user = await store.update_user(user)
        logger.info("password_reset", user_id=user.id)
        return user

    def to_response(self, user: User) -> SessionResponse:
        return _session(user)


class CurrentUserUseCase(_AccountUseCase):
    async def execute(self, user_id: int) -> User:
        store = await self._get_user_store()
        user = await store.get_user(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    def to_response(self, user: User) -> UserResponse:
        return UserResponse.model_validate(user)


@dataclass
class ListUsersResult:
    users: list[User]
    total: int
    page: int
    limit: int


class ListUsersUseCase(_AccountUseCase):
    async def execute(self, request: ListUsersRequest) -> ListUsersResult:
        store = await self._get_user_store()
        users, total = await store.list_users(
            search=request.search,
            role=request.role,
            limit=request.limit,
            offset=request.offset,
        )
        return ListUsersResult(users=users, total=total, page=request.page, limit=request.limit)

    def to_response(self, result: ListUsersResult) -> UserListResponse:
        return UserListResponse(
            users=[UserResponse.model_validate(u) for u in result.users],
            pagination=PaginationMeta.build(result.page, result.limit, result.total),
        )
