"""Account and session endpoints."""

from fastapi import APIRouter, Depends, Query, status

from src.api.dependencies import (
    Actor,
    get_create_user_use_case,
    get_current_actor,
    get_current_user_use_case,
    get_forgot_password_use_case,
    get_list_users_use_case,
    get_login_use_case,
    get_register_use_case,
    get_resend_verification_use_case,
    get_reset_password_use_case,
    get_verify_email_use_case,
    require_admin,
)
from src.application.dto.requests import (
    CreateUserRequest,
    ForgotPasswordRequest,
    ListUsersRequest,
    LoginRequest,
    RegisterRequest,
    ResendVerificationRequest,
    ResetPasswordRequest,
)
from src.application.dto.responses import ApiResponse
from src.application.use_cases.accounts import (
    CreateUserUseCase,
    CurrentUserUseCase,
    ForgotPasswordUseCase,
    ListUsersUseCase,
    LoginUseCase,
    RegisterUseCase,
    ResendVerificationUseCase,
    ResetPasswordUseCase,
    VerifyEmailUseCase,
)
from src.config import get_logger
from src.core.entities.user import UserRole

logger = get_logger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    use_case: RegisterUseCase = Depends(get_register_use_case),
) -> ApiResponse:
    """Create a customer account and send the verification email."""
    result = await use_case.execute(request)
    message = (
        "Account created. Check your email to verify it."
        if result.email_sent
        else "Account created, but the verification email could not be sent."
    )
    return ApiResponse(message=message, data=use_case.to_response(result))


@router.get("/verify-email/{token}", response_model=ApiResponse)
async def verify_email(
    token: str,
    use_case: VerifyEmailUseCase = Depends(get_verify_email_use_case),
) -> ApiResponse:
    user = await use_case.execute(token)
    return ApiResponse(message="Email verified", data=use_case.to_response(user))


@router.post("/resend-verification", response_model=ApiResponse)
async def resend_verification(
    request: ResendVerificationRequest,
    use_case: ResendVerificationUseCase = Depends(get_resend_verification_use_case),
) -> ApiResponse:
    """Send a fresh verification link. Unknown addresses get the same answer."""
    result = await use_case.execute(request)
    return ApiResponse(
        message="If the email is registered and unverified, a new link has been sent.",
        data=result,
    )


@router.post("/login", response_model=ApiResponse)
async def login(
    request: LoginRequest,
    use_case: LoginUseCase = Depends(get_login_use_case),
) -> ApiResponse:
    user = await use_case.execute(request)
    return ApiResponse(message="Signed in", data=use_case.to_response(user))


@router.post("/forgot-password", response_model=ApiResponse)
async def forgot_password(
    request: ForgotPasswordRequest,
    use_case: ForgotPasswordUseCase = Depends(get_forgot_password_use_case),
) -> ApiResponse:
    """Always answers the same way, whether or not the address is registered."""
    result = await use_case.execute(request)
    return ApiResponse(
        message="If the email is registered, a reset link has been sent.",
        data=result,
    )


@router.put("/reset-password/{token}", response_model=ApiResponse)
async def reset_password(
    token: str,
    request: ResetPasswordRequest,
    use_case: ResetPasswordUseCase = Depends(get_reset_password_use_case),
) -> ApiResponse:
    user = await use_case.execute(token, request)
    return ApiResponse(message="Password updated", data=use_case.to_response(user))


@router.get("/me", response_model=ApiResponse)
async def me(
    actor: Actor = Depends(get_current_actor),
    use_case: CurrentUserUseCase = Depends(get_current_user_use_case),
) -> ApiResponse:
    user = await use_case.execute(actor.user_id)
    return ApiResponse(data=use_case.to_response(user))


@router.post("/users", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    request: CreateUserRequest,
    _: Actor = Depends(require_admin),
    use_case: CreateUserUseCase = Depends(get_create_user_use_case),
) -> ApiResponse:
    """Admin-only account creation with an explicit role."""
    user = await use_case.execute(request)
    return ApiResponse(message="User created", data=use_case.to_response(user))


@router.get("/users", response_model=ApiResponse)
async def list_users(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    search: str | None = Query(default=None, description="Name, email or phone contains"),
    role: UserRole | None = Query(default=None),
    _: Actor = Depends(require_admin),
    use_case: ListUsersUseCase = Depends(get_list_users_use_case),
) -> ApiResponse:
    """Admin-only user listing, newest first."""
    request = ListUsersRequest(page=page, limit=limit, search=search, role=role)
    result = await use_case.execute(request)
    return ApiResponse(data=use_case.to_response(result))


@router.post("/logout", response_model=ApiResponse)
async def logout(actor: Actor = Depends(get_current_actor)) -> ApiResponse:
    """
    Acknowledge sign-out.

    Bearer tokens are not stored server-side; the client discards its token
    and it stays valid until it expires.
    """
    logger.info("user_logged_out", user_id=actor.user_id)
    return ApiResponse(message="Signed out")
