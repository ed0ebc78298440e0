"""
Dependency injection container for FastAPI.

Provides use cases, stores and the authenticated actor to route handlers.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from functools import lru_cache

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.application.use_cases import (
    ClientPurchasesUseCase,
    CreateConsumptionUseCase,
    CreateMaterialUseCase,
    CreatePurchaseUseCase,
    CreateSaleUseCase,
    CreateUserUseCase,
    CurrentUserUseCase,
    DeleteConsumptionUseCase,
    DeletePurchaseUseCase,
    ForgotPasswordUseCase,
    GetSaleUseCase,
    ListConsumptionsUseCase,
    ListPurchasesUseCase,
    ListSalesUseCase,
    ListUsersUseCase,
    LoginUseCase,
    MaterialConsumptionReportUseCase,
    MaterialStatsUseCase,
    RegisterUseCase,
    ResendVerificationUseCase,
    ResetPasswordUseCase,
    SalesReportUseCase,
    UpdateMaterialUseCase,
    UpdatePaymentStatusUseCase,
    UpdateProductUseCase,
    UpdatePurchaseUseCase,
    VerifyEmailUseCase,
)
from src.config import Settings, bind_request_context, get_settings
from src.core.entities.user import UserRole
from src.core.exceptions import AuthenticationError, PermissionDeniedError
from src.core.services.policy import LedgerPolicy
from src.infrastructure.security import decode_access_token
from src.infrastructure.storage.sqlite import (
    SQLiteClientStore,
    SQLiteMaterialStore,
    SQLiteProductStore,
    get_client_store,
    get_material_store,
    get_product_store,
)


@lru_cache
def get_app_settings() -> Settings:
    """Get cached application settings."""
    return get_settings()


@lru_cache
def get_policy() -> LedgerPolicy:
    """Ledger policy, built once from settings."""
    return LedgerPolicy.from_settings(get_app_settings())


# Authentication

_bearer = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Actor:
    """The authenticated caller."""

    user_id: int
    role: UserRole


async def get_current_actor(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> Actor:
    """Resolve the bearer token into an actor."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Missing bearer token")

    claims = decode_access_token(credentials.credentials)
    try:
        role = UserRole(claims.role)
    except ValueError as e:
        raise AuthenticationError("Unknown role in token") from e

    bind_request_context(user_id=claims.user_id)
    return Actor(user_id=claims.user_id, role=role)


def require_roles(*roles: UserRole) -> Callable[..., Awaitable[Actor]]:
    """Dependency factory: the actor must hold one of ``roles``."""

    async def dependency(actor: Actor = Depends(get_current_actor)) -> Actor:
        if actor.role not in roles:
            raise PermissionDeniedError(actor.role.value, [r.value for r in roles])
        return actor

    return dependency


require_staff = require_roles(UserRole.ADMIN, UserRole.SELLER)
require_admin = require_roles(UserRole.ADMIN)


# Store dependencies
async def get_prod_store() -> SQLiteProductStore:
    """Get product store."""
    return await get_product_store()


async def get_mat_store() -> SQLiteMaterialStore:
    """Get material store."""
    return await get_material_store()


async def get_cli_store() -> SQLiteClientStore:
    """Get client store."""
    return await get_client_store()


# Use case dependencies
def get_create_sale_use_case() -> CreateSaleUseCase:
    """Get create sale use case."""
    return CreateSaleUseCase(policy=get_policy())


def get_update_payment_status_use_case() -> UpdatePaymentStatusUseCase:
    """Get update payment status use case."""
    return UpdatePaymentStatusUseCase(policy=get_policy())


def get_get_sale_use_case() -> GetSaleUseCase:
    return GetSaleUseCase()


def get_list_sales_use_case() -> ListSalesUseCase:
    return ListSalesUseCase()


def get_client_purchases_use_case() -> ClientPurchasesUseCase:
    return ClientPurchasesUseCase()


def get_sales_report_use_case() -> SalesReportUseCase:
    return SalesReportUseCase()


def get_create_purchase_use_case() -> CreatePurchaseUseCase:
    return CreatePurchaseUseCase(policy=get_policy())


def get_update_purchase_use_case() -> UpdatePurchaseUseCase:
    return UpdatePurchaseUseCase(policy=get_policy())


def get_delete_purchase_use_case() -> DeletePurchaseUseCase:
    return DeletePurchaseUseCase(policy=get_policy())


def get_list_purchases_use_case() -> ListPurchasesUseCase:
    return ListPurchasesUseCase()


def get_create_consumption_use_case() -> CreateConsumptionUseCase:
    return CreateConsumptionUseCase(policy=get_policy())


def get_delete_consumption_use_case() -> DeleteConsumptionUseCase:
    return DeleteConsumptionUseCase(policy=get_policy())


def get_list_consumptions_use_case() -> ListConsumptionsUseCase:
    return ListConsumptionsUseCase()


def get_consumption_report_use_case() -> MaterialConsumptionReportUseCase:
    """Get material consumption report use case."""
    return MaterialConsumptionReportUseCase()


def get_create_material_use_case() -> CreateMaterialUseCase:
    return CreateMaterialUseCase(policy=get_policy())


def get_update_product_use_case() -> UpdateProductUseCase:
    return UpdateProductUseCase(policy=get_policy())


def get_update_material_use_case() -> UpdateMaterialUseCase:
    return UpdateMaterialUseCase(policy=get_policy())


def get_material_stats_use_case() -> MaterialStatsUseCase:
    return MaterialStatsUseCase()


def get_register_use_case() -> RegisterUseCase:
    return RegisterUseCase()


def get_create_user_use_case() -> CreateUserUseCase:
    return CreateUserUseCase()


def get_verify_email_use_case() -> VerifyEmailUseCase:
    return VerifyEmailUseCase()


def get_resend_verification_use_case() -> ResendVerificationUseCase:
    return ResendVerificationUseCase()


def get_login_use_case() -> LoginUseCase:
    return LoginUseCase()


def get_forgot_password_use_case() -> ForgotPasswordUseCase:
    return ForgotPasswordUseCase()


def get_reset_password_use_case() -> ResetPasswordUseCase:
    return ResetPasswordUseCase()


def get_current_user_use_case() -> CurrentUserUseCase:
    return CurrentUserUseCase()


def get_list_users_use_case() -> ListUsersUseCase:
    return ListUsersUseCase()
