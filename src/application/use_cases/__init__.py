"""Application use cases."""

from src.application.use_cases.accounts import (
    CreateUserUseCase,
    CurrentUserUseCase,
    ForgotPasswordUseCase,
    ListUsersUseCase,
    LoginUseCase,
    RegisterResult,
    RegisterUseCase,
    ResendVerificationUseCase,
    ResetPasswordUseCase,
    VerifyEmailUseCase,
)
from src.application.use_cases.base import LedgerUseCase, UnitOfWorkFactory
from src.application.use_cases.catalog import (
    CreateMaterialResult,
    CreateMaterialUseCase,
    MaterialStatsUseCase,
    UpdateMaterialUseCase,
    UpdateProductUseCase,
)
from src.application.use_cases.create_sale import CreateSaleResult, CreateSaleUseCase
from src.application.use_cases.material_consumption_report import (
    MaterialConsumptionReportUseCase,
)
from src.application.use_cases.material_consumptions import (
    ConsumptionResult,
    CreateConsumptionUseCase,
    DeleteConsumptionUseCase,
    ListConsumptionsUseCase,
)
from src.application.use_cases.material_purchases import (
    CreatePurchaseUseCase,
    DeletePurchaseUseCase,
    ListPurchasesUseCase,
    PurchaseResult,
    UpdatePurchaseUseCase,
)
from src.application.use_cases.sales_queries import (
    ClientPurchasesUseCase,
    GetSaleUseCase,
    ListSalesUseCase,
    SalesReportUseCase,
)
from src.application.use_cases.update_payment_status import (
    UpdatePaymentStatusResult,
    UpdatePaymentStatusUseCase,
)

__all__ = [
    "LedgerUseCase",
    "UnitOfWorkFactory",
    # Sales
    "CreateSaleUseCase",
    "CreateSaleResult",
    "UpdatePaymentStatusUseCase",
    "UpdatePaymentStatusResult",
    "GetSaleUseCase",
    "ListSalesUseCase",
    "ClientPurchasesUseCase",
    "SalesReportUseCase",
    # Material ledger
    "CreatePurchaseUseCase",
    "UpdatePurchaseUseCase",
    "DeletePurchaseUseCase",
    "ListPurchasesUseCase",
    "PurchaseResult",
    "CreateConsumptionUseCase",
    "DeleteConsumptionUseCase",
    "ListConsumptionsUseCase",
    "ConsumptionResult",
    "MaterialConsumptionReportUseCase",
    # Catalog
    "CreateMaterialUseCase",
    "CreateMaterialResult",
    "MaterialStatsUseCase",
    "UpdateProductUseCase",
    "UpdateMaterialUseCase",
    # Accounts
    "RegisterUseCase",
    "RegisterResult",
    "CreateUserUseCase",
    "VerifyEmailUseCase",
    "ResendVerificationUseCase",
    "LoginUseCase",
    "ForgotPasswordUseCase",
    "ResetPasswordUseCase",
    "CurrentUserUseCase",
    "ListUsersUseCase",
]
