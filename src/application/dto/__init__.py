"""Data Transfer Objects for API layer.

Request DTOs: Validate and parse incoming API requests.
Response DTOs: Structure and serialize API responses.

These are the ONLY contracts between API handlers and use cases.
"""

from src.application.dto.requests import (
    CatalogListRequest,
    ClientCreateRequest,
    ClientUpdateRequest,
    CreateConsumptionRequest,
    CreatePurchaseRequest,
    CreateSaleRequest,
    CreateUserRequest,
    DateRangeRequest,
    ForgotPasswordRequest,
    LedgerListRequest,
    ListSalesRequest,
    ListUsersRequest,
    LoginRequest,
    MaterialCreateRequest,
    MaterialUpdateRequest,
    MaterialUsageRequest,
    PageRequest,
    ProductCreateRequest,
    ProductUpdateRequest,
    RegisterRequest,
    ResendVerificationRequest,
    ResetPasswordRequest,
    SaleItemRequest,
    UpdatePaymentStatusRequest,
    UpdatePurchaseRequest,
)
from src.application.dto.responses import (
    ApiResponse,
    ClientResponse,
    ConsumptionReportResponse,
    ConsumptionResponse,
    ErrorResponse,
    HealthResponse,
    MaterialResponse,
    MaterialStatsResponse,
    PaginationMeta,
    ProductResponse,
    PurchaseResponse,
    SaleResponse,
    SalesReportResponse,
    SessionResponse,
    UserListResponse,
    UserResponse,
    VerificationResentResponse,
)

__all__ = [
    # Requests
    "PageRequest",
    "DateRangeRequest",
    "RegisterRequest",
    "CreateUserRequest",
    "LoginRequest",
    "ForgotPasswordRequest",
    "ResendVerificationRequest",
    "ResetPasswordRequest",
    "ListUsersRequest",
    "ProductCreateRequest",
    "ProductUpdateRequest",
    "MaterialCreateRequest",
    "MaterialUpdateRequest",
    "ClientCreateRequest",
    "ClientUpdateRequest",
    "CatalogListRequest",
    "MaterialUsageRequest",
    "SaleItemRequest",
    "CreateSaleRequest",
    "UpdatePaymentStatusRequest",
    "ListSalesRequest",
    "CreatePurchaseRequest",
    "UpdatePurchaseRequest",
    "CreateConsumptionRequest",
    "LedgerListRequest",
    # Responses
    "ApiResponse",
    "ErrorResponse",
    "PaginationMeta",
    "HealthResponse",
    "UserResponse",
    "SessionResponse",
    "UserListResponse",
    "VerificationResentResponse",
    "ProductResponse",
    "MaterialResponse",
    "ClientResponse",
    "MaterialStatsResponse",
    "SaleResponse",
    "SalesReportResponse",
    "PurchaseResponse",
    "ConsumptionResponse",
    "ConsumptionReportResponse",
]
