"""
Application layer - Use cases and DTOs.

This layer orchestrates business logic by:
1. Defining request/response DTOs for API contracts
2. Implementing use cases that coordinate core services inside a unit of work

Use cases are the only entry point for API handlers that change stock.
"""

from src.application.dto.requests import (
    CreateConsumptionRequest,
    CreatePurchaseRequest,
    CreateSaleRequest,
    DateRangeRequest,
    UpdatePaymentStatusRequest,
)
from src.application.dto.responses import (
    ApiResponse,
    ConsumptionReportResponse,
    ErrorResponse,
    HealthResponse,
    SaleResponse,
)
from src.application.use_cases import (
    CreateConsumptionUseCase,
    CreatePurchaseUseCase,
    CreateSaleUseCase,
    MaterialConsumptionReportUseCase,
    UpdatePaymentStatusUseCase,
)

__all__ = [
    # Request DTOs
    "CreateSaleRequest",
    "UpdatePaymentStatusRequest",
    "CreatePurchaseRequest",
    "CreateConsumptionRequest",
    "DateRangeRequest",
    # Response DTOs
    "ApiResponse",
    "ErrorResponse",
    "HealthResponse",
    "SaleResponse",
    "ConsumptionReportResponse",
    # Use Cases
    "CreateSaleUseCase",
    "UpdatePaymentStatusUseCase",
    "CreatePurchaseUseCase",
    "CreateConsumptionUseCase",
    "MaterialConsumptionReportUseCase",
]
