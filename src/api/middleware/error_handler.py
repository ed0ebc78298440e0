"""
Error handling middleware.

Standardizes all API error responses to the failure envelope:
- success: always false
- error: machine-readable code
- message: human-readable description
- hint: suggested recovery action
"""

import traceback
from collections.abc import Awaitable, Callable

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from src.application.dto.responses import ErrorResponse
from src.config import get_logger
from src.core.exceptions import (
    AuthenticationError,
    ConfigurationError,
    DuplicateEmailError,
    EmailAlreadyVerifiedError,
    EmailDeliveryError,
    EmailNotVerifiedError,
    InsufficientStockError,
    InvalidQuantityError,
    InvalidTokenError,
    NotFoundError,
    PermissionDeniedError,
    PersistenceError,
    ShopLedgerError,
    StoreBusyError,
    ValidationError,
)

logger = get_logger(__name__)


# Map exceptions to HTTP status codes; first match wins, so subclasses go first
EXCEPTION_STATUS_MAP: dict[type[Exception], int] = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    InsufficientStockError: status.HTTP_400_BAD_REQUEST,
    InvalidQuantityError: status.HTTP_400_BAD_REQUEST,
    ValidationError: status.HTTP_400_BAD_REQUEST,
    AuthenticationError: status.HTTP_401_UNAUTHORIZED,
    EmailAlreadyVerifiedError: status.HTTP_400_BAD_REQUEST,
    EmailNotVerifiedError: status.HTTP_403_FORBIDDEN,
    PermissionDeniedError: status.HTTP_403_FORBIDDEN,
    DuplicateEmailError: status.HTTP_409_CONFLICT,
    InvalidTokenError: status.HTTP_400_BAD_REQUEST,
    EmailDeliveryError: status.HTTP_502_BAD_GATEWAY,
    StoreBusyError: status.HTTP_503_SERVICE_UNAVAILABLE,
    PersistenceError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ConfigurationError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ValueError: status.HTTP_400_BAD_REQUEST,
}

# Hint messages per error code / exception type
HINT_MAP: dict[str, str] = {
    "PRODUCT_NOT_FOUND": "Check the product ID and try GET /api/products to list products.",
    "MATERIAL_NOT_FOUND": "Check the material ID and try GET /api/materials to list materials.",
    "CLIENT_NOT_FOUND": "Check the client ID and try GET /api/clients to list clients.",
    "SALE_NOT_FOUND": "Check the sale ID and try GET /api/sales to list sales.",
    "PURCHASE_NOT_FOUND": "Check the purchase ID and try GET /api/material-purchases.",
    "CONSUMPTION_NOT_FOUND": "Check the consumption ID and try GET /api/material-consumptions.",
    "INSUFFICIENT_STOCK": "Reduce the quantity or record a purchase before retrying.",
    "INVALID_QUANTITY": "Items counted in units need a whole quantity greater than zero.",
    "STORE_BUSY": "Another operation is updating stock. Retry shortly.",
    "DATABASE_ERROR": "A database operation failed. Check server logs.",
    "NOT_AUTHENTICATED": "Sign in via POST /api/auth/login and send the bearer token.",
    "PERMISSION_DENIED": "Ask an administrator for a role with access to this operation.",
    "EMAIL_NOT_VERIFIED": "Open the verification link, or POST /api/auth/resend-verification.",
    "EMAIL_ALREADY_VERIFIED": "Sign in via POST /api/auth/login.",
    "DUPLICATE_EMAIL": "Sign in instead, or use POST /api/auth/forgot-password.",
    "INVALID_TOKEN": "Request a new link; tokens expire and can be used only once.",
    "EMAIL_DELIVERY_FAILED": "The email provider rejected the message. Retry later.",
    "VALIDATION_ERROR": "Check the request body against the API schema.",
    "ValueError": "A parameter value is invalid. Check the request.",
}

# Default hints by HTTP status code
STATUS_HINTS: dict[int, str] = {
    400: "Check the request parameters and body.",
    401: "Authentication is required.",
    403: "You are not allowed to perform this operation.",
    404: "The requested resource was not found. Verify the ID.",
    409: "The resource already exists.",
    422: "The request could not be processed. Check the input format.",
    500: "An internal error occurred. Check server logs.",
    503: "The service is temporarily unavailable. Retry later.",
}


def _get_hint(error_code: str, status_code: int) -> str:
    """Resolve hint from error code, falling back to status-based hint."""
    return HINT_MAP.get(error_code) or STATUS_HINTS.get(status_code, "")


def status_for(exc: Exception) -> int:
    for exc_type, code in EXCEPTION_STATUS_MAP.items():
        if isinstance(exc, exc_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def error_response(request: Request, exc: Exception) -> JSONResponse:
    """Convert exception to the standardized JSON failure envelope."""
    status_code = status_for(exc)

    # Prefer ShopLedgerError.code, fall back to class name
    if isinstance(exc, ShopLedgerError):
        error_code = exc.code
        message = exc.message
        detail = exc.details or None
    else:
        error_code = exc.__class__.__name__
        message = str(exc)
        detail = None

    log = logger.error if status_code >= 500 else logger.warning
    log(
        "request_error",
        request_id=getattr(request.state, "request_id", None),
        path=request.url.path,
        error_type=error_code,
        error=message,
        traceback=traceback.format_exc() if status_code >= 500 else None,
    )

    body = ErrorResponse(
        error=error_code,
        message=message,
        hint=_get_hint(error_code, status_code),
        detail=detail,
        path=request.url.path,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Global error handling middleware.

    Converts exceptions that escape the route handlers to standardized JSON
    error responses.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        """Handle request with error catching."""
        try:
            return await call_next(request)

        except Exception as e:
            return error_response(request, e)


def setup_exception_handlers(app: FastAPI) -> None:
    """Set up FastAPI exception handlers."""
    from fastapi.exceptions import RequestValidationError
    from starlette.exceptions import HTTPException

    @app.exception_handler(ShopLedgerError)
    async def domain_exception_handler(request: Request, exc: ShopLedgerError) -> JSONResponse:
        """Map domain errors to their HTTP status."""
        return error_response(request, exc)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        """Handle Pydantic validation errors."""
        errors = []
        for error in exc.errors():
            loc = " -> ".join(str(part) for part in error["loc"])
            errors.append(f"{loc}: {error['msg']}")

        return JSONResponse(
            status_code=422,
            content=ErrorResponse(
                error="VALIDATION_ERROR",
                message="Request validation failed",
                hint=HINT_MAP["VALIDATION_ERROR"],
                detail="; ".join(errors),
                path=request.url.path,
            ).model_dump(mode="json"),
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(
        request: Request,
        exc: HTTPException,
    ) -> JSONResponse:
        """Handle HTTP exceptions with standardized format."""
        error_code = _infer_error_code(exc.status_code)
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                error=error_code,
                message=str(exc.detail) if exc.detail else "An error occurred",
                hint=_get_hint(error_code, exc.status_code),
                path=request.url.path,
            ).model_dump(mode="json"),
            headers=getattr(exc, "headers", None),
        )


def _infer_error_code(status_code: int) -> str:
    """Infer a machine-readable error code from an HTTPException status."""
    return {
        400: "BAD_REQUEST",
        401: "NOT_AUTHENTICATED",
        403: "PERMISSION_DENIED",
        404: "NOT_FOUND",
        405: "METHOD_NOT_ALLOWED",
        422: "UNPROCESSABLE_ENTITY",
    }.get(status_code, "HTTP_ERROR")
