"""
Domain exceptions for the shop ledger.

Provides specific exception types for different error scenarios.
"""

from typing import Any


class ShopLedgerError(Exception):
    """Base exception for all shop ledger errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Lookup Exceptions
class NotFoundError(ShopLedgerError):
    """Referenced entity does not exist."""

    entity: str = "Entity"
    code_name: str = "NOT_FOUND"

    def __init__(self, entity_id: int | str):
        super().__init__(
            f"{self.entity} not found: {entity_id}",
            code=self.code_name,
            details={"id": entity_id},
        )


class ProductNotFoundError(NotFoundError):
    entity = "Product"
    code_name = "PRODUCT_NOT_FOUND"


class MaterialNotFoundError(NotFoundError):
    entity = "Material"
    code_name = "MATERIAL_NOT_FOUND"


class ClientNotFoundError(NotFoundError):
    entity = "Client"
    code_name = "CLIENT_NOT_FOUND"


class SaleNotFoundError(NotFoundError):
    entity = "Sale"
    code_name = "SALE_NOT_FOUND"


class PurchaseNotFoundError(NotFoundError):
    entity = "Material purchase"
    code_name = "PURCHASE_NOT_FOUND"


class ConsumptionNotFoundError(NotFoundError):
    entity = "Material consumption"
    code_name = "CONSUMPTION_NOT_FOUND"


class UserNotFoundError(NotFoundError):
    entity = "User"
    code_name = "USER_NOT_FOUND"


# Stock Exceptions
class StockError(ShopLedgerError):
    """Base exception for stock rule violations."""

    pass


class InsufficientStockError(StockError):
    """Requested quantity exceeds what is available."""

    def __init__(
        self,
        entity: str,
        name: str,
        requested: float,
        available: float,
        unit: str | None = None,
    ):
        suffix = f" {unit}" if unit else ""
        super().__init__(
            f"Insufficient stock for {entity} '{name}'. "
            f"Available: {available}{suffix}, requested: {requested}{suffix}",
            code="INSUFFICIENT_STOCK",
            details={
                "entity": entity,
                "name": name,
                "requested": requested,
                "available": available,
                "unit": unit,
            },
        )


class InvalidQuantityError(StockError):
    """Quantity is non-positive, or fractional for a discrete unit."""

    def __init__(self, quantity: float, reason: str):
        super().__init__(
            f"Invalid quantity {quantity}: {reason}",
            code="INVALID_QUANTITY",
            details={"quantity": quantity, "reason": reason},
        )


# Storage Exceptions
class PersistenceError(ShopLedgerError):
    """Base exception for storage operations."""

    pass


class DatabaseError(PersistenceError):
    """Database operation failed."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Database error during {operation}: {error}",
            code="DATABASE_ERROR",
            details={"operation": operation, "error": error},
        )


class StoreBusyError(PersistenceError):
    """Could not obtain the write lock in time."""

    def __init__(self, attempts: int):
        super().__init__(
            f"Store is busy, gave up after {attempts} attempts",
            code="STORE_BUSY",
            details={"attempts": attempts},
        )


# Validation Exceptions
class ValidationError(ShopLedgerError):
    """Input validation failed."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            f"Validation error for '{field}': {message}",
            code="VALIDATION_ERROR",
            details={
                "field": field,
                "message": message,
                "value": str(value)[:100] if value else None,
            },
        )


# Account Exceptions
class AccountError(ShopLedgerError):
    """Base exception for account and session operations."""

    pass


class AuthenticationError(AccountError):
    """Missing, invalid or expired credentials."""

    def __init__(self, reason: str = "Invalid or expired token"):
        super().__init__(reason, code="NOT_AUTHENTICATED", details={"reason": reason})


class PermissionDeniedError(AccountError):
    """Authenticated actor lacks the required role."""

    def __init__(self, role: str, allowed: list[str]):
        super().__init__(
            f"Role '{role}' is not allowed. Required: {', '.join(allowed)}",
            code="PERMISSION_DENIED",
            details={"role": role, "allowed": allowed},
        )


class DuplicateEmailError(AccountError):
    """A user with the same email already exists."""

    def __init__(self, email: str):
        super().__init__(
            f"A user is already registered with email: {email}",
            code="DUPLICATE_EMAIL",
            details={"email": email},
        )


class InvalidTokenError(AccountError):
    """Verification or reset token is unknown or expired."""

    def __init__(self, purpose: str):
        super().__init__(
            f"Invalid or expired {purpose} token",
            code="INVALID_TOKEN",
            details={"purpose": purpose},
        )


class EmailNotVerifiedError(AccountError):
    """Login attempted before the email address was confirmed."""

    def __init__(self, email: str):
        super().__init__(
            f"Email not verified: {email}",
            code="EMAIL_NOT_VERIFIED",
            details={"email": email},
        )


class EmailAlreadyVerifiedError(AccountError):
    """Verification re-requested for an address that is already confirmed."""

    def __init__(self, email: str):
        super().__init__(
            f"Email already verified: {email}",
            code="EMAIL_ALREADY_VERIFIED",
            details={"email": email},
        )


class EmailDeliveryError(AccountError):
    """Email dispatcher could not deliver a message."""

    def __init__(self, recipient: str, reason: str):
        super().__init__(
            f"Could not send email to {recipient}: {reason}",
            code="EMAIL_DELIVERY_FAILED",
            details={"recipient": recipient, "reason": reason},
        )


class ConfigurationError(ShopLedgerError):
    """Configuration error."""

    pass
