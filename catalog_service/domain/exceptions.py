"""Domain exceptions.

All catalog failures are expressed as subclasses of ``DomainError``. Each
exception carries an ``ErrorKind`` so that the REST and RPC layers can map
it to a transport status without inspecting the message or the cause.

Storage failures are classified exactly once, in the storage engine, at
the point where constraint metadata is available.
"""

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Transport-independent classification of a failure."""

    VALIDATION_FAILED = "VALIDATION_FAILED"
    NOT_FOUND = "NOT_FOUND"
    NAME_CONFLICT = "NAME_CONFLICT"
    SKU_CONFLICT = "SKU_CONFLICT"
    INVALID_REFERENCE = "INVALID_REFERENCE"
    INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"
    INTERNAL = "INTERNAL"


class DomainError(Exception):
    """Base class for all domain exceptions.

    Attributes:
        kind: Error classification used by the transport layers.
        message: Public, human-readable message.
        details: Additional structured context.
    """

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize domain error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


# ============================================================================
# Validation Errors
# ============================================================================


class ValidationFailedError(DomainError):
    """Raised when an entity breaks a validation rule."""

    kind = ErrorKind.VALIDATION_FAILED


# ============================================================================
# Not Found Errors
# ============================================================================


class NotFoundError(DomainError):
    """Base class for missing-entity errors."""

    kind = ErrorKind.NOT_FOUND


class CategoryNotFoundError(NotFoundError):
    """Raised when no category matches the requested identifier."""

    def __init__(self, category_id: int | None = None) -> None:
        super().__init__(
            "category not found",
            details={"category_id": category_id} if category_id is not None else None,
        )


class ProductNotFoundError(NotFoundError):
    """Raised when no product matches the requested identifier."""

    def __init__(self, product_id: int | None = None) -> None:
        super().__init__(
            "product not found",
            details={"product_id": product_id} if product_id is not None else None,
        )


# ============================================================================
# Conflict Errors
# ============================================================================


class ConflictError(DomainError):
    """Base class for uniqueness violations."""


class CategoryNameExistsError(ConflictError):
    """Raised when a category name is already taken."""

    kind = ErrorKind.NAME_CONFLICT

    def __init__(self) -> None:
        super().__init__("category name already exists")


class ProductSKUExistsError(ConflictError):
    """Raised when a product SKU is already taken."""

    kind = ErrorKind.SKU_CONFLICT

    def __init__(self) -> None:
        super().__init__("product SKU already exists")


# ============================================================================
# Reference Errors
# ============================================================================


class InvalidReferenceError(DomainError):
    """Raised when a write references an entity that does not exist."""

    kind = ErrorKind.INVALID_REFERENCE


class CategoryReferenceError(InvalidReferenceError):
    """Raised when a product or category points at a missing category."""

    def __init__(self, field: str = "category_id") -> None:
        super().__init__(
            f"Invalid {field}: category does not exist.",
            details={"field": field},
        )


# ============================================================================
# Stock Errors
# ============================================================================


class InsufficientStockError(DomainError):
    """Raised when a stock adjustment would drive the quantity negative."""

    kind = ErrorKind.INSUFFICIENT_STOCK

    def __init__(self, product_id: int, quantity_change: int) -> None:
        """Initialize insufficient stock error.

        Args:
            product_id: Product whose stock was adjusted.
            quantity_change: Requested delta.
        """
        super().__init__(
            "insufficient stock or update constraint violation",
            details={"product_id": product_id, "quantity_change": quantity_change},
        )


# ============================================================================
# Internal Errors
# ============================================================================


class StorageError(DomainError):
    """Raised for any store failure that has no more specific kind.

    The underlying cause is chained (``raise ... from exc``) and logged by
    the storage engine; only ``message`` is ever shown to callers.
    """

    kind = ErrorKind.INTERNAL
