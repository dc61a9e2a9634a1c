"""Tests for the domain error taxonomy."""

import pytest

from catalog_service.domain import (
    CategoryNameExistsError,
    CategoryNotFoundError,
    CategoryReferenceError,
    ConflictError,
    DomainError,
    ErrorKind,
    InsufficientStockError,
    NotFoundError,
    ProductNotFoundError,
    ProductSKUExistsError,
    StorageError,
    ValidationFailedError,
)


@pytest.mark.parametrize(
    "error, kind",
    [
        (ValidationFailedError("bad"), ErrorKind.VALIDATION_FAILED),
        (CategoryNotFoundError(1), ErrorKind.NOT_FOUND),
        (ProductNotFoundError(1), ErrorKind.NOT_FOUND),
        (CategoryNameExistsError(), ErrorKind.NAME_CONFLICT),
        (ProductSKUExistsError(), ErrorKind.SKU_CONFLICT),
        (CategoryReferenceError(), ErrorKind.INVALID_REFERENCE),
        (InsufficientStockError(1, -5), ErrorKind.INSUFFICIENT_STOCK),
        (StorageError("store: list failed"), ErrorKind.INTERNAL),
        (DomainError("anything"), ErrorKind.INTERNAL),
    ],
)
def test_every_error_has_a_kind(error: DomainError, kind: ErrorKind) -> None:
    assert error.kind is kind


def test_hierarchy() -> None:
    assert isinstance(CategoryNotFoundError(), NotFoundError)
    assert isinstance(ProductSKUExistsError(), ConflictError)
    assert isinstance(CategoryNameExistsError(), ConflictError)


def test_not_found_details() -> None:
    assert ProductNotFoundError(7).details == {"product_id": 7}
    assert ProductNotFoundError().details == {}


def test_reference_error_names_field() -> None:
    error = CategoryReferenceError("parent_category_id")
    assert error.details == {"field": "parent_category_id"}
    assert "parent_category_id" in error.message


def test_insufficient_stock_details() -> None:
    error = InsufficientStockError(3, -10)
    assert error.details == {"product_id": 3, "quantity_change": -10}


def test_storage_error_keeps_cause_out_of_message() -> None:
    cause = ConnectionError("password=secret")
    try:
        raise StorageError("store: get_product failed") from cause
    except StorageError as error:
        assert error.__cause__ is cause
        assert "secret" not in str(error)
