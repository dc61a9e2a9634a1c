"""Constraint violation classification.

Turns a SQLAlchemy ``IntegrityError`` into the matching domain error by
looking at the violated constraint. Drivers expose the constraint name in
different places (asyncpg: ``constraint_name`` on the wrapped exception,
psycopg: ``diag.constraint_name``); SQLite only reports the key columns of
unique violations in its message, so each rule also lists the key markers
found in messages, plus the table its constraint guards.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError

from catalog_service.catalog.models import (
    CATEGORY_NAME_KEY,
    CATEGORY_PARENT_FKEY,
    PRODUCT_CATEGORY_FKEY,
    PRODUCT_SKU_KEY,
)
from catalog_service.domain import (
    CategoryNameExistsError,
    CategoryReferenceError,
    DomainError,
    ProductSKUExistsError,
)

UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"

SQLITE_FOREIGN_KEY_MESSAGE = "FOREIGN KEY constraint failed"
_WRITE_TARGET = re.compile(r'\s*(?:INSERT\s+INTO|UPDATE)\s+"?(\w+)"?', re.IGNORECASE)


@dataclass(frozen=True)
class ConstraintRule:
    """Maps one named constraint to a domain error.

    Attributes:
        constraint: Constraint name as declared in the schema.
        sqlstate: SQLSTATE raised when the constraint is violated.
        table: Table whose writes the constraint guards.
        markers: Message fragments identifying the constraint when the
            driver does not report its name.
        error: Factory for the domain error.
    """

    constraint: str
    sqlstate: str
    table: str
    markers: tuple[str, ...]
    error: Callable[[], DomainError]


CONSTRAINT_RULES: tuple[ConstraintRule, ...] = (
    ConstraintRule(
        constraint=CATEGORY_NAME_KEY,
        sqlstate=UNIQUE_VIOLATION,
        table="categories",
        markers=("Key (name)", "categories.name"),
        error=CategoryNameExistsError,
    ),
    ConstraintRule(
        constraint=PRODUCT_SKU_KEY,
        sqlstate=UNIQUE_VIOLATION,
        table="products",
        markers=("Key (sku)", "products.sku"),
        error=ProductSKUExistsError,
    ),
    ConstraintRule(
        constraint=PRODUCT_CATEGORY_FKEY,
        sqlstate=FOREIGN_KEY_VIOLATION,
        table="products",
        markers=("Key (category_id)",),
        error=CategoryReferenceError,
    ),
    ConstraintRule(
        constraint=CATEGORY_PARENT_FKEY,
        sqlstate=FOREIGN_KEY_VIOLATION,
        table="categories",
        markers=("Key (parent_category_id)",),
        error=lambda: CategoryReferenceError("parent_category_id"),
    ),
)


def _sqlstate(orig: BaseException | None) -> str | None:
    """Extract the SQLSTATE code reported by the driver."""
    for source in (orig, getattr(orig, "__cause__", None)):
        if source is None:
            continue
        for attr in ("sqlstate", "pgcode"):
            code = getattr(source, attr, None)
            if isinstance(code, str) and code:
                return code
    return None


def _constraint_name(orig: BaseException | None) -> str | None:
    """Extract the violated constraint name reported by the driver."""
    for source in (orig, getattr(orig, "__cause__", None)):
        if source is None:
            continue
        name = getattr(source, "constraint_name", None)
        if name is None:
            name = getattr(getattr(source, "diag", None), "constraint_name", None)
        if isinstance(name, str) and name:
            return name
    return None


def _statement_table(statement: str | None) -> str | None:
    """Name of the table an INSERT or UPDATE statement writes to."""
    if not statement:
        return None
    match = _WRITE_TARGET.match(statement)
    return match.group(1).lower() if match else None


def classify_integrity_error(exc: IntegrityError) -> DomainError | None:
    """Find the domain error for a constraint violation.

    Args:
        exc: Integrity error raised by SQLAlchemy.

    Returns:
        Domain error for a known constraint, ``None`` when the violation
        is not one this service knows how to classify.
    """
    orig = exc.orig
    name = _constraint_name(orig)
    code = _sqlstate(orig)
    text = str(orig) if orig is not None else str(exc)

    for rule in CONSTRAINT_RULES:
        if code is not None and code != rule.sqlstate:
            continue
        if name is not None:
            if rule.constraint in name:
                return rule.error()
            continue
        if any(marker in text for marker in rule.markers):
            return rule.error()

    # SQLite names neither the constraint nor the key of a foreign key
    # violation; the written table decides.
    if SQLITE_FOREIGN_KEY_MESSAGE in text:
        table = _statement_table(exc.statement)
        for rule in CONSTRAINT_RULES:
            if rule.sqlstate == FOREIGN_KEY_VIOLATION and rule.table == table:
                return rule.error()
    return None
