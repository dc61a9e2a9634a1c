"""Predicate building for list queries.

A ``PredicateBuilder`` collects SQLAlchemy boolean clauses; each clause
carries its own bound parameters, so the argument list always matches the
predicate list. The same builder is applied to the count statement and the
data statement of a listing, which keeps their filters identical.
"""

from collections.abc import Callable
from typing import Any, TypeVar

from sqlalchemy import ColumnElement, Select, or_

from catalog_service.catalog.models import CategoryRecord, ProductRecord
from catalog_service.catalog.params import ListCategoriesParams, ListProductsParams

S = TypeVar("S", bound=Select)


class PredicateBuilder:
    """Accumulates WHERE clauses for a statement."""

    def __init__(self) -> None:
        self._clauses: list[ColumnElement[bool]] = []

    def add(self, clause: ColumnElement[bool]) -> "PredicateBuilder":
        """Add an unconditional clause."""
        self._clauses.append(clause)
        return self

    def add_if(
        self,
        value: Any,
        factory: Callable[[Any], ColumnElement[bool]],
    ) -> "PredicateBuilder":
        """Add ``factory(value)`` when the value is present.

        ``None``, empty strings and empty collections count as absent.

        Args:
            value: Optional criterion.
            factory: Builds the clause from the value.

        Returns:
            The builder, for chaining.
        """
        if value is None:
            return self
        if isinstance(value, (str, list, tuple, set, frozenset)) and not value:
            return self
        return self.add(factory(value))

    @property
    def clauses(self) -> list[ColumnElement[bool]]:
        """Accumulated clauses, in insertion order."""
        return list(self._clauses)

    def apply(self, statement: S) -> S:
        """Attach all clauses to a SELECT statement."""
        if not self._clauses:
            return statement
        return statement.where(*self._clauses)

    def __len__(self) -> int:
        return len(self._clauses)


def category_predicates(params: ListCategoriesParams) -> PredicateBuilder:
    """Build the category listing filter."""
    return PredicateBuilder().add_if(
        params.parent_category_id,
        lambda parent_id: CategoryRecord.parent_category_id == parent_id,
    )


def product_predicates(params: ListProductsParams) -> PredicateBuilder:
    """Build the product listing filter.

    Args:
        params: Listing parameters.

    Returns:
        Builder holding one clause per present criterion.
    """
    return (
        PredicateBuilder()
        .add_if(
            params.search,
            lambda term: or_(
                ProductRecord.name.icontains(term, autoescape=True),
                ProductRecord.description.icontains(term, autoescape=True),
            ),
        )
        .add_if(params.category_id, lambda cid: ProductRecord.category_id == cid)
        .add_if(params.min_price, lambda price: ProductRecord.price >= price)
        .add_if(params.max_price, lambda price: ProductRecord.price <= price)
        .add_if(params.is_active, lambda active: ProductRecord.is_active == active)
        .add_if(params.product_ids, lambda ids: ProductRecord.id.in_(list(ids)))
    )


def product_sort_column(params: ListProductsParams) -> Any:
    """Get SQLAlchemy column for sorting.

    Args:
        params: Listing parameters.

    Returns:
        Ordered column expression.
    """
    columns = {
        "name": ProductRecord.name,
        "price": ProductRecord.price,
        "created_at": ProductRecord.created_at,
        "updated_at": ProductRecord.updated_at,
    }
    column = columns[params.resolved_sort_by]
    return column.desc() if params.descending else column.asc()
