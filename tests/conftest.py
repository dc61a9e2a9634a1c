"""Shared fixtures for catalog tests."""

from collections.abc import AsyncGenerator, Generator
from decimal import Decimal

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from catalog_service.catalog import InMemoryCatalogStore, SqlCatalogStore
from catalog_service.domain import Category, Product
from catalog_service.infrastructure.config import Settings
from catalog_service.infrastructure.database import (
    create_tables,
    enable_sqlite_foreign_keys,
)
from catalog_service.main import create_app

SQLITE_URL = "sqlite+aiosqlite:///:memory:"


# ============================================================================
# Configuration
# ============================================================================


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the environment and any .env file."""
    return Settings(
        _env_file=None,
        app_env="test",
        database_url=SQLITE_URL,
        log_json=False,
    )


# ============================================================================
# Stores
# ============================================================================


@pytest.fixture
def memory_store() -> InMemoryCatalogStore:
    """Empty in-memory store."""
    return InMemoryCatalogStore()


@pytest_asyncio.fixture
async def sql_store() -> AsyncGenerator[SqlCatalogStore, None]:
    """SQL store over a private in-memory SQLite database."""
    engine = create_async_engine(
        SQLITE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    enable_sqlite_foreign_keys(engine)
    await create_tables(engine)
    store = SqlCatalogStore(engine)
    yield store
    await store.close()


# ============================================================================
# Client Fixtures
# ============================================================================


@pytest.fixture
def client(
    settings: Settings, memory_store: InMemoryCatalogStore
) -> Generator[TestClient, None, None]:
    """Test client serving from the in-memory store."""
    app = create_app(settings, memory_store)
    with TestClient(app) as test_client:
        yield test_client


# ============================================================================
# Entity factories
# ============================================================================


def _category(name: str = "Garden", **overrides) -> Category:
    return Category(name=name, **overrides)


def _product(sku: str = "SKU-001", **overrides) -> Product:
    values = {
        "name": f"Product {sku}",
        "sku": sku,
        "price": Decimal("19.99"),
        "stock_quantity": 10,
    }
    values.update(overrides)
    return Product(**values)


@pytest.fixture
def make_category():
    """Factory for unsaved categories."""
    return _category


@pytest.fixture
def make_product():
    """Factory for unsaved products (price 19.99, stock 10)."""
    return _product


@pytest.fixture
def sql_client(settings: Settings, tmp_path) -> Generator[TestClient, None, None]:
    """Test client whose app owns a SQL store over a SQLite file."""
    sql_settings = settings.model_copy(
        update={"database_url": f"sqlite+aiosqlite:///{tmp_path / 'catalog.db'}"}
    )
    app = create_app(sql_settings)
    with TestClient(app) as test_client:
        yield test_client
