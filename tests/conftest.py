"""Pytest configuration and shared fixtures for the catalog console tests."""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

from storeadmin.catalog.selection import SelectionManager
from storeadmin.catalog.store import InventoryStore
from storeadmin.domain.entities import CatalogEntry
from storeadmin.domain.session import Session, UserInfo
from storeadmin.domain.value_objects import ProductStatus
from storeadmin.infrastructure.gateway import CatalogGateway, GatewayResponse


# ============================================================================
# Response Helpers
# ============================================================================


def make_success_response(data=None) -> GatewayResponse:
    """Create a successful gateway response."""
    return GatewayResponse.ok(data)


def make_error_response(
    error_code: str = "UNKNOWN_ERROR",
    message: str = "Server error",
    status_code: int = 500,
) -> GatewayResponse:
    """Create a failed gateway response."""
    return GatewayResponse.fail(error_code, message, status_code)


def make_entry(entry_id: str, **overrides) -> CatalogEntry:
    """Create a catalog entry with sensible defaults."""
    values = {
        "name": f"Product {entry_id}",
        "category": "Electronics",
        "price": Decimal("19.99"),
        "stock": 50,
        "status": ProductStatus.ACTIVE,
        "min_stock": 10,
        "sku": f"SKU-{entry_id}",
    }
    values.update(overrides)
    return CatalogEntry(id=entry_id, **values)


# ============================================================================
# Gateway Fixtures
# ============================================================================


@pytest.fixture
def mock_gateway() -> MagicMock:
    """Create a mock catalog gateway."""
    gateway = MagicMock(spec=CatalogGateway)

    # Make all methods async
    gateway.list_products = AsyncMock()
    gateway.create_product = AsyncMock()
    gateway.update_product = AsyncMock()
    gateway.delete_product = AsyncMock()
    gateway.patch_product_status = AsyncMock()
    gateway.upload_image = AsyncMock()
    gateway.close = AsyncMock()

    return gateway


@pytest.fixture
def session() -> Session:
    """Create an authenticated session."""
    session = Session()
    session.login("test-token", UserInfo(name="alice", role="admin", id="u-1"))
    return session


# ============================================================================
# Sample Data Fixtures
# ============================================================================


@pytest.fixture
def sample_entries() -> list[CatalogEntry]:
    """Create a small mixed catalog.

    - A: phone, plenty of stock
    - B: headset, low stock
    - C: mouse, out of stock but stored as active
    - D: notebook, inactive
    """
    return [
        make_entry(
            "A",
            name="Smart Phone X",
            sku="PH-001",
            stock=120,
            sales=340,
            supplier="Acme",
            description="Flagship phone",
        ),
        make_entry("B", name="Wireless Headset", sku="HS-002", stock=4, sales=80),
        make_entry(
            "C",
            name="Gaming Mouse",
            category="Accessories",
            sku="MS-003",
            stock=0,
            sales=150,
        ),
        make_entry(
            "D",
            name="Paper Notebook",
            category="Office",
            sku=None,
            price=Decimal("3.50"),
            stock=30,
            status=ProductStatus.INACTIVE,
            sales=5,
        ),
    ]


@pytest.fixture
def store(mock_gateway: MagicMock) -> InventoryStore:
    """Create an empty store over the mock gateway."""
    return InventoryStore(mock_gateway)


@pytest_asyncio.fixture
async def loaded_store(
    mock_gateway: MagicMock,
    sample_entries: list[CatalogEntry],
) -> InventoryStore:
    """Create a store loaded with the sample entries."""
    mock_gateway.list_products.return_value = make_success_response(sample_entries)
    store = InventoryStore(mock_gateway)
    await store.load()
    return store


@pytest.fixture
def selection(store: InventoryStore) -> SelectionManager:
    """Create a selection bound to the empty store."""
    return SelectionManager(store)
