"""
Pytest configuration and shared fixtures

Stores are fresh per test; time is pinned so suggestion timestamps are
predictable.
"""

from collections.abc import Sequence
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from pathlib import Path

import pytest

from supplieriq.kernel.bus import NotificationChannel
from supplieriq.kernel.settings import Settings
from supplieriq.kernel.time import FixedTimeProvider
from supplieriq.procurement.models import (
    IssueType,
    ProcurementRequest,
    PurchaseOrder,
    Supplier,
    SupplierIssue,
    SupplierRating,
)
from supplieriq.procurement.pipeline import SuggestionPipeline
from supplieriq.procurement.sqlite_store import SQLiteStore
from supplieriq.procurement.stores import InMemoryStore


@pytest.fixture
def fixed_time() -> FixedTimeProvider:
    """Deterministic clock: 2025-01-15 12:00:00 UTC"""
    return FixedTimeProvider(datetime(2025, 1, 15, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def sqlite_store(tmp_path: Path) -> SQLiteStore:
    return SQLiteStore(tmp_path / "supplieriq-test.db")


@pytest.fixture
def channel() -> NotificationChannel:
    return NotificationChannel()


@pytest.fixture
def pipeline(
    store: InMemoryStore, fixed_time: FixedTimeProvider, channel: NotificationChannel
) -> SuggestionPipeline:
    """Pipeline over the in-memory store, subscribed to the channel"""
    pipeline = SuggestionPipeline(store, settings=Settings(), time_provider=fixed_time)
    pipeline.register(channel)
    return pipeline


def make_request(
    category: str = "metals", region: str = "DE", **overrides: object
) -> ProcurementRequest:
    """Builder for a valid procurement request"""
    fields: dict[str, object] = {
        "category": category,
        "description": f"Test request for {category}",
        "quantity": 1000,
        "budget": Decimal("10000"),
        "region": region,
    }
    fields.update(overrides)
    return ProcurementRequest(**fields)


def make_orders(
    supplier_id: str,
    count: int,
    *,
    late: int = 0,
    category: str = "metals",
    unit_prices: Sequence[str] | None = None,
) -> list[PurchaseOrder]:
    """
    Builder for an order history

    The first ``late`` orders arrive two days after their expected date,
    the rest arrive on time. Unit prices default to 2.00 for every order.
    """
    orders = []
    for i in range(count):
        expected = date(2024, 1, 1) + timedelta(days=30 * i)
        actual = expected + timedelta(days=2) if i < late else expected
        price = unit_prices[i] if unit_prices else "2.00"
        orders.append(
            PurchaseOrder(
                supplier_id=supplier_id,
                category=category,
                quantity=100,
                unit_price=Decimal(price),
                expected_delivery_date=expected,
                actual_delivery_date=actual,
            )
        )
    return orders


async def add_supplier_with_history(
    store: InMemoryStore | SQLiteStore,
    name: str,
    *,
    category: str = "metals",
    region: str = "DE",
    is_active: bool = True,
    orders: int = 0,
    late: int = 0,
    order_category: str | None = None,
    unit_prices: Sequence[str] | None = None,
    ratings: Sequence[float] = (),
    issues: int = 0,
) -> Supplier:
    """Register a supplier plus its orders, ratings and issues"""
    supplier = await store.add_supplier(
        Supplier(name=name, category=category, region=region, is_active=is_active)
    )
    for order in make_orders(
        supplier.supplier_id,
        orders,
        late=late,
        category=order_category or category,
        unit_prices=unit_prices,
    ):
        await store.add_order(order)
    for value in ratings:
        await store.add_rating(SupplierRating(supplier_id=supplier.supplier_id, rating=value))
    for _ in range(issues):
        await store.add_issue(
            SupplierIssue(supplier_id=supplier.supplier_id, issue_type=IssueType.DELIVERY)
        )
    return supplier


@pytest.fixture
def supplier_factory():
    """Async builder: ``await supplier_factory(store, "Name", orders=5, ...)``"""
    return add_supplier_with_history


@pytest.fixture
def request_factory():
    return make_request


@pytest.fixture
def orders_factory():
    return make_orders
