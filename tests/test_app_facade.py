"""
Tests for the SupplierIQ façade

Intake returns immediately; suggestions appear once the background pipeline
run has finished.
"""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from supplieriq import SupplierIQ
from supplieriq.kernel.bus import DispatchStatus
from supplieriq.kernel.events import SuggestionsGenerated
from supplieriq.kernel.settings import Settings
from supplieriq.procurement.models import RequestStatus, Urgency
from supplieriq.procurement.pipeline import OutcomeStatus
from supplieriq.procurement.sqlite_store import SQLiteStore
from supplieriq.procurement.stores import InMemoryStore


@pytest.fixture
def iq(fixed_time) -> SupplierIQ:
    return SupplierIQ(time_provider=fixed_time)


async def submit_metals(iq: SupplierIQ, **overrides):
    fields = {
        "category": "metals",
        "description": "Aluminum casings for the new enclosure",
        "quantity": 5000,
        "budget": Decimal("15000"),
        "region": "DE",
    }
    fields.update(overrides)
    return await iq.submit_request(**fields)


def test_default_store_selection(tmp_path) -> None:
    assert isinstance(SupplierIQ().store, InMemoryStore)
    assert isinstance(SupplierIQ(settings=Settings(db_path=tmp_path / "iq.db")).store, SQLiteStore)


def test_pipeline_subscribed_once() -> None:
    iq = SupplierIQ()

    assert iq.channel.handler_count("RequestCreated") == 1


@pytest.mark.asyncio
async def test_submit_returns_pending_request(iq) -> None:
    await iq.seed_demo_data()

    request, receipt = await submit_metals(iq, urgency="high")

    assert request.status == RequestStatus.PENDING
    assert request.urgency == Urgency.HIGH
    assert request.created_at == iq.time_provider.now()
    assert receipt.dispatches[0].status is DispatchStatus.RUNNING

    await iq.wait_for_pipelines()

    outcome = receipt.dispatches[0].result
    assert outcome.status is OutcomeStatus.SUCCEEDED
    assert outcome.suggestion_count == 4


@pytest.mark.asyncio
async def test_seeded_metals_ranking(iq) -> None:
    await iq.seed_demo_data()
    names = {s.supplier_id: s.name for s in await iq.list_suppliers()}

    request, _ = await submit_metals(iq)
    await iq.wait_for_pipelines()

    suggestions = await iq.get_suggestions(request.request_id)
    assert [names[s.supplier_id] for s in suggestions] == [
        "SteelPro Industries",
        "MetalWorks GmbH",
        "Global Metals Ltd",
        "AlumniCorp",
    ]
    assert [s.rank for s in suggestions] == [1, 2, 3, 4]
    assert suggestions[0].match_score == pytest.approx(0.85)
    assert suggestions[0].risk_score == 2
    assert suggestions[0].explanation == (
        "Excellent delivery record: 100.0% on-time. "
        "No recorded issues. "
        "Excellent average rating: 4.90/5."
    )
    assert (await iq.get_request(request.request_id)).status == RequestStatus.COMPLETED


@pytest.mark.asyncio
async def test_suggestions_empty_until_generated(iq) -> None:
    await iq.seed_demo_data()

    request, _ = await submit_metals(iq)

    assert await iq.get_suggestions(request.request_id) == []
    await iq.wait_for_pipelines()
    assert len(await iq.get_suggestions(request.request_id)) == 4


@pytest.mark.asyncio
async def test_suggestions_paired_with_suppliers(iq) -> None:
    await iq.seed_demo_data()
    request, _ = await submit_metals(iq)
    await iq.wait_for_pipelines()

    rows = await iq.get_suggestions_with_suppliers(request.request_id)

    assert [s.rank for s, _ in rows] == [1, 2, 3, 4]
    assert all(s.supplier_id == supplier.supplier_id for s, supplier in rows)
    assert rows[0][1].name == "SteelPro Industries"
    assert await iq.get_suggestions_with_suppliers("unknown") == []


@pytest.mark.asyncio
async def test_completion_notification(iq) -> None:
    seen: list[SuggestionsGenerated] = []
    iq.channel.subscribe(SuggestionsGenerated, seen.append)
    await iq.seed_demo_data()

    request, _ = await submit_metals(iq, category="plastics")
    await iq.wait_for_pipelines()

    assert [(e.request_id, e.suggestion_count) for e in seen] == [(request.request_id, 2)]


@pytest.mark.asyncio
async def test_invalid_request_not_stored(iq) -> None:
    with pytest.raises(ValidationError):
        await submit_metals(iq, quantity=0)

    assert iq.channel.pending_count == 0
    assert iq.store._requests == {}


@pytest.mark.asyncio
async def test_sqlite_backed_facade(tmp_path, fixed_time) -> None:
    iq = SupplierIQ(settings=Settings(db_path=tmp_path / "facade.db"), time_provider=fixed_time)
    await iq.seed_demo_data()

    request, _ = await submit_metals(iq, category="electronics", region="CN")
    await iq.wait_for_pipelines()

    suggestions = await iq.get_suggestions(request.request_id)
    names = {s.supplier_id: s.name for s in await iq.list_suppliers()}
    assert [names[s.supplier_id] for s in suggestions] == ["TechParts Asia", "CircuitBoard Pro"]
