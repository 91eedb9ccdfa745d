"""Tests for procurement models and the scoring policy"""

from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError

from supplieriq.procurement.models import (
    PurchaseOrder,
    RequestStatus,
    SupplierRating,
    SupplierSuggestion,
    Urgency,
)
from supplieriq.procurement.policy import ScoringPolicy


# ============================================================================
# ProcurementRequest
# ============================================================================


def test_request_defaults(request_factory) -> None:
    request = request_factory()

    assert request.status == RequestStatus.PENDING
    assert request.urgency == Urgency.MEDIUM
    assert request.request_id


def test_request_strips_text_fields(request_factory) -> None:
    request = request_factory(category="  metals ", region=" DE")

    assert request.category == "metals"
    assert request.region == "DE"


@pytest.mark.parametrize(
    "overrides",
    [
        {"quantity": 0},
        {"quantity": -5},
        {"budget": Decimal("-1")},
        {"category": "   "},
        {"region": ""},
        {"urgency": "whenever"},
    ],
)
def test_invalid_requests_rejected(request_factory, overrides: dict) -> None:
    with pytest.raises(ValidationError):
        request_factory(**overrides)


def test_terminal_statuses() -> None:
    assert RequestStatus.COMPLETED.is_terminal
    assert RequestStatus.FAILED.is_terminal
    assert RequestStatus.CANCELLED.is_terminal
    assert not RequestStatus.PENDING.is_terminal
    assert not RequestStatus.PROCESSING.is_terminal


# ============================================================================
# PurchaseOrder
# ============================================================================


def test_order_total_defaults_to_unit_price_times_quantity() -> None:
    order = PurchaseOrder(
        supplier_id="sup-1", category="metals", quantity=200, unit_price=Decimal("2.50")
    )

    assert order.total_price == Decimal("500.00")
    assert order.is_late is False


def test_order_lateness_derived_from_dates() -> None:
    late = PurchaseOrder(
        supplier_id="sup-1",
        category="metals",
        quantity=1,
        unit_price=Decimal("1"),
        expected_delivery_date=date(2024, 1, 10),
        actual_delivery_date=date(2024, 1, 12),
    )
    early = PurchaseOrder(
        supplier_id="sup-1",
        category="metals",
        quantity=1,
        unit_price=Decimal("1"),
        expected_delivery_date=date(2024, 1, 10),
        actual_delivery_date=date(2024, 1, 9),
        is_late=True,
    )

    assert late.is_late is True
    assert early.is_late is False


def test_order_lateness_kept_without_dates() -> None:
    order = PurchaseOrder(
        supplier_id="sup-1", category="metals", quantity=1, unit_price=Decimal("1"), is_late=True
    )

    assert order.is_late is True


# ============================================================================
# Ratings and suggestions
# ============================================================================


@pytest.mark.parametrize("value", [-0.1, 5.1])
def test_rating_bounds(value: float) -> None:
    with pytest.raises(ValidationError):
        SupplierRating(supplier_id="sup-1", rating=value)


def test_suggestion_constraints() -> None:
    fields = {
        "request_id": "req-1",
        "supplier_id": "sup-1",
        "match_score": 0.85,
        "risk_score": 12,
        "explanation": "Excellent delivery record: 100.0% on-time.",
        "rank": 1,
    }
    suggestion = SupplierSuggestion(**fields)

    with pytest.raises(ValidationError):
        suggestion.rank = 2
    with pytest.raises(ValidationError):
        SupplierSuggestion(**{**fields, "match_score": 1.5})
    with pytest.raises(ValidationError):
        SupplierSuggestion(**{**fields, "risk_score": 101})
    with pytest.raises(ValidationError):
        SupplierSuggestion(**{**fields, "rank": 0})


# ============================================================================
# ScoringPolicy
# ============================================================================


def test_default_policy_weights() -> None:
    policy = ScoringPolicy()

    assert (policy.category_weight, policy.region_weight, policy.experience_weight) == (
        0.5,
        0.2,
        0.3,
    )
    assert policy.experience_saturation_orders == 10


def test_policy_rejects_weights_not_summing_to_one() -> None:
    with pytest.raises(ValidationError):
        ScoringPolicy(category_weight=0.9)

    with pytest.raises(ValidationError):
        ScoringPolicy(late_delivery_weight=0.1)
