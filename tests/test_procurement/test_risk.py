"""
Tests for the risk engine

Scores are integers in [0, 100]; explanations are one sentence per factor
joined with ". " and ending with a period.
"""

import pytest

from supplieriq.procurement.models import IssueType, SupplierIssue, SupplierRating
from supplieriq.procurement.risk import compute_risk_score, price_volatility

SUPPLIER_ID = "sup-1"


def ratings(*values: float) -> list[SupplierRating]:
    return [SupplierRating(supplier_id=SUPPLIER_ID, rating=v) for v in values]


def issues(count: int) -> list[SupplierIssue]:
    return [
        SupplierIssue(supplier_id=SUPPLIER_ID, issue_type=IssueType.QUALITY)
        for _ in range(count)
    ]


# ============================================================================
# Scores
# ============================================================================


def test_no_history_scores_neutral_rating_only() -> None:
    assessment = compute_risk_score([], [], [])

    assert assessment.risk_score == 10
    assert assessment.average_rating is None
    assert assessment.explanation == (
        "Excellent delivery record: 100.0% on-time. "
        "No recorded issues. "
        "No ratings available (neutral risk assumed)."
    )


def test_perfect_history_scores_zero(orders_factory) -> None:
    assessment = compute_risk_score(orders_factory(SUPPLIER_ID, 3), [], ratings(5.0, 5.0))

    assert assessment.risk_score == 0
    assert assessment.explanation == (
        "Excellent delivery record: 100.0% on-time. "
        "No recorded issues. "
        "Excellent average rating: 5.00/5."
    )


def test_troubled_supplier(orders_factory) -> None:
    # late 2/3·0.4 + issues 1·0.3 + rating 0.4375·0.2 = 0.654
    orders = orders_factory(SUPPLIER_ID, 3, late=2)

    assessment = compute_risk_score(orders, issues(2), ratings(3.5, 3.0))

    assert assessment.risk_score == 65
    assert assessment.late_delivery_rate == pytest.approx(2 / 3)
    assert assessment.issue_score == pytest.approx(1.0)
    assert assessment.rating_score == pytest.approx(0.4375)
    assert assessment.explanation == (
        "Poor delivery record: only 33.3% on-time. "
        "High issue frequency: 2 issues across 3 orders. "
        "Fair average rating: 3.25/5."
    )


def test_worst_case_is_capped_at_hundred(orders_factory) -> None:
    orders = orders_factory(SUPPLIER_ID, 2, late=2, unit_prices=["1.00", "5.00"])

    assessment = compute_risk_score(orders, issues(5), ratings(0.0))

    assert assessment.risk_score == 100
    assert assessment.rating_score == pytest.approx(1.0)


def test_issues_without_orders_use_denominator_one() -> None:
    assessment = compute_risk_score([], issues(1), [])

    # 1 issue / max(0, 1) saturates the issue factor: 0.3 + neutral 0.1
    assert assessment.issue_score == pytest.approx(1.0)
    assert assessment.risk_score == 40


def test_score_within_bounds_for_varied_histories(orders_factory) -> None:
    for late in range(0, 5):
        for issue_count in (0, 1, 3, 10):
            for rating_values in ((), (1.0,), (2.5, 4.5), (5.0,)):
                assessment = compute_risk_score(
                    orders_factory(SUPPLIER_ID, 4, late=min(late, 4)),
                    issues(issue_count),
                    ratings(*rating_values),
                )
                assert 0 <= assessment.risk_score <= 100


# ============================================================================
# Explanation tiers
# ============================================================================


@pytest.mark.parametrize(
    ("count", "late", "sentence"),
    [
        (20, 1, "Good delivery record: 95.0% on-time"),
        (10, 2, "Fair delivery record: 80.0% on-time"),
        (4, 1, "Poor delivery record: only 75.0% on-time"),
    ],
)
def test_delivery_tiers(orders_factory, count: int, late: int, sentence: str) -> None:
    assessment = compute_risk_score(orders_factory(SUPPLIER_ID, count, late=late), [], [])

    assert assessment.explanation.startswith(sentence + ". ")


@pytest.mark.parametrize(
    ("issue_count", "sentence"),
    [
        (1, "Low issue frequency: 1 issues across 10 orders"),
        (2, "Moderate issue frequency: 2 issues across 10 orders"),
        (4, "High issue frequency: 4 issues across 10 orders"),
    ],
)
def test_issue_tiers(orders_factory, issue_count: int, sentence: str) -> None:
    assessment = compute_risk_score(orders_factory(SUPPLIER_ID, 10), issues(issue_count), [])

    assert sentence in assessment.explanation


@pytest.mark.parametrize(
    ("values", "sentence"),
    [
        ((4.9, 4.9), "Excellent average rating: 4.90/5"),
        ((4.0,), "Good average rating: 4.00/5"),
        ((3.0, 2.5), "Fair average rating: 2.75/5"),
        ((2.0,), "Poor average rating: 2.00/5"),
    ],
)
def test_rating_tiers(values: tuple[float, ...], sentence: str) -> None:
    assessment = compute_risk_score([], [], ratings(*values))

    assert assessment.explanation.endswith(sentence + ".")


# ============================================================================
# Price volatility
# ============================================================================


def test_volatility_needs_two_orders(orders_factory) -> None:
    assert price_volatility([]) == 0.0
    assert price_volatility(orders_factory(SUPPLIER_ID, 1, unit_prices=["9.99"])) == 0.0


def test_volatility_floor_on_cheap_items(orders_factory) -> None:
    orders = orders_factory(SUPPLIER_ID, 2, unit_prices=["0.40", "0.90"])

    # (0.9 - 0.4) / max(0.4, 1)
    assert price_volatility(orders) == pytest.approx(0.5)


def test_high_volatility_warning(orders_factory) -> None:
    orders = orders_factory(SUPPLIER_ID, 2, unit_prices=["10.00", "14.00"])

    assessment = compute_risk_score(orders, [], ratings(5.0))

    assert assessment.volatility_score == pytest.approx(0.8)
    assert assessment.explanation.endswith(
        "Warning: High price volatility (40.0% variation)."
    )
    assert assessment.risk_score == 8


def test_moderate_volatility_note(orders_factory) -> None:
    orders = orders_factory(SUPPLIER_ID, 2, unit_prices=["10.00", "11.50"])

    assessment = compute_risk_score(orders, [], ratings(5.0))

    assert assessment.explanation.endswith(
        "Note: Moderate price volatility (15.0% variation)."
    )


def test_low_volatility_not_mentioned(orders_factory) -> None:
    orders = orders_factory(SUPPLIER_ID, 2, unit_prices=["10.00", "10.50"])

    assessment = compute_risk_score(orders, [], ratings(5.0))

    assert "volatility" not in assessment.explanation
