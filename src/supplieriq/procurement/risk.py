"""
Risk Engine - how unreliable a supplier has been

Four normalized factors from the supplier's history, combined with fixed
weights and scaled to an integer 0-100 (lower is safer):

| Factor            | Weight | Normalization                                   |
|-------------------|--------|-------------------------------------------------|
| Late deliveries   | 0.4    | late orders / orders (0 with no orders)         |
| Issue frequency   | 0.3    | min((issues / max(orders, 1)) / 0.5, 1)         |
| Inverted rating   | 0.2    | (5 - avg) / 4, 0.5 when unrated                 |
| Price volatility  | 0.1    | clamp(((max - min) / max(min, 1)) / 0.5, 0, 1)  |

Each factor also contributes one sentence to a human-readable explanation.
"""

import math
from collections.abc import Sequence

from pydantic import BaseModel, Field

from supplieriq.procurement.models import PurchaseOrder, SupplierIssue, SupplierRating
from supplieriq.procurement.policy import ScoringPolicy, default_scoring_policy


class RiskAssessment(BaseModel):
    """Risk score with its explanation and the factor values behind it"""

    risk_score: int = Field(..., ge=0, le=100)
    explanation: str = Field(...)
    late_delivery_rate: float = Field(..., ge=0.0, le=1.0)
    issue_score: float = Field(..., ge=0.0, le=1.0)
    rating_score: float = Field(..., ge=0.0, le=1.0)
    volatility_score: float = Field(..., ge=0.0, le=1.0)
    average_rating: float | None = Field(default=None)

    model_config = {"frozen": True}


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _late_delivery_rate(orders: Sequence[PurchaseOrder]) -> float:
    if not orders:
        return 0.0
    return sum(1 for order in orders if order.is_late) / len(orders)


def _delivery_sentence(late_rate: float, policy: ScoringPolicy) -> str:
    on_time = f"{(1 - late_rate) * 100:.1f}"
    if late_rate == 0:
        return f"Excellent delivery record: {on_time}% on-time"
    if late_rate < policy.good_delivery_max_late_rate:
        return f"Good delivery record: {on_time}% on-time"
    if late_rate < policy.fair_delivery_max_late_rate:
        return f"Fair delivery record: {on_time}% on-time"
    return f"Poor delivery record: only {on_time}% on-time"


def _issue_sentence(
    issue_count: int, order_count: int, issue_score: float, policy: ScoringPolicy
) -> str:
    if issue_count == 0:
        return "No recorded issues"
    counts = f"{issue_count} issues across {order_count} orders"
    if issue_score < policy.low_issue_max_score:
        return f"Low issue frequency: {counts}"
    if issue_score < policy.moderate_issue_max_score:
        return f"Moderate issue frequency: {counts}"
    return f"High issue frequency: {counts}"


def _rating_sentence(average: float | None, policy: ScoringPolicy) -> str:
    if average is None:
        return "No ratings available (neutral risk assumed)"
    if average >= policy.excellent_rating_min:
        tier = "Excellent"
    elif average >= policy.good_rating_min:
        tier = "Good"
    elif average >= policy.fair_rating_min:
        tier = "Fair"
    else:
        tier = "Poor"
    return f"{tier} average rating: {average:.2f}/5"


def price_volatility(orders: Sequence[PurchaseOrder]) -> float:
    """Relative unit-price spread (max - min) / max(min, 1); 0 for fewer than 2 orders"""
    if len(orders) < 2:
        return 0.0
    prices = [float(order.unit_price) for order in orders]
    low, high = min(prices), max(prices)
    return (high - low) / max(low, 1.0)


def compute_risk_score(
    orders: Sequence[PurchaseOrder],
    issues: Sequence[SupplierIssue],
    ratings: Sequence[SupplierRating],
    policy: ScoringPolicy = default_scoring_policy,
) -> RiskAssessment:
    """
    Compute a supplier's risk score from its full history

    Args:
        orders: All purchase orders placed with the supplier
        issues: All recorded issues with the supplier
        ratings: All ratings given to the supplier
        policy: Weights and tier thresholds

    Returns:
        RiskAssessment with an integer risk_score in [0, 100]

    Example:
        >>> compute_risk_score([], [], []).risk_score  # only the neutral rating term
        10
    """
    parts: list[str] = []

    late_rate = _late_delivery_rate(orders)
    parts.append(_delivery_sentence(late_rate, policy))

    issue_ratio = len(issues) / max(len(orders), 1)
    issue_score = min(issue_ratio / policy.issue_ratio_saturation, 1.0)
    parts.append(_issue_sentence(len(issues), len(orders), issue_score, policy))

    average_rating: float | None = None
    rating_score = policy.neutral_rating_risk
    if ratings:
        average_rating = sum(float(r.rating) for r in ratings) / len(ratings)
        # 5 stars → 0 risk, 1 star → 1 risk
        rating_score = min(max((5 - average_rating) / 4, 0.0), 1.0)
    parts.append(_rating_sentence(average_rating, policy))

    volatility = price_volatility(orders)
    volatility_score = min(max(volatility / policy.volatility_saturation, 0.0), 1.0)
    if volatility_score > policy.volatility_warning_above:
        parts.append(f"Warning: High price volatility ({volatility * 100:.1f}% variation)")
    elif volatility_score > policy.volatility_note_above:
        parts.append(f"Note: Moderate price volatility ({volatility * 100:.1f}% variation)")

    combined = (
        policy.late_delivery_weight * late_rate
        + policy.issue_weight * issue_score
        + policy.rating_weight * rating_score
        + policy.volatility_weight * volatility_score
    )
    risk_score = min(max(_round_half_up(combined * 100), 0), 100)

    return RiskAssessment(
        risk_score=risk_score,
        explanation=". ".join(parts) + ".",
        late_delivery_rate=late_rate,
        issue_score=issue_score,
        rating_score=rating_score,
        volatility_score=volatility_score,
        average_rating=average_rating,
    )
