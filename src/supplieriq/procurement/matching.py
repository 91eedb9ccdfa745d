"""
Match Engine - how well a supplier fits a request

score = 0.5·category + 0.2·region + 0.3·experience, each component in [0, 1].
Category and region are exact (case-insensitive) matches; experience grows
linearly with the supplier's past orders in the request's category and
saturates at 10 orders.
"""

from supplieriq.procurement.models import ProcurementRequest, Supplier
from supplieriq.procurement.policy import ScoringPolicy, default_scoring_policy


def experience_score(
    orders_in_category_count: int, policy: ScoringPolicy = default_scoring_policy
) -> float:
    """0 orders → 0.0, 5 → 0.5, 10 or more → 1.0 (default policy)"""
    return min(orders_in_category_count / policy.experience_saturation_orders, 1.0)


def compute_match_score(
    request: ProcurementRequest,
    supplier: Supplier,
    orders_in_category_count: int,
    policy: ScoringPolicy = default_scoring_policy,
) -> float:
    """
    Compute the match score of a supplier for a request

    Args:
        request: Request being matched
        supplier: Candidate supplier
        orders_in_category_count: Supplier's past orders in the request's category
        policy: Weights (defaults to 0.5 / 0.2 / 0.3)

    Returns:
        Score in [0, 1], higher is a better fit

    Example:
        >>> # category match, other region, 5 category orders
        >>> compute_match_score(request, supplier, 5)  # 0.5 + 0 + 0.15
        0.65
    """
    category_score = 1.0 if supplier.category.lower() == request.category.lower() else 0.0
    region_score = 1.0 if supplier.region.lower() == request.region.lower() else 0.0

    score = (
        policy.category_weight * category_score
        + policy.region_weight * region_score
        + policy.experience_weight * experience_score(orders_in_category_count, policy)
    )
    return max(0.0, min(1.0, score))
