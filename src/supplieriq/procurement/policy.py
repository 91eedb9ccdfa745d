"""
Scoring Policy - weights and tier thresholds for the match and risk engines

Defaults reproduce the published scoring rules. The policy is a validated
pydantic model so a tuned policy cannot silently drift out of range.
"""

from pydantic import BaseModel, Field, model_validator

_WEIGHT_TOLERANCE = 1e-9


class ScoringPolicy(BaseModel):
    """Parameters shared by compute_match_score and compute_risk_score"""

    # Match engine weights (must sum to 1)
    category_weight: float = Field(default=0.5, ge=0.0, le=1.0)
    region_weight: float = Field(default=0.2, ge=0.0, le=1.0)
    experience_weight: float = Field(default=0.3, ge=0.0, le=1.0)

    experience_saturation_orders: int = Field(
        default=10,
        ge=1,
        description="Category orders at which experience score reaches 1.0",
    )

    # Risk engine weights (must sum to 1)
    late_delivery_weight: float = Field(default=0.4, ge=0.0, le=1.0)
    issue_weight: float = Field(default=0.3, ge=0.0, le=1.0)
    rating_weight: float = Field(default=0.2, ge=0.0, le=1.0)
    volatility_weight: float = Field(default=0.1, ge=0.0, le=1.0)

    issue_ratio_saturation: float = Field(
        default=0.5,
        gt=0.0,
        description="Issues-per-order ratio at which issue risk reaches 1.0",
    )
    volatility_saturation: float = Field(
        default=0.5,
        gt=0.0,
        description="Relative unit-price spread at which volatility risk reaches 1.0",
    )
    neutral_rating_risk: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        description="Rating risk assumed for suppliers with no ratings",
    )

    # Explanation tiers
    good_delivery_max_late_rate: float = Field(default=0.10, ge=0.0, le=1.0)
    fair_delivery_max_late_rate: float = Field(default=0.25, ge=0.0, le=1.0)
    low_issue_max_score: float = Field(default=0.3, ge=0.0, le=1.0)
    moderate_issue_max_score: float = Field(default=0.6, ge=0.0, le=1.0)
    excellent_rating_min: float = Field(default=4.5, ge=0.0, le=5.0)
    good_rating_min: float = Field(default=3.5, ge=0.0, le=5.0)
    fair_rating_min: float = Field(default=2.5, ge=0.0, le=5.0)
    volatility_note_above: float = Field(default=0.2, ge=0.0, le=1.0)
    volatility_warning_above: float = Field(default=0.5, ge=0.0, le=1.0)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_weights(self) -> "ScoringPolicy":
        match_total = self.category_weight + self.region_weight + self.experience_weight
        if abs(match_total - 1.0) > _WEIGHT_TOLERANCE:
            raise ValueError(f"Match weights must sum to 1.0, got {match_total}")
        risk_total = (
            self.late_delivery_weight
            + self.issue_weight
            + self.rating_weight
            + self.volatility_weight
        )
        if abs(risk_total - 1.0) > _WEIGHT_TOLERANCE:
            raise ValueError(f"Risk weights must sum to 1.0, got {risk_total}")
        return self


default_scoring_policy = ScoringPolicy()
