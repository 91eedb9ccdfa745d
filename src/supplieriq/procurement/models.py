"""
Procurement Domain Models

Requests, suppliers and the supplier history (orders, issues, ratings) the
scoring engines read, plus the ranked suggestions the pipeline writes.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field, field_validator, model_validator

from supplieriq.kernel.ids import generate_id


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RequestStatus(str, Enum):
    """
    Procurement request lifecycle

    PENDING → PROCESSING → COMPLETED
                   ↓
                 FAILED (suggestion generation raised)

    CANCELLED is terminal and set outside the suggestion pipeline.
    """

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (RequestStatus.COMPLETED, RequestStatus.FAILED, RequestStatus.CANCELLED)


class Urgency(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class IssueType(str, Enum):
    QUALITY = "quality"
    DELIVERY = "delivery"
    COMMUNICATION = "communication"
    PRICING = "pricing"
    OTHER = "other"


class IssueSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ProcurementRequest(BaseModel):
    """
    A request to buy a quantity of goods in a category, delivered to a region

    Created by intake in PENDING; only the suggestion pipeline moves its status.
    """

    request_id: str = Field(default_factory=generate_id, description="Unique request identifier")
    category: str = Field(..., description="Goods category, e.g. 'metals'")
    description: str = Field(..., description="Free-text description of the need")
    quantity: int = Field(..., gt=0, description="Units requested")
    urgency: Urgency = Field(default=Urgency.MEDIUM)
    budget: Decimal = Field(..., ge=0, description="Budget for the whole request")
    region: str = Field(..., description="Delivery region code, e.g. 'DE'")
    status: RequestStatus = Field(default=RequestStatus.PENDING)
    created_at: datetime = Field(default_factory=_utcnow)

    @field_validator("category", "description", "region")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("must not be empty")
        return v.strip()


class Supplier(BaseModel):
    """Supplier in the registry (owned by supplier management, read-only here)"""

    supplier_id: str = Field(default_factory=generate_id)
    name: str = Field(..., description="Supplier name")
    category: str = Field(..., description="Category the supplier serves")
    region: str = Field(..., description="Region the supplier operates in")
    description: str | None = Field(default=None)
    is_active: bool = Field(default=True, description="Eligible for matching")


class PurchaseOrder(BaseModel):
    """
    Historical purchase order placed with a supplier

    is_late is derived from the delivery dates when both are known;
    otherwise the flag passed in is kept.
    """

    order_id: str = Field(default_factory=generate_id)
    supplier_id: str = Field(...)
    category: str = Field(...)
    quantity: int = Field(..., gt=0)
    unit_price: Decimal = Field(..., ge=0)
    total_price: Decimal | None = Field(
        default=None, description="Defaults to quantity × unit_price"
    )
    status: OrderStatus = Field(default=OrderStatus.PENDING)
    expected_delivery_date: date | None = Field(default=None)
    actual_delivery_date: date | None = Field(default=None)
    is_late: bool = Field(default=False)

    @model_validator(mode="after")
    def derive_totals_and_lateness(self) -> "PurchaseOrder":
        if self.total_price is None:
            self.total_price = self.unit_price * self.quantity
        if self.expected_delivery_date and self.actual_delivery_date:
            self.is_late = self.actual_delivery_date > self.expected_delivery_date
        return self


class SupplierIssue(BaseModel):
    """Recorded problem with a supplier"""

    issue_id: str = Field(default_factory=generate_id)
    supplier_id: str = Field(...)
    issue_type: IssueType = Field(...)
    severity: IssueSeverity = Field(default=IssueSeverity.MEDIUM)
    description: str = Field(default="")
    resolved: bool = Field(default=False)
    resolved_at: date | None = Field(default=None)


class SupplierRating(BaseModel):
    """Rating given to a supplier, 0.0 to 5.0"""

    rating_id: str = Field(default_factory=generate_id)
    supplier_id: str = Field(...)
    rating: float = Field(..., ge=0.0, le=5.0)
    comment: str | None = Field(default=None)
    category: str | None = Field(default=None, description="Category context")


class SupplierSuggestion(BaseModel):
    """
    One ranked supplier for one request

    Written once by the suggestion pipeline and never modified. Ranks within
    a request are 1..N with no gaps.
    """

    suggestion_id: str = Field(default_factory=generate_id)
    request_id: str = Field(...)
    supplier_id: str = Field(...)
    match_score: float = Field(..., ge=0.0, le=1.0)
    risk_score: int = Field(..., ge=0, le=100)
    explanation: str = Field(...)
    rank: int = Field(..., ge=1)
    created_at: datetime = Field(default_factory=_utcnow)

    model_config = {"frozen": True}
