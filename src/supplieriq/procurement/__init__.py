"""
Procurement - supplier matching, risk scoring and ranked suggestions

The match and risk engines are pure functions. SuggestionPipeline wires them
to the stores and the notification channel; SuggestionReader serves results.
"""

from supplieriq.procurement.matching import compute_match_score
from supplieriq.procurement.models import (
    IssueSeverity,
    IssueType,
    OrderStatus,
    ProcurementRequest,
    PurchaseOrder,
    RequestStatus,
    Supplier,
    SupplierIssue,
    SupplierRating,
    SupplierSuggestion,
    Urgency,
)
from supplieriq.procurement.pipeline import (
    OutcomeStatus,
    PipelineOutcome,
    SuggestionPipeline,
    rank_candidates,
)
from supplieriq.procurement.policy import ScoringPolicy, default_scoring_policy
from supplieriq.procurement.reader import SuggestionReader, suggestion_row
from supplieriq.procurement.risk import RiskAssessment, compute_risk_score
from supplieriq.procurement.sqlite_store import SQLiteStore
from supplieriq.procurement.stores import InMemoryStore, ProcurementStore

__all__ = [
    # Models
    "ProcurementRequest",
    "Supplier",
    "PurchaseOrder",
    "SupplierIssue",
    "SupplierRating",
    "SupplierSuggestion",
    "RequestStatus",
    "Urgency",
    "OrderStatus",
    "IssueType",
    "IssueSeverity",
    # Engines
    "ScoringPolicy",
    "default_scoring_policy",
    "compute_match_score",
    "compute_risk_score",
    "RiskAssessment",
    # Pipeline
    "SuggestionPipeline",
    "PipelineOutcome",
    "OutcomeStatus",
    "rank_candidates",
    "SuggestionReader",
    "suggestion_row",
    # Stores
    "ProcurementStore",
    "InMemoryStore",
    "SQLiteStore",
]
