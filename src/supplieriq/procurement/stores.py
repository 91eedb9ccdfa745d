"""
Store contracts consumed by the suggestion pipeline, and an in-memory store

Storage mechanics belong to the stores; the pipeline only relies on these
coroutine methods. InMemoryStore implements all of them in one object and
backs tests and the default SupplierIQ instance. SQLiteStore (sqlite_store.py)
is the persistent counterpart.
"""

from typing import Protocol

from supplieriq.kernel.errors import (
    DuplicateSuggestion,
    InvalidStatusTransition,
    RequestNotFound,
)
from supplieriq.procurement.models import (
    ProcurementRequest,
    PurchaseOrder,
    RequestStatus,
    Supplier,
    SupplierIssue,
    SupplierRating,
    SupplierSuggestion,
)


class RequestStore(Protocol):
    async def find_request(self, request_id: str) -> ProcurementRequest | None: ...

    async def update_request_status(self, request_id: str, status: RequestStatus) -> None: ...


class SupplierStore(Protocol):
    async def find_active_suppliers_by_category(self, category: str) -> list[Supplier]: ...


class OrderStore(Protocol):
    async def find_orders_by_supplier(self, supplier_id: str) -> list[PurchaseOrder]: ...


class IssueStore(Protocol):
    async def find_issues_by_supplier(self, supplier_id: str) -> list[SupplierIssue]: ...


class RatingStore(Protocol):
    async def find_ratings_by_supplier(self, supplier_id: str) -> list[SupplierRating]: ...


class SuggestionStore(Protocol):
    async def save_suggestions(self, suggestions: list[SupplierSuggestion]) -> None: ...

    async def find_suggestions_by_request(self, request_id: str) -> list[SupplierSuggestion]:
        """Suggestions for a request ordered by rank ascending"""
        ...


class ProcurementStore(
    RequestStore,
    SupplierStore,
    OrderStore,
    IssueStore,
    RatingStore,
    SuggestionStore,
    Protocol,
):
    """Everything the pipeline and reader need, from one backing store"""


def check_status_transition(
    request_id: str, current: RequestStatus, new: RequestStatus
) -> None:
    """
    Refuse transitions a request cannot make

    A terminal status is final; rewriting the same status is a no-op and
    allowed. PROCESSING can only be entered from PENDING, so exactly one
    pipeline run claims each request.

    Raises:
        InvalidStatusTransition: If current is terminal and new differs, or
            new is PROCESSING and current is not PENDING
    """
    if current.is_terminal and current != new:
        raise InvalidStatusTransition(request_id, current.value, new.value)
    if new == RequestStatus.PROCESSING and current != RequestStatus.PENDING:
        raise InvalidStatusTransition(request_id, current.value, new.value)


class InMemoryStore:
    """
    Dict-backed store implementing every store contract

    Returned models are copies, so callers cannot mutate stored state.
    Supplier category matching is case-sensitive, as a database would do it.
    """

    def __init__(self) -> None:
        self._requests: dict[str, ProcurementRequest] = {}
        self._suppliers: dict[str, Supplier] = {}
        self._orders: dict[str, list[PurchaseOrder]] = {}
        self._issues: dict[str, list[SupplierIssue]] = {}
        self._ratings: dict[str, list[SupplierRating]] = {}
        self._suggestions: dict[str, list[SupplierSuggestion]] = {}

    # Write helpers (intake, supplier management, seeding)

    async def add_request(self, request: ProcurementRequest) -> ProcurementRequest:
        self._requests[request.request_id] = request.model_copy()
        return request

    async def add_supplier(self, supplier: Supplier) -> Supplier:
        self._suppliers[supplier.supplier_id] = supplier.model_copy()
        return supplier

    async def add_order(self, order: PurchaseOrder) -> PurchaseOrder:
        self._orders.setdefault(order.supplier_id, []).append(order.model_copy())
        return order

    async def add_issue(self, issue: SupplierIssue) -> SupplierIssue:
        self._issues.setdefault(issue.supplier_id, []).append(issue.model_copy())
        return issue

    async def add_rating(self, rating: SupplierRating) -> SupplierRating:
        self._ratings.setdefault(rating.supplier_id, []).append(rating.model_copy())
        return rating

    async def list_suppliers(self) -> list[Supplier]:
        return [s.model_copy() for s in self._suppliers.values()]

    # RequestStore

    async def find_request(self, request_id: str) -> ProcurementRequest | None:
        request = self._requests.get(request_id)
        return request.model_copy() if request else None

    async def update_request_status(self, request_id: str, status: RequestStatus) -> None:
        request = self._requests.get(request_id)
        if request is None:
            raise RequestNotFound(request_id)
        check_status_transition(request_id, request.status, status)
        self._requests[request_id] = request.model_copy(update={"status": status})

    # SupplierStore

    async def find_active_suppliers_by_category(self, category: str) -> list[Supplier]:
        return [
            s.model_copy()
            for s in self._suppliers.values()
            if s.is_active and s.category == category
        ]

    # Order / Issue / Rating stores

    async def find_orders_by_supplier(self, supplier_id: str) -> list[PurchaseOrder]:
        return [o.model_copy() for o in self._orders.get(supplier_id, [])]

    async def find_issues_by_supplier(self, supplier_id: str) -> list[SupplierIssue]:
        return [i.model_copy() for i in self._issues.get(supplier_id, [])]

    async def find_ratings_by_supplier(self, supplier_id: str) -> list[SupplierRating]:
        return [r.model_copy() for r in self._ratings.get(supplier_id, [])]

    # SuggestionStore

    async def save_suggestions(self, suggestions: list[SupplierSuggestion]) -> None:
        """All or nothing: ranks and suppliers stay unique per request"""
        seen: dict[str, tuple[set[int], set[str]]] = {}
        for suggestion in suggestions:
            request_id = suggestion.request_id
            if request_id not in seen:
                stored = self._suggestions.get(request_id, [])
                seen[request_id] = (
                    {s.rank for s in stored},
                    {s.supplier_id for s in stored},
                )
            ranks, supplier_ids = seen[request_id]
            if suggestion.rank in ranks:
                raise DuplicateSuggestion(request_id, f"rank {suggestion.rank}")
            if suggestion.supplier_id in supplier_ids:
                raise DuplicateSuggestion(request_id, f"supplier {suggestion.supplier_id}")
            ranks.add(suggestion.rank)
            supplier_ids.add(suggestion.supplier_id)

        for suggestion in suggestions:
            self._suggestions.setdefault(suggestion.request_id, []).append(suggestion)

    async def find_suggestions_by_request(self, request_id: str) -> list[SupplierSuggestion]:
        return sorted(self._suggestions.get(request_id, []), key=lambda s: s.rank)
