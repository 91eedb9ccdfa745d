"""Read side: persisted rankings for a request."""

from typing import Any

from supplieriq.kernel.logging import get_logger
from supplieriq.procurement.models import Supplier, SupplierSuggestion
from supplieriq.procurement.stores import SuggestionStore

logger = get_logger(__name__)


class SuggestionReader:
    """
    Serves suggestions ordered by rank (best first)

    An empty list means "nothing yet": unknown request, still processing,
    failed, or no supplier in the category. The reader does not tell these apart.
    """

    def __init__(self, store: SuggestionStore) -> None:
        self.store = store

    async def get_suggestions(self, request_id: str) -> list[SupplierSuggestion]:
        suggestions = await self.store.find_suggestions_by_request(request_id)
        logger.debug(
            "Suggestions read", request_id=request_id, suggestion_count=len(suggestions)
        )
        return sorted(suggestions, key=lambda s: s.rank)


def suggestion_row(
    suggestion: SupplierSuggestion, supplier: Supplier | None
) -> dict[str, Any]:
    """JSON-ready suggestion with its supplier's name, category and region attached"""
    row = suggestion.model_dump(mode="json")
    row["supplier"] = (
        supplier.model_dump(
            mode="json", include={"supplier_id", "name", "category", "region"}
        )
        if supplier
        else None
    )
    return row
