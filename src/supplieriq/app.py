"""
SupplierIQ - main façade

Builds the notification channel, store, pipeline and reader once and wires
the pipeline's subscription. Intake goes through submit_request, which
returns as soon as the RequestCreated notification is published.

Example:
    >>> iq = SupplierIQ()
    >>> await iq.seed_demo_data()
    >>> request, receipt = await iq.submit_request(
    ...     category="metals", description="Aluminum casings",
    ...     quantity=5000, budget=Decimal("15000"), region="DE",
    ... )
    >>> await iq.wait_for_pipelines()
    >>> [s.rank for s in await iq.get_suggestions(request.request_id)]
    [1, 2, 3, 4]
"""

from decimal import Decimal

from supplieriq.kernel.bus import NotificationChannel, PublishReceipt
from supplieriq.kernel.events import RequestCreated
from supplieriq.kernel.logging import get_logger
from supplieriq.kernel.settings import Settings
from supplieriq.kernel.time import RealTimeProvider, TimeProvider
from supplieriq.procurement.models import (
    ProcurementRequest,
    Supplier,
    SupplierSuggestion,
    Urgency,
)
from supplieriq.procurement.pipeline import SuggestionPipeline
from supplieriq.procurement.policy import ScoringPolicy
from supplieriq.procurement.reader import SuggestionReader
from supplieriq.procurement.seed import seed_demo_data
from supplieriq.procurement.sqlite_store import SQLiteStore
from supplieriq.procurement.stores import InMemoryStore

logger = get_logger(__name__)


class SupplierIQ:
    """
    SupplierIQ main façade

    Provides:
    - Request intake (submit_request)
    - Ranked suggestion retrieval (get_suggestions)
    - Demo data seeding
    """

    def __init__(
        self,
        settings: Settings | None = None,
        store: InMemoryStore | SQLiteStore | None = None,
        policy: ScoringPolicy | None = None,
        time_provider: TimeProvider | None = None,
    ) -> None:
        """
        Initialize SupplierIQ

        Args:
            settings: Runtime settings (defaults if None)
            store: Backing store; defaults to SQLite when settings.db_path is
                set, otherwise in-memory
            policy: Scoring policy (defaults if None)
            time_provider: Clock (real time if None)
        """
        self.settings = settings or Settings()
        self.time_provider = time_provider or RealTimeProvider()

        if store is None:
            store = (
                SQLiteStore(self.settings.db_path)
                if self.settings.db_path
                else InMemoryStore()
            )
        self.store = store

        self.channel = NotificationChannel()
        self.pipeline = SuggestionPipeline(
            self.store,
            policy=policy,
            settings=self.settings,
            time_provider=self.time_provider,
        )
        self.pipeline.register(self.channel)
        self.reader = SuggestionReader(self.store)

    async def submit_request(
        self,
        *,
        category: str,
        description: str,
        quantity: int,
        budget: Decimal | float | str,
        region: str,
        urgency: Urgency | str = Urgency.MEDIUM,
    ) -> tuple[ProcurementRequest, PublishReceipt]:
        """
        Accept a procurement request and kick off suggestion generation

        Does not wait for suggestions: the returned receipt's dispatches expose
        the background pipeline run for callers that want to observe it.

        Raises:
            pydantic.ValidationError: If the request is malformed
        """
        request = ProcurementRequest(
            category=category,
            description=description,
            quantity=quantity,
            budget=budget,
            region=region,
            urgency=urgency,
            created_at=self.time_provider.now(),
        )
        await self.store.add_request(request)
        logger.info(
            "Procurement request accepted",
            request_id=request.request_id,
            category=request.category,
            region=request.region,
        )
        receipt = self.channel.publish(RequestCreated(request_id=request.request_id))
        return request, receipt

    async def get_request(self, request_id: str) -> ProcurementRequest | None:
        return await self.store.find_request(request_id)

    async def get_suggestions(self, request_id: str) -> list[SupplierSuggestion]:
        """Suggestions ordered by rank; empty until generation completes"""
        return await self.reader.get_suggestions(request_id)

    async def get_suggestions_with_suppliers(
        self, request_id: str
    ) -> list[tuple[SupplierSuggestion, Supplier | None]]:
        """Ranked suggestions paired with their supplier records"""
        suggestions = await self.reader.get_suggestions(request_id)
        if not suggestions:
            return []
        suppliers = {s.supplier_id: s for s in await self.store.list_suppliers()}
        return [(s, suppliers.get(s.supplier_id)) for s in suggestions]

    async def list_suppliers(self) -> list[Supplier]:
        return await self.store.list_suppliers()

    async def wait_for_pipelines(self) -> None:
        """Block until every background pipeline run has finished"""
        await self.channel.drain()

    async def seed_demo_data(self) -> dict[str, int]:
        return await seed_demo_data(self.store)
