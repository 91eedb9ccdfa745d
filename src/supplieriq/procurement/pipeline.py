"""
Suggestion Pipeline - RequestCreated → ranked supplier suggestions

On each RequestCreated notification:
1. Load the request (absent → log and stop, nothing changes)
2. Claim it: PENDING → PROCESSING (not pending → skip, so a repeated
   RequestCreated never starts a second run)
3. Load active suppliers in the request's category
4. Load each candidate's orders, issues and ratings (concurrently)
5. Score every candidate with the match and risk engines
6. Sort by match score descending, then risk score ascending
7. Assign ranks 1..N
8. Persist the suggestion set
9. Mark the request COMPLETED

Runs are fire-and-forget from the publisher's side. The handler never raises:
every run ends in a PipelineOutcome that the channel's dispatch exposes.
A run that fails after step 2 moves the request to FAILED unless
Settings.mark_failed_on_error is off, in which case it stays PROCESSING.
"""

import asyncio
import time
from enum import Enum

from pydantic import BaseModel, Field

from supplieriq.kernel.bus import NotificationChannel
from supplieriq.kernel.errors import (
    InvalidStatusTransition,
    RequestNotFound,
    SuggestionPipelineError,
)
from supplieriq.kernel.events import (
    RequestCreated,
    SuggestionGenerationFailed,
    SuggestionsGenerated,
)
from supplieriq.kernel.logging import LogOperation, get_logger, set_correlation_id
from supplieriq.kernel.metrics import (
    candidate_set_size,
    pipeline_duration_seconds,
    pipeline_runs_total,
    suggestions_generated_total,
)
from supplieriq.kernel.settings import Settings
from supplieriq.kernel.time import RealTimeProvider, TimeProvider
from supplieriq.procurement.matching import compute_match_score
from supplieriq.procurement.models import (
    ProcurementRequest,
    RequestStatus,
    Supplier,
    SupplierSuggestion,
)
from supplieriq.procurement.policy import ScoringPolicy, default_scoring_policy
from supplieriq.procurement.risk import compute_risk_score
from supplieriq.procurement.stores import ProcurementStore

logger = get_logger(__name__)


class OutcomeStatus(str, Enum):
    SUCCEEDED = "succeeded"
    NOT_FOUND = "not_found"
    FAILED = "failed"
    SKIPPED = "skipped"  # request was no longer pending


class PipelineOutcome(BaseModel):
    """Result of one pipeline run for one request"""

    request_id: str
    status: OutcomeStatus
    suggestion_count: int = Field(default=0, ge=0)
    error: str | None = Field(default=None)
    failed_stage: str | None = Field(default=None)
    final_request_status: RequestStatus | None = Field(default=None)
    duration_ms: float = Field(default=0.0, ge=0.0)

    @property
    def succeeded(self) -> bool:
        return self.status is OutcomeStatus.SUCCEEDED


class ScoredCandidate(BaseModel):
    """A supplier with both scores, before ranking"""

    supplier: Supplier
    match_score: float
    risk_score: int
    explanation: str


def rank_candidates(candidates: list[ScoredCandidate]) -> list[ScoredCandidate]:
    """
    Order candidates best first

    Higher match score wins; equal match scores go to the lower risk score.
    The sort is stable, so full ties keep their input order.
    """
    return sorted(candidates, key=lambda c: (-c.match_score, c.risk_score))


def build_suggestions(
    request_id: str,
    ranked: list[ScoredCandidate],
    time_provider: TimeProvider,
) -> list[SupplierSuggestion]:
    """Turn a ranked candidate list into suggestion records with ranks 1..N"""
    now = time_provider.now()
    return [
        SupplierSuggestion(
            request_id=request_id,
            supplier_id=candidate.supplier.supplier_id,
            match_score=candidate.match_score,
            risk_score=candidate.risk_score,
            explanation=candidate.explanation,
            rank=position,
            created_at=now,
        )
        for position, candidate in enumerate(ranked, start=1)
    ]


class SuggestionPipeline:
    """Subscriber that turns new requests into persisted supplier rankings"""

    def __init__(
        self,
        store: ProcurementStore,
        policy: ScoringPolicy | None = None,
        settings: Settings | None = None,
        time_provider: TimeProvider | None = None,
        channel: NotificationChannel | None = None,
    ) -> None:
        self.store = store
        self.policy = policy or default_scoring_policy
        self.settings = settings or Settings()
        self.time_provider = time_provider or RealTimeProvider()
        self.channel = channel

    def register(self, channel: NotificationChannel) -> None:
        """Subscribe to RequestCreated; call once at startup"""
        self.channel = channel
        channel.subscribe(RequestCreated, self.handle_request_created)
        logger.info("Suggestion pipeline subscribed", event_type="RequestCreated")

    async def handle_request_created(self, event: RequestCreated) -> PipelineOutcome:
        """
        Run the pipeline for one request; never raises

        Returns:
            PipelineOutcome describing how the run ended
        """
        request_id = event.request_id
        set_correlation_id(request_id)
        started = time.perf_counter()
        stage = "load_request"
        processing_started = False

        try:
            with LogOperation(logger, "generate_suggestions", request_id=request_id):
                request = await self.store.find_request(request_id)
                if request is None:
                    raise RequestNotFound(request_id)

                stage = "mark_processing"
                if not await self._claim(request):
                    logger.warning(
                        "Request already picked up by another run, skipping",
                        request_id=request_id,
                        status=request.status.value,
                    )
                    return self._finish(
                        started,
                        PipelineOutcome(request_id=request_id, status=OutcomeStatus.SKIPPED),
                    )
                processing_started = True

                stage = "score_candidates"
                candidates = await self._score_candidates(request)

                stage = "persist_suggestions"
                ranked = rank_candidates(candidates)
                suggestions = build_suggestions(request_id, ranked, self.time_provider)
                await self.store.save_suggestions(suggestions)

                stage = "mark_completed"
                await self.store.update_request_status(request_id, RequestStatus.COMPLETED)

        except RequestNotFound as e:
            logger.error("Request not found, no suggestions generated", request_id=request_id)
            return self._finish(
                started,
                PipelineOutcome(
                    request_id=request_id, status=OutcomeStatus.NOT_FOUND, error=str(e)
                ),
            )
        except Exception as e:
            failure = SuggestionPipelineError(request_id, stage, e)
            final_status = await self._handle_failure(request_id, processing_started)
            self._notify(SuggestionGenerationFailed(request_id=request_id, error=str(failure)))
            return self._finish(
                started,
                PipelineOutcome(
                    request_id=request_id,
                    status=OutcomeStatus.FAILED,
                    error=str(failure),
                    failed_stage=stage,
                    final_request_status=final_status,
                ),
            )

        suggestions_generated_total.inc(len(suggestions))
        logger.info(
            "Suggestions generated",
            request_id=request_id,
            suggestion_count=len(suggestions),
        )
        self._notify(
            SuggestionsGenerated(request_id=request_id, suggestion_count=len(suggestions))
        )
        return self._finish(
            started,
            PipelineOutcome(
                request_id=request_id,
                status=OutcomeStatus.SUCCEEDED,
                suggestion_count=len(suggestions),
                final_request_status=RequestStatus.COMPLETED,
            ),
        )

    async def _score_candidates(self, request: ProcurementRequest) -> list[ScoredCandidate]:
        suppliers = await self.store.find_active_suppliers_by_category(request.category)
        candidate_set_size.observe(len(suppliers))
        logger.info(
            "Candidate suppliers loaded",
            request_id=request.request_id,
            category=request.category,
            candidate_count=len(suppliers),
        )
        # Per run, so it binds to the loop this run executes on
        load_limit = asyncio.Semaphore(self.settings.max_concurrent_candidate_loads)
        tasks = [
            asyncio.create_task(self._score_one(request, s, load_limit)) for s in suppliers
        ]
        try:
            # gather keeps input order, so ranking input is deterministic
            return list(await asyncio.gather(*tasks))
        except BaseException:
            # One failed load fails the run; stop the rest before reporting it
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def _claim(self, request: ProcurementRequest) -> bool:
        """Move a pending request to PROCESSING; False if another run got there first"""
        if request.status is not RequestStatus.PENDING:
            return False
        try:
            await self.store.update_request_status(
                request.request_id, RequestStatus.PROCESSING
            )
        except InvalidStatusTransition:
            return False
        return True

    async def _score_one(
        self,
        request: ProcurementRequest,
        supplier: Supplier,
        load_limit: asyncio.Semaphore,
    ) -> ScoredCandidate:
        async with load_limit:
            orders = await self.store.find_orders_by_supplier(supplier.supplier_id)
            issues = await self.store.find_issues_by_supplier(supplier.supplier_id)
            ratings = await self.store.find_ratings_by_supplier(supplier.supplier_id)

        wanted = request.category.lower()
        orders_in_category = sum(1 for o in orders if o.category.lower() == wanted)

        match_score = compute_match_score(request, supplier, orders_in_category, self.policy)
        risk = compute_risk_score(orders, issues, ratings, self.policy)
        logger.debug(
            "Supplier scored",
            supplier_id=supplier.supplier_id,
            match_score=match_score,
            risk_score=risk.risk_score,
        )
        return ScoredCandidate(
            supplier=supplier,
            match_score=match_score,
            risk_score=risk.risk_score,
            explanation=risk.explanation,
        )

    async def _handle_failure(
        self, request_id: str, processing_started: bool
    ) -> RequestStatus | None:
        """Move a request that reached PROCESSING to FAILED (if enabled)"""
        if not processing_started:
            return None
        if not self.settings.mark_failed_on_error:
            logger.warning(
                "Request left in processing after failure", request_id=request_id
            )
            return RequestStatus.PROCESSING
        try:
            await self.store.update_request_status(request_id, RequestStatus.FAILED)
        except Exception as e:
            logger.error(
                "Could not mark request failed",
                request_id=request_id,
                error=str(e),
                exc_info=True,
            )
            return RequestStatus.PROCESSING
        return RequestStatus.FAILED

    def _notify(self, event: SuggestionsGenerated | SuggestionGenerationFailed) -> None:
        if self.channel is not None:
            self.channel.publish(event)

    def _finish(self, started: float, outcome: PipelineOutcome) -> PipelineOutcome:
        elapsed = time.perf_counter() - started
        pipeline_duration_seconds.observe(elapsed)
        pipeline_runs_total.labels(outcome=outcome.status.value).inc()
        return outcome.model_copy(update={"duration_ms": round(elapsed * 1000, 2)})
