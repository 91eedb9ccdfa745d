"""
Exception hierarchy for SupplierIQ

Pipeline failures never reach the publisher of an event (dispatch is
fire-and-forget); they are logged and recorded on the run's outcome instead.
"""


class SupplierIQError(Exception):
    """Base exception for all SupplierIQ errors"""

    pass


class NotFoundError(SupplierIQError):
    """Base class for lookups that resolved to nothing"""

    pass


class RequestNotFound(NotFoundError):
    """Raised when a procurement request ID cannot be resolved"""

    def __init__(self, request_id: str) -> None:
        self.request_id = request_id
        super().__init__(f"Procurement request {request_id} not found")


class EventError(SupplierIQError):
    """Base class for notification channel errors"""

    pass


class UnknownEventType(EventError):
    """Raised when an event tag is not one of the known variants"""

    def __init__(self, event_type: str, known: list[str]) -> None:
        self.event_type = event_type
        self.known = known
        super().__init__(
            f"Unknown event type '{event_type}'. Known event types: {known}"
        )


class InvalidStatusTransition(SupplierIQError):
    """Raised when a request would leave a terminal status"""

    def __init__(self, request_id: str, current_status: str, new_status: str) -> None:
        self.request_id = request_id
        self.current_status = current_status
        self.new_status = new_status
        super().__init__(
            f"Request {request_id} is {current_status}, cannot move to {new_status}"
        )


class SuggestionPipelineError(SupplierIQError):
    """
    Raised (and captured on the run outcome) when suggestion generation fails

    Wraps the original exception so the outcome carries both the stage that
    failed and the underlying cause.
    """

    def __init__(self, request_id: str, stage: str, cause: BaseException) -> None:
        self.request_id = request_id
        self.stage = stage
        self.cause = cause
        super().__init__(
            f"Suggestion pipeline failed for request {request_id} "
            f"during {stage}: {type(cause).__name__}: {cause}"
        )


class DuplicateSuggestion(SupplierIQError):
    """Raised when a suggestion set would repeat a rank or a supplier for a request"""

    def __init__(self, request_id: str, detail: str) -> None:
        self.request_id = request_id
        self.detail = detail
        super().__init__(f"Duplicate suggestion for request {request_id}: {detail}")
