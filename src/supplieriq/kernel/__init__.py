"""
Kernel - infrastructure shared by the procurement domain

Notification channel, typed events, logging, metrics, errors, IDs, clock
and settings.
"""

from supplieriq.kernel.bus import (
    DispatchStatus,
    HandlerDispatch,
    NotificationChannel,
    PublishReceipt,
)
from supplieriq.kernel.errors import (
    DuplicateSuggestion,
    EventError,
    InvalidStatusTransition,
    NotFoundError,
    RequestNotFound,
    SuggestionPipelineError,
    SupplierIQError,
    UnknownEventType,
)
from supplieriq.kernel.events import (
    EVENT_TYPES,
    Event,
    RequestCreated,
    SuggestionGenerationFailed,
    SuggestionsGenerated,
    parse_event,
)
from supplieriq.kernel.ids import generate_id
from supplieriq.kernel.settings import Settings
from supplieriq.kernel.time import FixedTimeProvider, RealTimeProvider, TimeProvider

__all__ = [
    # Channel
    "NotificationChannel",
    "PublishReceipt",
    "HandlerDispatch",
    "DispatchStatus",
    # Events
    "EVENT_TYPES",
    "Event",
    "RequestCreated",
    "SuggestionsGenerated",
    "SuggestionGenerationFailed",
    "parse_event",
    # IDs & time
    "generate_id",
    "TimeProvider",
    "RealTimeProvider",
    "FixedTimeProvider",
    # Settings
    "Settings",
    # Errors
    "SupplierIQError",
    "NotFoundError",
    "RequestNotFound",
    "EventError",
    "UnknownEventType",
    "InvalidStatusTransition",
    "DuplicateSuggestion",
    "SuggestionPipelineError",
]
