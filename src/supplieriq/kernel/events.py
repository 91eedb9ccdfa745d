"""
Notification event variants

The channel carries a closed set of events. Each variant is a frozen pydantic
model whose ``event_type`` literal is its tag; ``EVENT_TYPES`` is the single
registry the channel validates subscriptions and publications against.
"""

from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, Field

from supplieriq.kernel.errors import UnknownEventType
from supplieriq.kernel.ids import generate_id


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Event(BaseModel):
    """
    Base class for notification events

    Events are immutable and passed to every handler by reference, so handlers
    share one instance per publish call.
    """

    event_type: str
    event_id: str = Field(
        default_factory=generate_id,
        description="Unique event identifier",
    )
    occurred_at: datetime = Field(
        default_factory=_utcnow,
        description="UTC timestamp when the event was created",
    )

    model_config = {"frozen": True}


class RequestCreated(Event):
    """A procurement request was accepted and is waiting for suggestions"""

    event_type: Literal["RequestCreated"] = "RequestCreated"
    request_id: str = Field(..., description="ID of the newly created request")


class SuggestionsGenerated(Event):
    """Suggestion generation finished and the ranking is readable"""

    event_type: Literal["SuggestionsGenerated"] = "SuggestionsGenerated"
    request_id: str = Field(..., description="Request the ranking belongs to")
    suggestion_count: int = Field(..., ge=0, description="Number of ranked suppliers")


class SuggestionGenerationFailed(Event):
    """Suggestion generation raised; the request will not get a ranking"""

    event_type: Literal["SuggestionGenerationFailed"] = "SuggestionGenerationFailed"
    request_id: str = Field(..., description="Request whose run failed")
    error: str = Field(..., description="Failure description")


EVENT_TYPES: dict[str, type[Event]] = {
    "RequestCreated": RequestCreated,
    "SuggestionsGenerated": SuggestionsGenerated,
    "SuggestionGenerationFailed": SuggestionGenerationFailed,
}


def event_tag(event_type: str | type[Event]) -> str:
    """
    Resolve a tag string or event class to a registered tag

    Raises:
        UnknownEventType: If the tag is not a known variant
    """
    if isinstance(event_type, type):
        tag = event_type.model_fields["event_type"].default
    else:
        tag = event_type
    if tag not in EVENT_TYPES:
        raise UnknownEventType(str(tag), sorted(EVENT_TYPES))
    return tag


def parse_event(data: dict[str, Any]) -> Event:
    """
    Rebuild a typed event from its serialized form

    Raises:
        UnknownEventType: If data carries an unknown or missing tag
    """
    tag = data.get("event_type")
    if tag not in EVENT_TYPES:
        raise UnknownEventType(str(tag), sorted(EVENT_TYPES))
    return EVENT_TYPES[tag].model_validate(data)
