"""
Injectable clock

Suggestion and request timestamps come from a TimeProvider so tests can pin "now".
"""

from datetime import datetime, timezone
from typing import Protocol


class TimeProvider(Protocol):
    """Protocol for time providers"""

    def now(self) -> datetime:
        """Return current UTC datetime"""
        ...


class RealTimeProvider:
    """Production time provider using system clock"""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedTimeProvider:
    """
    Pinned clock for deterministic tests

    Always returns the instant it was built with (Unix epoch by default).
    """

    def __init__(self, initial_time: datetime | None = None) -> None:
        self._current_time = initial_time or datetime(1970, 1, 1, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self._current_time
