"""
In-process Notification Channel

Publish/subscribe between request intake and suggestion generation.
One channel instance is built at startup and injected wherever it is needed;
there is no global bus.

Handlers run synchronously, in registration order, at publish time. A handler
that returns an awaitable has it spawned as a background asyncio task and
publish returns as soon as the task exists. Every dispatch is recorded on the
returned PublishReceipt so callers (mostly tests) can inspect or await it.
"""

import asyncio
import inspect
from collections import defaultdict
from collections.abc import Callable
from enum import Enum
from typing import Any

from supplieriq.kernel.events import EVENT_TYPES, Event, event_tag
from supplieriq.kernel.logging import get_logger
from supplieriq.kernel.metrics import event_handler_failures_total, events_published_total

logger = get_logger(__name__)


EventHandler = Callable[[Event], Any]


def _handler_name(handler: EventHandler) -> str:
    return getattr(handler, "__qualname__", None) or repr(handler)


class DispatchStatus(str, Enum):
    """State of one handler invocation"""

    SUCCEEDED = "SUCCEEDED"  # sync handler returned, or background task finished
    RUNNING = "RUNNING"  # background task still in flight
    FAILED = "FAILED"  # handler raised, or background task raised/was cancelled


class HandlerDispatch:
    """
    Outcome of invoking one handler for one published event

    For sync handlers the outcome is final at publish time. For async handlers
    it follows the background task.
    """

    def __init__(
        self,
        handler_name: str,
        *,
        task: "asyncio.Future[Any] | None" = None,
        result: Any = None,
        error: BaseException | None = None,
    ) -> None:
        self.handler_name = handler_name
        self.task = task
        self._result = result
        self._error = error

    @property
    def background(self) -> bool:
        return self.task is not None

    @property
    def done(self) -> bool:
        return self.task is None or self.task.done()

    @property
    def error(self) -> BaseException | None:
        if self.task is None or not self.task.done():
            return self._error
        if self.task.cancelled():
            return asyncio.CancelledError()
        return self.task.exception()

    @property
    def status(self) -> DispatchStatus:
        if not self.done:
            return DispatchStatus.RUNNING
        return DispatchStatus.FAILED if self.error is not None else DispatchStatus.SUCCEEDED

    @property
    def succeeded(self) -> bool:
        return self.status is DispatchStatus.SUCCEEDED

    @property
    def result(self) -> Any:
        """Handler return value (or task result once the task is done)"""
        if self.task is not None and self.task.done() and self.error is None:
            return self.task.result()
        return self._result

    async def wait(self) -> Any:
        """Wait for the background task (if any) and return the handler result"""
        if self.task is not None:
            await asyncio.wait({self.task})
        return self.result

    def __repr__(self) -> str:
        return f"HandlerDispatch({self.handler_name!r}, status={self.status.value})"


class PublishReceipt:
    """Everything that happened when one event was published"""

    def __init__(self, event: Event, dispatches: list[HandlerDispatch]) -> None:
        self.event = event
        self.dispatches = dispatches

    @property
    def background_tasks(self) -> list["asyncio.Future[Any]"]:
        return [d.task for d in self.dispatches if d.task is not None]

    @property
    def failures(self) -> list[HandlerDispatch]:
        return [d for d in self.dispatches if d.status is DispatchStatus.FAILED]

    async def wait(self) -> list[Any]:
        """Wait for all background work started by this publish; returns results"""
        return [await d.wait() for d in self.dispatches]


class NotificationChannel:
    """
    Typed in-process publish/subscribe channel

    Holds a mapping from event tag to an ordered handler list. Not persisted,
    not shared across processes. There is no ordering guarantee between
    different event types, only within one publish call's handler list.
    """

    def __init__(self) -> None:
        self._handlers: defaultdict[str, list[EventHandler]] = defaultdict(list)
        self._pending: set["asyncio.Future[Any]"] = set()
        logger.debug("NotificationChannel initialized")

    def subscribe(self, event_type: str | type[Event], handler: EventHandler) -> None:
        """
        Register a handler (many handlers per event type are allowed)

        Args:
            event_type: Event tag (e.g. "RequestCreated") or event class
            handler: Callable receiving the event; may be a coroutine function

        Raises:
            UnknownEventType: If event_type is not a known variant
        """
        tag = event_tag(event_type)
        self._handlers[tag].append(handler)
        logger.debug(
            "Event handler subscribed",
            event_type=tag,
            handler=_handler_name(handler),
            total_handlers=len(self._handlers[tag]),
        )

    def publish(self, event: Event) -> PublishReceipt:
        """
        Invoke every handler registered for the event's type

        Handler errors are caught and logged here; they never reach the
        publisher and never stop later handlers from running.

        Raises:
            UnknownEventType: If the event is not a known variant
        """
        tag = event_tag(event.event_type)
        if not isinstance(event, EVENT_TYPES[tag]):
            raise TypeError(
                f"Event tagged {tag} must be a {EVENT_TYPES[tag].__name__}, "
                f"got {type(event).__name__}"
            )

        handlers = list(self._handlers.get(tag, []))
        if not handlers:
            logger.debug("No handlers registered for event type", event_type=tag)
            return PublishReceipt(event, [])

        events_published_total.labels(event_type=tag).inc()
        logger.debug(
            "Publishing event",
            event_type=tag,
            event_id=event.event_id,
            handler_count=len(handlers),
        )

        dispatches = [self._invoke(tag, event, handler) for handler in handlers]
        return PublishReceipt(event, dispatches)

    def _invoke(self, tag: str, event: Event, handler: EventHandler) -> HandlerDispatch:
        name = _handler_name(handler)
        try:
            result = handler(event)
        except Exception as e:
            self._record_failure(tag, event, name, e)
            return HandlerDispatch(name, error=e)

        if not inspect.isawaitable(result):
            return HandlerDispatch(name, result=result)

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError as e:
            # Nobody would ever await it
            if inspect.iscoroutine(result):
                result.close()
            self._record_failure(tag, event, name, e)
            return HandlerDispatch(name, error=e)

        if inspect.iscoroutine(result):
            task = loop.create_task(result, name=f"{tag}:{name}")
        else:
            task = asyncio.ensure_future(result)
        self._pending.add(task)
        task.add_done_callback(
            lambda t: self._on_task_done(t, tag, event, name)
        )
        return HandlerDispatch(name, task=task)

    def _on_task_done(
        self, task: "asyncio.Future[Any]", tag: str, event: Event, name: str
    ) -> None:
        self._pending.discard(task)
        if task.cancelled():
            logger.warning(
                "Background event handler cancelled",
                event_type=tag,
                event_id=event.event_id,
                handler=name,
            )
            event_handler_failures_total.labels(event_type=tag).inc()
            return
        error = task.exception()
        if error is not None:
            self._record_failure(tag, event, name, error)

    def _record_failure(
        self, tag: str, event: Event, name: str, error: BaseException
    ) -> None:
        event_handler_failures_total.labels(event_type=tag).inc()
        logger.error(
            "Event handler failed",
            event_type=tag,
            event_id=event.event_id,
            handler=name,
            error=str(error),
            exc_info=error,
        )

    @property
    def pending_count(self) -> int:
        """Background handler tasks still running"""
        return len(self._pending)

    async def drain(self) -> None:
        """
        Wait until no background handler task is running

        Loops because a finishing handler may publish further events.
        """
        while self._pending:
            await asyncio.wait(set(self._pending))

    def get_event_types(self) -> list[str]:
        """Event types with at least one handler"""
        return [tag for tag, handlers in self._handlers.items() if handlers]

    def handler_count(self, event_type: str | type[Event]) -> int:
        return len(self._handlers.get(event_tag(event_type), []))

    def clear(self) -> None:
        """Remove all handlers (background tasks already running are unaffected)"""
        removed = sum(len(h) for h in self._handlers.values())
        self._handlers.clear()
        logger.info("Channel cleared", handlers_removed=removed)
