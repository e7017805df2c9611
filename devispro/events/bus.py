"""In-process event bus.

Async pub/sub for SystemEvents. Services emit an event after every state
change (quote saved, quote sent, invoice issued); subscribers such as the
audit trail consume them in a background worker so request handlers never
wait on them.

Usage:
    # Emit from a service:
    from devispro.events.bus import emit

    await emit(SystemEvent(
        event_type=EventType.QUOTE_CREATED,
        entity_type="quote",
        entity_id=quote.id,
        data={"number": quote.number},
    ))

    # Register a subscriber at startup:
    from devispro.events.bus import subscribe

    subscribe(audit_on_event)  # async def handler(event: SystemEvent) -> None
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Coroutine
from typing import Any

from devispro.schemas.events import EventType, SystemEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[SystemEvent], Coroutine[Any, Any, None]]

# ── Internal state ───────────────────────────────────────────────────

_subscribers: list[EventHandler] = []
_type_subscribers: dict[EventType, list[EventHandler]] = {}
_queue: asyncio.Queue[SystemEvent] | None = None
_worker_task: asyncio.Task[None] | None = None


# ── Public API ───────────────────────────────────────────────────────


def subscribe(handler: EventHandler, event_types: list[EventType] | None = None) -> None:
    """Register an event handler.

    Args:
        handler: Async function that accepts a SystemEvent.
        event_types: Restrict the handler to these types. None means all events.
    """
    if event_types is None:
        _subscribers.append(handler)
        logger.info("Registered global event subscriber: %s", handler.__name__)
        return

    for et in event_types:
        _type_subscribers.setdefault(et, []).append(handler)
    logger.info(
        "Registered event subscriber %s for types: %s",
        handler.__name__,
        [t.value for t in event_types],
    )


def unsubscribe(handler: EventHandler) -> None:
    """Remove a previously registered handler from every list."""
    if handler in _subscribers:
        _subscribers.remove(handler)
    for handlers in _type_subscribers.values():
        if handler in handlers:
            handlers.remove(handler)


async def emit(event: SystemEvent) -> None:
    """Queue a SystemEvent for delivery to its subscribers."""
    global _queue
    if _queue is None:
        _queue = asyncio.Queue()
    _ensure_worker()

    await _queue.put(event)
    logger.debug("Event emitted: %s (%s=%s)", event.event_type.value, event.entity_type, event.entity_id)


async def dispatch(event: SystemEvent) -> None:
    """Deliver one event to every matching subscriber, right now.

    Handler failures are logged and isolated from each other.
    """
    handlers: list[EventHandler] = list(_subscribers)
    handlers.extend(_type_subscribers.get(event.event_type, []))
    if not handlers:
        return

    results = await asyncio.gather(
        *[handler(event) for handler in handlers],
        return_exceptions=True,
    )
    for handler, result in zip(handlers, results):
        if isinstance(result, Exception):
            logger.error(
                "Handler %s failed for event %s: %s",
                handler.__name__,
                event.event_type.value,
                result,
            )


# ── Background worker ────────────────────────────────────────────────


def _ensure_worker() -> None:
    global _worker_task
    if _worker_task is None or _worker_task.done():
        _worker_task = asyncio.create_task(_event_worker())
        logger.info("Event worker started")


async def _event_worker() -> None:
    """Drain the queue forever, one event at a time."""
    while _queue is not None:
        event = await _queue.get()
        try:
            await dispatch(event)
        except Exception:
            logger.exception("Error dispatching %s", event.event_type.value)
        finally:
            _queue.task_done()


# ── Lifecycle ────────────────────────────────────────────────────────


async def start_event_system() -> None:
    """Create the queue and worker. Call during FastAPI lifespan startup."""
    global _queue
    _queue = asyncio.Queue()
    _ensure_worker()
    logger.info(
        "Event system started with %d global + %d typed subscribers",
        len(_subscribers),
        sum(len(v) for v in _type_subscribers.values()),
    )


async def stop_event_system() -> None:
    """Deliver pending events, then stop the worker. Call on shutdown."""
    global _worker_task, _queue

    if _queue is not None:
        await _queue.join()

    if _worker_task is not None and not _worker_task.done():
        _worker_task.cancel()
        try:
            await _worker_task
        except asyncio.CancelledError:
            pass

    _worker_task = None
    _queue = None
    logger.info("Event system stopped")
