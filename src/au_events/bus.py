"""In-process publish/subscribe for domain events.

``emit`` dispatches synchronously to every registered handler but never waits
for async handlers: their coroutines are scheduled as tasks on the running
loop. A failing handler is logged and does not affect the others or the
emitter. Nothing is persisted; the durable records are the notification rows
and the email outbox, not bus events.

The bus is constructed explicitly (see ``src/bootstrap.py``) and injected into
the services that publish to it.
"""

import asyncio
import inspect
import logging
from collections import defaultdict
from collections.abc import Awaitable, Callable
from typing import Any

from src.au_events.events import EVENT_PAYLOADS, EventName

logger = logging.getLogger(__name__)

Handler = Callable[[Any], Awaitable[None] | None]


class EventBus:
    def __init__(self) -> None:
        self._handlers: dict[EventName, list[Handler]] = defaultdict(list)
        self._tasks: set[asyncio.Task[None]] = set()

    def on(self, event: EventName, handler: Handler) -> None:
        handlers = self._handlers[event]
        if handler not in handlers:
            handlers.append(handler)

    def off(self, event: EventName, handler: Handler) -> None:
        handlers = self._handlers.get(event)
        if handlers and handler in handlers:
            handlers.remove(handler)

    def handlers(self, event: EventName) -> list[Handler]:
        return list(self._handlers.get(event, ()))

    def emit(self, event: EventName, payload: Any) -> None:
        """Fire and forget. Raises only for a payload of the wrong type."""
        expected = EVENT_PAYLOADS[event]
        if not isinstance(payload, expected):
            raise TypeError(
                f"{event.value} expects {expected.__name__}, got {type(payload).__name__}"
            )

        for handler in self.handlers(event):
            try:
                result = handler(payload)
            except Exception:
                logger.exception("[EventBus] Error in handler for %r", event.value)
                continue
            if inspect.isawaitable(result):
                self._schedule(event, result)

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait for all in-flight async handlers (shutdown, tests)."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _schedule(self, event: EventName, awaitable: Awaitable[None]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.error("[EventBus] No running loop, dropping async handler for %r", event.value)
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            return
        task = loop.create_task(self._run(event, awaitable))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run(self, event: EventName, awaitable: Awaitable[None]) -> None:
        try:
            await awaitable
        except Exception:
            logger.exception("[EventBus] Error in handler for %r", event.value)
