"""Test lifecycle events and a synchronous event source.

The reporter does not extend any runner base class. Host adapters (the pytest
plugin, or anything else) emit these events and the reporter registers one
handler per event name.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable
from typing import Any, Protocol

PASS = "test:pass"
FAIL = "test:fail"
SKIP = "test:skip"
RUN_END = "run:end"

EVENT_NAMES = (PASS, FAIL, SKIP, RUN_END)

EventHandler = Callable[..., Any]


class EventSource(Protocol):
    """Anything a reporter can register lifecycle handlers on."""

    def on(self, event_name: str, handler: EventHandler) -> None: ...


class EventBus:
    """In-process event source; handlers run synchronously in registration order."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[EventHandler]] = defaultdict(list)

    def on(self, event_name: str, handler: EventHandler) -> None:
        if event_name not in EVENT_NAMES:
            raise ValueError(f"Unknown event: {event_name}")
        self._handlers[event_name].append(handler)

    def emit(self, event_name: str, *args: Any) -> None:
        for handler in self._handlers.get(event_name, []):
            handler(*args)
