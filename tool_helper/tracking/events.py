"""Publish/subscribe channel owned by the tracker."""
from __future__ import annotations

import inspect
import logging
from enum import Enum
from typing import Any, Callable, Dict, List

LOGGER = logging.getLogger(__name__)


class TrackerEvent(str, Enum):
    REQUEST = "request"
    RESPONSE = "response"
    REQUEST_FAILED = "requestfailed"


Listener = Callable[[Any], Any]


class EventChannel:
    """Listeners per event, each with its own disposer.

    A listener that raises is logged and does not stop delivery to the
    others. Async listeners are awaited in subscription order.
    """

    def __init__(self) -> None:
        self._listeners: Dict[TrackerEvent, List[Listener]] = {event: [] for event in TrackerEvent}

    def subscribe(self, event: TrackerEvent | str, listener: Listener) -> Callable[[], None]:
        key = TrackerEvent(event)
        self._listeners[key].append(listener)

        def dispose() -> None:
            try:
                self._listeners[key].remove(listener)
            except ValueError:
                pass

        return dispose

    async def publish(self, event: TrackerEvent, payload: Any) -> None:
        for listener in list(self._listeners[event]):
            try:
                result = listener(payload)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                LOGGER.exception("Listener for %r failed", event.value)

    def count(self, event: TrackerEvent | str) -> int:
        return len(self._listeners[TrackerEvent(event)])
