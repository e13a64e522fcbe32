"""Ordered interception handlers for request and response events."""
from __future__ import annotations

import asyncio
import inspect
import itertools
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

from .matcher import UrlMatcher
from .records import RequestRecord, ResponseRecord

LOGGER = logging.getLogger(__name__)

_UNSET = object()


class _HandlerTimeout(Exception):
    """A handler exceeded its time budget."""


CONTINUE_OVERRIDES = ("url", "method", "headers", "post_data")


class Phase(str, Enum):
    """Event phase a handler is bound to."""

    REQUEST = "request"
    RESPONSE = "response"


class Action(str, Enum):
    """Final disposition applied to an intercepted request."""

    CONTINUE = "continue"
    ABORT = "abort"
    RESPOND = "respond"


@dataclass(frozen=True)
class SyntheticResponse:
    """Response used to short-circuit a request.

    ``body`` may be text, bytes, or a dict/list that is sent as JSON.
    """

    status: int = 200
    headers: Optional[Dict[str, str]] = None
    body: Union[str, bytes, Dict[str, Any], List[Any], None] = None
    content_type: Optional[str] = None


@dataclass
class Disposition:
    action: Action = Action.CONTINUE
    overrides: Dict[str, Any] = field(default_factory=dict)
    error_code: Optional[str] = None
    response: Optional[SyntheticResponse] = None

    @property
    def short_circuits(self) -> bool:
        return self.action is not Action.CONTINUE


class RequestActions:
    """Capability object handed to request handlers.

    ``continue_`` merges overrides (``url``, ``method``, ``headers``,
    ``post_data``) into the outbound request. ``abort`` and ``respond`` stop
    the pipeline for this event.
    """

    def __init__(self) -> None:
        self.overrides: Dict[str, Any] = {}
        self.decision: Optional[Disposition] = None

    def continue_(self, **overrides: Any) -> Disposition:
        unknown = sorted(set(overrides) - set(CONTINUE_OVERRIDES))
        if unknown:
            raise ValueError(
                f"Unsupported continue override(s): {', '.join(unknown)}. "
                f"Expected one of: {', '.join(CONTINUE_OVERRIDES)}"
            )
        self.overrides.update(overrides)
        return Disposition(Action.CONTINUE, overrides=dict(overrides))

    def abort(self, error_code: str = "failed") -> Disposition:
        self.decision = Disposition(Action.ABORT, error_code=error_code)
        return self.decision

    def respond(
        self,
        status: int = 200,
        *,
        headers: Optional[Dict[str, str]] = None,
        body: Union[str, bytes, Dict[str, Any], List[Any], None] = None,
        content_type: Optional[str] = None,
    ) -> Disposition:
        self.decision = Disposition(
            Action.RESPOND,
            response=SyntheticResponse(status=status, headers=headers, body=body, content_type=content_type),
        )
        return self.decision


class ResponseActions:
    """Capability object handed to response handlers.

    Only the stored body can change; status and headers already went over
    the wire.
    """

    def __init__(self) -> None:
        self._body: Any = _UNSET

    def modify_body(self, body: Any) -> None:
        self._body = body

    def apply(self, record: ResponseRecord) -> None:
        if self._body is not _UNSET:
            record.body = self._body


Handler = Callable[..., Any]


@dataclass(eq=False)
class InterceptHandler:
    id: int
    phase: Phase
    matcher: UrlMatcher
    callback: Handler
    active: bool = True


class InterceptionPipeline:
    """Handlers run in registration order for every matching event.

    Each event iterates over a snapshot of the handler list. A handler
    disposed while a run is in flight is skipped by that run.
    """

    def __init__(self, handler_timeout_ms: float = 0) -> None:
        self.handler_timeout_ms = handler_timeout_ms
        self._handlers: Dict[int, InterceptHandler] = {}
        self._ids = itertools.count(1)

    def add(self, phase: Phase, matcher: UrlMatcher, callback: Handler) -> Callable[[], None]:
        """Register a handler and return its disposer."""
        handler = InterceptHandler(next(self._ids), phase, matcher, callback)
        self._handlers[handler.id] = handler

        def dispose() -> None:
            handler.active = False
            self._handlers.pop(handler.id, None)

        return dispose

    def handlers(self, phase: Phase) -> List[InterceptHandler]:
        return [handler for handler in self._handlers.values() if handler.phase is phase]

    def __len__(self) -> int:
        return len(self._handlers)

    async def run_request(self, record: RequestRecord) -> Disposition:
        """Run request handlers and return the disposition to apply."""
        merged: Dict[str, Any] = {}
        for handler in self.handlers(Phase.REQUEST):
            if not handler.active:
                continue
            actions = RequestActions()
            ok, result = await self._invoke(handler, record, actions)
            if not ok:
                continue

            decision = actions.decision
            if decision is None and isinstance(result, Disposition) and result.short_circuits:
                decision = result
            if decision is not None:
                return decision

            if isinstance(result, Disposition):
                actions.overrides.update(result.overrides)
            merged.update(actions.overrides)

        return Disposition(Action.CONTINUE, overrides=merged)

    async def run_response(self, record: ResponseRecord) -> None:
        """Run response handlers; each may replace the stored body."""
        for handler in self.handlers(Phase.RESPONSE):
            if not handler.active:
                continue
            actions = ResponseActions()
            ok, _ = await self._invoke(handler, record, actions)
            if ok:
                actions.apply(record)

    async def _invoke(self, handler: InterceptHandler, record: Any, actions: Any) -> tuple[bool, Any]:
        try:
            if not handler.matcher.accepts(record.url, record.method):
                return False, None
            result = handler.callback(record, actions)
            if inspect.isawaitable(result):
                result = await self._bounded(result)
            return True, result
        except _HandlerTimeout:
            LOGGER.warning(
                "%s handler %d timed out after %.0fms on %s",
                handler.phase.value,
                handler.id,
                self.handler_timeout_ms,
                record.url,
            )
        except Exception:
            LOGGER.exception("Error in %s handler %d for %s", handler.phase.value, handler.id, record.url)
        return False, None

    async def _bounded(self, awaitable: Any) -> Any:
        if self.handler_timeout_ms <= 0:
            return await awaitable
        task = asyncio.ensure_future(awaitable)
        try:
            done, _ = await asyncio.wait({task}, timeout=self.handler_timeout_ms / 1000)
        except asyncio.CancelledError:
            task.cancel()
            raise
        if not done:
            task.cancel()
            await asyncio.wait({task})
            raise _HandlerTimeout()
        # A handler's own TimeoutError is reported as a handler error.
        return task.result()
