"""Pending ``wait_for_*`` registrations."""
from __future__ import annotations

import asyncio
import itertools
import logging
from dataclasses import dataclass, field
from typing import Dict, Optional, Union

from .errors import WaitAbandonedError, WaitTimeoutError
from .matcher import UrlMatcher
from .records import RecordKind, RequestRecord, ResponseRecord

LOGGER = logging.getLogger(__name__)

Record = Union[RequestRecord, ResponseRecord]


@dataclass(eq=False)
class Waiter:
    """One outstanding wait. Settled exactly once, then removed."""

    id: int
    kind: RecordKind
    matcher: UrlMatcher
    future: "asyncio.Future[Record]"
    started: float
    deadline: float
    timer: Optional[asyncio.TimerHandle] = field(default=None, repr=False)


class WaiterRegistry:
    """Event-driven waiters keyed by id.

    Every inserted record is offered to all pending waiters of its kind, so
    several waiters on the same pattern resolve from the same event.
    """

    def __init__(self) -> None:
        self._waiters: Dict[int, Waiter] = {}
        self._ids = itertools.count(1)

    def wait_for(self, kind: RecordKind, matcher: UrlMatcher, timeout_ms: float) -> "asyncio.Future[Record]":
        """Register a waiter and return the future it settles.

        Parameters
        ----------
        kind : RecordKind
            Request or response
        matcher : UrlMatcher
            Pattern the record must satisfy
        timeout_ms : float
            Wall-clock budget in milliseconds

        Returns
        -------
        asyncio.Future
            Resolves with the first matching record, or fails with
            :class:`WaitTimeoutError`
        """
        loop = asyncio.get_running_loop()
        now = loop.time()
        delay = max(timeout_ms, 0) / 1000
        waiter = Waiter(
            id=next(self._ids),
            kind=kind,
            matcher=matcher,
            future=loop.create_future(),
            started=now,
            deadline=now + delay,
        )
        self._waiters[waiter.id] = waiter
        waiter.timer = loop.call_later(delay, self._expire, waiter.id)
        # A caller that cancels its await must not leave the entry behind.
        waiter.future.add_done_callback(lambda _f, waiter_id=waiter.id: self._discard(waiter_id))
        LOGGER.debug("Waiter %d registered for %s %s", waiter.id, kind.value, matcher.describe())
        return waiter.future

    def notify(self, kind: RecordKind, record: Record) -> int:
        """Offer a freshly stored record to pending waiters. Returns how many settled."""
        settled = 0
        for waiter in list(self._waiters.values()):
            if waiter.kind is not kind:
                continue
            try:
                accepted = waiter.matcher.accepts(record.url, record.method)
            except Exception:
                LOGGER.exception("Matcher %s raised while checking %s", waiter.matcher.describe(), record.url)
                continue
            if accepted:
                self._settle(waiter, result=record)
                settled += 1
        return settled

    def clear(self) -> None:
        """Reject and drop every pending waiter."""
        for waiter in list(self._waiters.values()):
            self._settle(
                waiter,
                error=WaitAbandonedError(
                    f"Wait for {waiter.kind.value} {waiter.matcher.describe()} abandoned: tracker cleared"
                ),
            )

    def pending(self, kind: Optional[RecordKind] = None) -> int:
        if kind is None:
            return len(self._waiters)
        return sum(1 for waiter in self._waiters.values() if waiter.kind is kind)

    def __len__(self) -> int:
        return len(self._waiters)

    def _expire(self, waiter_id: int) -> None:
        waiter = self._waiters.get(waiter_id)
        if waiter is None:
            return
        elapsed = waiter.future.get_loop().time() - waiter.started
        self._settle(waiter, error=WaitTimeoutError(waiter.kind.value, waiter.matcher.describe(), elapsed))

    def _settle(
        self,
        waiter: Waiter,
        *,
        result: Optional[Record] = None,
        error: Optional[BaseException] = None,
    ) -> None:
        self._discard(waiter.id)
        if waiter.future.done():
            return
        if error is not None:
            waiter.future.set_exception(error)
        else:
            waiter.future.set_result(result)  # type: ignore[arg-type]

    def _discard(self, waiter_id: int) -> None:
        waiter = self._waiters.pop(waiter_id, None)
        if waiter is not None and waiter.timer is not None:
            waiter.timer.cancel()
