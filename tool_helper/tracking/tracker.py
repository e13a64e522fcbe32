"""Session-level network tracker.

Binds to one driver at a time, records requests and responses, resolves
waiters and runs interception handlers. Driver events go through a single
queue and are processed one at a time, so store updates, waiter
notifications and handler runs for one event finish before the next event
starts.
"""
from __future__ import annotations

import asyncio
import contextlib
import logging
from dataclasses import replace
from typing import Any, AsyncIterator, Callable, Dict, List, Optional, Tuple

from .config import TrackerConfig
from .driver import DriverAdapter, DriverRequest, DriverResponse
from .errors import DriverError, TrackerUsageError
from .events import EventChannel, Listener, TrackerEvent
from .matcher import PatternLike, UrlMatcher
from .pipeline import Action, Disposition, Handler, InterceptionPipeline, Phase
from .records import (
    FailureRecord,
    RecordKind,
    RequestRecord,
    ResponseRecord,
    bound_post_data,
    decode_body,
    header_value,
)
from .store import EventStore
from .waiters import WaiterRegistry

LOGGER = logging.getLogger(__name__)

_REQUEST = "request"
_RESPONSE = "response"
_FAILED = "requestfailed"


class NetworkTracker:
    """Track, wait for and intercept HTTP traffic of one browser page.

    Examples
    --------
    >>> tracker = NetworkTracker(debug=True)
    >>> async with tracker.session(PlaywrightDriver(page)):
    ...     await page.goto("https://example.com")
    ...     response = await tracker.wait_for_response("/api/items")
    """

    def __init__(self, config: Optional[TrackerConfig] = None, **overrides: Any) -> None:
        base = config or TrackerConfig()
        self.config = replace(base, **overrides) if overrides else base
        self.store = EventStore()
        self.waiters = WaiterRegistry()
        self.pipeline = InterceptionPipeline(handler_timeout_ms=self.config.timeout)
        self.events = EventChannel()

        self._driver: Optional[DriverAdapter] = None
        self._queue: Optional[asyncio.Queue[Tuple[str, Any]]] = None
        self._worker: Optional[asyncio.Task[None]] = None
        self._enabled = False

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def driver(self) -> Optional[DriverAdapter]:
        return self._driver

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def enable(self, driver: DriverAdapter) -> None:
        """Start tracking ``driver``.

        Raises
        ------
        TrackerUsageError
            If the tracker is already enabled
        """
        if self._enabled:
            raise TrackerUsageError("Tracker is already enabled")

        self._driver = driver
        self._queue = asyncio.Queue()
        self._worker = asyncio.create_task(self._consume(self._queue))
        self._enabled = True

        driver.on_request(lambda request: self._submit(_REQUEST, request))
        driver.on_response(lambda response: self._submit(_RESPONSE, response))
        driver.on_request_failed(lambda request: self._submit(_FAILED, request))

        try:
            await driver.set_interception(True)
        except Exception:
            driver.remove_listeners()
            await self._teardown()
            raise

        self._log("Tracker enabled")

    async def disable(self) -> None:
        """Stop tracking. No-op when not enabled."""
        driver = self._driver
        if not self._enabled or driver is None:
            return

        driver.remove_listeners()
        await self.flush()
        try:
            await driver.set_interception(False)
        except DriverError as exc:
            LOGGER.warning("Failed to turn interception off: %s", exc)
        await self._teardown()
        self.clear()
        self._log("Tracker disabled")

    @contextlib.asynccontextmanager
    async def session(self, driver: DriverAdapter) -> AsyncIterator[NetworkTracker]:
        """Enable for the duration of an ``async with`` block."""
        await self.enable(driver)
        try:
            yield self
        finally:
            await self.disable()

    async def flush(self) -> None:
        """Wait until every event queued so far has been processed."""
        if self._queue is not None:
            await self._queue.join()

    def clear(self) -> None:
        """Drop captured records and pending waiters. Handlers and listeners stay."""
        self.store.clear()
        self.waiters.clear()

    async def _teardown(self) -> None:
        worker = self._worker
        self._worker = None
        self._queue = None
        self._driver = None
        self._enabled = False
        if worker is not None:
            worker.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await worker

    # ------------------------------------------------------------------
    # Waiting and lookup
    # ------------------------------------------------------------------

    async def wait_for_request(
        self,
        pattern: PatternLike,
        *,
        method: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> RequestRecord:
        """Wait for the next request matching ``pattern``.

        Parameters
        ----------
        pattern : str | re.Pattern | callable
            URL matcher
        method : str, optional
            Required HTTP method
        timeout : float, optional
            Milliseconds; defaults to ``config.timeout``

        Raises
        ------
        WaitTimeoutError
            If nothing matched in time
        """
        self._require_enabled("wait_for_request")
        matcher = UrlMatcher.build(pattern, method)
        return await self.waiters.wait_for(RecordKind.REQUEST, matcher, self._timeout(timeout))

    async def wait_for_response(
        self,
        pattern: PatternLike,
        *,
        method: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> ResponseRecord:
        """Return a captured response matching ``pattern`` or wait for one."""
        self._require_enabled("wait_for_response")
        matcher = UrlMatcher.build(pattern, method)
        existing = self.store.find(RecordKind.RESPONSE, matcher)
        if existing is not None:
            return existing  # type: ignore[return-value]
        return await self.waiters.wait_for(RecordKind.RESPONSE, matcher, self._timeout(timeout))

    def find_request(self, pattern: PatternLike, *, method: Optional[str] = None) -> Optional[RequestRecord]:
        return self.store.find(RecordKind.REQUEST, UrlMatcher.build(pattern, method))  # type: ignore[return-value]

    def find_all_requests(self, pattern: PatternLike, *, method: Optional[str] = None) -> List[RequestRecord]:
        return self.store.find_all(RecordKind.REQUEST, UrlMatcher.build(pattern, method))  # type: ignore[return-value]

    def find_response(self, pattern: PatternLike, *, method: Optional[str] = None) -> Optional[ResponseRecord]:
        return self.store.find(RecordKind.RESPONSE, UrlMatcher.build(pattern, method))  # type: ignore[return-value]

    def find_all_responses(self, pattern: PatternLike, *, method: Optional[str] = None) -> List[ResponseRecord]:
        return self.store.find_all(RecordKind.RESPONSE, UrlMatcher.build(pattern, method))  # type: ignore[return-value]

    def get_all_requests(self) -> List[RequestRecord]:
        return self.store.all(RecordKind.REQUEST)  # type: ignore[return-value]

    def get_all_responses(self) -> List[ResponseRecord]:
        return self.store.all(RecordKind.RESPONSE)  # type: ignore[return-value]

    def filter_requests(self, predicate: Callable[[RequestRecord], bool]) -> List[RequestRecord]:
        return [record for record in self.get_all_requests() if predicate(record)]

    def filter_responses(self, predicate: Callable[[ResponseRecord], bool]) -> List[ResponseRecord]:
        return [record for record in self.get_all_responses() if predicate(record)]

    # ------------------------------------------------------------------
    # Interception and events
    # ------------------------------------------------------------------

    def intercept_request(
        self,
        pattern: PatternLike,
        handler: Handler,
        *,
        method: Optional[str] = None,
    ) -> Callable[[], None]:
        """Register ``handler(record, actions)`` for matching requests.

        The handler may call ``actions.continue_(**overrides)``,
        ``actions.abort(code)`` or ``actions.respond(...)``. Returns a
        disposer that unregisters it immediately.
        """
        return self.pipeline.add(Phase.REQUEST, UrlMatcher.build(pattern, method), handler)

    def intercept_response(
        self,
        pattern: PatternLike,
        handler: Handler,
        *,
        method: Optional[str] = None,
    ) -> Callable[[], None]:
        """Register ``handler(record, actions)`` for matching responses.

        ``actions.modify_body(value)`` replaces the stored body.
        """
        return self.pipeline.add(Phase.RESPONSE, UrlMatcher.build(pattern, method), handler)

    def on(self, event: TrackerEvent | str, listener: Listener) -> Callable[[], None]:
        """Subscribe to ``request``, ``response`` or ``requestfailed``."""
        return self.events.subscribe(event, listener)

    # ------------------------------------------------------------------
    # Event processing
    # ------------------------------------------------------------------

    def _submit(self, kind: str, payload: Any) -> None:
        if self._queue is None:
            return
        self._queue.put_nowait((kind, payload))

    async def _consume(self, queue: asyncio.Queue[Tuple[str, Any]]) -> None:
        while True:
            kind, payload = await queue.get()
            try:
                if kind == _REQUEST:
                    await self._handle_request(payload)
                elif kind == _RESPONSE:
                    await self._handle_response(payload)
                else:
                    await self._handle_request_failed(payload)
            except Exception:
                LOGGER.exception("Error while processing %s event", kind)
            finally:
                queue.task_done()

    async def _handle_request(self, request: DriverRequest) -> None:
        config = self.config
        record = RequestRecord(
            url=request.url,
            method=request.method,
            headers=dict(request.headers) if config.capture_headers else None,
            post_data=bound_post_data(request.post_data, config.max_body_size) if config.capture_body else None,
            resource_type=request.resource_type,
            is_navigation_request=request.is_navigation_request(),
        )
        self.store.record_request(record)
        await self.events.publish(TrackerEvent.REQUEST, record)
        self.waiters.notify(RecordKind.REQUEST, record)

        disposition = await self.pipeline.run_request(record)
        await self._apply(request, record, disposition)

    async def _apply(self, request: DriverRequest, record: RequestRecord, disposition: Disposition) -> None:
        if disposition.action is not Action.CONTINUE:
            try:
                if disposition.action is Action.ABORT:
                    await request.abort(disposition.error_code or "failed")
                    self._log("Request aborted: %s", record.url)
                    return
                if disposition.response is not None:
                    await request.respond(disposition.response)
                    self._log("Request responded: %s", record.url)
                    return
            except DriverError as exc:
                LOGGER.warning("Driver rejected %s for %s: %s", disposition.action.value, record.url, exc)
            # The route must still be answered or the page request hangs.
            await self._continue(request, record, {})
            return

        overrides = disposition.overrides
        if "method" in overrides:
            record.method = overrides["method"]
        if "headers" in overrides and self.config.capture_headers:
            record.headers = dict(overrides["headers"])
        if "post_data" in overrides and self.config.capture_body:
            record.post_data = bound_post_data(overrides["post_data"], self.config.max_body_size)
        if not await self._continue(request, record, overrides) and overrides:
            await self._continue(request, record, {})

    async def _continue(self, request: DriverRequest, record: RequestRecord, overrides: Dict[str, Any]) -> bool:
        try:
            await request.continue_(overrides)
        except DriverError as exc:
            LOGGER.warning("Driver rejected continue for %s: %s", record.url, exc)
            return False
        return True

    async def _handle_response(self, response: DriverResponse) -> None:
        config = self.config
        headers = dict(response.headers)
        body = None
        if config.capture_body:
            try:
                raw = await self._read_body(response)
            except asyncio.TimeoutError:
                LOGGER.debug("Body of %s not ready after %.0fms", response.url, config.timeout)
            except DriverError as exc:
                LOGGER.debug("Body unavailable for %s: %s", response.url, exc)
            else:
                body = decode_body(raw, header_value(headers, "content-type"), config.max_body_size)

        record = ResponseRecord(
            url=response.url,
            status=response.status,
            status_text=response.status_text,
            headers=headers if config.capture_headers else None,
            body=body,
            ok=response.ok,
            from_cache=response.from_cache,
            from_service_worker=response.from_service_worker,
        )
        self.store.record_response(record)
        await self.pipeline.run_response(record)
        await self.events.publish(TrackerEvent.RESPONSE, record)
        self.waiters.notify(RecordKind.RESPONSE, record)

    async def _read_body(self, response: DriverResponse) -> bytes:
        # Streaming bodies never complete; they must not hold the queue.
        if self.config.timeout > 0:
            return await asyncio.wait_for(response.body(), self.config.timeout / 1000)
        return await response.body()

    async def _handle_request_failed(self, request: DriverRequest) -> None:
        record = FailureRecord(
            url=request.url,
            method=request.method,
            error_text=request.failure or "Unknown error",
        )
        await self.events.publish(TrackerEvent.REQUEST_FAILED, record)
        self._log("Request failed: %s - %s", record.url, record.error_text)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _require_enabled(self, operation: str) -> None:
        if not self._enabled:
            raise TrackerUsageError(f"{operation} requires an enabled tracker")

    def _timeout(self, timeout: Optional[float]) -> float:
        return self.config.timeout if timeout is None else timeout

    def _log(self, message: str, *args: Any) -> None:
        if self.config.debug:
            LOGGER.info(message, *args)
