"""In-memory stand-ins for the browser driver."""
from __future__ import annotations

import json
from typing import Any, Dict, Iterable, List, Optional

from tool_helper.tracking import DriverError


class FakeRequest:
    def __init__(
        self,
        url: str,
        method: str = "GET",
        headers: Optional[Dict[str, str]] = None,
        post_data: Any = None,
        resource_type: str = "xhr",
        navigation: bool = False,
        failure: Optional[str] = None,
        fail_actions: bool = False,
        fail_on: Iterable[str] = (),
    ) -> None:
        self.url = url
        self.method = method
        self.headers = headers or {}
        self.post_data = post_data
        self.resource_type = resource_type
        self.failure = failure
        self.navigation = navigation
        self.fail_actions = fail_actions
        self.fail_on = set(fail_on)
        self.actions: List[tuple] = []

    def is_navigation_request(self) -> bool:
        return self.navigation

    def _record(self, action: tuple) -> None:
        if self.fail_actions or action[0] in self.fail_on:
            raise DriverError(f"{action[0]} rejected for {self.url}")
        self.actions.append(action)

    async def continue_(self, overrides: Dict[str, Any]) -> None:
        self._record(("continue", overrides))

    async def abort(self, error_code: str) -> None:
        self._record(("abort", error_code))

    async def respond(self, response: Any) -> None:
        self._record(("respond", response))


class FakeResponse:
    def __init__(
        self,
        url: str,
        status: int = 200,
        body: Optional[bytes] = None,
        headers: Optional[Dict[str, str]] = None,
        status_text: str = "OK",
        from_service_worker: bool = False,
    ) -> None:
        self.url = url
        self.status = status
        self.status_text = status_text
        self.headers = headers or {}
        self.ok = 200 <= status < 300
        self.from_cache = False
        self.from_service_worker = from_service_worker
        self._body = body
        self.body_reads = 0

    @classmethod
    def json(cls, url: str, payload: Any, status: int = 200) -> FakeResponse:
        return cls(
            url,
            status=status,
            body=json.dumps(payload).encode("utf-8"),
            headers={"Content-Type": "application/json; charset=utf-8"},
        )

    async def body(self) -> bytes:
        self.body_reads += 1
        if self._body is None:
            raise DriverError(f"No body for {self.url}")
        return self._body


class FakeDriver:
    def __init__(self, fail_interception: bool = False) -> None:
        self.fail_interception = fail_interception
        self.interception_calls: List[bool] = []
        self.request_callbacks: List[Any] = []
        self.response_callbacks: List[Any] = []
        self.failed_callbacks: List[Any] = []

    async def set_interception(self, enabled: bool) -> None:
        self.interception_calls.append(enabled)
        if self.fail_interception:
            raise DriverError("interception unavailable")

    def on_request(self, callback) -> None:
        self.request_callbacks.append(callback)

    def on_response(self, callback) -> None:
        self.response_callbacks.append(callback)

    def on_request_failed(self, callback) -> None:
        self.failed_callbacks.append(callback)

    def remove_listeners(self) -> None:
        self.request_callbacks.clear()
        self.response_callbacks.clear()
        self.failed_callbacks.clear()

    @property
    def listener_count(self) -> int:
        return len(self.request_callbacks) + len(self.response_callbacks) + len(self.failed_callbacks)

    def emit_request(self, request: FakeRequest) -> FakeRequest:
        for callback in list(self.request_callbacks):
            callback(request)
        return request

    def emit_response(self, response: FakeResponse) -> FakeResponse:
        for callback in list(self.response_callbacks):
            callback(response)
        return response

    def emit_request_failed(self, request: FakeRequest) -> FakeRequest:
        for callback in list(self.failed_callbacks):
            callback(request)
        return request


class FakeRoute:
    """Records the Playwright ``Route`` calls made for one request."""

    def __init__(self, error: Optional[Exception] = None) -> None:
        self.error = error
        self.calls: List[tuple] = []

    def _record(self, call: tuple) -> None:
        if self.error is not None:
            raise self.error
        self.calls.append(call)

    async def continue_(self, **overrides: Any) -> None:
        self._record(("continue", overrides))

    async def abort(self, error_code: Optional[str] = None) -> None:
        self._record(("abort", error_code))

    async def fulfill(self, **kwargs: Any) -> None:
        self._record(("fulfill", kwargs))


class FakePlaywrightRequest:
    def __init__(
        self,
        url: str,
        method: str = "GET",
        headers: Optional[Dict[str, str]] = None,
        post_data: Optional[str] = None,
        resource_type: str = "xhr",
        failure: Optional[str] = None,
    ) -> None:
        self.url = url
        self.method = method
        self.headers = headers or {}
        self.post_data = post_data
        self.post_data_buffer = post_data.encode("utf-8") if post_data is not None else None
        self.resource_type = resource_type
        self.failure = failure

    def is_navigation_request(self) -> bool:
        return self.resource_type == "document"


class FakePage:
    """Enough of a Playwright ``Page`` for ``PlaywrightDriver``."""

    def __init__(self, route_error: Optional[Exception] = None) -> None:
        self.route_error = route_error
        self.routes: List[tuple] = []
        self.listeners: Dict[str, List[Any]] = {}

    async def route(self, url: str, handler: Any) -> None:
        if self.route_error is not None:
            raise self.route_error
        self.routes.append((url, handler))

    async def unroute(self, url: str, handler: Any = None) -> None:
        self.routes = [entry for entry in self.routes if entry != (url, handler)]

    def on(self, event: str, listener: Any) -> None:
        self.listeners.setdefault(event, []).append(listener)

    def remove_listener(self, event: str, listener: Any) -> None:
        self.listeners[event].remove(listener)
        if not self.listeners[event]:
            del self.listeners[event]

    def emit(self, event: str, payload: Any) -> None:
        for listener in list(self.listeners.get(event, [])):
            listener(payload)
