"""Browser driver contract and its Playwright implementation."""
from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, List, Optional, Protocol, Union

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page, Request, Response, Route

from .errors import DriverError
from .pipeline import CONTINUE_OVERRIDES, SyntheticResponse

LOGGER = logging.getLogger(__name__)


class DriverRequest(Protocol):
    """A request as exposed by the driver."""

    @property
    def url(self) -> str: ...

    @property
    def method(self) -> str: ...

    @property
    def headers(self) -> Dict[str, str]: ...

    @property
    def post_data(self) -> Union[str, bytes, None]: ...

    @property
    def resource_type(self) -> str: ...

    @property
    def failure(self) -> Optional[str]: ...

    def is_navigation_request(self) -> bool: ...

    async def continue_(self, overrides: Dict[str, Any]) -> None: ...

    async def abort(self, error_code: str) -> None: ...

    async def respond(self, response: SyntheticResponse) -> None: ...


class DriverResponse(Protocol):
    """A response as exposed by the driver."""

    @property
    def url(self) -> str: ...

    @property
    def status(self) -> int: ...

    @property
    def status_text(self) -> str: ...

    @property
    def headers(self) -> Dict[str, str]: ...

    @property
    def ok(self) -> bool: ...

    @property
    def from_cache(self) -> bool: ...

    @property
    def from_service_worker(self) -> bool: ...

    async def body(self) -> bytes: ...


RequestCallback = Callable[[DriverRequest], None]
ResponseCallback = Callable[[DriverResponse], None]


class DriverAdapter(Protocol):
    """The only browser interface the tracker consumes."""

    async def set_interception(self, enabled: bool) -> None: ...

    def on_request(self, callback: RequestCallback) -> None: ...

    def on_response(self, callback: ResponseCallback) -> None: ...

    def on_request_failed(self, callback: RequestCallback) -> None: ...

    def remove_listeners(self) -> None: ...


class PlaywrightRequest:
    """Playwright request, optionally paired with the route that holds it."""

    def __init__(self, request: Request, route: Optional[Route] = None) -> None:
        self._request = request
        self._route = route

    @property
    def url(self) -> str:
        return self._request.url

    @property
    def method(self) -> str:
        return self._request.method

    @property
    def headers(self) -> Dict[str, str]:
        return self._request.headers

    @property
    def post_data(self) -> Union[str, bytes, None]:
        try:
            return self._request.post_data
        except UnicodeDecodeError:
            return self._request.post_data_buffer

    @property
    def resource_type(self) -> str:
        return self._request.resource_type

    @property
    def failure(self) -> Optional[str]:
        return self._request.failure

    def is_navigation_request(self) -> bool:
        return self._request.is_navigation_request()

    def _require_route(self) -> Route:
        if self._route is None:
            raise DriverError(f"Request is not intercepted: {self.url}")
        return self._route

    async def continue_(self, overrides: Dict[str, Any]) -> None:
        route = self._require_route()
        unknown = sorted(set(overrides) - set(CONTINUE_OVERRIDES))
        if unknown:
            raise DriverError(f"Unsupported continue override(s): {', '.join(unknown)}")
        try:
            await route.continue_(**overrides)
        except PlaywrightError as exc:
            raise DriverError(f"continue failed for {self.url}: {exc}") from exc

    async def abort(self, error_code: str) -> None:
        route = self._require_route()
        try:
            await route.abort(error_code)
        except PlaywrightError as exc:
            raise DriverError(f"abort failed for {self.url}: {exc}") from exc

    async def respond(self, response: SyntheticResponse) -> None:
        route = self._require_route()
        body = response.body
        content_type = response.content_type
        if isinstance(body, (dict, list)):
            body = json.dumps(body)
            content_type = content_type or "application/json"
        try:
            await route.fulfill(
                status=response.status,
                headers=response.headers,
                body=body,
                content_type=content_type,
            )
        except PlaywrightError as exc:
            raise DriverError(f"fulfill failed for {self.url}: {exc}") from exc


class PlaywrightResponse:
    """Playwright response. Playwright reports no cache flag, so ``from_cache`` is False."""

    def __init__(self, response: Response) -> None:
        self._response = response

    @property
    def url(self) -> str:
        return self._response.url

    @property
    def status(self) -> int:
        return self._response.status

    @property
    def status_text(self) -> str:
        return self._response.status_text

    @property
    def headers(self) -> Dict[str, str]:
        return self._response.headers

    @property
    def ok(self) -> bool:
        return self._response.ok

    @property
    def from_cache(self) -> bool:
        return False

    @property
    def from_service_worker(self) -> bool:
        return self._response.from_service_worker

    async def body(self) -> bytes:
        try:
            return await self._response.body()
        except PlaywrightError as exc:
            raise DriverError(f"Cannot read body of {self.url}: {exc}") from exc


class PlaywrightDriver:
    """Adapter binding one Playwright page to the tracker.

    With interception on, requests are delivered from ``page.route`` so they
    can be continued, aborted or fulfilled. Otherwise they come from the
    page ``request`` event and are observe-only.
    """

    def __init__(self, page: Page, url_pattern: str = "**/*") -> None:
        self.page = page
        self.url_pattern = url_pattern
        self._intercepting = False
        self._request_callbacks: List[RequestCallback] = []
        self._response_callbacks: List[ResponseCallback] = []
        self._failed_callbacks: List[RequestCallback] = []
        self._page_listeners: Dict[str, Callable[..., Any]] = {}

    async def set_interception(self, enabled: bool) -> None:
        try:
            if enabled and not self._intercepting:
                await self.page.route(self.url_pattern, self._handle_route)
                self._intercepting = True
            elif not enabled and self._intercepting:
                await self.page.unroute(self.url_pattern, self._handle_route)
                self._intercepting = False
        except PlaywrightError as exc:
            raise DriverError(f"Cannot set interception={enabled}: {exc}") from exc

    def on_request(self, callback: RequestCallback) -> None:
        self._request_callbacks.append(callback)
        self._listen("request", self._handle_page_request)

    def on_response(self, callback: ResponseCallback) -> None:
        self._response_callbacks.append(callback)
        self._listen("response", self._handle_page_response)

    def on_request_failed(self, callback: RequestCallback) -> None:
        self._failed_callbacks.append(callback)
        self._listen("requestfailed", self._handle_page_request_failed)

    def remove_listeners(self) -> None:
        for event, listener in self._page_listeners.items():
            self.page.remove_listener(event, listener)
        self._page_listeners.clear()
        self._request_callbacks.clear()
        self._response_callbacks.clear()
        self._failed_callbacks.clear()

    def _listen(self, event: str, listener: Callable[..., Any]) -> None:
        if event not in self._page_listeners:
            self.page.on(event, listener)
            self._page_listeners[event] = listener

    async def _handle_route(self, route: Route, request: Request) -> None:
        if not self._request_callbacks:
            # Nobody will decide on this request; let it through.
            await route.continue_()
            return
        wrapped = PlaywrightRequest(request, route)
        for callback in list(self._request_callbacks):
            callback(wrapped)

    def _handle_page_request(self, request: Request) -> None:
        if self._intercepting:
            return
        wrapped = PlaywrightRequest(request)
        for callback in list(self._request_callbacks):
            callback(wrapped)

    def _handle_page_response(self, response: Response) -> None:
        wrapped = PlaywrightResponse(response)
        for callback in list(self._response_callbacks):
            callback(wrapped)

    def _handle_page_request_failed(self, request: Request) -> None:
        wrapped = PlaywrightRequest(request)
        for callback in list(self._failed_callbacks):
            callback(wrapped)
