"""Async JSON HTTP client shared by the REST collaborators."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_incrementing

LOGGER = logging.getLogger(__name__)

USER_AGENT = "ToolHelper-Automation/1.0"


class HttpRequestError(RuntimeError):
    """Request failed after retries, or the server answered with an error status."""

    def __init__(self, message: str, *, status_code: Optional[int] = None, body: Optional[str] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class BaseHttpClient:
    """JSON request helper with linear-backoff retry on transport errors.

    Parameters
    ----------
    base_url : str
        Prefix for every endpoint
    api_key : str, optional
        Sent as ``Authorization: Bearer <key>``
    timeout : float
        Per-request timeout in seconds
    retry_attempts : int
        Total attempts for transport failures (timeouts, refused connections)
    retry_delay : float
        Backoff step in seconds; attempt ``n`` waits ``n * retry_delay``
    headers : dict, optional
        Extra default headers
    transport : httpx.AsyncBaseTransport, optional
        Custom transport (tests use ``httpx.MockTransport``)
    """

    def __init__(
        self,
        base_url: str,
        *,
        api_key: Optional[str] = None,
        timeout: float = 30.0,
        retry_attempts: int = 3,
        retry_delay: float = 1.0,
        headers: Optional[Dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key or ""
        self.timeout = timeout
        self.retry_attempts = max(1, retry_attempts)
        self.retry_delay = retry_delay

        default_headers = {
            "Content-Type": "application/json",
            "User-Agent": USER_AGENT,
        }
        if self.api_key:
            default_headers["Authorization"] = f"Bearer {self.api_key}"
        default_headers.update(headers or {})

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout),
            headers=default_headers,
            transport=transport,
        )

    async def __aenter__(self) -> BaseHttpClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        method: str,
        endpoint: str,
        payload: Any = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Send a request and return the decoded body.

        Returns
        -------
        Any
            Parsed JSON, or the raw text when the body is not JSON

        Raises
        ------
        HttpRequestError
            On a non-2xx status, or when every attempt failed in transport
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.retry_attempts),
            wait=wait_incrementing(start=self.retry_delay, increment=self.retry_delay),
            retry=retry_if_exception_type(httpx.TransportError),
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    number = attempt.retry_state.attempt_number
                    if number > 1:
                        LOGGER.debug("Retrying %s %s (attempt %d)", method, endpoint, number)
                    response = await self._client.request(method, endpoint, json=payload, params=params)
        except httpx.TimeoutException as exc:
            raise HttpRequestError(f"Request timeout after {self.timeout}s") from exc
        except httpx.TransportError as exc:
            raise HttpRequestError(f"Request failed: {exc}") from exc

        if response.is_error:
            raise HttpRequestError(
                f"HTTP {response.status_code}: {response.text}",
                status_code=response.status_code,
                body=response.text,
            )

        LOGGER.debug("%s %s -> %s", method, endpoint, response.status_code)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    async def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("GET", endpoint, params=params)

    async def post(self, endpoint: str, payload: Any = None, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("POST", endpoint, payload, params=params)

    async def put(self, endpoint: str, payload: Any = None) -> Any:
        return await self.request("PUT", endpoint, payload)

    async def delete(self, endpoint: str) -> Any:
        return await self.request("DELETE", endpoint)
