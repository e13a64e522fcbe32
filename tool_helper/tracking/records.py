"""Captured request/response records and body decoding."""
from __future__ import annotations

import base64
import json
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union


class RecordKind(str, Enum):
    """Which store a record lives in."""

    REQUEST = "request"
    RESPONSE = "response"


class BodyKind(str, Enum):
    """How a captured body is represented."""

    JSON = "json"
    TEXT = "text"
    BASE64 = "base64"


def classify_content_type(content_type: str) -> BodyKind:
    """Decide the body representation for a ``Content-Type`` value.

    ``application/json`` -> JSON, ``text/*`` -> TEXT, anything else -> BASE64.
    """
    lowered = (content_type or "").lower()
    if "application/json" in lowered:
        return BodyKind.JSON
    if "text/" in lowered:
        return BodyKind.TEXT
    return BodyKind.BASE64


def decode_body(raw: Optional[bytes], content_type: str, max_body_size: int) -> Any:
    """Decode a raw body once, at capture time.

    Returns ``None`` when there is no body or when it exceeds
    ``max_body_size``. JSON that fails to parse is kept as text.
    """
    if raw is None or len(raw) > max_body_size:
        return None

    kind = classify_content_type(content_type)
    if kind is BodyKind.JSON:
        text = raw.decode("utf-8", errors="replace")
        try:
            return json.loads(text)
        except ValueError:
            return text
    if kind is BodyKind.TEXT:
        return raw.decode("utf-8", errors="replace")
    return base64.b64encode(raw).decode("ascii")


def bound_post_data(post_data: Union[str, bytes, None], max_body_size: int) -> Union[str, bytes, None]:
    """Drop request bodies larger than the capture ceiling."""
    if post_data is None:
        return None
    size = len(post_data.encode("utf-8")) if isinstance(post_data, str) else len(post_data)
    if size > max_body_size:
        return None
    return post_data


def header_value(headers: Optional[Mapping[str, str]], name: str) -> str:
    """Case-insensitive header lookup."""
    if not headers:
        return ""
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value
    return ""


@dataclass
class RequestRecord:
    """Outbound request as observed by the driver."""

    url: str
    method: str
    headers: Optional[Dict[str, str]] = None
    post_data: Union[str, bytes, None] = None
    resource_type: str = "other"
    is_navigation_request: bool = False
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        post_data = self.post_data
        if isinstance(post_data, bytes):
            post_data = base64.b64encode(post_data).decode("ascii")
        return {
            "url": self.url,
            "method": self.method,
            "headers": self.headers,
            "post_data": post_data,
            "resource_type": self.resource_type,
            "is_navigation_request": self.is_navigation_request,
            "timestamp": self.timestamp,
        }


@dataclass
class ResponseRecord:
    """Response as observed by the driver.

    ``request`` is the request stored for the same URL when the response
    arrived. It is a best-effort join by URL, not a guaranteed pairing.
    """

    url: str
    status: int
    status_text: str = ""
    headers: Optional[Dict[str, str]] = None
    body: Any = None
    ok: bool = True
    from_cache: bool = False
    from_service_worker: bool = False
    timestamp: float = field(default_factory=time.time)
    request: Optional[RequestRecord] = None

    @property
    def method(self) -> Optional[str]:
        return self.request.method if self.request is not None else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "status": self.status,
            "status_text": self.status_text,
            "headers": self.headers,
            "body": self.body,
            "ok": self.ok,
            "from_cache": self.from_cache,
            "from_service_worker": self.from_service_worker,
            "timestamp": self.timestamp,
            "method": self.method,
        }


@dataclass(frozen=True)
class FailureRecord:
    """A request that never completed. Published as an event, never stored."""

    url: str
    method: str
    error_text: str
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "method": self.method,
            "error_text": self.error_text,
            "timestamp": self.timestamp,
        }
