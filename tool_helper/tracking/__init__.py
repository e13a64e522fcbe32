"""HTTP request/response tracking and interception for browser pages.

This package provides:
- URL matching (substring, regex, predicate) with optional method filter
- Per-URL storage of the latest request and response
- Event-driven waiters with timeouts
- Ordered interception handlers (continue with overrides, abort, respond)
- A Playwright driver adapter
"""

from .config import TrackerConfig
from .driver import DriverAdapter, DriverRequest, DriverResponse, PlaywrightDriver
from .errors import DriverError, TrackerError, TrackerUsageError, WaitAbandonedError, WaitTimeoutError
from .events import TrackerEvent
from .matcher import PredicateMatch, RegexMatch, StringMatch, UrlMatcher, matches, to_pattern
from .pipeline import Action, Disposition, RequestActions, ResponseActions, SyntheticResponse
from .records import BodyKind, FailureRecord, RecordKind, RequestRecord, ResponseRecord, decode_body
from .store import EventStore
from .tracker import NetworkTracker
from .waiters import WaiterRegistry

__all__ = [
    "Action",
    "BodyKind",
    "Disposition",
    "DriverAdapter",
    "DriverError",
    "DriverRequest",
    "DriverResponse",
    "EventStore",
    "FailureRecord",
    "NetworkTracker",
    "PlaywrightDriver",
    "PredicateMatch",
    "RecordKind",
    "RegexMatch",
    "RequestActions",
    "RequestRecord",
    "ResponseActions",
    "ResponseRecord",
    "StringMatch",
    "SyntheticResponse",
    "TrackerConfig",
    "TrackerError",
    "TrackerEvent",
    "TrackerUsageError",
    "UrlMatcher",
    "WaitAbandonedError",
    "WaitTimeoutError",
    "WaiterRegistry",
    "decode_body",
    "matches",
    "to_pattern",
]
