"""Per-URL storage of the latest request and response."""
from __future__ import annotations

from typing import Dict, List, Optional, Union

from .matcher import UrlMatcher
from .records import RecordKind, RequestRecord, ResponseRecord

Record = Union[RequestRecord, ResponseRecord]


class EventStore:
    """Latest request and latest response per URL (last write wins).

    Callers that need the full history subscribe to tracker events instead.
    """

    def __init__(self) -> None:
        self._requests: Dict[str, RequestRecord] = {}
        self._responses: Dict[str, ResponseRecord] = {}

    def record_request(self, record: RequestRecord) -> None:
        self._requests[record.url] = record

    def record_response(self, record: ResponseRecord) -> None:
        """Store a response, attaching the request currently stored for its URL."""
        record.request = self._requests.get(record.url)
        self._responses[record.url] = record

    def _table(self, kind: RecordKind) -> Dict[str, Record]:
        if kind is RecordKind.REQUEST:
            return self._requests  # type: ignore[return-value]
        return self._responses  # type: ignore[return-value]

    def find(self, kind: RecordKind, matcher: UrlMatcher) -> Optional[Record]:
        for url, record in self._table(kind).items():
            if matcher.accepts(url, record.method):
                return record
        return None

    def find_all(self, kind: RecordKind, matcher: UrlMatcher) -> List[Record]:
        return [
            record
            for url, record in self._table(kind).items()
            if matcher.accepts(url, record.method)
        ]

    def all(self, kind: RecordKind) -> List[Record]:
        return list(self._table(kind).values())

    def get_request(self, url: str) -> Optional[RequestRecord]:
        return self._requests.get(url)

    def clear(self) -> None:
        self._requests.clear()
        self._responses.clear()

    def __len__(self) -> int:
        return len(self._requests) + len(self._responses)
