"""Exceptions raised by the network tracker."""
from __future__ import annotations


class TrackerError(Exception):
    """Base class for tracker failures."""


class TrackerUsageError(TrackerError):
    """Tracker used in the wrong state (enable twice, wait while disabled)."""


class WaitTimeoutError(TrackerError, TimeoutError):
    """A ``wait_for_*`` call exceeded its deadline."""

    def __init__(self, kind: str, description: str, elapsed: float) -> None:
        self.kind = kind
        self.description = description
        self.elapsed = elapsed
        super().__init__(
            f"Timeout waiting for {kind}: {description} (after {elapsed * 1000:.0f}ms)"
        )


class WaitAbandonedError(TrackerError):
    """A pending waiter was discarded because the tracker was cleared."""


class DriverError(TrackerError):
    """The underlying browser driver failed to apply an action."""
