"""Tracker configuration."""
from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_TIMEOUT_MS = 30_000
DEFAULT_MAX_BODY_SIZE = 10 * 1024 * 1024  # 10MB


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "yes", "on"}


def _env_number(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return float(value)


@dataclass
class TrackerConfig:
    """Options recognised by :class:`~tool_helper.tracking.tracker.NetworkTracker`.

    Attributes
    ----------
    debug : bool
        Emit diagnostic log lines (enable/disable, aborts, synthetic responses).
    timeout : float
        Default wait timeout in milliseconds. Also bounds a single handler run.
    capture_body : bool
        Read and decode request/response bodies.
    capture_headers : bool
        Keep header maps on records.
    max_body_size : int
        Byte ceiling for body capture; larger bodies are stored as ``None``.
    """

    debug: bool = False
    timeout: float = DEFAULT_TIMEOUT_MS
    capture_body: bool = True
    capture_headers: bool = True
    max_body_size: int = DEFAULT_MAX_BODY_SIZE

    def __post_init__(self) -> None:
        if self.timeout < 0:
            raise ValueError("timeout must be non-negative")
        if self.max_body_size < 0:
            raise ValueError("max_body_size must be non-negative")

    @classmethod
    def from_env(cls, prefix: str = "TRACKER_") -> TrackerConfig:
        """Build a config from ``<prefix>DEBUG``, ``<prefix>TIMEOUT`` etc."""
        return cls(
            debug=_env_bool(f"{prefix}DEBUG", False),
            timeout=_env_number(f"{prefix}TIMEOUT", DEFAULT_TIMEOUT_MS),
            capture_body=_env_bool(f"{prefix}CAPTURE_BODY", True),
            capture_headers=_env_bool(f"{prefix}CAPTURE_HEADERS", True),
            max_body_size=int(_env_number(f"{prefix}MAX_BODY_SIZE", DEFAULT_MAX_BODY_SIZE)),
        )
