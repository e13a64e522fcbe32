"""Task-based captcha API client with telemetry support.

Covers the ``createTask`` / ``getTaskResult`` protocol shared by
Anti-Captcha compatible services.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests

POLL_INTERVAL = 3.0
MAX_WAIT = 30.0

LOGGER = logging.getLogger(__name__)


class CaptchaError(RuntimeError):
    """The provider rejected a task or reported a failure."""


class CaptchaTimeoutError(CaptchaError, TimeoutError):
    """No result before the deadline."""


@dataclass
class CaptchaTelemetry:
    """Telemetry data for one solve."""

    task_type: str = ""
    task_id: Optional[Any] = None
    solve_time_sec: float = 0.0
    status: str = "pending"  # pending, solving, solved, failed
    error_message: Optional[str] = None
    attempts: int = 0

    def to_dict(self) -> dict:
        return {
            "task_type": self.task_type,
            "task_id": self.task_id,
            "solve_time_sec": round(self.solve_time_sec, 2),
            "status": self.status,
            "error_message": self.error_message,
            "attempts": self.attempts,
        }


@dataclass
class CaptchaResult:
    """Outcome of a non-raising solve."""

    success: bool
    text: Optional[str] = None
    point_a: Optional[Dict[str, float]] = None
    point_b: Optional[Dict[str, float]] = None
    solution: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None


class TaskCaptchaProvider:
    """Generic ``createTask``/``getTaskResult`` client.

    Parameters
    ----------
    api_key : str
        Provider client key
    timeout : float
        Seconds to wait for a task to become ready
    polling_interval : float
        Seconds between ``getTaskResult`` calls
    session : requests.Session, optional
        HTTP session (tests pass a fake)
    """

    API_URL = ""

    def __init__(
        self,
        api_key: str,
        *,
        timeout: float = MAX_WAIT,
        polling_interval: float = POLL_INTERVAL,
        session: Optional[requests.Session] = None,
    ) -> None:
        if not api_key:
            raise ValueError("Captcha API key is required")
        self.api_key = api_key
        self.timeout = timeout
        self.polling_interval = polling_interval
        self.session = session or requests.Session()
        self.telemetry_history: List[CaptchaTelemetry] = []

    def _post(self, endpoint: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        resp = self.session.post(f"{self.API_URL}{endpoint}", json=payload, timeout=30)
        resp.raise_for_status()
        return resp.json()

    def create_task(self, task: Dict[str, Any]) -> Any:
        """Submit ``task`` and return its id."""
        data = self._post("/createTask", {"clientKey": self.api_key, "task": task})
        if data.get("errorId") != 0:
            raise CaptchaError(data.get("errorDescription") or "Create task failed")
        LOGGER.debug("Created captcha task %s (%s)", data["taskId"], task.get("type"))
        return data["taskId"]

    def get_task_result(self, task_id: Any) -> Dict[str, Any]:
        return self._post("/getTaskResult", {"clientKey": self.api_key, "taskId": task_id})

    def wait_for_result(self, task_id: Any, telemetry: Optional[CaptchaTelemetry] = None) -> Dict[str, Any]:
        """Poll until the task is ready.

        Raises
        ------
        CaptchaError
            If the provider reports an error for the task
        CaptchaTimeoutError
            If the task is not ready within ``timeout`` seconds
        """
        deadline = time.monotonic() + self.timeout
        while True:
            if telemetry is not None:
                telemetry.attempts += 1
            result = self.get_task_result(task_id)
            if result.get("errorId") != 0:
                raise CaptchaError(result.get("errorDescription") or "Task failed")
            if result.get("status") == "ready":
                return result
            if time.monotonic() >= deadline:
                raise CaptchaTimeoutError(f"Captcha solving timeout after {self.timeout}s")
            time.sleep(self.polling_interval)

    def solve(self, task: Dict[str, Any]) -> Dict[str, Any]:
        """Create ``task``, wait for it and return its ``solution``."""
        telemetry = CaptchaTelemetry(task_type=str(task.get("type", "")), status="solving")
        start_time = time.time()
        try:
            telemetry.task_id = self.create_task(task)
            result = self.wait_for_result(telemetry.task_id, telemetry)
        except Exception as exc:
            telemetry.status = "failed"
            telemetry.error_message = str(exc)
            telemetry.solve_time_sec = time.time() - start_time
            self.telemetry_history.append(telemetry)
            LOGGER.error(
                "Failed to solve captcha: %s (time=%.2fs, attempts=%d)",
                exc,
                telemetry.solve_time_sec,
                telemetry.attempts,
            )
            raise

        telemetry.status = "solved"
        telemetry.solve_time_sec = time.time() - start_time
        self.telemetry_history.append(telemetry)
        LOGGER.info(
            "Solved captcha task %s in %.2fs (attempts=%d)",
            telemetry.task_id,
            telemetry.solve_time_sec,
            telemetry.attempts,
        )
        return result.get("solution") or {}

    def success_rate(self) -> float:
        if not self.telemetry_history:
            return 0.0
        solved = sum(1 for t in self.telemetry_history if t.status == "solved")
        return solved / len(self.telemetry_history)

    def average_solve_time(self) -> float:
        solved = [t for t in self.telemetry_history if t.status == "solved"]
        if not solved:
            return 0.0
        return sum(t.solve_time_sec for t in solved) / len(solved)
