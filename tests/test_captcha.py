import pytest
import requests

from tool_helper.captcha import (
    AntiCaptchaProvider,
    CaptchaError,
    CaptchaHelper,
    CaptchaTimeoutError,
    OmoCaptchaProvider,
    TaskCaptchaProvider,
)


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self.payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self.payload


class FakeSession:
    """Replays scripted ``getTaskResult`` answers after a successful ``createTask``."""

    def __init__(self, results, create=None):
        self.create = create or {"errorId": 0, "taskId": 42}
        self.results = list(results)
        self.calls = []

    def post(self, url, json=None, timeout=None):
        self.calls.append((url, json))
        if url.endswith("/createTask"):
            return FakeResponse(self.create)
        if len(self.results) > 1:
            return FakeResponse(self.results.pop(0))
        return FakeResponse(self.results[0])


def _provider(cls, session, **kwargs):
    kwargs.setdefault("polling_interval", 0)
    return cls("key", session=session, **kwargs)


def test_image_to_text_polls_until_ready():
    session = FakeSession(
        [
            {"errorId": 0, "status": "processing"},
            {"errorId": 0, "status": "ready", "solution": {"text": "abc12"}},
        ]
    )
    provider = _provider(OmoCaptchaProvider, session)
    result = provider.image_to_text("aW1n", module="module_1")

    assert result.success
    assert result.text == "abc12"
    url, payload = session.calls[0]
    assert url == "https://api.omocaptcha.com/v2/createTask"
    assert payload == {"clientKey": "key", "task": {"type": "ImageToTextTask", "imageBase64": "aW1n", "module": "module_1"}}
    assert len(session.calls) == 3
    assert provider.telemetry_history[0].attempts == 2
    assert provider.success_rate() == 1.0


def test_tiktok_select_object_returns_points():
    solution = {"pointA": {"x": 10, "y": 20}, "pointB": {"x": 30, "y": 40}}
    session = FakeSession([{"errorId": 0, "status": "ready", "solution": solution}])
    result = _provider(OmoCaptchaProvider, session).tiktok_3d_select_object_web("aW1n", 340, 212)

    assert result.success
    assert result.point_a == {"x": 10, "y": 20}
    assert result.point_b == {"x": 30, "y": 40}
    task = session.calls[0][1]["task"]
    assert task["widthView"] == 340 and task["heightView"] == 212


def test_omocaptcha_reports_failures_without_raising():
    session = FakeSession([], create={"errorId": 1, "errorDescription": "ERROR_KEY_DOES_NOT_EXIST"})
    provider = _provider(OmoCaptchaProvider, session)
    result = provider.image_to_text("aW1n")

    assert not result.success
    assert result.error == "ERROR_KEY_DOES_NOT_EXIST"
    assert provider.telemetry_history[0].status == "failed"
    assert provider.success_rate() == 0.0


def test_task_error_raises_captcha_error():
    session = FakeSession([{"errorId": 12, "errorDescription": "ERROR_CAPTCHA_UNSOLVABLE"}])
    provider = _provider(TaskCaptchaProvider, session)
    with pytest.raises(CaptchaError, match="UNSOLVABLE"):
        provider.wait_for_result(42)


def test_wait_for_result_times_out():
    session = FakeSession([{"errorId": 0, "status": "processing"}])
    provider = _provider(TaskCaptchaProvider, session, timeout=0)
    with pytest.raises(CaptchaTimeoutError):
        provider.wait_for_result(42)


def test_anticaptcha_solve_token():
    session = FakeSession([{"errorId": 0, "status": "ready", "solution": {"gRecaptchaResponse": "tok"}}])
    provider = _provider(AntiCaptchaProvider, session)
    assert provider.solve_token("site", "https://example.com/login") == "tok"
    assert session.calls[0][1]["task"]["websiteKey"] == "site"
    assert provider.average_solve_time() >= 0


def test_anticaptcha_empty_solution_raises():
    session = FakeSession([{"errorId": 0, "status": "ready", "solution": {}}])
    with pytest.raises(CaptchaError):
        _provider(AntiCaptchaProvider, session).solve_token("site", "https://example.com")


def test_helper_registry():
    helper = CaptchaHelper()
    assert helper.available_providers() == ["omocaptcha", "anticaptcha"]
    provider = helper.connect("OmoCaptcha", "key", polling_interval=0, session=FakeSession([]))
    assert isinstance(provider, OmoCaptchaProvider)
    assert provider.polling_interval == 0

    helper.register("Custom", TaskCaptchaProvider)
    assert "custom" in helper.available_providers()

    with pytest.raises(ValueError, match="not supported"):
        helper.connect("unknown", "key")


def test_api_key_is_required():
    with pytest.raises(ValueError):
        OmoCaptchaProvider("")
