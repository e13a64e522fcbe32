"""Captcha solving clients."""

from .anticaptcha import AntiCaptchaProvider
from .base import CaptchaError, CaptchaResult, CaptchaTelemetry, CaptchaTimeoutError, TaskCaptchaProvider
from .helper import CaptchaHelper
from .omocaptcha import OmoCaptchaProvider

__all__ = [
    "AntiCaptchaProvider",
    "CaptchaError",
    "CaptchaHelper",
    "CaptchaResult",
    "CaptchaTelemetry",
    "CaptchaTimeoutError",
    "OmoCaptchaProvider",
    "TaskCaptchaProvider",
]
