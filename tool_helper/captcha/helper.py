"""Registry of captcha providers."""
from __future__ import annotations

from typing import Any, Dict, List, Type

from .anticaptcha import AntiCaptchaProvider
from .base import TaskCaptchaProvider
from .omocaptcha import OmoCaptchaProvider


class CaptchaHelper:
    def __init__(self) -> None:
        self.providers: Dict[str, Type[TaskCaptchaProvider]] = {
            "omocaptcha": OmoCaptchaProvider,
            "anticaptcha": AntiCaptchaProvider,
        }

    def connect(self, name: str, api_key: str, **options: Any) -> TaskCaptchaProvider:
        """Instantiate provider ``name`` (``timeout``, ``polling_interval``, ``session``)."""
        provider = self.providers.get(name.lower())
        if provider is None:
            raise ValueError(
                f"Provider '{name}' not supported. Available: {', '.join(self.available_providers())}"
            )
        return provider(api_key, **options)

    def register(self, name: str, provider: Type[TaskCaptchaProvider]) -> None:
        self.providers[name.lower()] = provider

    def available_providers(self) -> List[str]:
        return list(self.providers)
