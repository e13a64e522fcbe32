"""
Antidetect browser helper.

Single entry point for the XLogin, GPMLogin and GoLogin local APIs:
validates the connection config, picks the matching adapter and checks
ids before any request leaves the process.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Type

from .adapters import AntidetectAdapter, GoLoginAdapter, GPMLoginAdapter, XLoginAdapter
from .models import Folder, OperationResult, Profile, StartProfileResult
from .platform import PlatformType

LOGGER = logging.getLogger(__name__)

ADAPTERS: Dict[PlatformType, Type[AntidetectAdapter]] = {
    PlatformType.XLOGIN: XLoginAdapter,
    PlatformType.GPM: GPMLoginAdapter,
    PlatformType.GOLOGIN: GoLoginAdapter,
}


@dataclass
class AntidetectConfig:
    """Connection settings for one antidetect platform."""

    type: Optional[str] = None
    base_url: Optional[str] = None
    api_key: Optional[str] = None
    timeout: float = 30.0

    @classmethod
    def from_env(cls) -> AntidetectConfig:
        return cls(
            type=os.getenv("ANTIDETECT_TYPE"),
            base_url=os.getenv("ANTIDETECT_BASE_URL"),
            api_key=os.getenv("ANTIDETECT_API_KEY"),
            timeout=float(os.getenv("ANTIDETECT_TIMEOUT", "30")),
        )


def _validate(config: AntidetectConfig) -> PlatformType:
    if not config.type:
        raise ValueError("Platform type is required")
    if not config.base_url:
        raise ValueError("Base URL is required")
    try:
        return PlatformType(config.type.lower())
    except ValueError:
        raise ValueError(f"Invalid platform type. Supported: {', '.join(PlatformType.values())}") from None


def _require(value: Optional[str], label: str) -> str:
    if not value:
        raise ValueError(f"{label} is required")
    return value


class ConnectAntidetectHelper:
    """Facade over the platform adapters.

    Parameters
    ----------
    config : AntidetectConfig
        Platform type, base URL, optional API key and timeout (seconds)
    **client_options
        Forwarded to the adapter (``retry_attempts``, ``transport``, ...)

    Raises
    ------
    ValueError
        If the config is missing, incomplete or names an unknown platform
    """

    def __init__(self, config: Optional[AntidetectConfig], **client_options: Any) -> None:
        if config is None:
            raise ValueError("Config object is required")
        self._platform = _validate(config)
        self.config = config
        adapter_cls = ADAPTERS[self._platform]
        self.adapter = adapter_cls(
            config.base_url,
            api_key=config.api_key,
            timeout=config.timeout,
            **client_options,
        )
        LOGGER.debug("Antidetect helper ready: %s at %s", self._platform.value, config.base_url)

    async def __aenter__(self) -> ConnectAntidetectHelper:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.adapter.aclose()

    @property
    def platform_type(self) -> PlatformType:
        return self._platform

    def connection_info(self) -> Dict[str, Any]:
        return {
            "platform": self._platform.value,
            "base_url": self.config.base_url,
            "has_api_key": bool(self.config.api_key),
            "timeout": self.config.timeout,
        }

    @staticmethod
    def supported_platforms() -> List[str]:
        return PlatformType.values()

    @staticmethod
    def is_platform_supported(platform: str) -> bool:
        return platform.lower() in PlatformType.values()

    async def get_folders(self) -> List[Folder]:
        return await self.adapter.get_folders()

    async def get_profiles(self, folder_id: str) -> List[Profile]:
        return await self.adapter.get_profiles(_require(folder_id, "Folder ID"))

    async def create_profile(
        self,
        folder_id: str,
        *,
        name: Optional[str] = None,
        proxy: Optional[str] = None,
        note: Optional[str] = None,
        **extra: Any,
    ) -> Profile:
        return await self.adapter.create_profile(
            _require(folder_id, "Folder ID"), name=name, proxy=proxy, note=note, **extra
        )

    async def start_profile(self, profile_id: str, **options: Any) -> StartProfileResult:
        result = await self.adapter.start_profile(_require(profile_id, "Profile ID"), **options)
        LOGGER.info("Started %s profile %s on port %s", self._platform.value, profile_id, result.debug_port)
        return result

    async def stop_profile(self, profile_id: str) -> OperationResult:
        return await self.adapter.stop_profile(_require(profile_id, "Profile ID"))

    async def delete_profile(self, profile_id: str) -> OperationResult:
        return await self.adapter.delete_profile(_require(profile_id, "Profile ID"))
