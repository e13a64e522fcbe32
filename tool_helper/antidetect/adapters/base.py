"""
Base class for antidetect platform adapters.
Each platform-specific adapter inherits from this.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, List, Optional

from ...http_client import BaseHttpClient
from ..models import Folder, OperationResult, Profile, StartProfileResult
from ..platform import PlatformType


def _text(value: Any) -> str:
    return "" if value is None else str(value)


class AntidetectAdapter(BaseHttpClient, ABC):
    """
    REST adapter for one antidetect control plane.

    Subclasses must implement:
    - platform_type: PlatformType
    - get_folders(), get_profiles(), create_profile()
    - start_profile(), stop_profile(), delete_profile()
    """

    platform_type: PlatformType

    @abstractmethod
    async def get_folders(self) -> List[Folder]:
        ...

    @abstractmethod
    async def get_profiles(self, folder_id: str) -> List[Profile]:
        ...

    @abstractmethod
    async def create_profile(
        self,
        folder_id: str,
        *,
        name: Optional[str] = None,
        proxy: Optional[str] = None,
        note: Optional[str] = None,
        **extra: Any,
    ) -> Profile:
        ...

    @abstractmethod
    async def start_profile(self, profile_id: str, **options: Any) -> StartProfileResult:
        ...

    @abstractmethod
    async def stop_profile(self, profile_id: str) -> OperationResult:
        ...

    @abstractmethod
    async def delete_profile(self, profile_id: str) -> OperationResult:
        ...
