"""Supported antidetect browser platforms."""
from __future__ import annotations

from enum import Enum


class PlatformType(str, Enum):
    """Antidetect control-plane products."""

    XLOGIN = "xlogin"
    GPM = "gpm"
    GOLOGIN = "gologin"

    @classmethod
    def values(cls) -> list[str]:
        return [member.value for member in cls]
