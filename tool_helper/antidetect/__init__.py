"""Antidetect browser control-plane clients (XLogin, GPMLogin, GoLogin)."""

from .helper import AntidetectConfig, ConnectAntidetectHelper
from .models import Folder, OperationResult, Profile, StartProfileResult
from .platform import PlatformType

__all__ = [
    "AntidetectConfig",
    "ConnectAntidetectHelper",
    "Folder",
    "OperationResult",
    "PlatformType",
    "Profile",
    "StartProfileResult",
]
