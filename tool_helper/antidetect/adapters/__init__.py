"""Platform-specific antidetect adapters."""

from .base import AntidetectAdapter
from .gologin import GoLoginAdapter
from .gpm import GPMLoginAdapter
from .xlogin import XLoginAdapter

__all__ = [
    "AntidetectAdapter",
    "GPMLoginAdapter",
    "GoLoginAdapter",
    "XLoginAdapter",
]
