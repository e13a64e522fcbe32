"""GPMLogin local API adapter."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..models import Folder, OperationResult, Profile, StartProfileResult
from ..platform import PlatformType
from .base import AntidetectAdapter, _text

DEFAULT_WIN_SCALE = 0.5
DEFAULT_WIN_SIZE = "700,900"
DEFAULT_WIN_POS = "300,300"


def _extract_port(address: str) -> str:
    """``127.0.0.1:9222`` -> ``9222``."""
    parts = address.split(":")
    return parts[1] if len(parts) > 1 else address


def _to_profile(item: Dict[str, Any]) -> Profile:
    return Profile(
        id=_text(item.get("id")),
        name=_text(item.get("name")),
        folder_id=_text(item.get("group_id")),
        is_running=False,
        proxy=_text(item.get("raw_proxy") or item.get("proxy")),
        note=_text(item.get("note")),
    )


def window_params(options: Dict[str, Any]) -> Dict[str, Any]:
    """Build GPM window query parameters.

    ``scale``/``width``/``height``/``x``/``y`` are shortcuts for
    ``win_scale``/``win_size``/``win_pos``.
    """
    scale = options.get("scale")
    win_scale = scale if isinstance(scale, (int, float)) else options.get("win_scale", DEFAULT_WIN_SCALE)

    width, height = options.get("width"), options.get("height")
    win_size = options.get("win_size") or (
        f"{width},{height}" if width is not None and height is not None else DEFAULT_WIN_SIZE
    )

    x, y = options.get("x"), options.get("y")
    win_pos = options.get("win_pos") or (f"{x},{y}" if x is not None and y is not None else DEFAULT_WIN_POS)

    return {"win_scale": win_scale, "win_size": win_size, "win_pos": win_pos}


class GPMLoginAdapter(AntidetectAdapter):
    platform_type = PlatformType.GPM

    async def get_folders(self) -> List[Folder]:
        data = await self.get("/api/v3/groups")
        return [Folder(id=_text(group["id"]), name=_text(group.get("name"))) for group in data["data"]]

    async def get_profiles(self, folder_id: str) -> List[Profile]:
        data = await self.get("/api/v3/profiles", params={"group_id": folder_id})
        return [_to_profile(item) for item in data["data"]]

    async def create_profile(
        self,
        folder_id: str,
        *,
        name: Optional[str] = None,
        proxy: Optional[str] = None,
        note: Optional[str] = None,
        **extra: Any,
    ) -> Profile:
        payload = {
            "group_id": folder_id,
            "name": name or "New Profile",
            "proxy": proxy or "",
            "note": note or "",
            **extra,
        }
        data = await self.post("/api/v3/profiles/create", payload)
        return _to_profile(data["data"])

    async def start_profile(self, profile_id: str, **options: Any) -> StartProfileResult:
        data = await self.post(f"/api/v3/profiles/start/{profile_id}", params=window_params(options))
        return StartProfileResult(
            debug_port=_extract_port(_text(data["data"].get("remote_debugging_address"))),
            success=bool(data.get("success")),
        )

    async def stop_profile(self, profile_id: str) -> OperationResult:
        await self.post(f"/api/v3/profiles/stop/{profile_id}")
        return OperationResult(success=True)

    async def delete_profile(self, profile_id: str) -> OperationResult:
        await self.delete(f"/api/v3/profiles/{profile_id}")
        return OperationResult(success=True)
