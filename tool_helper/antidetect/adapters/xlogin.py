"""XLogin local API adapter."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..models import Folder, OperationResult, Profile, StartProfileResult
from ..platform import PlatformType
from .base import AntidetectAdapter, _text


def _to_profile(item: Dict[str, Any]) -> Profile:
    return Profile(
        id=_text(item.get("id")),
        name=_text(item.get("username") or item.get("note")),
        folder_id=_text(item.get("folderId")),
        is_running=bool(item.get("isRunning")),
        proxy=_text(item.get("proxyString")),
        note=_text(item.get("note")),
    )


class XLoginAdapter(AntidetectAdapter):
    platform_type = PlatformType.XLOGIN

    async def get_folders(self) -> List[Folder]:
        data = await self.get("/api/v3/folders")
        return [Folder(id=_text(folder["id"]), name=_text(folder.get("name"))) for folder in data["data"]]

    async def get_profiles(self, folder_id: str) -> List[Profile]:
        data = await self.get("/api/v3/profiles", params={"folder_id": folder_id})
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
            "folderId": folder_id,
            "kernel": extra.pop("kernel", "windows"),
            "proxyString": proxy or "",
            "note": note or name or "",
            **extra,
        }
        data = await self.post("/api/v3/profiles/create", payload)
        return _to_profile(data["data"])

    async def start_profile(self, profile_id: str, **options: Any) -> StartProfileResult:
        data = await self.get(f"/api/v3/profiles/start/{profile_id}")
        return StartProfileResult(
            debug_port=_text(data.get("debugPort")),
            hwnd=_text(data["hwnd"]) if data.get("hwnd") is not None else None,
            success=bool(data.get("success")),
        )

    async def stop_profile(self, profile_id: str) -> OperationResult:
        await self.get(f"/api/v3/profiles/close/{profile_id}")
        return OperationResult(success=True)

    async def delete_profile(self, profile_id: str) -> OperationResult:
        await self.post(f"/api/v3/profiles/delete/{profile_id}")
        return OperationResult(success=True)
