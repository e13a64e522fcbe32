"""GoLogin API adapter."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..models import Folder, OperationResult, Profile, StartProfileResult
from ..platform import PlatformType
from .base import AntidetectAdapter, _text


def _proxy_string(item: Dict[str, Any]) -> str:
    proxy = item.get("proxy")
    if not item.get("proxyEnabled") or not proxy:
        return ""
    return f"{proxy.get('mode')}://{proxy.get('host')}:{proxy.get('port')}"


class GoLoginAdapter(AntidetectAdapter):
    platform_type = PlatformType.GOLOGIN

    async def get_folders(self) -> List[Folder]:
        data = await self.get("/browser/folders")
        return [Folder(id=_text(folder["id"]), name=_text(folder.get("name"))) for folder in data["folders"]]

    async def get_profiles(self, folder_id: str) -> List[Profile]:
        data = await self.get("/browser", params={"folder": folder_id})
        return [
            Profile(
                id=_text(item.get("id")),
                name=_text(item.get("name")),
                folder_id=_text(item.get("folder")),
                is_running=bool(item.get("is_active")),
                proxy=_proxy_string(item),
                note=_text(item.get("notes")),
            )
            for item in data["profiles"]
        ]

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
            "name": name or "New Profile",
            "folder": folder_id,
            "notes": note or "",
            "proxyEnabled": bool(proxy),
            **extra,
        }
        data = await self.post("/browser", payload)
        return Profile(
            id=_text(data.get("id")),
            name=_text(data.get("name")),
            folder_id=_text(data.get("folder")),
            is_running=False,
            note=_text(data.get("notes")),
        )

    async def start_profile(self, profile_id: str, **options: Any) -> StartProfileResult:
        data = await self.get(f"/browser/{profile_id}")
        return StartProfileResult(debug_port=_text(data.get("port")), success=True)

    async def stop_profile(self, profile_id: str) -> OperationResult:
        await self.post(f"/browser/{profile_id}/close")
        return OperationResult(success=True)

    async def delete_profile(self, profile_id: str) -> OperationResult:
        await self.delete(f"/browser/{profile_id}")
        return OperationResult(success=True)
