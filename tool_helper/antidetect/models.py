"""Pydantic models shared by the antidetect adapters."""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class Folder(BaseModel):
    id: str
    name: str = ""


class Profile(BaseModel):
    id: str
    name: str = ""
    folder_id: str = ""
    is_running: bool = False
    proxy: str = ""
    note: str = ""


class StartProfileResult(BaseModel):
    debug_port: str
    success: bool = True
    hwnd: Optional[str] = None  # XLogin only


class OperationResult(BaseModel):
    success: bool = True
