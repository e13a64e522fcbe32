"""Thin Telegram Bot API caller for automation notifications.

Wraps ``telegram.Bot.do_api_request`` so callers can hit any Bot API
method with a pre-built payload, plus a handful of send helpers.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

from telegram import Bot, InputFile
from telegram.error import BadRequest, NetworkError, TelegramError
from tenacity import AsyncRetrying, retry_if_exception, stop_after_attempt, wait_incrementing

LOGGER = logging.getLogger(__name__)

FILE_URL = "https://api.telegram.org/file/bot{token}/{path}"

FileLike = Union[str, bytes, Path]


def _is_transient(exc: BaseException) -> bool:
    # BadRequest subclasses NetworkError
    return isinstance(exc, NetworkError) and not isinstance(exc, BadRequest)


def _is_local_file(value: str) -> bool:
    try:
        return Path(value).is_file()
    except OSError:
        return False


def _as_upload(value: FileLike, filename: Optional[str] = None) -> Union[str, InputFile]:
    """Local paths and raw bytes become uploads; URLs and file ids pass through."""
    if isinstance(value, bytes):
        return InputFile(value, filename=filename)
    if isinstance(value, Path) or _is_local_file(value):
        path = Path(value)
        return InputFile(path.read_bytes(), filename=filename or path.name)
    return str(value)


class TelegramClient:
    """Send messages and files through a Telegram bot.

    Parameters
    ----------
    token : str, optional
        Bot token, defaults to ``TELEGRAM_BOT_TOKEN``
    default_chat_id : str | int, optional
        Fallback chat, defaults to ``TELEGRAM_CHAT_ID``
    parse_mode : str
        Parse mode applied to text and captions
    disable_notification : bool
        Send silently by default
    retry_attempts : int
        Total attempts on network errors
    retry_delay : float
        Backoff step in seconds
    bot : telegram.Bot, optional
        Pre-built bot (tests pass a fake)
    """

    def __init__(
        self,
        token: Optional[str] = None,
        *,
        default_chat_id: Union[str, int, None] = None,
        parse_mode: Optional[str] = "HTML",
        disable_notification: bool = False,
        retry_attempts: int = 3,
        retry_delay: float = 1.0,
        bot: Optional[Bot] = None,
    ) -> None:
        self.token = token or os.getenv("TELEGRAM_BOT_TOKEN", "")
        if bot is None and not self.token:
            raise ValueError("Telegram bot token is required")
        self.default_chat_id = default_chat_id or os.getenv("TELEGRAM_CHAT_ID") or None
        self.parse_mode = parse_mode
        self.disable_notification = disable_notification
        self.retry_attempts = max(1, retry_attempts)
        self.retry_delay = retry_delay
        self.bot = bot or Bot(self.token)

        self.last_message_id: Optional[int] = None
        self.last_error: Optional[str] = None

    async def call(self, method: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        """Invoke Bot API ``method`` with ``payload`` as-is.

        Raises
        ------
        telegram.error.TelegramError
            When the API rejects the call or the network keeps failing
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.retry_attempts),
            wait=wait_incrementing(start=self.retry_delay, increment=self.retry_delay),
            retry=retry_if_exception(_is_transient),
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    result = await self.bot.do_api_request(method, api_kwargs=payload or {})
        except TelegramError as exc:
            self.last_error = str(exc)
            LOGGER.error("Telegram %s failed: %s", method, exc)
            raise

        self.last_error = None
        if isinstance(result, dict) and "message_id" in result:
            self.last_message_id = result["message_id"]
        return result

    def _chat(self, chat_id: Union[str, int, None]) -> Union[str, int]:
        chat = chat_id or self.default_chat_id
        if not chat:
            raise ValueError("chat_id is required (no default chat configured)")
        return chat

    def _base(self, chat_id: Union[str, int, None], **extra: Any) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"chat_id": self._chat(chat_id)}
        if self.parse_mode:
            payload["parse_mode"] = self.parse_mode
        if self.disable_notification:
            payload["disable_notification"] = True
        payload.update({key: value for key, value in extra.items() if value is not None})
        return payload

    async def send_message(self, text: str, chat_id: Union[str, int, None] = None, **options: Any) -> Any:
        return await self.call("sendMessage", self._base(chat_id, text=text, **options))

    async def send_photo(
        self,
        photo: FileLike,
        chat_id: Union[str, int, None] = None,
        *,
        caption: Optional[str] = None,
        **options: Any,
    ) -> Any:
        payload = self._base(chat_id, photo=_as_upload(photo), caption=caption, **options)
        return await self.call("sendPhoto", payload)

    async def send_document(
        self,
        document: FileLike,
        chat_id: Union[str, int, None] = None,
        *,
        caption: Optional[str] = None,
        filename: Optional[str] = None,
        **options: Any,
    ) -> Any:
        payload = self._base(chat_id, document=_as_upload(document, filename), caption=caption, **options)
        return await self.call("sendDocument", payload)

    async def send_chat_action(self, action: str = "typing", chat_id: Union[str, int, None] = None) -> Any:
        return await self.call("sendChatAction", {"chat_id": self._chat(chat_id), "action": action})

    async def edit_message_text(
        self,
        message_id: int,
        text: str,
        chat_id: Union[str, int, None] = None,
        **options: Any,
    ) -> Any:
        payload = self._base(chat_id, message_id=message_id, text=text, **options)
        payload.pop("disable_notification", None)
        return await self.call("editMessageText", payload)

    async def delete_message(self, message_id: int, chat_id: Union[str, int, None] = None) -> Any:
        return await self.call("deleteMessage", {"chat_id": self._chat(chat_id), "message_id": message_id})

    async def get_me(self) -> Any:
        return await self.call("getMe")

    async def get_file(self, file_id: str) -> Dict[str, Any]:
        info = dict(await self.call("getFile", {"file_id": file_id}))
        if info.get("file_path"):
            info["download_url"] = FILE_URL.format(token=self.token, path=info["file_path"])
        return info
