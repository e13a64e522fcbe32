"""Element finder and interaction helper for Playwright pages.

Accepts XPath (``//div``), text (``text=Login``) and CSS selectors
through one interface.
"""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, replace
from typing import Any, List, Optional

from playwright.async_api import ElementHandle, Page
from playwright.async_api import Error as PlaywrightError
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_fixed

from .xpath import to_playwright_selector

LOGGER = logging.getLogger(__name__)

STABLE_POLL = 0.05


class SelectorTimeoutError(TimeoutError):
    """An element did not appear (or disappear) in time."""

    def __init__(self, message: str, selector: str) -> None:
        super().__init__(message)
        self.selector = selector


class ElementNotFoundError(LookupError):
    """No element matched a selector that had to match now."""

    def __init__(self, message: str, selector: str) -> None:
        super().__init__(message)
        self.selector = selector


@dataclass
class SelectorConfig:
    """Defaults for ``SelectorHelper``; times are milliseconds."""

    default_timeout: float = 30000
    retry_attempts: int = 3
    retry_delay: float = 1000
    scroll_into_view: bool = True
    wait_for_stable: bool = True
    stable_duration: float = 500


class SelectorHelper:
    """Find and interact with elements on one page.

    Parameters
    ----------
    page : playwright.async_api.Page
        Page to search
    config : SelectorConfig, optional
        Timeouts and retry behaviour
    """

    def __init__(self, page: Page, config: Optional[SelectorConfig] = None, **overrides: Any) -> None:
        base = config or SelectorConfig()
        self.page = page
        self.config = replace(base, **overrides) if overrides else base

    async def find(self, selector: str) -> Optional[ElementHandle]:
        """First matching element, or None. Does not wait."""
        return await self.page.query_selector(to_playwright_selector(selector))

    async def find_all(self, selector: str) -> List[ElementHandle]:
        return await self.page.query_selector_all(to_playwright_selector(selector))

    async def wait_for(self, selector: str, timeout: Optional[float] = None) -> ElementHandle:
        """Poll until ``selector`` matches, then wait for its position to settle.

        Raises
        ------
        SelectorTimeoutError
            If nothing matched within ``timeout`` ms
        """
        limit = self._timeout(timeout)
        deadline = time.monotonic() + limit / 1000
        while True:
            element = await self.find(selector)
            if element is not None:
                if self.config.wait_for_stable:
                    await self._wait_for_stable(element)
                return element
            if time.monotonic() >= deadline:
                raise SelectorTimeoutError(f"Timeout waiting for selector: {selector} ({limit}ms)", selector)
            await asyncio.sleep(self.config.retry_delay / 1000)

    async def wait_for_disappear(self, selector: str, timeout: Optional[float] = None) -> bool:
        limit = self._timeout(timeout)
        deadline = time.monotonic() + limit / 1000
        while True:
            if await self.find(selector) is None:
                return True
            if time.monotonic() >= deadline:
                raise SelectorTimeoutError(f"Element still present after timeout: {selector}", selector)
            await asyncio.sleep(self.config.retry_delay / 1000)

    async def click(self, selector: str, timeout: Optional[float] = None, **click_options: Any) -> bool:
        element = await self._ready(selector, timeout)

        retrying = AsyncRetrying(
            stop=stop_after_attempt(max(1, self.config.retry_attempts)),
            wait=wait_fixed(self.config.retry_delay / 1000),
            retry=retry_if_exception_type(PlaywrightError),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                await element.click(**click_options)
        LOGGER.debug("Clicked %s", selector)
        return True

    async def type(
        self,
        selector: str,
        text: str,
        *,
        clear: bool = True,
        delay: float = 50,
        timeout: Optional[float] = None,
    ) -> bool:
        """Type ``text`` key by key (``delay`` ms apart), clearing the field first."""
        element = await self._ready(selector, timeout)
        if clear:
            await element.fill("")
        await element.type(text, delay=delay)
        return True

    async def double_click(self, selector: str, timeout: Optional[float] = None) -> bool:
        element = await self._ready(selector, timeout)
        await element.dblclick()
        return True

    async def right_click(self, selector: str, timeout: Optional[float] = None) -> bool:
        element = await self._ready(selector, timeout)
        await element.click(button="right")
        return True

    async def hover(self, selector: str, timeout: Optional[float] = None) -> bool:
        element = await self._ready(selector, timeout)
        await element.hover()
        return True

    async def check(self, selector: str, checked: bool = True, timeout: Optional[float] = None) -> bool:
        """Click a checkbox or radio only if its state differs from ``checked``."""
        element = await self._ready(selector, timeout)
        if await element.is_checked() != checked:
            await element.click()
        return True

    async def select(self, selector: str, value: str, timeout: Optional[float] = None) -> List[str]:
        """Pick the option of a ``<select>`` whose value or label is ``value``.

        Returns
        -------
        list of str
            Values that ended up selected
        """
        element = await self.wait_for(selector, timeout)
        return await element.select_option(value)

    async def focus(self, selector: str) -> bool:
        element = await self._require(selector)
        await element.focus()
        return True

    async def scroll_to(self, selector: str) -> bool:
        element = await self._require(selector)
        await element.scroll_into_view_if_needed()
        return True

    async def get_text(self, selector: str, *, strip: bool = False) -> Optional[str]:
        element = await self.find(selector)
        if element is None:
            return None
        text = await element.evaluate("el => el.innerText || el.textContent")
        if text is not None and strip:
            return text.strip()
        return text

    async def get_attribute(self, selector: str, name: str) -> Optional[str]:
        element = await self.find(selector)
        if element is None:
            return None
        return await element.get_attribute(name)

    async def get_value(self, selector: str) -> Optional[str]:
        """Current value of an input, textarea or select; None if absent."""
        element = await self.find(selector)
        if element is None:
            return None
        return await element.input_value()

    async def is_visible(self, selector: str) -> bool:
        element = await self.find(selector)
        return element is not None and await element.is_visible()

    async def is_enabled(self, selector: str) -> bool:
        element = await self.find(selector)
        return element is not None and await element.is_enabled()

    async def is_checked(self, selector: str) -> bool:
        element = await self.find(selector)
        return element is not None and await element.is_checked()

    async def exists(self, selector: str) -> bool:
        return await self.find(selector) is not None

    async def count(self, selector: str) -> int:
        return len(await self.find_all(selector))

    async def _ready(self, selector: str, timeout: Optional[float]) -> ElementHandle:
        element = await self.wait_for(selector, timeout)
        if self.config.scroll_into_view:
            await element.scroll_into_view_if_needed()
        return element

    async def _require(self, selector: str) -> ElementHandle:
        element = await self.find(selector)
        if element is None:
            raise ElementNotFoundError(f"Element not found: {selector}", selector)
        return element

    def _timeout(self, timeout: Optional[float]) -> float:
        return self.config.default_timeout if timeout is None else timeout

    async def _wait_for_stable(self, element: ElementHandle) -> None:
        """Return once two consecutive bounding boxes agree, or after ``stable_duration``."""
        last_box = await element.bounding_box()
        deadline = time.monotonic() + self.config.stable_duration / 1000
        while time.monotonic() < deadline:
            await asyncio.sleep(STABLE_POLL)
            box = await element.bounding_box()
            if box is None or last_box is None:
                return
            if box["x"] == last_box["x"] and box["y"] == last_box["y"]:
                return
            last_box = box
