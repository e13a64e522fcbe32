"""Selector type detection and a fluent XPath builder."""
from __future__ import annotations

from enum import Enum
from typing import List, Optional

TEXT_PREFIXES = ("text=", "text:")


class SelectorType(str, Enum):
    XPATH = "xpath"
    TEXT = "text"
    CSS = "css"


def detect_selector_type(selector: str) -> SelectorType:
    """``//``/``(//`` -> XPath, ``text=``/``text:`` -> text, anything else -> CSS."""
    if selector.startswith("//") or selector.startswith("(//"):
        return SelectorType.XPATH
    if selector.startswith(TEXT_PREFIXES):
        return SelectorType.TEXT
    return SelectorType.CSS


def xpath_literal(value: str) -> str:
    """Quote ``value`` as an XPath string literal."""
    if "'" not in value:
        return f"'{value}'"
    if '"' not in value:
        return f'"{value}"'
    parts = value.split("'")
    return "concat(" + ", \"'\", ".join(f"'{part}'" for part in parts) + ")"


def text_to_xpath(selector: str) -> str:
    text = selector
    for prefix in TEXT_PREFIXES:
        if text.startswith(prefix):
            text = text[len(prefix):]
            break
    return f"//*[contains(text(), {xpath_literal(text)})]"


def to_playwright_selector(selector: str) -> str:
    """Translate a helper selector into Playwright selector syntax.

    >>> to_playwright_selector("text=Login")
    "xpath=//*[contains(text(), 'Login')]"
    """
    kind = detect_selector_type(selector)
    if kind is SelectorType.XPATH:
        return f"xpath={selector}"
    if kind is SelectorType.TEXT:
        return f"xpath={text_to_xpath(selector)}"
    return selector


class XPathBuilder:
    """Chainable XPath construction.

    Examples
    --------
    >>> XPathBuilder().root().tag("div").class_("item").child("a").first().build()
    "//div[contains(@class, 'item')]/a[1]"
    """

    def __init__(self) -> None:
        self.parts: List[str] = []

    def _push(self, part: str) -> XPathBuilder:
        self.parts.append(part)
        return self

    def root(self) -> XPathBuilder:
        self.parts = ["//"]
        return self

    def any(self) -> XPathBuilder:
        return self._push("*")

    def tag(self, name: str) -> XPathBuilder:
        return self._push(name)

    def id(self, value: str) -> XPathBuilder:
        return self._push(f"[@id={xpath_literal(value)}]")

    def class_(self, name: str) -> XPathBuilder:
        return self._push(f"[contains(@class, {xpath_literal(name)})]")

    def attr(self, name: str, value: Optional[str] = None) -> XPathBuilder:
        if value:
            return self._push(f"[@{name}={xpath_literal(value)}]")
        return self._push(f"[@{name}]")

    def text(self, value: str) -> XPathBuilder:
        return self._push(f"[contains(text(), {xpath_literal(value)})]")

    def text_exact(self, value: str) -> XPathBuilder:
        return self._push(f"[text()={xpath_literal(value)}]")

    def child(self, tag: Optional[str] = None) -> XPathBuilder:
        return self._push(f"/{tag or '*'}")

    def descendant(self, tag: Optional[str] = None) -> XPathBuilder:
        return self._push(f"//{tag or '*'}")

    def parent(self) -> XPathBuilder:
        return self._push("/..")

    def following_sibling(self, tag: Optional[str] = None) -> XPathBuilder:
        return self._push(f"/following-sibling::{tag or '*'}")

    def preceding_sibling(self, tag: Optional[str] = None) -> XPathBuilder:
        return self._push(f"/preceding-sibling::{tag or '*'}")

    def index(self, idx: int) -> XPathBuilder:
        """1-based, as in XPath."""
        return self._push(f"[{idx}]")

    def position(self, pos: int) -> XPathBuilder:
        return self._push(f"[position()={pos}]")

    def last(self) -> XPathBuilder:
        return self._push("[last()]")

    def first(self) -> XPathBuilder:
        return self._push("[1]")

    def contains_attr(self, name: str, value: str) -> XPathBuilder:
        return self._push(f"[contains(@{name}, {xpath_literal(value)})]")

    def starts_with(self, name: str, value: str) -> XPathBuilder:
        return self._push(f"[starts-with(@{name}, {xpath_literal(value)})]")

    def and_(self) -> XPathBuilder:
        return self._push(" and ")

    def or_(self) -> XPathBuilder:
        return self._push(" or ")

    def build(self) -> str:
        return "".join(self.parts)

    def __str__(self) -> str:
        return self.build()
