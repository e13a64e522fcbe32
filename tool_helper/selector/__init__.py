"""Element finding for Playwright pages (XPath, CSS and text selectors)."""

from .helper import ElementNotFoundError, SelectorConfig, SelectorHelper, SelectorTimeoutError
from .xpath import SelectorType, XPathBuilder, detect_selector_type, to_playwright_selector, xpath_literal

__all__ = [
    "ElementNotFoundError",
    "SelectorConfig",
    "SelectorHelper",
    "SelectorTimeoutError",
    "SelectorType",
    "XPathBuilder",
    "detect_selector_type",
    "to_playwright_selector",
    "xpath_literal",
]
