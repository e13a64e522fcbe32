"""URL matching used by finders, waiters and interception handlers.

A caller may pass a plain string (substring test), a compiled regular
expression (``search`` against the full URL) or a callable receiving the
URL. The value is converted once into one of the tagged pattern types below
and every later test dispatches on that tag.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Optional, Pattern, Union


@dataclass(frozen=True)
class StringMatch:
    """Substring containment."""

    value: str

    def describe(self) -> str:
        return repr(self.value)


@dataclass(frozen=True)
class RegexMatch:
    """Regular expression searched anywhere in the URL."""

    pattern: Pattern[str]

    def describe(self) -> str:
        return f"/{self.pattern.pattern}/"


@dataclass(frozen=True)
class PredicateMatch:
    """Caller supplied function of the URL.

    Only an explicit ``False`` rejects the URL. Any other return value,
    ``None`` included, counts as a match.
    """

    func: Callable[[str], Any]

    def describe(self) -> str:
        name = getattr(self.func, "__qualname__", None) or repr(self.func)
        return f"<predicate {name}>"


UrlPattern = Union[StringMatch, RegexMatch, PredicateMatch]
PatternLike = Union[str, Pattern[str], Callable[[str], Any], StringMatch, RegexMatch, PredicateMatch]


def to_pattern(value: PatternLike) -> UrlPattern:
    """Convert caller input into a tagged pattern."""
    if isinstance(value, (StringMatch, RegexMatch, PredicateMatch)):
        return value
    if isinstance(value, str):
        return StringMatch(value)
    if isinstance(value, re.Pattern):
        return RegexMatch(value)
    if callable(value):
        return PredicateMatch(value)
    raise TypeError(f"Unsupported URL matcher: {value!r}")


def matches(
    url: str,
    pattern: PatternLike,
    method: Optional[str] = None,
    method_filter: Optional[str] = None,
) -> bool:
    """Return True when ``url`` (and ``method``, if filtered) satisfy the pattern.

    Parameters
    ----------
    url : str
        Candidate URL
    pattern : str | re.Pattern | callable | UrlPattern
        What to look for
    method : str, optional
        HTTP method of the candidate record
    method_filter : str, optional
        Required method, compared case-insensitively

    Returns
    -------
    bool
        Whether the candidate qualifies
    """
    if method_filter is not None:
        if method is None or method.upper() != method_filter.upper():
            return False

    tagged = to_pattern(pattern)
    if isinstance(tagged, StringMatch):
        return tagged.value in url
    if isinstance(tagged, RegexMatch):
        return tagged.pattern.search(url) is not None
    return tagged.func(url) is not False


@dataclass(frozen=True)
class UrlMatcher:
    """A pattern bound to an optional method filter."""

    pattern: UrlPattern
    method: Optional[str] = None

    @classmethod
    def build(cls, value: PatternLike, method: Optional[str] = None) -> UrlMatcher:
        return cls(to_pattern(value), method)

    def accepts(self, url: str, method: Optional[str] = None) -> bool:
        return matches(url, self.pattern, method, self.method)

    def describe(self) -> str:
        if self.method:
            return f"{self.method.upper()} {self.pattern.describe()}"
        return self.pattern.describe()
