import re

import pytest

from tool_helper.tracking.matcher import (
    PredicateMatch,
    RegexMatch,
    StringMatch,
    UrlMatcher,
    matches,
    to_pattern,
)

URLS = [
    "https://x/api/a",
    "https://example.com/api/items?page=2",
    "http://cdn.example.com/static/app.js",
    "",
]


@pytest.mark.parametrize("url", URLS)
@pytest.mark.parametrize("needle", ["/api/", "example", "app.js", "", "missing"])
def test_substring_match_equals_containment(url, needle):
    assert matches(url, needle) == (needle in url)


@pytest.mark.parametrize("url", URLS)
def test_regex_match_uses_search(url):
    pattern = re.compile(r"/api/\w+")
    assert matches(url, pattern) == (pattern.search(url) is not None)


def test_predicate_only_false_rejects():
    assert matches("https://x/a", lambda url: False) is False
    assert matches("https://x/a", lambda url: None) is True
    assert matches("https://x/a", lambda url: 0) is True
    assert matches("https://x/a", lambda url: "yes") is True


def test_method_filter_is_case_insensitive():
    assert matches("https://x/a", "/a", method="post", method_filter="POST")
    assert not matches("https://x/a", "/a", method="GET", method_filter="POST")


def test_method_filter_without_method_fails():
    assert not matches("https://x/a", "/a", method=None, method_filter="GET")


def test_to_pattern_tags_input_once():
    regex = re.compile("a")
    assert to_pattern("a") == StringMatch("a")
    assert to_pattern(regex) == RegexMatch(regex)
    assert isinstance(to_pattern(lambda url: True), PredicateMatch)
    tagged = StringMatch("b")
    assert to_pattern(tagged) is tagged


def test_to_pattern_rejects_unsupported_values():
    with pytest.raises(TypeError):
        to_pattern(42)


def test_url_matcher_describe():
    assert UrlMatcher.build("/api", "post").describe() == "POST '/api'"
    assert UrlMatcher.build(re.compile(r"\d+")).describe() == r"/\d+/"


def test_predicate_errors_propagate_from_matches():
    def broken(url):
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        matches("https://x", broken)
