from __future__ import annotations

from core.blocklist import extract_fragment
from core.models import IntegerId, Post, StringId, TrailEntry, resolve_item_id


def _post(trail: tuple[TrailEntry, ...] = ()) -> Post:
    return Post(type="photo", id=IntegerId(987654321), timestamp=1, short_url="u", trail=trail)


def test_resolve_item_id_prefers_string_form() -> None:
    assert resolve_item_id(42, "42-str") == StringId("42-str")
    assert resolve_item_id("abc") == StringId("abc")
    assert resolve_item_id(42) == IntegerId(42)


def test_resolve_item_id_treats_empty_values_as_absent() -> None:
    assert resolve_item_id(None) is None
    assert resolve_item_id("") is None
    assert resolve_item_id(0) is None
    assert resolve_item_id(True) is None
    assert resolve_item_id(0, "") is None


def test_resolve_item_id_accepts_integral_floats() -> None:
    assert resolve_item_id(12345.0) == IntegerId(12345)


def test_canonical_id_defaults_to_own_id() -> None:
    assert _post().canonical_id == "987654321"


def test_canonical_id_prefers_first_trail_entry() -> None:
    post = _post(trail=(TrailEntry(StringId("12345")), TrailEntry(StringId("555"))))
    assert post.canonical_id == "12345"


def test_canonical_id_falls_back_when_trail_has_no_id() -> None:
    post = _post(trail=(TrailEntry(None),))
    assert post.canonical_id == "987654321"


def test_extract_fragment_uses_fourth_segment() -> None:
    assert extract_fragment("https://64.media.tumblr.com/abcfrag/s640x960/x.jpg") == "abcfrag"
    assert extract_fragment(".../abcfrag/...") is None
    assert extract_fragment("a/b/c/abcfrag") == "abcfrag"
    assert extract_fragment("https://tmblr.co") is None
