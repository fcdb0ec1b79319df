"""Tests for the ordered multimap stores.

Tests cover:
- Header key canonicalization
- add/replace/delete_key/delete_matching semantics
- Copy independence
"""

import pytest

from request_factory.errors import PatternError
from request_factory.multimap import HeaderMap, MultiMap, canonical_header_key


class TestCanonicalHeaderKey:
    """canonical_header_key normalizes the case of header names."""

    def test_lowercase_key(self) -> None:
        assert canonical_header_key("content-type") == "Content-Type"

    def test_uppercase_key(self) -> None:
        assert canonical_header_key("X-REQUEST-ID") == "X-Request-Id"

    def test_already_canonical(self) -> None:
        assert canonical_header_key("Accept") == "Accept"

    def test_key_with_space_unchanged(self) -> None:
        """Non-token characters disable canonicalization."""
        assert canonical_header_key("bad key") == "bad key"

    def test_empty_key_unchanged(self) -> None:
        assert canonical_header_key("") == ""


class TestMultiMap:
    """Case-sensitive store behavior."""

    def test_add_preserves_insertion_order(self) -> None:
        store = MultiMap()
        store.add("tag", "a", "b")
        store.add("tag", "c")
        assert store.get("tag") == ["a", "b", "c"]

    def test_add_without_values_does_not_create_key(self) -> None:
        store = MultiMap()
        store.add("tag")
        assert "tag" not in store

    def test_keys_are_case_sensitive(self) -> None:
        store = MultiMap()
        store.add("Tag", "a")
        store.add("tag", "b")
        assert store.keys() == ["Tag", "tag"]

    def test_replace_discards_previous_values(self) -> None:
        store = MultiMap({"tag": ["a", "b"]})
        store.replace("tag", "c")
        assert store.get("tag") == ["c"]

    def test_replace_without_values_removes_key(self) -> None:
        store = MultiMap({"tag": ["a"]})
        store.replace("tag")
        assert "tag" not in store

    def test_delete_key(self) -> None:
        store = MultiMap({"a": ["1"], "b": ["2"]})
        store.delete_key("a")
        assert store.keys() == ["b"]

    def test_delete_missing_key_is_noop(self) -> None:
        store = MultiMap({"a": ["1"]})
        store.delete_key("zzz")
        assert store.to_dict() == {"a": ["1"]}

    def test_get_returns_copy(self) -> None:
        store = MultiMap({"a": ["1"]})
        store.get("a").append("2")
        assert store.get("a") == ["1"]

    def test_get_missing_key_is_empty(self) -> None:
        assert MultiMap().get("nope") == []

    def test_first(self) -> None:
        store = MultiMap({"a": ["1", "2"]})
        assert store.first("a") == "1"
        assert store.first("b") == ""

    def test_multi_items_flattens(self) -> None:
        store = MultiMap({"a": ["1", "2"], "b": ["3"]})
        assert store.multi_items() == [("a", "1"), ("a", "2"), ("b", "3")]


class TestDeleteMatching:
    """Regex removal of keys."""

    def test_removes_matching_keys_only(self) -> None:
        store = MultiMap({"x-a": ["1"], "x-b": ["2"], "y": ["3"]})
        removed = store.delete_matching("^x-")
        assert removed == ["x-a", "x-b"]
        assert store.to_dict() == {"y": ["3"]}

    def test_pattern_is_searched_not_anchored(self) -> None:
        store = MultiMap({"page_size": ["1"], "size": ["2"], "page": ["3"]})
        store.delete_matching("size")
        assert store.keys() == ["page"]

    def test_no_match_leaves_store_unchanged(self) -> None:
        store = MultiMap({"a": ["1"]})
        assert store.delete_matching("^z") == []
        assert store.to_dict() == {"a": ["1"]}

    def test_invalid_pattern_raises_and_leaves_store_unchanged(self) -> None:
        store = MultiMap({"a": ["1"], "b": ["2"]})
        with pytest.raises(PatternError, match="Invalid key pattern"):
            store.delete_matching("(")
        assert store.to_dict() == {"a": ["1"], "b": ["2"]}

    def test_header_patterns_match_canonical_keys(self) -> None:
        headers = HeaderMap({"x-trace-id": ["1"], "accept": ["*/*"]})
        headers.delete_matching("^X-")
        assert headers.keys() == ["Accept"]


class TestHeaderMap:
    """Case-insensitive header store."""

    def test_keys_differing_in_case_are_one_entry(self) -> None:
        headers = HeaderMap()
        headers.add("accept", "text/html")
        headers.add("ACCEPT", "application/json")
        assert headers.keys() == ["Accept"]
        assert headers.get("Accept") == ["text/html", "application/json"]

    def test_lookup_is_case_insensitive(self) -> None:
        headers = HeaderMap({"Content-Type": ["text/plain"]})
        assert "content-type" in headers
        assert headers.first("CONTENT-TYPE") == "text/plain"

    def test_delete_is_case_insensitive(self) -> None:
        headers = HeaderMap({"Content-Type": ["text/plain"]})
        headers.delete_key("content-type")
        assert len(headers) == 0


class TestCopy:
    """copy() produces an independent store of the same type."""

    def test_copy_is_independent(self) -> None:
        original = MultiMap({"a": ["1"]})
        clone = original.copy()
        clone.add("a", "2")
        clone.add("b", "3")
        assert original.to_dict() == {"a": ["1"]}

    def test_copy_keeps_type(self) -> None:
        clone = HeaderMap({"accept": ["*/*"]}).copy()
        assert isinstance(clone, HeaderMap)
        clone.add("ACCEPT", "text/html")
        assert clone.get("Accept") == ["*/*", "text/html"]

    def test_equality(self) -> None:
        assert MultiMap({"a": ["1"]}) == MultiMap({"a": ["1"]})
        assert MultiMap({"a": ["1"]}) != HeaderMap({"a": ["1"]})
