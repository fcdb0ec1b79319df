"""Ordered multimap stores for headers and query parameters.

A key maps to an ordered list of string values. Keys are unique; a key holds
zero or more values kept in insertion order. HeaderMap canonicalizes keys the
way HTTP header names are conventionally written (``content-type`` becomes
``Content-Type``), so two keys differing only in case are the same entry.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, Iterator

from request_factory.errors import PatternError

logger = logging.getLogger(__name__)

# RFC 7230 token characters; keys with anything else are left as given.
_TOKEN_CHARS = frozenset(
    "!#$%&'*+-.^_`|~0123456789"
    "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"
)


def canonical_header_key(key: str) -> str:
    """Return the canonical form of a header name.

    The first letter and any letter following a hyphen are upper-cased, the
    rest lower-cased. Keys containing spaces or other non-token characters
    are returned unchanged.
    """
    if not key or any(ch not in _TOKEN_CHARS for ch in key):
        return key
    return "-".join(part[:1].upper() + part[1:].lower() for part in key.split("-"))


class MultiMap:
    """Case-sensitive key -> ordered list of values."""

    def __init__(self, initial: dict[str, Iterable[str]] | None = None) -> None:
        self._data: dict[str, list[str]] = {}
        if initial:
            for key, values in initial.items():
                self.add(key, *values)

    def _key(self, key: str) -> str:
        return key

    def add(self, key: str, *values: str) -> None:
        """Append values to the key, creating it if absent."""
        if not values:
            return
        self._data.setdefault(self._key(key), []).extend(values)

    def replace(self, key: str, *values: str) -> None:
        """Discard the key's values and store the given ones instead.

        With no values the key is removed entirely.
        """
        self.delete_key(key)
        self.add(key, *values)

    def delete_key(self, key: str) -> None:
        self._data.pop(self._key(key), None)

    def delete_matching(self, pattern: str) -> list[str]:
        """Remove every key matching the regular expression.

        The pattern is searched (not anchored) against each key. Matches are
        collected over a snapshot of the keys and removed afterwards.

        Returns:
            The removed keys, in store order.

        Raises:
            PatternError: If pattern is not a valid regular expression. The
                store is left unchanged.
        """
        try:
            regex = re.compile(pattern)
        except re.error as e:
            raise PatternError(f"Invalid key pattern '{pattern}': {e}") from e

        doomed = [key for key in list(self._data) if regex.search(key)]
        for key in doomed:
            del self._data[key]
        if doomed:
            logger.debug("Removed keys matching %r: %s", pattern, ", ".join(doomed))
        return doomed

    def get(self, key: str) -> list[str]:
        """Return a copy of the key's values (empty if absent)."""
        return list(self._data.get(self._key(key), []))

    def first(self, key: str) -> str:
        """Return the key's first value, or an empty string."""
        values = self._data.get(self._key(key))
        return values[0] if values else ""

    def keys(self) -> list[str]:
        return list(self._data)

    def items(self) -> list[tuple[str, list[str]]]:
        return [(key, list(values)) for key, values in self._data.items()]

    def multi_items(self) -> list[tuple[str, str]]:
        """Flatten to (key, value) pairs, one per value."""
        return [(key, value) for key, values in self._data.items() for value in values]

    def to_dict(self) -> dict[str, list[str]]:
        return {key: list(values) for key, values in self._data.items()}

    def copy(self) -> "MultiMap":
        clone = type(self)()
        clone._data = self.to_dict()
        return clone

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self._key(key) in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._data))

    def __len__(self) -> int:
        return len(self._data)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MultiMap):
            return NotImplemented
        return type(self) is type(other) and self._data == other._data

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._data!r})"


class HeaderMap(MultiMap):
    """MultiMap whose keys are canonical header names."""

    def _key(self, key: str) -> str:
        return canonical_header_key(key)
