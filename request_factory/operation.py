"""Operation modes governing how header and query mutations are applied.

The factory holds one Operation at a time. The mode is sticky: it stays in
effect for every following header/query call until another mode is selected.
"""

from __future__ import annotations

from enum import Enum

from request_factory.multimap import MultiMap


class Operation(str, Enum):
    """How the next header/query calls mutate a store."""

    APPEND = "append"  # Add values to the key's existing list (default)
    REPLACE = "replace"  # Discard the key's values, then add the given ones
    DELETE = "delete"  # Remove the literal key; values are ignored
    REMOVE_MATCHING = "remove_matching"  # Key is a regex; remove every matching key


def apply_operation(
    store: MultiMap,
    operation: Operation,
    key: str,
    values: tuple[str, ...],
) -> None:
    """Mutate store according to operation.

    Raises:
        PatternError: In REMOVE_MATCHING mode, if key is not a valid regex.
    """
    if operation is Operation.APPEND:
        store.add(key, *values)
    elif operation is Operation.REPLACE:
        store.replace(key, *values)
    elif operation is Operation.DELETE:
        store.delete_key(key)
    elif operation is Operation.REMOVE_MATCHING:
        store.delete_matching(key)
    else:
        raise ValueError(f"Unknown operation: {operation!r}")
