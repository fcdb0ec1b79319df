"""Tag Scanner - harvests tagged fields of structured values.

A structured value is a dataclass instance or a pydantic model instance.
A field is tagged for a given tag name when its metadata maps that name to a
payload string:

    @dataclass
    class Search:
        term: str = field(metadata={"query": "q"})
        page: int = field(default=1, metadata={"query": "page"})

    class Search(BaseModel):
        term: str = Field(json_schema_extra={"query": "q"})

scan("query", Search(term="cats")) returns {"q": ["cats"], "page": [1]}.
Fields holding another structured value are walked recursively whatever
their own metadata says, and their results are merged in traversal order.
Inherited fields are part of a class's field list, so base classes behave
like embedded structures.
"""

from __future__ import annotations

import dataclasses
from typing import Any, Iterator, Mapping

from pydantic import BaseModel

from request_factory.errors import InvalidSourceError, TagConfigurationError


def is_structured(value: Any) -> bool:
    """True for dataclass and pydantic model instances (not their classes)."""
    if isinstance(value, BaseModel):
        return True
    return dataclasses.is_dataclass(value) and not isinstance(value, type)


def _tagged_fields(source: Any, tag: str) -> Iterator[tuple[str, str | None, Any]]:
    """Yield (field name, tag payload or None, value) for each field of source."""
    if isinstance(source, BaseModel):
        for name, info in type(source).model_fields.items():
            extra = info.json_schema_extra
            metadata = extra if isinstance(extra, dict) else {}
            yield name, _payload(metadata, tag), getattr(source, name)
    else:
        for f in dataclasses.fields(source):
            yield f.name, _payload(f.metadata, tag), getattr(source, f.name)


def _payload(metadata: Mapping[str, Any], tag: str) -> str | None:
    if tag not in metadata:
        return None
    payload = metadata[tag]
    return "" if payload is None else str(payload)


def scan(tag: str, source: Any) -> dict[str, list[Any]]:
    """Collect the values of every field tagged with tag, keyed by payload.

    Args:
        tag: Metadata key selecting the fields to extract (e.g. "query").
        source: Dataclass or pydantic model instance.

    Returns:
        Mapping of tag payload -> field values in traversal order. Values are
        returned as stored on the instance, without conversion.

    Raises:
        TagConfigurationError: If tag is empty, or a field declares the tag
            with an empty payload.
        InvalidSourceError: If source is not a structured value, or a
            structured value refers back to one of its enclosing values.
    """
    if not tag:
        raise TagConfigurationError("A non-empty tag name is required for field extraction")
    if not is_structured(source):
        raise InvalidSourceError(
            f"Only dataclass or pydantic model instances can be scanned, "
            f"got {type(source).__name__}"
        )
    return _scan(tag, source, set())


def _scan(tag: str, source: Any, walking: set[int]) -> dict[str, list[Any]]:
    # walking holds the ids of the structures enclosing source
    walking.add(id(source))
    result: dict[str, list[Any]] = {}
    for name, payload, value in _tagged_fields(source, tag):
        if is_structured(value):
            if id(value) in walking:
                raise InvalidSourceError(
                    f"Field '{type(source).__name__}.{name}' refers back to an "
                    f"enclosing {type(value).__name__}; cyclic structures cannot be scanned"
                )
            for key, values in _scan(tag, value, walking).items():
                result.setdefault(key, []).extend(values)
        elif payload is not None:
            if not payload:
                raise TagConfigurationError(
                    f"Field '{type(source).__name__}.{name}' declares tag '{tag}' "
                    f"with an empty payload"
                )
            result.setdefault(payload, []).append(value)
    walking.discard(id(source))
    return result


def stringify(value: Any) -> list[str]:
    """Render one scanned field value as zero or more query strings.

    None contributes nothing, booleans are lower-cased, and lists and tuples
    contribute one string per element.
    """
    if value is None:
        return []
    if isinstance(value, bool):
        return ["true" if value else "false"]
    if isinstance(value, (list, tuple)):
        out: list[str] = []
        for item in value:
            out.extend(stringify(item))
        return out
    return [str(value)]


def query_values(scanned: Mapping[str, list[Any]]) -> dict[str, list[str]]:
    """Convert scan() output to string values ready for a query store."""
    return {
        key: [text for value in values for text in stringify(value)]
        for key, values in scanned.items()
    }
