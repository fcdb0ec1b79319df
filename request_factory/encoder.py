"""Entity Encoder - turns structured values into request bodies.

A Codec serializes a dataclass or pydantic model instance to bytes and
names the media type of the result. encode_entity() wraps the bytes in a
single-read byte source and fills in Content-Type when none is set yet.
"""

from __future__ import annotations

import io
import logging
from typing import Any, Protocol

from pydantic import PydanticUserError
from pydantic_core import PydanticSerializationError, to_json, to_jsonable_python

from request_factory.errors import EncodingError, InvalidSourceError
from request_factory.multimap import HeaderMap
from request_factory.scanner import is_structured
from request_factory.xml_body import to_xml

logger = logging.getLogger(__name__)

CONTENT_TYPE = "Content-Type"


class Codec(Protocol):
    """Serializer for request entities."""

    media_type: str

    def encode(self, value: Any) -> bytes: ...


class JSONCodec:
    """Encodes dataclasses and pydantic models as JSON."""

    media_type = "application/json"

    def encode(self, value: Any) -> bytes:
        return to_json(value)


class XMLCodec:
    """Encodes dataclasses and pydantic models as XML.

    The root element is named after the value's class; fields become child
    elements (see xml_body.to_xml for the conversion rules).
    """

    media_type = "application/xml"

    def encode(self, value: Any) -> bytes:
        data = to_jsonable_python(value)
        return to_xml(type(value).__name__, data)


def encode_entity(value: Any, codec: Codec, headers: HeaderMap) -> io.BytesIO:
    """Serialize value with codec and return the bytes as a byte source.

    If headers has no Content-Type, it is set to the codec's media type; an
    existing Content-Type is left untouched. On failure neither a byte source
    is produced nor are the headers touched.

    Raises:
        InvalidSourceError: If value is not a dataclass or model instance.
        EncodingError: If the codec fails to serialize value.
    """
    if not is_structured(value):
        raise InvalidSourceError(
            f"Only dataclass or pydantic model instances can be encoded as "
            f"{codec.media_type} entities, got {type(value).__name__}"
        )

    try:
        data = codec.encode(value)
    except (PydanticSerializationError, PydanticUserError, ValueError, TypeError) as e:
        raise EncodingError(
            f"Failed to encode {type(value).__name__} as {codec.media_type}: {e}"
        ) from e

    if not headers.first(CONTENT_TYPE):
        headers.replace(CONTENT_TYPE, codec.media_type)
    logger.debug("Encoded %s entity (%d bytes)", codec.media_type, len(data))

    return io.BytesIO(data)
