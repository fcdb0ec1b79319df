"""Error taxonomy for request_factory.

Every error raised by the factory is recoverable and derives from
FactoryError, so callers can catch the whole family at once.
"""

from __future__ import annotations


class FactoryError(Exception):
    """Base class for request factory errors."""


class AddressParseError(FactoryError):
    """Raised when a base address or path reference cannot be parsed."""


class PatternError(FactoryError):
    """Raised when a key pattern in Remove mode is not a valid regular expression."""


class InvalidSourceError(FactoryError):
    """Raised when a non-structured value is passed to the scanner or encoder."""


class TagConfigurationError(FactoryError):
    """Raised when a tag name or tag payload is empty."""


class EncodingError(FactoryError):
    """Raised when a codec fails to serialize an entity."""
