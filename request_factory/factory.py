"""Factory - fluent builder for HTTP requests.

A Factory accumulates a method, a base URL, headers, query parameters and an
optional body, then assembles them into an immutable PreparedRequest:

    request = (
        new("GET", "https://api.example.com/")
        .path("v1/items")
        .query_parameter("limit", "10")
        .set().header("Accept", "application/json")
        .make()
    )

Header and query calls are governed by a sticky operation mode selected
with add(), set(), drop() or remove(). The mode stays in effect for every
following header()/query_parameter() call until another mode is selected:

    f.set().header("Accept", "text/html").query_parameter("page", "2")

replaces both Accept and page. Append is the initial mode.

Child factories created with Factory.new() get independent copies of the
header and query stores; the body source is shared with the parent. A
Factory is not safe for concurrent mutation without external locking.
"""

from __future__ import annotations

import io
import logging
from typing import Any, BinaryIO, Mapping

from request_factory.assembler import assemble, resolve_path
from request_factory.encoder import CONTENT_TYPE, JSONCodec, XMLCodec, encode_entity
from request_factory.models import PreparedRequest
from request_factory.multimap import HeaderMap, MultiMap
from request_factory.operation import Operation, apply_operation
from request_factory.scanner import is_structured, query_values, scan, stringify

logger = logging.getLogger(__name__)

USER_AGENT = "User-Agent"
DEFAULT_TAG = "query"


class Factory:
    """HTTP request factory.

    Usage:
        factory = Factory("GET", "https://api.example.com/")
        factory.add().query_parameter("tag", "a", "b")
        request = factory.make()

    Every configuration method returns the factory itself, except
    with_json_entity()/with_xml_entity() which return the encoded byte
    source. Assembly does not consume factory state; the same factory can
    be assembled again after further changes.
    """

    def __init__(self, method: str = "GET", base_url: str = "") -> None:
        self._method = "GET"
        self._base_url = base_url
        self._operation = Operation.APPEND
        self._headers = HeaderMap()
        self._parameters = MultiMap()
        self._body: Any = None
        self.method(method)

    def __repr__(self) -> str:
        return f"Factory({self._method!r}, {self._base_url!r}, mode={self._operation.value})"

    # -------------------------------------------------------------------------
    # Read-only views
    # -------------------------------------------------------------------------

    @property
    def http_method(self) -> str:
        return self._method

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def mode(self) -> Operation:
        """The operation applied by the next header/query call."""
        return self._operation

    @property
    def headers(self) -> HeaderMap:
        return self._headers

    @property
    def query(self) -> MultiMap:
        return self._parameters

    @property
    def body(self) -> Any:
        return self._body

    # -------------------------------------------------------------------------
    # Cloning, method and URL
    # -------------------------------------------------------------------------

    def new(self, method: str | None = None, base_url: str | None = None) -> "Factory":
        """Create a child factory, optionally overriding method and/or base URL.

        None or an empty string keeps the parent's value. The child gets its
        own copies of the header and query stores, so changes to one never
        show up in the other. The body source is shared. The child starts in
        Append mode.
        """
        clone = Factory(self._method, self._base_url)
        clone._headers = self._headers.copy()
        clone._parameters = self._parameters.copy()
        clone._body = self._body
        if method:
            clone.method(method)
        if base_url:
            clone._base_url = base_url
        return clone

    def method(self, method: str) -> "Factory":
        """Set the HTTP method (trimmed, upper-cased). Empty keeps the current one."""
        method = (method or "").strip().upper()
        if method:
            self._method = method
        return self

    def base(self, url: str) -> "Factory":
        """Set the base URL. It is not validated until the request is assembled.

        A base meant to be extended with path() should end with a slash.
        """
        self._base_url = url
        return self

    def path(self, path: str) -> "Factory":
        """Resolve path against the base URL and make the result the new base.

        Raises:
            AddressParseError: If the base URL or path cannot be parsed; the
                base URL is left unchanged.
        """
        self._base_url = resolve_path(self._base_url, path)
        return self

    # -------------------------------------------------------------------------
    # Operation mode
    # -------------------------------------------------------------------------

    def add(self) -> "Factory":
        """Following header/query calls append values to the key's current list."""
        return self._switch(Operation.APPEND)

    def set(self) -> "Factory":
        """Following header/query calls replace the key's values with the given ones."""
        return self._switch(Operation.REPLACE)

    def drop(self) -> "Factory":
        """Following header/query calls delete the key; values may be omitted."""
        return self._switch(Operation.DELETE)

    def remove(self) -> "Factory":
        """Following header/query calls treat the key as a regular expression
        and delete every key it matches.
        """
        return self._switch(Operation.REMOVE_MATCHING)

    def _switch(self, operation: Operation) -> "Factory":
        if operation is not self._operation:
            logger.debug("Operation mode %s -> %s", self._operation.value, operation.value)
        self._operation = operation
        return self

    # -------------------------------------------------------------------------
    # Headers and query parameters
    # -------------------------------------------------------------------------

    def header(self, key: str, *values: str) -> "Factory":
        """Add, replace or delete header values according to the current mode.

        Raises:
            PatternError: In remove mode, if key is not a valid regex.
        """
        apply_operation(self._headers, self._operation, key, values)
        return self

    def query_parameter(self, key: str, *values: str) -> "Factory":
        """Add, replace or delete query parameter values according to the current mode.

        Raises:
            PatternError: In remove mode, if key is not a valid regex.
        """
        apply_operation(self._parameters, self._operation, key, values)
        return self

    def query_parameters_from(self, source: Any, tag: str = DEFAULT_TAG) -> "Factory":
        """Append query parameters harvested from source.

        source is either a dataclass/pydantic model instance, whose fields
        tagged with tag are extracted (see scanner.scan), or a mapping of
        parameter name -> value(s), rendered the same way. Values are
        always appended, whatever the current mode.

        Raises:
            TagConfigurationError: If tag is empty or a field's payload is empty.
            InvalidSourceError: If source is neither structured nor a mapping.
        """
        if isinstance(source, Mapping) and not is_structured(source):
            extracted = _mapping_values(source)
        else:
            extracted = query_values(scan(tag, source))
        for key, values in extracted.items():
            self._parameters.add(key, *values)
        return self

    def user_agent(self, user_agent: str) -> "Factory":
        """Replace the User-Agent header. The operation mode is not changed."""
        self._headers.replace(USER_AGENT, user_agent)
        return self

    def content_type(self, content_type: str) -> "Factory":
        """Replace the Content-Type header. The operation mode is not changed."""
        self._headers.replace(CONTENT_TYPE, content_type)
        return self

    # -------------------------------------------------------------------------
    # Entity
    # -------------------------------------------------------------------------

    def with_entity(self, entity: BinaryIO | bytes | None) -> "Factory":
        """Set the request body source; None clears it.

        Content-Type must be provided separately.
        """
        self._body = io.BytesIO(entity) if isinstance(entity, (bytes, bytearray)) else entity
        return self

    def with_json_entity(self, entity: Any) -> io.BytesIO:
        """Encode entity as JSON and return the byte source.

        Sets Content-Type to application/json if none is set. The returned
        source is not installed as the body; pass it to with_entity().

        Raises:
            InvalidSourceError: If entity is not a dataclass or model instance.
            EncodingError: If serialization fails.
        """
        return encode_entity(entity, JSONCodec(), self._headers)

    def with_xml_entity(self, entity: Any) -> io.BytesIO:
        """Encode entity as XML and return the byte source.

        Sets Content-Type to application/xml if none is set. The returned
        source is not installed as the body; pass it to with_entity().

        Raises:
            InvalidSourceError: If entity is not a dataclass or model instance.
            EncodingError: If serialization fails.
        """
        return encode_entity(entity, XMLCodec(), self._headers)

    # -------------------------------------------------------------------------
    # Terminal verbs
    # -------------------------------------------------------------------------

    def make(self) -> PreparedRequest:
        """Assemble a PreparedRequest from the current factory state.

        Raises:
            AddressParseError: If the base URL cannot be parsed.
        """
        return assemble(
            self._method,
            self._base_url,
            self._headers,
            self._parameters,
            self._body,
        )

    def get(self) -> PreparedRequest:
        return self.method("GET").make()

    def post(self) -> PreparedRequest:
        return self.method("POST").make()

    def put(self) -> PreparedRequest:
        return self.method("PUT").make()

    def patch(self) -> PreparedRequest:
        return self.method("PATCH").make()

    def delete(self) -> PreparedRequest:
        return self.method("DELETE").make()

    def head(self) -> PreparedRequest:
        return self.method("HEAD").make()

    def trace(self) -> PreparedRequest:
        return self.method("TRACE").make()

    def options(self) -> PreparedRequest:
        return self.method("OPTIONS").make()

    def connect(self) -> PreparedRequest:
        return self.method("CONNECT").make()


def new(method: str, base_url: str) -> Factory:
    """Return a request factory for method and base_url."""
    return Factory(method, base_url)


def _mapping_values(source: Mapping[Any, Any]) -> dict[str, list[str]]:
    # Same rendering as tagged fields: None skipped, lower-case booleans
    return {str(key): stringify(values) for key, values in source.items()}
