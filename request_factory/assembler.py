"""Request Assembler - resolves addresses and builds PreparedRequests.

Address parsing and reference resolution use httpx.URL (RFC 3986). Query
parameters accumulated on a factory are merged into the address's own query
string: nothing is replaced, both sources accumulate, and the result is
encoded sorted by key with each key's values in insertion order (existing
values first).
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from request_factory.errors import AddressParseError
from request_factory.models import PreparedRequest
from request_factory.multimap import HeaderMap, MultiMap

logger = logging.getLogger(__name__)


def parse_url(address: str, what: str = "address") -> httpx.URL:
    """Parse address, raising AddressParseError instead of httpx errors."""
    try:
        return httpx.URL(address)
    except (httpx.InvalidURL, TypeError, ValueError) as e:
        raise AddressParseError(f"Invalid {what} '{address}': {e}") from e


def resolve_path(base_url: str, path: str) -> str:
    """Resolve a path reference against base_url.

    Absolute paths replace the base path, relative paths resolve against the
    base's last segment, and absolute URLs replace the base entirely. A base
    meant to be extended must end with a slash:

        resolve_path("http://h/api/", "v1/users")  ->  "http://h/api/v1/users"
        resolve_path("http://h/api/", "/v2")       ->  "http://h/v2"

    Raises:
        AddressParseError: If either side cannot be parsed.
    """
    base = parse_url(base_url, "base address")
    reference = parse_url(path, "path reference")
    resolved = str(base.join(reference))
    logger.debug("Resolved path %r against %r -> %r", path, base_url, resolved)
    return resolved


def merge_query(url: httpx.URL, parameters: MultiMap) -> httpx.URL:
    """Append parameters to url's existing query, in canonical order."""
    pairs: list[tuple[str, str]] = list(url.params.multi_items())
    pairs.extend(parameters.multi_items())
    if not pairs:
        return url
    # Stable sort: values keep their relative order within each key
    pairs.sort(key=lambda pair: pair[0])
    return url.copy_with(params=httpx.QueryParams(pairs))


def assemble(
    method: str,
    base_url: str,
    headers: HeaderMap,
    parameters: MultiMap,
    body: Any = None,
) -> PreparedRequest:
    """Build a PreparedRequest from accumulated factory state.

    Headers and query parameters are snapshotted, so the request does not
    change when the factory is mutated afterwards.

    Raises:
        AddressParseError: If base_url cannot be parsed.
    """
    url = merge_query(parse_url(base_url, "base address"), parameters)
    request = PreparedRequest(
        method=method,
        url=str(url),
        headers=headers.to_dict(),
        body=body,
    )
    logger.debug("Assembled %s %s", request.method, request.url)
    return request
