"""Data models for request_factory.

All models use Pydantic v2.
"""

from __future__ import annotations

from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field, field_validator

from request_factory.scanner import stringify


# =============================================================================
# Assembled Request
# =============================================================================


class PreparedRequest(BaseModel):
    """An assembled, immutable HTTP request ready for a transport.

    Header values are arrays to support repeated headers. The url already
    carries the merged, canonically ordered query string. body is the byte
    source given to the factory (read at most once, by the transport).
    """

    model_config = ConfigDict(extra="forbid", frozen=True, arbitrary_types_allowed=True)

    method: str = Field(description="HTTP method, upper-case")
    url: str = Field(description="Resolved URL including the query string")
    headers: dict[str, list[str]] = Field(
        default_factory=dict, description="Request headers (canonical keys, array values)"
    )
    body: Any = Field(default=None, description="Byte source for the payload, if any")

    def header(self, name: str) -> str:
        """First value of a header (case-insensitive), or an empty string."""
        lower = name.lower()
        for key, values in self.headers.items():
            if key.lower() == lower and values:
                return values[0]
        return ""

    def to_httpx(self) -> httpx.Request:
        """Build the equivalent httpx.Request.

        Repeated headers are sent as repeated header lines. The body source
        is consumed here.
        """
        headers = [(key, value) for key, values in self.headers.items() for value in values]
        return httpx.Request(
            self.method,
            self.url,
            headers=headers,
            content=_read_body(self.body),
        )


def _read_body(body: Any) -> bytes | None:
    if body is None:
        return None
    if isinstance(body, (bytes, bytearray)):
        return bytes(body)
    if isinstance(body, str):
        return body.encode("utf-8")
    data = body.read()
    return data.encode("utf-8") if isinstance(data, str) else data


# =============================================================================
# Factory Configuration Models
# =============================================================================


class FactoryConfig(BaseModel):
    """A factory profile loaded from YAML.

    Header and query values may be given as a single scalar or a list.
    They are rendered like query values everywhere else: booleans become
    true/false and nulls are dropped.
    """

    model_config = ConfigDict(extra="forbid")

    method: str = Field(default="GET", description="Default HTTP method")
    base_url: str = Field(description="Base URL for generated requests")
    headers: dict[str, list[str]] = Field(
        default_factory=dict,
        description="Headers to include (supports ${ENV_VAR} substitution)",
    )
    query: dict[str, list[str]] = Field(
        default_factory=dict, description="Query parameters added to every request"
    )
    user_agent: str | None = Field(default=None, description="User-Agent header value")
    content_type: str | None = Field(default=None, description="Content-Type header value")

    @field_validator("headers", "query", mode="before")
    @classmethod
    def wrap_scalar_values(cls, v: Any) -> Any:
        if not isinstance(v, dict):
            return v
        # Nested mappings are left for validation to reject
        return {
            key: value if isinstance(value, dict) else stringify(value)
            for key, value in v.items()
        }

    @field_validator("method")
    @classmethod
    def normalize_method(cls, v: str) -> str:
        method = v.strip().upper()
        if not method:
            raise ValueError("method must not be empty")
        return method
