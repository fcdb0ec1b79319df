"""Tagged sample entities shared by scanner, encoder and factory tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, Field


@dataclass
class Paging:
    page: int = field(default=1, metadata={"query": "page"})
    size: int = field(default=20, metadata={"query": "size"})


@dataclass
class Search:
    term: str = field(metadata={"query": "q"})
    scope: str = field(default="all", metadata={"query": "scope", "header": "X-Scope"})
    internal_note: str = ""
    paging: Paging = field(default_factory=Paging)


class Owner(BaseModel):
    login: str = Field(json_schema_extra={"query": "owner"})


class RepoFilter(BaseModel):
    language: str = Field(json_schema_extra={"query": "lang"})
    archived: bool = Field(default=False, json_schema_extra={"query": "archived"})
    topics: list[str] = Field(default_factory=list, json_schema_extra={"query": "topic"})
    owner: Owner | None = None


@dataclass
class Widget:
    name: str
    quantity: int
    tags: list[str] = field(default_factory=list)
    active: bool = True


@dataclass
class Opaque:
    payload: Any = None


@dataclass
class Labelled:
    labels: dict[str, str] = field(default_factory=dict)
