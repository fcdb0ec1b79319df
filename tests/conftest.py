"""Pytest configuration and fixtures for request_factory tests."""

from __future__ import annotations

import pytest

from request_factory.factory import Factory, new
from tests.entities import Widget


@pytest.fixture
def factory() -> Factory:
    """A GET factory whose base URL is meant to be extended with path()."""
    return new("GET", "http://example.com/api/")


@pytest.fixture
def widget() -> Widget:
    return Widget(name="sprocket", quantity=3, tags=["metal", "small"])
