"""Shared fixtures."""

from __future__ import annotations

import pytest

from fakes import FakeGeocoder, item
from where_i_traveled.config import reset_config
from where_i_traveled.observability import reset_logging


@pytest.fixture(autouse=True)
def fresh_config():
    reset_config()
    yield
    reset_config()


@pytest.fixture(autouse=True)
def detached_logging():
    # CLI commands install a handler bound to the runner's captured stderr.
    yield
    reset_logging()


@pytest.fixture
def rome_geocoder() -> FakeGeocoder:
    return FakeGeocoder(
        responses={"Rome, Italy": [item("Rome", 41.9028, 12.4964)]},
    )
