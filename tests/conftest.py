"""Shared test fixtures for mimebridge."""

from __future__ import annotations

import pytest

from fakes import FakeHandler, JPEG, PNG, fmt
from mimebridge.config.models import MimeBridgeConfig
from mimebridge.formats.models import FileData


@pytest.fixture
def sample_config():
    return MimeBridgeConfig()


@pytest.fixture
def sample_files():
    return [FileData(name="photo.png", data=b"\x89PNG-bytes")]


@pytest.fixture
def raster_like():
    """Reads and writes PNG and JPEG."""
    return FakeHandler("raster", [PNG, JPEG])


@pytest.fixture
def html_to_svg():
    """HTML in, SVG out only."""
    return FakeHandler("html", [fmt("html", "text/html", out=False), fmt("svg", "image/svg+xml", inp=False)])


@pytest.fixture
def svg_to_png():
    return FakeHandler("svg", [fmt("svg", "image/svg+xml"), fmt("png", "image/png", inp=False)])


@pytest.fixture
def progress_events():
    """A list plus a callback that appends every progress event to it."""
    events = []
    return events, events.append
