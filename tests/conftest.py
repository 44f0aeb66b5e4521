"""Shared fixtures for Pathly tests."""

from collections.abc import Iterator
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest

from pathly.utils import dt_utils


@pytest.fixture(autouse=True)
def reset_default_timezone() -> Iterator[None]:
    """Run every test with UTC as the default timezone."""
    dt_utils.set_default_timezone(ZoneInfo("UTC"))
    yield
    dt_utils.set_default_timezone(ZoneInfo("UTC"))


@pytest.fixture
def storage_path(tmp_path: Path) -> Path:
    """Location of a fresh storage file."""
    return tmp_path / "pathly_data.json"
