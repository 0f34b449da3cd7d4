"""Shared test fixtures."""

import os
import sys
from datetime import UTC, datetime
from pathlib import Path

import pytest
import respx

# Add src/ to path so tests can import farmhand
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

# Settings are read at import time; point them at a fake backend
os.environ["SUPABASE_URL"] = "https://test.supabase.co"
os.environ["SUPABASE_KEY"] = "test-key"
os.environ["FARMHAND_OWNER_ID"] = "owner-1"
os.environ["DISPLAY_UNITS"] = "metric"

BACKEND_URL = "https://test.supabase.co/rest/v1"


@pytest.fixture
def mock_backend():
    """Mock the backend REST API."""
    with respx.mock(base_url=BACKEND_URL, assert_all_called=False) as mock:
        yield mock


@pytest.fixture
def no_retry_wait():
    """Make transport retries immediate."""
    from tenacity import wait_none

    from farmhand.core import client

    retrying = client.request_with_retry.retry
    original = retrying.wait
    retrying.wait = wait_none()
    yield
    retrying.wait = original


@pytest.fixture
def now():
    """Fixed clock for grazing calculations."""
    return datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def sample_paddocks():
    """Two paddocks: 10 ha and 4 ha."""
    return [
        {
            "id": "p-river",
            "user_id": "owner-1",
            "name": "River",
            "geometry": {"type": "Polygon", "coordinates": []},
            "area": 100_000,
            "color": "#22c55e",
            "type": "pasture",
        },
        {
            "id": "p-hill",
            "user_id": "owner-1",
            "name": "Hill",
            "geometry": {"type": "Polygon", "coordinates": []},
            "area": 40_000,
            "color": "#eab308",
            "type": "native_bush",
        },
    ]
