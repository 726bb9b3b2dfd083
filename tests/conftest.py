"""
Pytest configuration and fixtures
"""
import pytest
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from fakes import NOW, FakeGateway, RecordingNotifier


@pytest.fixture
def now():
    """Fixed current instant."""
    return NOW


@pytest.fixture
def gateway():
    """Recording gateway with no signed-in caller."""
    return FakeGateway()


@pytest.fixture
def notifier():
    """Notifier that records alerts."""
    return RecordingNotifier()


@pytest.fixture
def sample_rows():
    """Report rows as returned by the hosted backend."""
    return [
        {
            "id": "a1",
            "title": "Bags & cans by trail",
            "litter_types": ["Bottles", "Cans"],
            "types": None,
            "notes_presets": ["Along trail"],
            "notes_other": None,
            "severity": "High",
            "latitude": 35.6012,
            "longitude": -82.5531,
            "user_id": "user-1",
            "photo_paths": ["user-1/a1/1760788800000-0.jpg"],
            "created_at": "2026-10-17T12:00:00.123456+00:00",
            "expires_at": "2026-11-16T12:00:00+00:00",
        },
        {
            "id": "b2",
            "title": "Litter report",
            "litter_types": None,
            "types": "mattress",
            "notes_presets": None,
            "notes_other": "Behind the gas station",
            "severity": "low",
            "latitude": 35.5987,
            "longitude": -82.5602,
            "user_id": None,
            "photo_paths": [],
            "created_at": "2026-10-16T08:30:00Z",
            "expires_at": "2026-11-15T08:30:00Z",
        },
        {
            "id": "c3",
            "title": "No location",
            "severity": "Medium",
            "latitude": None,
            "longitude": -82.55,
            "user_id": "user-2",
            "created_at": "2026-10-16T08:30:00Z",
            "expires_at": "2026-11-15T08:30:00Z",
        },
    ]
