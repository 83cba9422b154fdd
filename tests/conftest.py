import sys
from pathlib import Path

import pytest

# Ensure the repository root (which contains the `src` package) is importable in tests.
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from src.common.models import Location, ParkingSpot  # noqa: E402


@pytest.fixture
def make_spot():
    """Factory for located parking spots given in degrees."""

    def _make(lat: float, lng: float, name: str | None = None, total_capacity: int = 0, used_capacity: int = 0):
        location = Location()
        location.set_coords(lat, lng)
        return ParkingSpot(
            name=name or f"spot {lat},{lng}",
            location=location,
            total_capacity=total_capacity,
            used_capacity=used_capacity,
        )

    return _make


@pytest.fixture
def unlocated_spot():
    return ParkingSpot(name="address only", location=Location(address="1 Main St"))
