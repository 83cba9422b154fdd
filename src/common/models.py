"""Dataclasses shared between ingestion, the grid and its summaries."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, List, Mapping, Optional, Protocol, Tuple, Union

CellIndex = Tuple[int, int]

COORDINATE_ORDERS = ("lat_lng", "lng_lat")


@dataclass(frozen=True)
class SphericalPoint:
    """Latitude/longitude in radians, with an optional altitude."""

    latitude: float
    longitude: float
    altitude: Optional[float] = None

    @classmethod
    def from_degrees(cls, latitude: float, longitude: float, altitude: Optional[float] = None) -> "SphericalPoint":
        return cls(math.radians(latitude), math.radians(longitude), altitude)

    def to_degrees(self) -> Tuple[float, float]:
        return math.degrees(self.latitude), math.degrees(self.longitude)


class Location:
    """Coordinates in degrees and/or a postal address for a record."""

    def __init__(
        self,
        coordinates: Optional[Tuple[float, float, Optional[float]]] = None,
        address: Optional[str] = None,
    ) -> None:
        self.coordinates = coordinates
        self.address = address

    def __repr__(self) -> str:
        return f"Location(coordinates={self.coordinates!r}, address={self.address!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Location):
            return NotImplemented
        return self.coordinates == other.coordinates and self.address == other.address

    def set_coords(self, lat: float, lng: float, alt: Optional[float] = None) -> None:
        self.coordinates = (float(lat), float(lng), None if alt is None else float(alt))

    def has_coords(self) -> bool:
        if not self.coordinates:
            return False
        lat, lng = self.coordinates[0], self.coordinates[1]
        if lat is None or lng is None:
            return False
        return math.isfinite(lat) and math.isfinite(lng)

    def to_spherical(self) -> SphericalPoint:
        if not self.has_coords():
            raise ValueError("Location has no coordinates to convert.")
        lat, lng, alt = self.coordinates
        return SphericalPoint.from_degrees(lat, lng, alt)

    @classmethod
    def from_parking_spot(cls, record: Mapping[str, Any], coordinate_order: str = "lat_lng") -> "Location":
        """Build a Location from a raw routing record.

        ``coordinate_order`` says how the first two entries of
        ``record["coordinates"]`` are laid out.
        """

        if coordinate_order not in COORDINATE_ORDERS:
            raise ValueError(f"Unknown coordinate order: {coordinate_order}")

        location = cls(address=record.get("address") or None)
        raw = record.get("coordinates")
        if not raw or len(raw) < 2 or raw[0] is None or raw[1] is None:
            return location

        first, second = float(raw[0]), float(raw[1])
        alt = float(raw[2]) if len(raw) > 2 and raw[2] is not None else None
        if coordinate_order == "lng_lat":
            first, second = second, first
        location.set_coords(first, second, alt)
        return location


class Locatable(Protocol):
    """Anything carrying an optional location."""

    location: Optional[Union[Location, SphericalPoint]]


def resolve_point(item: Any) -> Optional[SphericalPoint]:
    """Return the spherical position of ``item`` or None when it has none."""

    if isinstance(item, SphericalPoint):
        return item
    location = getattr(item, "location", None)
    if location is None:
        return None
    if isinstance(location, SphericalPoint):
        return location
    if isinstance(location, Location) and location.has_coords():
        return location.to_spherical()
    return None


@dataclass(frozen=True, eq=False)
class ParkingSpot:
    """A parking spot as served by the routing source."""

    name: str
    location: Optional[Location]
    address: Optional[str] = None
    total_capacity: int = 0
    used_capacity: int = 0
    charging_pole: bool = False

    @property
    def free_capacity(self) -> int:
        return max(self.total_capacity - self.used_capacity, 0)


class Direction(IntEnum):
    """Neighbour slots of a grid cell."""

    RIGHT = 0
    UP = 1
    LEFT = 2
    DOWN = 3

    @property
    def opposite(self) -> "Direction":
        return Direction((self + 2) % 4)


@dataclass
class GridCell:
    """One lattice cell; neighbours are (column, row) indices into the owning grid."""

    column: int
    row: int
    latitude: float
    longitude: float
    neighbours: Tuple[Optional[CellIndex], ...] = (None, None, None, None)
    points: List[Any] = field(default_factory=list)

    @property
    def index(self) -> CellIndex:
        return (self.column, self.row)

    @property
    def cell_id(self) -> str:
        return f"{self.column}_{self.row}"

    @property
    def latitude_deg(self) -> float:
        return math.degrees(self.latitude)

    @property
    def longitude_deg(self) -> float:
        return math.degrees(self.longitude)

    def neighbour(self, direction: Direction) -> Optional[CellIndex]:
        return self.neighbours[direction]
