"""Load parking-spot records dumped from the routing source."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, List, Mapping, Optional

from src.common.models import Location, ParkingSpot

logger = logging.getLogger(__name__)


class ParkingSpotSource:
    """Reads a JSON dump (``{"placemarks": [...]}`` or a bare list) into ParkingSpots."""

    def __init__(self, path: str | Path, coordinate_order: str = "lat_lng", limit: Optional[int] = None) -> None:
        self.path = Path(path)
        self.coordinate_order = coordinate_order
        self.limit = limit

    def load(self) -> List[ParkingSpot]:
        with open(self.path, "r", encoding="utf-8") as handle:
            payload = json.load(handle)

        records = _records(payload)
        if self.limit:
            records = records[: self.limit]

        spots = [parse_parking_spot(record, self.coordinate_order) for record in records]
        located = sum(1 for spot in spots if spot.location is not None and spot.location.has_coords())
        logger.info("Loaded %d parking spots (%d with coordinates) from %s", len(spots), located, self.path)
        return spots


def _records(payload: Any) -> List[Mapping[str, Any]]:
    if isinstance(payload, dict) and "placemarks" in payload:
        payload = payload["placemarks"]
    if not isinstance(payload, list):
        raise ValueError("Parking-spot dump must be a list or an object with a 'placemarks' list.")
    return [record for record in payload if isinstance(record, dict)]


def parse_parking_spot(record: Mapping[str, Any], coordinate_order: str = "lat_lng") -> ParkingSpot:
    location = Location.from_parking_spot(record, coordinate_order)
    return ParkingSpot(
        name=str(record.get("name") or "Unnamed spot"),
        location=location,
        address=record.get("address") or None,
        total_capacity=int(record.get("totalCapacity") or 0),
        used_capacity=int(record.get("usedCapacity") or 0),
        charging_pole=bool(record.get("chargingPole", False)),
    )
