"""Per-cell and per-point tables derived from a built grid."""

from __future__ import annotations

from typing import Any, Dict, List

import pandas as pd

from src.common.models import resolve_point
from src.grid.spatial_grid import SpatialGrid

CELL_COLUMNS = [
    "cell_id",
    "column",
    "row",
    "latitude",
    "longitude",
    "point_count",
    "total_capacity",
    "used_capacity",
    "free_capacity",
]

ASSIGNMENT_COLUMNS = ["cell_id", "column", "row", "name", "latitude", "longitude"]


def cell_summary(grid: SpatialGrid) -> pd.DataFrame:
    """One row per cell with its centre in degrees and capacity totals."""

    if not grid.is_built:
        return pd.DataFrame(columns=CELL_COLUMNS)

    rows: List[Dict[str, Any]] = []
    for cell in grid.cells():
        total = sum(int(getattr(item, "total_capacity", 0) or 0) for item in cell.points)
        used = sum(int(getattr(item, "used_capacity", 0) or 0) for item in cell.points)
        rows.append(
            {
                "cell_id": cell.cell_id,
                "column": cell.column,
                "row": cell.row,
                "latitude": float(cell.latitude_deg),
                "longitude": float(cell.longitude_deg),
                "point_count": len(cell.points),
                "total_capacity": total,
                "used_capacity": used,
                "free_capacity": max(total - used, 0),
            }
        )
    return pd.DataFrame(rows, columns=CELL_COLUMNS)


def point_assignments(grid: SpatialGrid) -> pd.DataFrame:
    """One row per bound point, keyed by the cell that holds it."""

    if not grid.is_built:
        return pd.DataFrame(columns=ASSIGNMENT_COLUMNS)

    rows: List[Dict[str, Any]] = []
    for cell in grid.cells():
        for item in cell.points:
            lat, lng = resolve_point(item).to_degrees()
            rows.append(
                {
                    "cell_id": cell.cell_id,
                    "column": cell.column,
                    "row": cell.row,
                    "name": getattr(item, "name", None),
                    "latitude": lat,
                    "longitude": lng,
                }
            )
    return pd.DataFrame(rows, columns=ASSIGNMENT_COLUMNS)
