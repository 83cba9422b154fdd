"""Configuration helpers for the parking-spot grid."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml

from .models import COORDINATE_ORDERS


@dataclass(frozen=True)
class DatasetConfig:
    """Where the routing source's parking-spot dump lives."""

    spots_path: str = "./data/parkingspots.json"
    coordinate_order: str = "lat_lng"  # lat_lng | lng_lat
    limit: Optional[int] = None


@dataclass(frozen=True)
class GridConfig:
    """Lattice half-extent and skew."""

    columns: int = 3
    rows: int = 3
    rotation_offset_degrees: float = 0.0


@dataclass(frozen=True)
class OutputConfig:
    """Where the grid job writes its summary tables."""

    base_path: str = "./data/output"


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"


@dataclass(frozen=True)
class DashboardConfig:
    """Dashboard defaults."""

    map_zoom: int = 12


@dataclass(frozen=True)
class AppConfig:
    """Aggregated configuration model."""

    dataset: DatasetConfig
    grid: GridConfig
    output: OutputConfig
    logging: LoggingConfig
    dashboard: DashboardConfig


def load_config(path: str | Path) -> AppConfig:
    """Parse a YAML config file into an AppConfig dataclass."""

    raw = _load_yaml(path)
    dataset_cfg = raw.get("dataset") or {}
    grid_cfg = raw.get("grid") or {}
    output_cfg = raw.get("output") or {}
    logging_cfg = raw.get("logging") or {}
    dashboard_cfg = raw.get("dashboard") or {}

    limit = dataset_cfg.get("limit")
    dataset = DatasetConfig(
        spots_path=str(dataset_cfg.get("spots_path", "./data/parkingspots.json")),
        coordinate_order=str(dataset_cfg.get("coordinate_order", "lat_lng")),
        limit=int(limit) if limit is not None else None,
    )
    grid = GridConfig(
        columns=int(grid_cfg.get("columns", 3)),
        rows=int(grid_cfg.get("rows", 3)),
        rotation_offset_degrees=float(grid_cfg.get("rotation_offset_degrees", 0.0)),
    )
    output = OutputConfig(base_path=str(output_cfg.get("base_path", "./data/output")))
    logging_config = LoggingConfig(level=str(logging_cfg.get("level", "INFO")).upper())
    dashboard = DashboardConfig(map_zoom=int(dashboard_cfg.get("map_zoom", 12)))

    _validate(dataset, grid)
    return AppConfig(
        dataset=dataset,
        grid=grid,
        output=output,
        logging=logging_config,
        dashboard=dashboard,
    )


def _validate(dataset: DatasetConfig, grid: GridConfig) -> None:
    if grid.columns < 0 or grid.rows < 0:
        raise ValueError("grid.columns and grid.rows must be >= 0.")
    if dataset.coordinate_order not in COORDINATE_ORDERS:
        raise ValueError(
            f"dataset.coordinate_order must be one of {', '.join(COORDINATE_ORDERS)}, "
            f"got {dataset.coordinate_order!r}."
        )


def _load_yaml(path: str | Path) -> dict[str, Any]:
    with open(path, "r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a top-level mapping.")
    return data
