"""Entry point: bin a parking-spot dump into a grid and write summaries."""

from __future__ import annotations

import argparse

from src.common.config import load_config
from src.common.logging_utils import setup_logging
from src.grid.persistence import Persistence
from src.grid.spatial_grid import SpatialGrid
from src.grid.summary import cell_summary, point_assignments
from src.ingest.sources import ParkingSpotSource


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Bin parking spots into a spatial grid.")
    parser.add_argument("--config", default="config/local.yaml", help="Path to YAML config.")
    parser.add_argument("--columns", type=int, default=None, help="Override grid.columns.")
    parser.add_argument("--rows", type=int, default=None, help="Override grid.rows.")
    parser.add_argument("--rotation", type=float, default=None, help="Override grid.rotation_offset_degrees.")
    args = parser.parse_args(argv)

    config = load_config(args.config)
    setup_logging(config.logging.level)

    columns = config.grid.columns if args.columns is None else args.columns
    rows = config.grid.rows if args.rows is None else args.rows
    rotation = config.grid.rotation_offset_degrees if args.rotation is None else args.rotation

    source = ParkingSpotSource(
        config.dataset.spots_path,
        coordinate_order=config.dataset.coordinate_order,
        limit=config.dataset.limit,
    )
    spots = source.load()
    if not spots:
        raise RuntimeError("No parking spots available. Check dataset.spots_path.")

    grid = SpatialGrid(columns, rows, spots, rotation_offset_degrees=rotation)
    tables = {
        "cell_summary": cell_summary(grid),
        "point_assignments": point_assignments(grid),
    }
    Persistence(config.output.base_path).write(tables)
    print(f"Wrote grid tables to {config.output.base_path}")


if __name__ == "__main__":
    main()
