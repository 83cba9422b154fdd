"""Persist grid summary tables for the dashboard."""

from __future__ import annotations

from pathlib import Path
from typing import Dict

import pandas as pd


class Persistence:
    """Write pandas DataFrames as CSV files into a folder."""

    def __init__(self, base_path: str) -> None:
        self.base_path = Path(base_path)

    def write(self, tables: Dict[str, pd.DataFrame]) -> None:
        self.base_path.mkdir(parents=True, exist_ok=True)
        for name, frame in tables.items():
            target = self.base_path / f"{name}.csv"
            frame.to_csv(target, index=False)
