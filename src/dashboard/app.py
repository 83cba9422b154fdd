"""Streamlit dashboard over the parking-spot grid tables."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pandas as pd
import pydeck as pdk
import streamlit as st

project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), "../.."))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from src.common.config import load_config

CACHE_TTL = int(os.environ.get("PARKING_GRID_REFRESH_SECONDS", "60"))


@st.cache_data(ttl=CACHE_TTL)
def load_table(path: Path) -> pd.DataFrame:
    if not path.exists():
        return pd.DataFrame()
    return pd.read_csv(path)


def main() -> None:
    config_path = Path(os.environ.get("PARKING_GRID_CONFIG", "config/local.yaml"))
    config = load_config(config_path)
    base_path = Path(config.output.base_path)

    st.set_page_config(page_title="Parking Grid", layout="wide")
    st.title("Parking spots by grid cell")
    st.caption(
        f"Lattice of {2 * config.grid.columns + 1} x {2 * config.grid.rows + 1} cells "
        f"centred on the spots' centroid."
    )
    if st.sidebar.button("Refresh data now"):
        st.cache_data.clear()
        rerun_fn = getattr(st, "experimental_rerun", None) or getattr(st, "rerun", None)
        if rerun_fn:
            rerun_fn()

    cells = load_table(base_path / "cell_summary.csv")
    assignments = load_table(base_path / "point_assignments.csv")

    if cells.empty:
        st.warning("Run `python -m src.grid.grid_job --config config/local.yaml` to generate grid tables.")
        return

    min_points = st.sidebar.slider("Minimum spots per cell", 0, int(max(cells["point_count"].max(), 1)), value=0)
    show_spots = st.sidebar.checkbox("Show individual spots", value=True)

    visible = cells[cells["point_count"] >= min_points]
    st.subheader("Cells")
    midpoint = (cells["latitude"].mean(), cells["longitude"].mean())
    layers = [
        pdk.Layer(
            "ColumnLayer",
            data=visible,
            get_position="[longitude, latitude]",
            get_elevation="point_count",
            elevation_scale=40,
            radius=60,
            get_fill_color="[60, 140 + point_count * 10, 200, 180]",
            auto_highlight=True,
            pickable=True,
        )
    ]
    if show_spots and not assignments.empty:
        layers.append(
            pdk.Layer(
                "ScatterplotLayer",
                data=assignments,
                get_position="[longitude, latitude]",
                get_radius=15,
                get_fill_color="[255, 140, 0, 200]",
                pickable=True,
            )
        )
    deck = pdk.Deck(
        map_style="mapbox://styles/mapbox/dark-v11",
        initial_view_state=pdk.ViewState(
            latitude=midpoint[0], longitude=midpoint[1], zoom=config.dashboard.map_zoom, pitch=40
        ),
        layers=layers,
        tooltip={"text": "cell_id: {cell_id}\nSpots: {point_count}\nFree: {free_capacity}"},
    )
    st.pydeck_chart(deck)

    col1, col2 = st.columns(2)
    with col1:
        st.subheader("Busiest cells")
        st.dataframe(
            visible.sort_values(by="point_count", ascending=False).head(20),
            use_container_width=True,
        )

    with col2:
        st.subheader("Spots")
        if assignments.empty:
            st.info("No spots were bound to the grid.")
        else:
            cell_options = ["All"] + sorted(assignments["cell_id"].unique())
            selected_cell = st.selectbox("Cell", options=cell_options, index=0)
            shown = assignments if selected_cell == "All" else assignments[assignments["cell_id"] == selected_cell]
            st.dataframe(shown, use_container_width=True)


if __name__ == "__main__":
    main()
