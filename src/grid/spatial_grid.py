"""Lattice of cells centred on a point set, with greedy nearest-cell binning."""

from __future__ import annotations

import logging
import math
from typing import Dict, Iterable, Iterator, List, Optional, Set, Tuple, Union

from src.common.basis import BasisConverter
from src.common.errors import DegenerateExtentError
from src.common.geo import angular_distance, spherical_centroid
from src.common.models import CellIndex, Direction, GridCell, Locatable, SphericalPoint, resolve_point

logger = logging.getLogger(__name__)

MIN_EXTENT = 1e-12  # Radians; below this an axis has no spread

Target = Union[Locatable, SphericalPoint]


class SpatialGrid:
    """Bins located items into a (2*columns+1) x (2*rows+1) lattice.

    The lattice is centred on the spherical centroid of the items and sized so
    that its outermost cells reach the furthest items along each local axis.
    Cells are addressed by ``(column, row)``; column grows eastwards and row
    grows northwards before any rotation offset is applied.

    Passing ``points=None`` leaves the grid empty until the first ``bind`` or
    ``build``; any other sequence is built and binned straight away.
    """

    def __init__(
        self,
        columns: int,
        rows: int,
        points: Optional[Iterable[Locatable]] = None,
        rotation_offset_degrees: float = 0.0,
    ) -> None:
        if columns < 0 or rows < 0:
            raise ValueError("columns and rows must be >= 0.")

        self.columns = int(columns)
        self.rows = int(rows)
        self.width = 2 * self.columns + 1
        self.height = 2 * self.rows + 1
        self.center_index: CellIndex = (self.columns, self.rows)
        self.skew = math.radians(rotation_offset_degrees)

        self.converter: Optional[BasisConverter] = None
        self.origin: Optional[SphericalPoint] = None
        self.origin_radius: Optional[float] = None
        self.spacing: Tuple[float, float] = (0.0, 0.0)

        self._points: List[Locatable] = []
        self._point_ids: Set[int] = set()
        self._cells: Optional[List[List[GridCell]]] = None
        self._assignments: Dict[int, CellIndex] = {}

        if points is not None:
            self._points = _unique(points)
            self._point_ids = {id(item) for item in self._points}
            self.rebin_all()

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    def build(self, points: Optional[Iterable[Locatable]] = None) -> None:
        """Lay out a fresh lattice and clear every cell.

        ``points`` replaces the accumulated point set when given. On failure
        the previous lattice and point set are kept.
        """

        items = self._points if points is None else _unique(points)
        located = [point for point in map(resolve_point, items) if point is not None]

        lat, lng, radius = spherical_centroid(located)
        converter = BasisConverter(lat, lng, self.skew)

        max_dy = max_dz = 0.0
        for point in located:
            _, y, z = converter.convert(point.latitude, point.longitude)
            max_dy = max(max_dy, abs(y))
            max_dz = max(max_dz, abs(z))

        dy, dz = self._derive_spacing(max_dy, max_dz)
        cells = self._lay_out(converter, dy, dz)

        self._points = items
        self._point_ids = {id(item) for item in items}
        self._cells = cells
        self._assignments = {}
        self.converter = converter
        self.origin = SphericalPoint(lat, lng)
        self.origin_radius = radius
        self.spacing = (dy, dz)
        logger.debug(
            "Built %dx%d lattice at (%.6f, %.6f) deg with spacing dy=%.3e dz=%.3e from %d located points",
            self.width,
            self.height,
            math.degrees(lat),
            math.degrees(lng),
            dy,
            dz,
            len(located),
        )

    def _derive_spacing(self, max_dy: float, max_dz: float) -> Tuple[float, float]:
        if max_dy < MIN_EXTENT and max_dz < MIN_EXTENT:
            raise DegenerateExtentError("All located points coincide; lattice spacing would be zero.")

        # A flat axis takes the other axis's extent so its cells stay distinct.
        if max_dy < MIN_EXTENT:
            max_dy = max_dz
        if max_dz < MIN_EXTENT:
            max_dz = max_dy

        dy = max_dy / self.columns if self.columns else 0.0
        dz = max_dz / self.rows if self.rows else 0.0
        return dy, dz

    def _lay_out(self, converter: BasisConverter, dy: float, dz: float) -> List[List[GridCell]]:
        center_col, center_row = self.center_index
        cells: List[List[GridCell]] = []
        for col in range(self.width):
            column: List[GridCell] = []
            for row in range(self.height):
                lat, lng = converter.revert_offset(dy * (col - center_col), dz * (row - center_row))
                column.append(GridCell(col, row, lat, lng, neighbours=self._neighbour_indices(col, row)))
            cells.append(column)
        return cells

    def _neighbour_indices(self, col: int, row: int) -> Tuple[Optional[CellIndex], ...]:
        right = (col + 1, row) if col + 1 < self.width else None
        up = (col, row + 1) if row + 1 < self.height else None
        left = (col - 1, row) if col - 1 >= 0 else None
        down = (col, row - 1) if row - 1 >= 0 else None
        return (right, up, left, down)

    # ------------------------------------------------------------------
    # Binning
    # ------------------------------------------------------------------
    def bind(self, item: Target) -> GridCell:
        """Place ``item`` in the cell reached by the greedy neighbour walk.

        On a built grid the lattice and the other assignments are left as
        they are. On an empty grid the lattice is built from the accumulated
        items first and all of them are binned.
        """

        point = resolve_point(item)
        if point is None:
            raise ValueError("Cannot bind an item without coordinates.")

        if id(item) not in self._point_ids:
            self._points.append(item)
            self._point_ids.add(id(item))

        if self._cells is None:
            self.rebin_all()
            return self._cell_at(self._assignments[id(item)])
        return self._place(item, point)

    def rebin_all(self) -> None:
        """Rebuild the lattice from every accumulated item and bin them again."""

        self.build()
        bound = 0
        for item in self._points:
            point = resolve_point(item)
            if point is None:
                continue
            self._place(item, point)
            bound += 1
        logger.info(
            "Binned %d of %d points into %d cells",
            bound,
            len(self._points),
            self.cell_count,
        )

    def locate(self, target: Target) -> GridCell:
        """Cell the neighbour walk ends on for ``target``, without binning it."""

        cell, _ = self.walk(target)
        return cell

    def walk(self, target: Target) -> Tuple[GridCell, int]:
        """Terminal cell and hop count of the neighbour walk towards ``target``."""

        point = resolve_point(target)
        if point is None:
            raise ValueError("Cannot locate an item without coordinates.")
        self._require_built()
        return self._walk(point)

    def _place(self, item: Target, point: SphericalPoint) -> GridCell:
        previous = self._assignments.pop(id(item), None)
        if previous is not None:
            old_points = self._cell_at(previous).points
            for position, existing in enumerate(old_points):
                if existing is item:
                    del old_points[position]
                    break

        cell, _ = self._walk(point)
        cell.points.append(item)
        self._assignments[id(item)] = cell.index
        return cell

    def _walk(self, point: SphericalPoint) -> Tuple[GridCell, int]:
        """Hill-climb from the centre cell towards ``point``.

        Returns the terminal cell and the number of hops taken. Each hop
        strictly reduces the distance, so no cell is visited twice.
        """

        current = self.center_cell
        best = angular_distance(point.latitude, point.longitude, current.latitude, current.longitude)
        hops = 0
        while hops < self.cell_count:
            following = None
            for index in current.neighbours:
                if index is None:
                    continue
                candidate = self._cell_at(index)
                distance = angular_distance(point.latitude, point.longitude, candidate.latitude, candidate.longitude)
                if distance < best:
                    best = distance
                    following = candidate
            if following is None:
                break
            current = following
            hops += 1
        return current, hops

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @property
    def is_built(self) -> bool:
        return self._cells is not None

    @property
    def shape(self) -> Tuple[int, int]:
        return (self.width, self.height)

    @property
    def cell_count(self) -> int:
        return self.width * self.height

    @property
    def points(self) -> Tuple[Locatable, ...]:
        return tuple(self._points)

    @property
    def located_points(self) -> List[Locatable]:
        return [item for item in self._points if resolve_point(item) is not None]

    @property
    def center_cell(self) -> GridCell:
        self._require_built()
        return self._cell_at(self.center_index)

    def cell(self, column: int, row: int) -> GridCell:
        self._require_built()
        if not (0 <= column < self.width and 0 <= row < self.height):
            raise IndexError(f"Cell ({column}, {row}) is outside a {self.width}x{self.height} lattice.")
        return self._cell_at((column, row))

    def cells(self) -> Iterator[GridCell]:
        """All cells, column by column."""

        self._require_built()
        for column in self._cells:
            yield from column

    def neighbours(self, cell: GridCell) -> List[Tuple[Direction, GridCell]]:
        return [
            (direction, self._cell_at(index))
            for direction, index in zip(Direction, cell.neighbours)
            if index is not None
        ]

    def cell_of(self, item: Target) -> Optional[GridCell]:
        """Cell ``item`` is currently bound to, if any."""

        index = self._assignments.get(id(item))
        if index is None:
            return None
        return self._cell_at(index)

    def _cell_at(self, index: CellIndex) -> GridCell:
        return self._cells[index[0]][index[1]]

    def _require_built(self) -> None:
        if self._cells is None:
            raise RuntimeError("Grid has no lattice yet; bind a point or call build() first.")


def _unique(points: Iterable[Locatable]) -> List[Locatable]:
    seen = set()
    unique = []
    for item in points:
        if id(item) in seen:
            continue
        seen.add(id(item))
        unique.append(item)
    return unique
