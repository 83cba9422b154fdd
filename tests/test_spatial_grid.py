import math

import pytest

from src.common.errors import DegenerateExtentError, EmptyInputError
from src.common.models import Direction, SphericalPoint
from src.grid.spatial_grid import SpatialGrid

FRAME = [(41.0, -73.0), (39.0, -73.0), (40.0, -74.3), (40.0, -71.7)]
CLUSTER = [
    (40.001, -73.002),
    (39.999, -72.998),
    (40.002, -73.001),
    (39.998, -73.0),
    (40.0, -72.999),
]
PLUS = [(40.0, -73.0), (40.002, -73.0), (39.998, -73.0), (40.0, -73.003), (40.0, -72.997)]


@pytest.fixture
def spread_spots(make_spot):
    return [make_spot(lat, lng) for lat, lng in FRAME]


def _cells_holding(grid, item):
    return [cell for cell in grid.cells() if any(existing is item for existing in cell.points)]


@pytest.mark.parametrize("columns,rows", [(0, 0), (1, 1), (2, 1), (0, 3), (3, 0)])
def test_lattice_has_doubled_plus_one_shape(make_spot, columns, rows):
    spots = [make_spot(lat, lng) for lat, lng in FRAME]

    grid = SpatialGrid(columns, rows, spots)

    assert grid.shape == (2 * columns + 1, 2 * rows + 1)
    assert len(list(grid.cells())) == (2 * columns + 1) * (2 * rows + 1)
    assert grid.center_cell.index == (columns, rows)


def test_center_cell_has_all_neighbours_unless_lattice_is_flat(spread_spots):
    grid = SpatialGrid(2, 1, spread_spots)
    assert all(index is not None for index in grid.center_cell.neighbours)

    flat = SpatialGrid(0, 2, spread_spots)
    center = flat.center_cell
    assert center.neighbour(Direction.RIGHT) is None
    assert center.neighbour(Direction.LEFT) is None
    assert center.neighbour(Direction.UP) == (0, 3)
    assert center.neighbour(Direction.DOWN) == (0, 1)


def test_neighbour_links_are_symmetric(spread_spots):
    grid = SpatialGrid(3, 2, spread_spots)

    for cell in grid.cells():
        for direction, other in grid.neighbours(cell):
            assert other.neighbour(direction.opposite) == cell.index


def test_boundary_cells_have_no_neighbour_outside_the_lattice(spread_spots):
    grid = SpatialGrid(1, 1, spread_spots)

    corner = grid.cell(0, 0)
    assert corner.neighbour(Direction.LEFT) is None
    assert corner.neighbour(Direction.DOWN) is None
    assert corner.neighbour(Direction.RIGHT) == (1, 0)
    assert corner.neighbour(Direction.UP) == (0, 1)

    opposite = grid.cell(2, 2)
    assert opposite.neighbour(Direction.RIGHT) is None
    assert opposite.neighbour(Direction.UP) is None


def test_cell_lookup_rejects_indices_outside_the_lattice(spread_spots):
    grid = SpatialGrid(1, 1, spread_spots)

    with pytest.raises(IndexError):
        grid.cell(-1, 0)
    with pytest.raises(IndexError):
        grid.cell(0, 3)


def test_cluster_inside_wider_population_binds_into_center_cell(make_spot):
    frame = [make_spot(lat, lng, name="frame") for lat, lng in FRAME]
    cluster = [make_spot(lat, lng, name="cluster") for lat, lng in CLUSTER]

    grid = SpatialGrid(1, 1, frame + cluster)

    center = grid.center_cell
    assert len(center.points) == 5
    assert all(spot.name == "cluster" for spot in center.points)
    lat, lng = SphericalPoint(center.latitude, center.longitude).to_degrees()
    assert lat == pytest.approx(40.0, abs=0.01)
    assert lng == pytest.approx(-73.0, abs=0.01)


def test_lone_cluster_is_spread_over_the_whole_lattice(make_spot):
    centre, north, south, west, east = [make_spot(lat, lng) for lat, lng in PLUS]

    grid = SpatialGrid(1, 1, [centre, north, south, west, east])

    assert grid.center_cell.points == [centre]
    assert grid.cell_of(north).index == (1, 2)
    assert grid.cell_of(south).index == (1, 0)
    assert grid.cell_of(west).index == (0, 1)
    assert grid.cell_of(east).index == (2, 1)
    assert grid.cell(2, 1).longitude_deg == pytest.approx(-72.997, abs=1e-6)


def test_frame_points_bind_to_edge_cells(make_spot):
    north, south, west, east = [make_spot(lat, lng) for lat, lng in FRAME]

    grid = SpatialGrid(1, 1, [north, south, west, east])

    assert grid.cell_of(north).index == (1, 2)
    assert grid.cell_of(south).index == (1, 0)
    assert grid.cell_of(west).index == (0, 1)
    assert grid.cell_of(east).index == (2, 1)


def test_two_points_on_the_equator_land_on_opposite_sides(make_spot):
    west = make_spot(0.0, 0.0)
    east = make_spot(0.0, 10.0)

    grid = SpatialGrid(2, 0, [west, east])

    dy, dz = grid.spacing
    assert dy == pytest.approx(math.sin(math.radians(5.0)) / 2)
    assert dz == 0.0
    assert grid.center_cell.longitude_deg == pytest.approx(5.0)
    assert grid.cell_of(west).index == (0, 0)
    assert grid.cell_of(east).index == (4, 0)
    assert grid.cell(0, 0).longitude_deg == pytest.approx(0.0, abs=1e-9)
    assert grid.cell(4, 0).longitude_deg == pytest.approx(10.0)


def test_rotation_offset_turns_the_lattice(make_spot):
    west = make_spot(0.0, 0.0)
    east = make_spot(0.0, 10.0)

    grid = SpatialGrid(0, 2, [west, east], rotation_offset_degrees=90.0)

    assert grid.cell_of(west).index == (0, 0)
    assert grid.cell_of(east).index == (0, 4)
    assert grid.cell(0, 4).longitude_deg == pytest.approx(10.0)


def test_build_without_located_points_raises(unlocated_spot):
    with pytest.raises(EmptyInputError):
        SpatialGrid(1, 1, [])
    with pytest.raises(EmptyInputError):
        SpatialGrid(1, 1, [unlocated_spot])


def test_build_with_coincident_points_raises(make_spot):
    with pytest.raises(DegenerateExtentError):
        SpatialGrid(1, 1, [make_spot(40.0, -73.0)])
    with pytest.raises(DegenerateExtentError):
        SpatialGrid(1, 1, [make_spot(40.0, -73.0), make_spot(40.0, -73.0)])


def test_negative_dimensions_are_rejected():
    with pytest.raises(ValueError):
        SpatialGrid(-1, 0)


def test_unlocated_items_are_kept_but_never_binned(spread_spots, unlocated_spot):
    grid = SpatialGrid(1, 1, spread_spots + [unlocated_spot])

    assert unlocated_spot in grid.points
    assert unlocated_spot not in grid.located_points
    assert grid.cell_of(unlocated_spot) is None
    assert sum(len(cell.points) for cell in grid.cells()) == len(spread_spots)


def test_every_point_is_in_exactly_one_cell(make_spot):
    spots = [make_spot(lat, lng) for lat, lng in FRAME + CLUSTER]
    grid = SpatialGrid(2, 2, spots)

    for spot in spots:
        assert len(_cells_holding(grid, spot)) == 1

    grid.rebin_all()
    for spot in spots:
        assert len(_cells_holding(grid, spot)) == 1


def test_binning_the_same_point_twice_is_stable(spread_spots, make_spot):
    grid = SpatialGrid(2, 2, spread_spots)
    newcomer = make_spot(40.3, -73.4)

    first = grid.bind(newcomer)
    second = grid.bind(newcomer)

    assert first.index == second.index
    assert grid.locate(newcomer).index == first.index
    assert len(_cells_holding(grid, newcomer)) == 1
    assert len(grid.points) == len(spread_spots) + 1


def test_bind_keeps_existing_lattice_and_assignments(spread_spots, make_spot):
    grid = SpatialGrid(2, 2, spread_spots)
    spacing = grid.spacing
    before = {id(spot): grid.cell_of(spot).index for spot in spread_spots}

    far_away = make_spot(45.0, -60.0)
    grid.bind(far_away)

    assert grid.spacing == spacing
    assert {id(spot): grid.cell_of(spot).index for spot in spread_spots} == before
    assert far_away in grid.points


def test_rebin_all_resizes_spacing_for_new_population(spread_spots, make_spot):
    grid = SpatialGrid(2, 2, spread_spots)
    dy, dz = grid.spacing

    grid.bind(make_spot(45.0, -60.0))
    grid.rebin_all()

    new_dy, new_dz = grid.spacing
    assert new_dy > dy
    assert new_dz > dz
    assert sum(len(cell.points) for cell in grid.cells()) == len(spread_spots) + 1


def test_walk_terminates_within_lattice_size(spread_spots):
    grid = SpatialGrid(2, 2, spread_spots)

    targets = [
        SphericalPoint.from_degrees(lat, lng)
        for lat, lng in [(40.0, -73.0), (41.5, -75.0), (38.0, -70.0), (-30.0, 100.0), (89.0, 0.0)]
    ]
    for target in targets:
        cell, hops = grid.walk(target)
        assert hops <= grid.cell_count
        assert grid.locate(target) is cell


def test_walk_to_a_corner_takes_manhattan_hops(spread_spots):
    grid = SpatialGrid(2, 2, spread_spots)
    corner = grid.cell(4, 4)

    cell, hops = grid.walk(SphericalPoint(corner.latitude, corner.longitude))

    assert cell is corner
    assert hops == 4


def test_empty_grid_builds_on_first_successful_bind(make_spot):
    grid = SpatialGrid(1, 1)
    assert not grid.is_built
    with pytest.raises(RuntimeError):
        grid.center_cell

    first = make_spot(0.0, 0.0)
    with pytest.raises(DegenerateExtentError):
        grid.bind(first)
    assert not grid.is_built

    second = make_spot(0.0, 1.0)
    cell = grid.bind(second)

    assert grid.is_built
    assert cell.index == (2, 1)
    assert grid.cell_of(first).index == (0, 1)


def test_failed_build_keeps_previous_lattice(spread_spots, make_spot):
    grid = SpatialGrid(1, 1, spread_spots)
    spacing = grid.spacing
    center = grid.center_cell

    with pytest.raises(DegenerateExtentError):
        grid.build([make_spot(10.0, 10.0)])

    assert grid.spacing == spacing
    assert grid.center_cell is center
    assert list(grid.points) == spread_spots


def test_bind_rejects_items_without_coordinates(spread_spots, unlocated_spot):
    grid = SpatialGrid(1, 1, spread_spots)

    with pytest.raises(ValueError):
        grid.bind(unlocated_spot)
    with pytest.raises(ValueError):
        grid.locate(unlocated_spot)


def test_walk_rejects_items_without_coordinates(spread_spots, unlocated_spot):
    grid = SpatialGrid(1, 1, spread_spots)

    with pytest.raises(ValueError):
        grid.walk(unlocated_spot)
