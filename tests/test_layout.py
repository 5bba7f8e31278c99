from __future__ import annotations

import pytest

from crs.contracts import Direction, Side
from crs.court import GridShape, build_rotation_path, describe_court, resolve_grid, side_ports
from crs.court.layout import substituting_sides


@pytest.mark.parametrize(
    ("court_size", "shape"),
    [
        (1, GridShape(1, 1)),
        (3, GridShape(1, 3)),
        (4, GridShape(2, 2)),
        (5, GridShape(2, 3)),
        (6, GridShape(2, 3)),
        (7, GridShape(3, 3)),
        (9, GridShape(3, 3)),
        (10, GridShape(3, 4)),
        (12, GridShape(3, 4)),
    ],
)
def test_grid_shape_follows_court_size(court_size: int, shape: GridShape):
    assert resolve_grid(court_size) == shape


def test_six_court_forward_map_walks_the_perimeter_clockwise():
    path = build_rotation_path(resolve_grid(6), 6)
    assert path.forward == {0: 1, 1: 2, 2: 5, 5: 4, 4: 3, 3: 0}
    assert path.backward == {1: 0, 2: 1, 5: 2, 4: 5, 3: 4, 0: 3}


def test_partial_grids_skip_missing_cells():
    assert build_rotation_path(resolve_grid(4), 4).forward == {0: 1, 1: 3, 3: 2, 2: 0}
    assert build_rotation_path(resolve_grid(5), 5).forward == {0: 1, 1: 2, 2: 4, 4: 3, 3: 0}
    assert build_rotation_path(resolve_grid(3), 3).forward == {0: 1, 1: 2, 2: 0}
    assert build_rotation_path(resolve_grid(1), 1).forward == {0: 0}


def test_interior_cell_closes_the_cycle_on_a_nine_court():
    path = build_rotation_path(resolve_grid(9), 9)
    assert path.order == [0, 1, 2, 5, 8, 7, 6, 3, 4]


@pytest.mark.parametrize("court_size", range(1, 13))
def test_rotation_path_is_a_single_cycle_and_backward_inverts_forward(court_size: int):
    path = build_rotation_path(resolve_grid(court_size), court_size)
    assert sorted(path.forward) == list(range(court_size))
    assert sorted(path.forward.values()) == list(range(court_size))
    for src, dst in path.forward.items():
        assert path.backward[dst] == src

    seen = [0]
    while len(seen) < court_size:
        seen.append(path.forward[seen[-1]])
    assert sorted(seen) == list(range(court_size))
    assert path.forward[seen[-1]] == 0


def test_side_ports_swap_roles_with_direction():
    forward = side_ports(resolve_grid(6), 6, Direction.FORWARD)
    backward = side_ports(resolve_grid(6), 6, Direction.BACKWARD)

    assert (forward[Side.A].entry, forward[Side.A].exit) == (0, 3)
    assert (forward[Side.B].entry, forward[Side.B].exit) == (5, 2)
    assert (backward[Side.A].entry, backward[Side.A].exit) == (3, 0)
    assert (backward[Side.B].entry, backward[Side.B].exit) == (2, 5)


def test_single_slot_court_lets_only_side_a_substitute():
    ports = side_ports(resolve_grid(1), 1, Direction.FORWARD)
    assert substituting_sides(ports) == [Side.A]

    two = side_ports(resolve_grid(2), 2, Direction.FORWARD)
    assert substituting_sides(two) == [Side.A, Side.B]


@pytest.mark.parametrize("court_size", range(1, 13))
def test_ports_stay_inside_the_court(court_size: int):
    for direction in Direction:
        for port in side_ports(resolve_grid(court_size), court_size, direction).values():
            assert 0 <= port.entry < court_size
            assert 0 <= port.exit < court_size


def test_describe_court_reports_grid_and_ports():
    described = describe_court(6)
    assert (described["rows"], described["cols"]) == (2, 3)
    assert described["ports"]["forward"]["A"] == {"entry": 0, "exit": 3}
    assert described["ports"]["backward"]["B"] == {"entry": 2, "exit": 5}
