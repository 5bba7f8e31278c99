from __future__ import annotations

import math
from dataclasses import dataclass

from crs.contracts import Direction, Side


@dataclass(slots=True, frozen=True)
class GridShape:
    rows: int
    cols: int


@dataclass(slots=True, frozen=True)
class SidePorts:
    side: Side
    entry: int
    exit: int


@dataclass(slots=True)
class RotationPath:
    order: list[int]
    forward: dict[int, int]
    backward: dict[int, int]

    def successors(self, direction: Direction) -> dict[int, int]:
        return self.forward if direction == Direction.FORWARD else self.backward


def resolve_grid(court_size: int) -> GridShape:
    if court_size <= 3:
        return GridShape(rows=1, cols=max(court_size, 0))
    if court_size == 4:
        return GridShape(rows=2, cols=2)
    if court_size <= 6:
        return GridShape(rows=2, cols=3)
    if court_size <= 9:
        return GridShape(rows=3, cols=3)
    return GridShape(rows=math.ceil(court_size / 4), cols=4)


def perimeter_order(shape: GridShape, court_size: int) -> list[int]:
    if court_size <= 0:
        return []
    if shape.rows == 1:
        return list(range(court_size))

    rows, cols = shape.rows, shape.cols
    cells = [c for c in range(cols)]
    cells += [r * cols + cols - 1 for r in range(1, rows)]
    cells += [(rows - 1) * cols + c for c in range(cols - 2, -1, -1)]
    cells += [r * cols for r in range(rows - 2, 0, -1)]

    order: list[int] = []
    seen: set[int] = set()
    for idx in cells:
        if idx < court_size and idx not in seen:
            seen.add(idx)
            order.append(idx)
    # interior cells of 3+ row grids are not on the perimeter; they close the cycle
    for idx in range(court_size):
        if idx not in seen:
            seen.add(idx)
            order.append(idx)
    return order


def build_rotation_path(shape: GridShape, court_size: int) -> RotationPath:
    order = perimeter_order(shape, court_size)
    forward: dict[int, int] = {}
    for pos, idx in enumerate(order):
        forward[idx] = order[(pos + 1) % len(order)]
    backward = {dst: src for src, dst in forward.items()}
    return RotationPath(order=order, forward=forward, backward=backward)


def side_ports(shape: GridShape, court_size: int, direction: Direction) -> dict[Side, SidePorts]:
    last = max(court_size - 1, 0)
    a_front = 0
    a_back = min((shape.rows - 1) * shape.cols, last)
    b_front = min(max(shape.cols - 1, 0), last)
    b_back = min((shape.rows - 1) * shape.cols + shape.cols - 1, last)

    if direction == Direction.FORWARD:
        return {
            Side.A: SidePorts(Side.A, entry=a_front, exit=a_back),
            Side.B: SidePorts(Side.B, entry=b_back, exit=b_front),
        }
    return {
        Side.A: SidePorts(Side.A, entry=a_back, exit=a_front),
        Side.B: SidePorts(Side.B, entry=b_front, exit=b_back),
    }


def substituting_sides(ports: dict[Side, SidePorts]) -> list[Side]:
    """Sides allowed to substitute; side B yields when its ports collide with side A's."""
    a_slots = {ports[Side.A].entry, ports[Side.A].exit}
    b_slots = {ports[Side.B].entry, ports[Side.B].exit}
    if a_slots & b_slots:
        return [Side.A]
    return [Side.A, Side.B]


def describe_court(court_size: int) -> dict[str, object]:
    shape = resolve_grid(court_size)
    path = build_rotation_path(shape, court_size)
    return {
        "rows": shape.rows,
        "cols": shape.cols,
        "forward": dict(path.forward),
        "backward": dict(path.backward),
        "ports": {
            direction.value: {
                side.value: {"entry": p.entry, "exit": p.exit}
                for side, p in side_ports(shape, court_size, direction).items()
            }
            for direction in Direction
        },
    }
