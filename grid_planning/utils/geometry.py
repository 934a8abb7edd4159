"""
Geometric utility functions for grid path planning.

This module provides the distance measures used as edge costs and
heuristics, and the segment rasterization used for straight-line
collision checking on a grid of unit-square cells.
"""

import math
from typing import Iterator, Tuple

Cell = Tuple[int, int]


def euclidean_distance(a: Tuple[float, float], b: Tuple[float, float]) -> float:
    """
    Straight-line distance between two points.

    Example:
        >>> euclidean_distance((0, 0), (3, 4))
        5.0
    """
    return math.hypot(b[0] - a[0], b[1] - a[1])


def manhattan_distance(a: Cell, b: Cell) -> int:
    """Sum of absolute coordinate differences (4-connected step count)."""
    return abs(b[0] - a[0]) + abs(b[1] - a[1])


def octile_distance(a: Cell, b: Cell) -> float:
    """
    Shortest 8-connected distance on an empty grid.

    Diagonal steps cost sqrt(2), straight steps cost 1.
    """
    dx = abs(b[0] - a[0])
    dy = abs(b[1] - a[1])
    return (math.sqrt(2) - 1) * min(dx, dy) + max(dx, dy)


def segment_intersects_cell(a: Tuple[float, float],
                            b: Tuple[float, float],
                            cell: Cell) -> bool:
    """
    Test if segment AB meets the closed unit square of a cell.

    Cell (i, j) covers [i - 0.5, i + 0.5] x [j - 0.5, j + 0.5]. The test
    clips the parametric segment A + t (B - A), t in [0, 1], against the
    four slabs of the square (Liang-Barsky). Touching an edge or a corner
    counts as an intersection.

    Args:
        a: Segment start (x, y)
        b: Segment end (x, y)
        cell: Grid cell (i, j)

    Returns:
        True if the segment and the square share at least one point
    """
    x0, y0 = a
    dx = b[0] - x0
    dy = b[1] - y0
    cx, cy = cell

    t_enter, t_exit = 0.0, 1.0
    for p, q in ((-dx, x0 - (cx - 0.5)),
                 (dx, (cx + 0.5) - x0),
                 (-dy, y0 - (cy - 0.5)),
                 (dy, (cy + 0.5) - y0)):
        if p == 0:
            # Parallel to this slab: outside it means no intersection at all
            if q < 0:
                return False
            continue
        t = q / p
        if p < 0:
            if t > t_exit:
                return False
            t_enter = max(t_enter, t)
        else:
            if t < t_enter:
                return False
            t_exit = min(t_exit, t)

    return t_enter <= t_exit


def supercover_cells(a: Cell, b: Cell) -> Iterator[Cell]:
    """
    Enumerate every cell the segment between two cell centres touches.

    This is the supercover of the segment: all cells whose closed unit
    square meets it, including the cells of both endpoints. Cells are
    yielded in row-major order of the segment's bounding box.

    Args:
        a: First cell (x, y)
        b: Second cell (x, y)

    Yields:
        Cells (x, y) touched by the segment

    Example:
        >>> sorted(supercover_cells((0, 0), (1, 1)))
        [(0, 0), (0, 1), (1, 0), (1, 1)]
    """
    x_min, x_max = min(a[0], b[0]), max(a[0], b[0])
    y_min, y_max = min(a[1], b[1]), max(a[1], b[1])

    for x in range(x_min, x_max + 1):
        for y in range(y_min, y_max + 1):
            if segment_intersects_cell(a, b, (x, y)):
                yield x, y


def line_cells(a: Cell, b: Cell) -> Iterator[Cell]:
    """
    Walk a straight or diagonal grid line one cell at a time.

    Used to expand the jump points of JPS into adjacent cells. Both
    endpoints are included.

    Raises:
        ValueError: If the two cells are not on a common row, column or
                    diagonal
    """
    dx = b[0] - a[0]
    dy = b[1] - a[1]
    if dx != 0 and dy != 0 and abs(dx) != abs(dy):
        raise ValueError(f"Cells {a} and {b} are not on a straight or diagonal line")

    steps = max(abs(dx), abs(dy))
    sx = (dx > 0) - (dx < 0)
    sy = (dy > 0) - (dy < 0)
    for i in range(steps + 1):
        yield a[0] + i * sx, a[1] + i * sy
