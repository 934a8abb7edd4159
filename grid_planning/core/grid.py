"""
Occupancy grid representation for path planning.

This module defines the Grid class which encapsulates the planning space,
cell classification, neighbourhoods and straight-line collision checking.
"""

from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .node import Node
from ..utils.geometry import supercover_cells


class CellType:
    """Grid cell classification codes"""
    FREE = 0        # Traversable space
    OBSTACLE = 1    # Blocked cell
    START = 2       # Overlay: start cell
    PATH = 3        # Overlay: cell on a returned path
    CURRENT = 4     # Overlay: live robot position (reserved)
    GOAL = 5        # Overlay: goal cell


# Neighbour offsets, in the order planners expand them
MOTIONS_4 = [(0, 1), (1, 0), (0, -1), (-1, 0)]
MOTIONS_8 = MOTIONS_4 + [(1, 1), (1, -1), (-1, 1), (-1, -1)]


class Grid:
    """
    Two-dimensional occupancy grid.

    Cell (x, y) is ``cells[x][y]``: x indexes rows, y indexes columns. Every
    code other than ``CellType.OBSTACLE`` is traversable; the remaining codes
    only matter for display.

    Attributes:
        cells (np.ndarray): Integer cell codes, shape (rows, cols)
        rows (int): Number of rows
        cols (int): Number of columns
    """

    def __init__(self, cells: Any):
        """
        Initialize the grid from a rectangular array of cell codes.

        Args:
            cells: Nested sequence or array of integer codes (0 free, 1 obstacle)

        Raises:
            ValueError: If the array is not two-dimensional or is empty

        Example:
            >>> grid = Grid([[0, 0, 0],
            ...              [1, 1, 0],
            ...              [0, 0, 0]])
            >>> grid.is_free(1, 2)
            True
        """
        array = np.array(cells, dtype=int)
        if array.ndim != 2 or array.size == 0:
            raise ValueError(f"Grid must be a non-empty 2D array, got shape {array.shape}")

        self.cells = array
        self.rows, self.cols = array.shape

    @classmethod
    def empty(cls, rows: int, cols: Optional[int] = None) -> 'Grid':
        """Create an obstacle-free grid (square when cols is omitted)."""
        cols = rows if cols is None else cols
        return cls(np.zeros((rows, cols), dtype=int))

    @classmethod
    def from_obstacles(cls, rows: int, cols: Optional[int],
                       obstacles: Iterable[Sequence[int]]) -> 'Grid':
        """
        Create a grid with the listed cells marked as obstacles.

        Args:
            rows: Number of rows
            cols: Number of columns (square grid when None)
            obstacles: Obstacle cells [(x1, y1), (x2, y2), ...]
        """
        grid = cls.empty(rows, cols)
        for x, y in obstacles:
            grid.set_cell(x, y, CellType.OBSTACLE)
        return grid

    @classmethod
    def from_config(cls, grid_config: Dict[str, Any]) -> 'Grid':
        """
        Create a grid from its YAML configuration section.

        Either ``cells`` (explicit rows of codes) or ``size`` plus an
        optional ``obstacles`` list must be given. ``size`` is an integer
        for square grids or a ``{rows, cols}`` mapping.

        Raises:
            ValueError: If neither layout is present
        """
        if 'cells' in grid_config:
            return cls(grid_config['cells'])

        if 'size' not in grid_config:
            raise ValueError("Grid configuration needs either 'cells' or 'size'")

        size = grid_config['size']
        if isinstance(size, dict):
            rows, cols = size['rows'], size['cols']
        else:
            rows, cols = size, size
        return cls.from_obstacles(rows, cols, grid_config.get('obstacles', []))

    @property
    def shape(self) -> Tuple[int, int]:
        return self.rows, self.cols

    @property
    def size(self) -> int:
        """Total number of cells."""
        return self.rows * self.cols

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.rows and 0 <= y < self.cols

    def is_obstacle(self, x: int, y: int) -> bool:
        """True for in-bounds obstacle cells."""
        return self.in_bounds(x, y) and self.cells[x, y] == CellType.OBSTACLE

    def is_free(self, x: int, y: int) -> bool:
        """True for in-bounds cells a planner may occupy."""
        return self.in_bounds(x, y) and self.cells[x, y] != CellType.OBSTACLE

    def set_cell(self, x: int, y: int, value: int) -> None:
        """
        Overwrite one cell code.

        Raises:
            IndexError: If (x, y) lies outside the grid
        """
        if not self.in_bounds(x, y):
            raise IndexError(f"Cell ({x}, {y}) outside grid of shape {self.shape}")
        self.cells[x, y] = value

    def node_id(self, x: int, y: int) -> int:
        """Canonical identifier of a cell."""
        return x * self.cols + y

    def coords(self, node_id: int) -> Tuple[int, int]:
        """Inverse of node_id."""
        return divmod(node_id, self.cols)

    def node(self, x: int, y: int, cost: float = 0.0, heuristic: float = 0.0) -> Node:
        """Create a root node for a cell: its parent is itself."""
        node_id = self.node_id(x, y)
        return Node(x, y, cost, heuristic, node_id, node_id)

    def neighbors(self, x: int, y: int, connectivity: int = 4) -> List[Tuple[int, int]]:
        """
        Get free neighbouring cells.

        With 8-connectivity a diagonal step is only allowed when both
        orthogonal cells beside it are free, so paths never cut corners.

        Args:
            x: Row index
            y: Column index
            connectivity: 4 or 8

        Returns:
            List of free (x, y) neighbours
        """
        if connectivity not in (4, 8):
            raise ValueError(f"Connectivity must be 4 or 8, got {connectivity}")

        motions = MOTIONS_4 if connectivity == 4 else MOTIONS_8
        result = []
        for dx, dy in motions:
            nx, ny = x + dx, y + dy
            if not self.is_free(nx, ny):
                continue
            if dx != 0 and dy != 0 and not (self.is_free(x + dx, y) and self.is_free(x, y + dy)):
                continue
            result.append((nx, ny))
        return result

    def obstacle_cells(self) -> np.ndarray:
        """Coordinates of all obstacle cells as an array of shape (k, 2)."""
        return np.argwhere(self.cells == CellType.OBSTACLE)

    def free_cells(self) -> np.ndarray:
        """Coordinates of all traversable cells as an array of shape (k, 2)."""
        return np.argwhere(self.cells != CellType.OBSTACLE)

    def is_segment_free(self, a: Tuple[int, int], b: Tuple[int, int]) -> bool:
        """
        Check if the straight segment between two cell centres is collision-free.

        Every cell whose unit square touches the segment, endpoints
        included, must be free.

        Args:
            a: First cell (x, y)
            b: Second cell (x, y)

        Returns:
            True if no obstacle square touches the segment
        """
        if not (self.is_free(*a) and self.is_free(*b)):
            return False
        return all(self.is_free(x, y) for x, y in supercover_cells(a, b))

    def with_path_overlay(self, path: Sequence[Node],
                          start: Optional[Node] = None,
                          goal: Optional[Node] = None) -> np.ndarray:
        """
        Copy of the cell codes with a path drawn in.

        Path cells are marked ``PATH``, the start ``START`` and the goal
        ``GOAL``. Start and goal default to the ends of the path.
        """
        overlay = self.cells.copy()
        for node in path:
            overlay[node.x, node.y] = CellType.PATH

        if start is None and path:
            start = path[0]
        if goal is None and path:
            goal = path[-1]
        if start is not None:
            overlay[start.x, start.y] = CellType.START
        if goal is not None:
            overlay[goal.x, goal.y] = CellType.GOAL
        return overlay

    def copy(self) -> 'Grid':
        return Grid(self.cells.copy())

    def __repr__(self) -> str:
        """String representation of the grid."""
        return f"Grid(shape={self.shape}, obstacles={int(np.count_nonzero(self.cells == CellType.OBSTACLE))})"
