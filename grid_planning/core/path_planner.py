"""
Abstract base class for all grid path planning algorithms.

This module defines the common interface that all planners (Dijkstra, A*,
JPS, LPA*, D* Lite, RRT, RRT*, ACO, GA) implement.
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import numpy as np

from .exceptions import ConfigurationError, InvalidInputError
from .grid import Grid, CellType
from .node import Node
from ..utils.geometry import euclidean_distance

logger = logging.getLogger(__name__)

CellLike = Union[Node, Sequence[int]]


class PathPlanner(ABC):
    """
    Abstract base class for grid path planning algorithms.

    Subclasses implement ``_plan`` for a validated start and goal;
    ``plan`` wraps it with input checks, timing and logging.

    Attributes:
        grid (Grid): The occupancy grid to plan on
        config (Dict[str, Any]): Algorithm configuration, as loaded from YAML
        params (Dict[str, Any]): The ``parameters`` section of config
        path (List[Node]): Path found by the last planning run
        success (bool): Whether the last planning run reached the goal
        planning_time (float): Time taken by the last run (seconds)
        movement_model (str): Which cell pairs may be consecutive in a path
    """

    movement_model = '4-connected'
    name = 'Planner'

    def __init__(self, grid: Union[Grid, Any], config: Optional[Dict[str, Any]] = None, **overrides):
        """
        Bind the planner to a grid and its configuration.

        Args:
            grid: Grid object, or a rectangular array of cell codes
            config: Algorithm configuration dictionary loaded from YAML
            **overrides: Parameter values that take precedence over
                         ``config['parameters']``
        """
        self.grid = grid if isinstance(grid, Grid) else Grid(grid)
        self.config = dict(config or {})
        self.params: Dict[str, Any] = dict(self.config.get('parameters') or {})
        self.params.update({k: v for k, v in overrides.items() if v is not None})

        self.path: List[Node] = []
        self.success: bool = False
        self.planning_time: float = 0.0
        self.start_node: Optional[Node] = None
        self.goal_node: Optional[Node] = None
        self._initialize_algorithm()

    @abstractmethod
    def _initialize_algorithm(self) -> None:
        """
        Read parameters and set up algorithm-specific data structures.

        Called once from __init__.
        """
        pass

    @abstractmethod
    def _plan(self, start: Node, goal: Node) -> Tuple[bool, List[Node]]:
        """
        Search for a path between two validated, distinct cells.

        Args:
            start: Start node created by ``grid.node`` (cost 0, own parent)
            goal: Goal node created by ``grid.node``

        Returns:
            (True, path) with path running from start to goal, or
            (False, []) when no path was found
        """
        pass

    @abstractmethod
    def get_metrics(self) -> Dict[str, Any]:
        """
        Statistics describing the last call to plan().

        Returns:
            Dictionary containing at least:
            - algorithm (str): Planner name
            - path_length (float): Euclidean length of the returned path
            - planning_time (float): Wall-clock seconds spent in plan()
            - nodes_explored (int): Number of nodes expanded or sampled
            - path_exists (bool): Whether the last run succeeded
        """
        pass

    def plan(self, start: CellLike, goal: CellLike) -> Tuple[bool, List[Node]]:
        """
        Compute a path from start to goal.

        Args:
            start: Start cell as a Node or an (x, y) pair
            goal: Goal cell as a Node or an (x, y) pair

        Returns:
            (success, path). On success the path is a non-empty list of
            nodes whose first element is the start and last element the
            goal. On failure the path is empty.

        Raises:
            InvalidInputError: If start or goal is outside the grid or on
                               an obstacle

        Example:
            >>> planner = AStarPlanner(grid)
            >>> success, path = planner.plan((0, 0), (4, 4))
            >>> if success:
            ...     print([node.position for node in path])
        """
        start_node = self._to_node(start, 'Start')
        goal_node = self._to_node(goal, 'Goal')

        start_time = time.perf_counter()
        self.start_node = start_node
        self.goal_node = goal_node

        if start_node == goal_node:
            success, path = True, [start_node]
        else:
            success, path = self._plan(start_node, goal_node)
            if not success:
                path = []

        self.success = success
        self.path = path
        self.planning_time = time.perf_counter() - start_time

        if success:
            logger.info("%s: path found from %s to %s with %d nodes in %.4fs",
                        self.name, start_node.position, goal_node.position,
                        len(path), self.planning_time)
        else:
            logger.warning("%s: no path from %s to %s (%.4fs)",
                           self.name, start_node.position, goal_node.position,
                           self.planning_time)
        return success, path

    def _to_node(self, cell: CellLike, label: str) -> Node:
        """Validate a start/goal cell and build a fresh node for it."""
        if isinstance(cell, Node):
            x, y = cell.x, cell.y
        else:
            try:
                raw_x, raw_y = cell
                x, y = int(raw_x), int(raw_y)
            except (TypeError, ValueError):
                raise InvalidInputError(f"{label} must be a Node or an (x, y) pair, got {cell!r}")
            if (x, y) != (raw_x, raw_y):
                raise InvalidInputError(f"{label} must have integer coordinates, got {cell!r}")

        if not self.grid.in_bounds(x, y):
            raise InvalidInputError(f"{label} ({x}, {y}) is outside grid of shape {self.grid.shape}")
        if self.grid.is_obstacle(x, y):
            raise InvalidInputError(f"{label} ({x}, {y}) is on an obstacle")
        return self.grid.node(x, y)

    def _make_rng(self):
        """
        Random generator for one planning run.

        An injected generator is used as-is. Otherwise a new generator is
        seeded from ``random_seed`` on every call, so a fixed seed gives
        the same result on every run.
        """
        rng = self.params.get('rng')
        if rng is not None:
            return rng
        return np.random.default_rng(self.params.get('random_seed'))

    def _require(self, name: str, value, condition: bool, expectation: str):
        """Return value, or raise ConfigurationError when condition fails."""
        if not condition:
            raise ConfigurationError(f"{self.name}: '{name}' must be {expectation}, got {value!r}")
        return value

    def is_valid_step(self, a: Node, b: Node) -> bool:
        """
        Check whether two consecutive path nodes obey the movement model.

        Grid searches need adjacent cells; sampling planners need a free
        straight segment no longer than their threshold.
        """
        dx, dy = abs(a.x - b.x), abs(a.y - b.y)
        if self.movement_model == '4-connected':
            return dx + dy == 1
        if self.movement_model == '8-connected':
            return b.position in self.grid.neighbors(a.x, a.y, 8)
        threshold = getattr(self, 'threshold', float('inf'))
        return a.distance_to(b) <= threshold and self.grid.is_segment_free(a.position, b.position)

    def validate_path(self) -> bool:
        """
        Validate the computed path.

        Checks the endpoints, that every node is a free cell and that every
        consecutive pair obeys the movement model.

        Returns:
            True if a path exists and is valid
            False if no path exists or it breaks a rule
        """
        if not self.success or not self.path:
            return False
        if self.path[0] != self.start_node or self.path[-1] != self.goal_node:
            return False
        if any(not self.grid.is_free(node.x, node.y) for node in self.path):
            return False

        for i in range(len(self.path) - 1):
            if not self.is_valid_step(self.path[i], self.path[i + 1]):
                return False

        return True

    def get_path_length(self) -> float:
        """
        Sum of Euclidean step lengths along the last path.

        Returns:
            Path length in cells
            0.0 if no path exists
        """
        if len(self.path) < 2:
            return 0.0

        return sum(euclidean_distance(self.path[i].position, self.path[i + 1].position)
                   for i in range(len(self.path) - 1))

    def path_positions(self) -> List[Tuple[int, int]]:
        """The computed path as a list of (x, y) pairs."""
        return [node.position for node in self.path]

    def visualize(self, ax, **kwargs) -> None:
        """
        Draw the grid and the last path onto a matplotlib axis.

        Args:
            ax: Axis that receives the drawing
            **kwargs: Passed to ``draw_grid`` (path_color, path_label, ...)
        """
        from ..utils.visualization import draw_grid

        visualization = self.config.get('visualization') or {}
        kwargs.setdefault('path_color', visualization.get('path_color', 'blue'))
        draw_grid(
            ax,
            self.grid,
            path=self.path_positions() or None,
            start=self.start_node.position if self.start_node else None,
            goal=self.goal_node.position if self.goal_node else None,
            path_label=kwargs.pop('path_label', f"{self.name} Path"),
            **kwargs
        )
        ax.set_title(f"{self.name}\n"
                     f"Length: {self.get_path_length():.2f}, "
                     f"Time: {self.planning_time:.3f}s")

    def __repr__(self) -> str:
        """Class name and last outcome."""
        return f"{self.__class__.__name__}(grid={self.grid!r}, params={self.params})"

    def __str__(self) -> str:
        """Class name and last outcome."""
        status = "with path" if self.success else "no path"
        return f"{self.__class__.__name__} ({status})"


class IncrementalPathPlanner(PathPlanner):
    """
    Base class for planners that repair their search after grid changes.

    Obstacles may be added or removed between ``plan`` calls through
    ``update_cell``. The changed cells are queued and handed to the
    planner at the start of the next call, which reuses its previous
    search when start and goal allow it.

    Attributes:
        verbose (bool): Log every expansion at INFO level
    """

    def _initialize_algorithm(self) -> None:
        self.verbose = bool(self.params.get('verbose', False))
        self._changed_cells: List[Tuple[int, int]] = []
        self.nodes_explored = 0

    def update_cell(self, x: int, y: int, value: int = CellType.OBSTACLE) -> None:
        """
        Change one cell of the grid between planning cycles.

        Args:
            x: Row index
            y: Column index
            value: New cell code (default: obstacle)

        Raises:
            IndexError: If the cell is outside the grid
        """
        was_obstacle = self.grid.is_obstacle(x, y)
        self.grid.set_cell(x, y, value)
        if was_obstacle != self.grid.is_obstacle(x, y):
            self._changed_cells.append((x, y))
            logger.debug("%s: cell (%d, %d) changed to %d", self.name, x, y, value)

    def _take_changes(self) -> List[Tuple[int, int]]:
        changes, self._changed_cells = self._changed_cells, []
        return changes

    def _edge_cost(self, a: Tuple[int, int], b: Tuple[int, int]) -> float:
        """Unit cost between free neighbours, infinite if either is blocked."""
        if self.grid.is_obstacle(*a) or self.grid.is_obstacle(*b):
            return float('inf')
        return 1.0

    def _grid_neighbors(self, x: int, y: int) -> List[Tuple[int, int]]:
        """All in-bounds 4-neighbours, blocked or not."""
        return [(x + dx, y + dy) for dx, dy in ((0, 1), (1, 0), (0, -1), (-1, 0))
                if self.grid.in_bounds(x + dx, y + dy)]

    def _log_expansion(self, cell: Tuple[int, int], g: float, rhs: float) -> None:
        if self.verbose:
            logger.info("%s: expand %s g=%s rhs=%s", self.name, cell, g, rhs)
