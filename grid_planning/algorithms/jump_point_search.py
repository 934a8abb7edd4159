"""
Jump Point Search (JPS) on an 8-connected grid.

JPS is A* with symmetry breaking: instead of pushing every neighbour, it
jumps along straight and diagonal lines and only stops at cells where
the optimal path may turn (jump points).
"""

import heapq
import logging
import math
from typing import Any, Dict, List, Optional, Tuple

from ..core.path_planner import PathPlanner
from ..core.node import Node
from ..utils.geometry import euclidean_distance, line_cells, octile_distance

logger = logging.getLogger(__name__)

Cell = Tuple[int, int]

DIRECTIONS = [(0, 1), (1, 0), (0, -1), (-1, 0), (1, 1), (1, -1), (-1, 1), (-1, -1)]


class JumpPointSearchPlanner(PathPlanner):
    """
    Jump Point Search path planning algorithm.

    Diagonal moves are only allowed when both orthogonal cells beside them
    are free, matching ``Grid.neighbors(..., connectivity=8)``. Straight
    steps cost 1 and diagonal steps sqrt(2); the octile distance is used
    as heuristic.

    The search runs over jump points only; the returned path is expanded
    back into a sequence of 8-adjacent cells.

    Attributes:
        jump_points (List[Cell]): Jump points of the last path
        nodes_explored (int): Number of jump points expanded
    """

    name = 'Jump Point Search'
    movement_model = '8-connected'

    def _initialize_algorithm(self) -> None:
        """Initialize JPS-specific data structures."""
        self.jump_points: List[Cell] = []
        self.nodes_explored = 0
        self._goal: Cell = (-1, -1)

    def _can_step(self, x: int, y: int, dx: int, dy: int) -> bool:
        """Check a single step from (x, y) in direction (dx, dy)."""
        if not self.grid.is_free(x + dx, y + dy):
            return False
        if dx != 0 and dy != 0:
            return self.grid.is_free(x + dx, y) and self.grid.is_free(x, y + dy)
        return True

    def _jump(self, x: int, y: int, dx: int, dy: int) -> Optional[Cell]:
        """
        Move from (x, y) in direction (dx, dy) until a jump point is found.

        Returns:
            The jump point, or None if the line runs into an obstacle or
            the grid boundary first
        """
        free = self.grid.is_free
        while self._can_step(x, y, dx, dy):
            x, y = x + dx, y + dy

            if (x, y) == self._goal:
                return x, y

            if dx != 0 and dy != 0:
                # Diagonal: stop if a straight jump from here finds something
                if self._jump(x, y, dx, 0) is not None or self._jump(x, y, 0, dy) is not None:
                    return x, y
            elif dx != 0:
                # Moving along rows: an opening beside us that was blocked one step back
                if (free(x, y - 1) and not free(x - dx, y - 1)) or \
                   (free(x, y + 1) and not free(x - dx, y + 1)):
                    return x, y
            else:
                if (free(x - 1, y) and not free(x - 1, y - dy)) or \
                   (free(x + 1, y) and not free(x + 1, y - dy)):
                    return x, y

        return None

    def _plan(self, start: Node, goal: Node) -> Tuple[bool, List[Node]]:
        """
        Search jump points from start to goal with A*.

        Args:
            start: Start node
            goal: Goal node

        Returns:
            (True, path) if the goal is reachable, (False, []) otherwise
        """
        self._goal = goal.position
        self.nodes_explored = 0
        self.jump_points = []

        g_score: Dict[Cell, float] = {start.position: 0.0}
        came_from: Dict[Cell, Cell] = {}
        closed = set()
        open_set = [(octile_distance(start.position, self._goal), 0.0, start.position)]

        while open_set:
            _, g, current = heapq.heappop(open_set)
            if current in closed:
                continue
            closed.add(current)
            self.nodes_explored += 1

            if current == self._goal:
                self.jump_points = self._reconstruct_jump_points(came_from, current)
                return True, self._expand_path(self.jump_points)

            for dx, dy in DIRECTIONS:
                jump_point = self._jump(current[0], current[1], dx, dy)
                if jump_point is None or jump_point in closed:
                    continue

                tentative_g = g + euclidean_distance(current, jump_point)
                if tentative_g < g_score.get(jump_point, float('inf')):
                    g_score[jump_point] = tentative_g
                    came_from[jump_point] = current
                    f = tentative_g + octile_distance(jump_point, self._goal)
                    heapq.heappush(open_set, (f, tentative_g, jump_point))

        logger.debug("JPS found no path after %d jump point expansions", self.nodes_explored)
        return False, []

    @staticmethod
    def _reconstruct_jump_points(came_from: Dict[Cell, Cell], current: Cell) -> List[Cell]:
        points = [current]
        while current in came_from:
            current = came_from[current]
            points.append(current)
        return points[::-1]

    def _expand_path(self, jump_points: List[Cell]) -> List[Node]:
        """
        Fill in the cells between consecutive jump points.

        Costs accumulate 1 per straight step and sqrt(2) per diagonal step.
        """
        cells = [jump_points[0]]
        for a, b in zip(jump_points, jump_points[1:]):
            cells.extend(list(line_cells(a, b))[1:])

        path = []
        parent: Optional[Node] = None
        for x, y in cells:
            node = self.grid.node(x, y, heuristic=octile_distance((x, y), self._goal))
            if parent is not None:
                node.parent_id = parent.id
                node.cost = parent.cost + (math.sqrt(2) if x != parent.x and y != parent.y else 1.0)
            path.append(node)
            parent = node
        return path

    def get_metrics(self) -> Dict[str, Any]:
        """Get JPS performance metrics."""
        return {
            'algorithm': 'Jump Point Search',
            'path_length': self.get_path_length(),
            'planning_time': self.planning_time,
            'nodes_explored': self.nodes_explored,
            'jump_points': len(self.jump_points),
            'path_exists': self.success
        }
