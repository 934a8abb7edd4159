"""
A* pathfinding algorithm on a 4-connected grid.

Best-first search ordered by cost so far plus an admissible estimate of
the remaining distance, so the first time the goal is popped its path is optimal.
"""

import heapq
import logging
import math
from typing import Any, Dict, List, Tuple

from ..core.path_planner import PathPlanner
from ..core.node import Node

logger = logging.getLogger(__name__)


class AStarPlanner(PathPlanner):
    """
    A* path planning algorithm.

    The heuristic steers expansion toward the goal,
    guaranteeing optimal paths when the heuristic is admissible. Both the
    Manhattan and the Euclidean heuristic are admissible for unit steps
    between 4-neighbours.

    Attributes:
        g_score (Dict[int, float]): Best known cost per cell id
        came_from (Dict[int, int]): Parent mapping for path reconstruction
        nodes_explored (int): Number of cells expanded during search
    """

    name = 'A*'
    movement_model = '4-connected'

    def _initialize_algorithm(self) -> None:
        """Reset the open set bookkeeping for a new query."""
        self.heuristic_type = self.params.get('heuristic_type', 'manhattan')
        self._require('heuristic_type', self.heuristic_type,
                      self.heuristic_type in ('manhattan', 'euclidean'),
                      "'manhattan' or 'euclidean'")
        self.g_score: Dict[int, float] = {}
        self.came_from: Dict[int, int] = {}
        self.nodes_explored = 0

    def _heuristic(self, x: int, y: int, goal: Node) -> float:
        """
        Compute heuristic estimate from a cell to the goal.

        Args:
            x: Row index of the cell
            y: Column index of the cell
            goal: Goal node

        Returns:
            Estimated cost from the cell to the goal
        """
        if self.heuristic_type == 'euclidean':
            return math.hypot(goal.x - x, goal.y - y)
        return abs(goal.x - x) + abs(goal.y - y)

    def _reconstruct_path(self, current_id: int, goal: Node) -> List[Node]:
        """
        Follow came_from links back from the goal.

        Args:
            current_id: Id of the goal cell

        Returns:
            List of nodes from start to goal
        """
        path = []
        while True:
            x, y = self.grid.coords(current_id)
            node = self.grid.node(x, y, cost=self.g_score[current_id],
                                  heuristic=self._heuristic(x, y, goal))
            parent_id = self.came_from.get(current_id, current_id)
            node.parent_id = parent_id
            path.append(node)
            if parent_id == current_id:
                break
            current_id = parent_id
        return path[::-1]

    def _plan(self, start: Node, goal: Node) -> Tuple[bool, List[Node]]:
        """
        Search the grid from start to goal, expanding cells by f = g + h.

        Args:
            start: Start node
            goal: Goal node

        Returns:
            (True, path) if the goal is reachable, (False, []) otherwise
        """
        self.nodes_explored = 0
        self.g_score = {start.id: 0.0}
        self.came_from = {}
        closed = set()

        # Priority queue: (f_score, h_score, node id)
        h_start = self._heuristic(start.x, start.y, goal)
        open_set = [(h_start, h_start, start.id)]

        # best-first expansion
        while open_set:
            _, _, current_id = heapq.heappop(open_set)
            if current_id in closed:
                continue
            closed.add(current_id)
            self.nodes_explored += 1

            # goal popped
            if current_id == goal.id:
                return True, self._reconstruct_path(current_id, goal)

            x, y = self.grid.coords(current_id)
            for nx, ny in self.grid.neighbors(x, y, connectivity=4):
                neighbor_id = self.grid.node_id(nx, ny)
                if neighbor_id in closed:
                    continue

                tentative_g_score = self.g_score[current_id] + 1.0
                if tentative_g_score < self.g_score.get(neighbor_id, float('inf')):
                    # cheaper route to neighbour
                    self.came_from[neighbor_id] = current_id
                    self.g_score[neighbor_id] = tentative_g_score
                    h = self._heuristic(nx, ny, goal)
                    heapq.heappush(open_set, (tentative_g_score + h, h, neighbor_id))

        logger.debug("A* open set exhausted after %d expansions", self.nodes_explored)
        return False, []

    def get_metrics(self) -> Dict[str, Any]:
        """
        Statistics of the last query.

        Returns:
            Dictionary with:
            - path_length: Length of the returned path
            - planning_time: Seconds spent in plan()
            - nodes_explored: Number of cells examined
        """
        return {
            'algorithm': 'A*',
            'heuristic_type': self.heuristic_type,
            'path_length': self.get_path_length(),
            'planning_time': self.planning_time,
            'nodes_explored': self.nodes_explored,
            'path_exists': self.success
        }
