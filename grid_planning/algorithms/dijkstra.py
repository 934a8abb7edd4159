"""
Dijkstra's shortest path algorithm on a 4-connected grid.

Dijkstra's algorithm explores cells in order of increasing distance from
the start, without a heuristic.
"""

import heapq
import logging
from typing import Any, Dict, List, Tuple

from ..core.path_planner import PathPlanner
from ..core.node import Node

logger = logging.getLogger(__name__)


class DijkstraPlanner(PathPlanner):
    """
    Dijkstra's shortest path algorithm.

    Every step between 4-neighbours costs 1, so the returned path has the
    minimum number of cells.

    Attributes:
        distances (Dict[int, float]): Best known cost per cell id
        previous_nodes (Dict[int, int]): Parent id per reached cell id
        nodes_explored (int): Number of cells popped from the queue
    """

    name = 'Dijkstra'
    movement_model = '4-connected'

    def _initialize_algorithm(self) -> None:
        """Reset the frontier bookkeeping for a new query."""
        self.distances: Dict[int, float] = {}
        self.previous_nodes: Dict[int, int] = {}
        self.nodes_explored = 0

    def _plan(self, start: Node, goal: Node) -> Tuple[bool, List[Node]]:
        """
        Settle cells in order of path cost until the goal is reached.

        Args:
            start: Start node
            goal: Goal node

        Returns:
            (True, path) if the goal is reachable, (False, []) otherwise
        """
        self.nodes_explored = 0
        self.distances = {start.id: 0.0}
        self.previous_nodes = {start.id: start.id}

        # Priority queue: (distance, node id)
        priority_queue = [(0.0, start.id)]
        visited = set()

        while priority_queue:
            current_distance, current_id = heapq.heappop(priority_queue)

            if current_id in visited:
                continue

            visited.add(current_id)
            self.nodes_explored += 1

            # goal settled
            if current_id == goal.id:
                return True, self._reconstruct_path(start, goal)

            x, y = self.grid.coords(current_id)
            for nx, ny in self.grid.neighbors(x, y, connectivity=4):
                neighbor_id = self.grid.node_id(nx, ny)
                if neighbor_id in visited:
                    continue

                new_distance = current_distance + 1.0
                if new_distance < self.distances.get(neighbor_id, float('inf')):
                    self.distances[neighbor_id] = new_distance
                    self.previous_nodes[neighbor_id] = current_id
                    heapq.heappush(priority_queue, (new_distance, neighbor_id))

        logger.debug("Dijkstra exhausted the reachable region after %d cells", self.nodes_explored)
        return False, []

    def _reconstruct_path(self, start: Node, goal: Node) -> List[Node]:
        """Follow parent ids from the goal back to the start."""
        path = []
        current_id = goal.id
        while True:
            x, y = self.grid.coords(current_id)
            node = self.grid.node(x, y, cost=self.distances[current_id])
            node.parent_id = self.previous_nodes[current_id]
            path.append(node)
            if current_id == start.id:
                break
            current_id = self.previous_nodes[current_id]
        return path[::-1]  # Reverse to get start-to-goal order

    def get_metrics(self) -> Dict[str, Any]:
        """
        Statistics of the last query.

        Returns:
            Metric name to value
        """
        return {
            'algorithm': 'Dijkstra',
            'path_length': self.get_path_length(),
            'planning_time': self.planning_time,
            'nodes_explored': self.nodes_explored,
            'path_exists': self.success
        }
