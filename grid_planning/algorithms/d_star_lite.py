"""
D* Lite on a 4-connected grid.

D* Lite searches backwards from the goal, so the start can move between
planning calls (as a robot advances along its path) while the previous
search is reused. The key modifier ``km`` keeps queued keys valid after
the start moves.

Reference: Koenig, Likhachev, "D* Lite", AAAI 2002.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from ..core.exceptions import InternalInvariantError
from ..core.path_planner import IncrementalPathPlanner
from ..core.node import Node
from ..utils.geometry import manhattan_distance
from ..utils.priority_queue import KeyedPriorityQueue

logger = logging.getLogger(__name__)

Cell = Tuple[int, int]
INF = float('inf')


class DStarLitePlanner(IncrementalPathPlanner):
    """
    D* Lite path planning algorithm.

    Calling ``plan`` again with the same goal reuses the previous search:
    the start may have moved and cells may have changed through
    ``update_cell``. A different goal restarts the search.

    Attributes:
        g (Dict[Cell, float]): Cost-to-goal estimates
        rhs (Dict[Cell, float]): One-step lookahead values
        km (float): Accumulated heuristic offset from start moves
        queue (KeyedPriorityQueue): Locally inconsistent cells
        nodes_explored (int): Expansions in the last call
    """

    name = 'D* Lite'
    movement_model = '4-connected'

    def _initialize_algorithm(self) -> None:
        """Initialize D* Lite-specific data structures."""
        super()._initialize_algorithm()
        self.g: Dict[Cell, float] = {}
        self.rhs: Dict[Cell, float] = {}
        self.km = 0.0
        self.queue = KeyedPriorityQueue()
        self._start: Optional[Cell] = None
        self._last: Optional[Cell] = None
        self._goal: Optional[Cell] = None
        self.replans = 0

    def _calculate_key(self, cell: Cell) -> Tuple[float, float]:
        best = min(self.g.get(cell, INF), self.rhs.get(cell, INF))
        return best + manhattan_distance(self._start, cell) + self.km, best

    def _reset(self, start: Cell, goal: Cell) -> None:
        """Start a fresh backward search towards a new goal."""
        self._start = self._last = start
        self._goal = goal
        self.km = 0.0
        self.g = {}
        self.rhs = {goal: 0.0}
        self.queue = KeyedPriorityQueue()
        self.queue.push(goal, self._calculate_key(goal))
        self._changed_cells = []

    def _update_vertex(self, cell: Cell) -> None:
        if cell != self._goal:
            x, y = cell
            self.rhs[cell] = min(
                (self._edge_cost(cell, succ) + self.g.get(succ, INF)
                 for succ in self._grid_neighbors(x, y)),
                default=INF
            )
        self.queue.remove(cell)
        if self.g.get(cell, INF) != self.rhs.get(cell, INF):
            self.queue.push(cell, self._calculate_key(cell))

    def _compute_shortest_path(self) -> None:
        start = self._start
        while (self.queue.top_key() < self._calculate_key(start)
               or self.rhs.get(start, INF) != self.g.get(start, INF)):
            if not self.queue:
                break
            cell, k_old = self.queue.pop()
            self.nodes_explored += 1
            k_new = self._calculate_key(cell)
            g, rhs = self.g.get(cell, INF), self.rhs.get(cell, INF)
            self._log_expansion(cell, g, rhs)

            if k_old < k_new:
                # Key went stale after the start moved
                self.queue.push(cell, k_new)
            elif g > rhs:
                self.g[cell] = rhs
                for pred in self._grid_neighbors(*cell):
                    self._update_vertex(pred)
            else:
                self.g[cell] = INF
                for pred in self._grid_neighbors(*cell) + [cell]:
                    self._update_vertex(pred)

    def _plan(self, start: Node, goal: Node) -> Tuple[bool, List[Node]]:
        """
        Plan, or replan after the start moved or cells changed.

        Args:
            start: Start node (current robot cell)
            goal: Goal node

        Returns:
            (True, path) if the goal is reachable, (False, []) otherwise
        """
        self.nodes_explored = 0
        if goal.position != self._goal:
            self._reset(start.position, goal.position)
        else:
            self.replans += 1
            self._start = start.position
            self.km += manhattan_distance(self._last, self._start)
            self._last = self._start

            changes = self._take_changes()
            logger.debug("D* Lite: replanning with km=%.1f after %d cell changes", self.km, len(changes))
            for x, y in changes:
                self._update_vertex((x, y))
                for neighbor in self._grid_neighbors(x, y):
                    self._update_vertex(neighbor)

        self._compute_shortest_path()

        if self.g.get(self._start, INF) == INF:
            return False, []
        return True, self._extract_path(start, goal)

    def _extract_path(self, start: Node, goal: Node) -> List[Node]:
        """Descend the cost-to-goal field from the start."""
        cells = [start.position]
        current = start.position
        while current != goal.position:
            best = min(
                self._grid_neighbors(*current),
                key=lambda s: (self._edge_cost(current, s) + self.g.get(s, INF), s)
            )
            if self.g.get(best, INF) == INF or len(cells) > self.grid.size:
                raise InternalInvariantError(f"D* Lite: no finite descent from {current}")
            cells.append(best)
            current = best

        path = []
        for i, (x, y) in enumerate(cells):
            # Node cost is the distance travelled from the start
            node = self.grid.node(x, y, cost=float(i),
                                  heuristic=self.g[(x, y)])
            if i > 0:
                node.parent_id = path[-1].id
            path.append(node)
        return path

    def get_metrics(self) -> Dict[str, Any]:
        """Get D* Lite performance metrics."""
        return {
            'algorithm': 'D* Lite',
            'path_length': self.get_path_length(),
            'planning_time': self.planning_time,
            'nodes_explored': self.nodes_explored,
            'replans': self.replans,
            'km': self.km,
            'path_exists': self.success
        }
