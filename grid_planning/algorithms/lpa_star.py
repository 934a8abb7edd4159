"""
Lifelong Planning A* (LPA*) on a 4-connected grid.

LPA* keeps its g-values and right-hand-side values between planning
calls. When cells change between calls only the affected vertices are
updated, so replanning after a small change is much cheaper than a new
A* search.

Reference: Koenig, Likhachev, Furcy, "Lifelong Planning A*", 2004.
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


class LPAStarPlanner(IncrementalPathPlanner):
    """
    Lifelong Planning A* path planning algorithm.

    The search runs forward from the start. Calling ``plan`` again with
    the same start and goal after ``update_cell`` repairs the previous
    search; any other start or goal restarts it.

    Attributes:
        g (Dict[Cell, float]): Cost-so-far estimates
        rhs (Dict[Cell, float]): One-step lookahead values
        queue (KeyedPriorityQueue): Locally inconsistent cells
        nodes_explored (int): Expansions in the last call
    """

    name = 'LPA*'
    movement_model = '4-connected'

    def _initialize_algorithm(self) -> None:
        """Initialize LPA*-specific data structures."""
        super()._initialize_algorithm()
        self.g: Dict[Cell, float] = {}
        self.rhs: Dict[Cell, float] = {}
        self.queue = KeyedPriorityQueue()
        self._start: Optional[Cell] = None
        self._goal: Optional[Cell] = None
        self.replans = 0

    def _heuristic(self, cell: Cell) -> float:
        return manhattan_distance(cell, self._goal)

    def _calculate_key(self, cell: Cell) -> Tuple[float, float]:
        best = min(self.g.get(cell, INF), self.rhs.get(cell, INF))
        return best + self._heuristic(cell), best

    def _reset(self, start: Cell, goal: Cell) -> None:
        """Start a fresh search for a new start/goal pair."""
        self._start, self._goal = start, goal
        self.g = {}
        self.rhs = {start: 0.0}
        self.queue = KeyedPriorityQueue()
        self.queue.push(start, self._calculate_key(start))
        self._changed_cells = []

    def _update_vertex(self, cell: Cell) -> None:
        if cell != self._start:
            x, y = cell
            self.rhs[cell] = min(
                (self.g.get(pred, INF) + self._edge_cost(pred, cell)
                 for pred in self._grid_neighbors(x, y)),
                default=INF
            )
        self.queue.remove(cell)
        if self.g.get(cell, INF) != self.rhs.get(cell, INF):
            self.queue.push(cell, self._calculate_key(cell))

    def _compute_shortest_path(self) -> None:
        goal = self._goal
        while (self.queue.top_key() < self._calculate_key(goal)
               or self.rhs.get(goal, INF) != self.g.get(goal, INF)):
            if not self.queue:
                break
            cell, _ = self.queue.pop()
            self.nodes_explored += 1
            g, rhs = self.g.get(cell, INF), self.rhs.get(cell, INF)
            self._log_expansion(cell, g, rhs)

            if g > rhs:
                # Overconsistent: settle the cell
                self.g[cell] = rhs
                for succ in self._grid_neighbors(*cell):
                    self._update_vertex(succ)
            else:
                # Underconsistent: invalidate and let neighbours recompute
                self.g[cell] = INF
                for succ in self._grid_neighbors(*cell) + [cell]:
                    self._update_vertex(succ)

    def _apply_changes(self, changes: List[Cell]) -> None:
        """Update every vertex whose incoming edge costs changed."""
        for x, y in changes:
            self._update_vertex((x, y))
            for neighbor in self._grid_neighbors(x, y):
                self._update_vertex(neighbor)

    def _plan(self, start: Node, goal: Node) -> Tuple[bool, List[Node]]:
        """
        Plan, or replan after grid changes, from start to goal.

        Args:
            start: Start node
            goal: Goal node

        Returns:
            (True, path) if the goal is reachable, (False, []) otherwise
        """
        self.nodes_explored = 0
        if (start.position, goal.position) != (self._start, self._goal):
            self._reset(start.position, goal.position)
        else:
            self.replans += 1
            changes = self._take_changes()
            logger.debug("LPA*: repairing search after %d cell changes", len(changes))
            self._apply_changes(changes)

        self._compute_shortest_path()

        if self.g.get(self._goal, INF) == INF:
            return False, []
        return True, self._extract_path(start, goal)

    def _extract_path(self, start: Node, goal: Node) -> List[Node]:
        """Walk back from the goal along the best predecessors."""
        cells = [goal.position]
        current = goal.position
        while current != start.position:
            best = min(
                self._grid_neighbors(*current),
                key=lambda p: (self.g.get(p, INF) + self._edge_cost(p, current), p)
            )
            if self.g.get(best, INF) == INF or len(cells) > self.grid.size:
                raise InternalInvariantError(f"LPA*: no finite predecessor chain from {current}")
            cells.append(best)
            current = best
        cells.reverse()

        path = []
        for i, (x, y) in enumerate(cells):
            node = self.grid.node(x, y, cost=self.g[(x, y)], heuristic=self._heuristic((x, y)))
            if i > 0:
                node.parent_id = path[-1].id
            path.append(node)
        return path

    def get_metrics(self) -> Dict[str, Any]:
        """Get LPA* performance metrics."""
        return {
            'algorithm': 'LPA*',
            'path_length': self.get_path_length(),
            'planning_time': self.planning_time,
            'nodes_explored': self.nodes_explored,
            'replans': self.replans,
            'path_exists': self.success
        }
