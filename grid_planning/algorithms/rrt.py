"""
RRT (Rapidly-exploring Random Tree) on an occupancy grid.

RRT grows a tree rooted at the start by sampling random cells and
connecting each sample to its nearest tree node when the straight segment
between them is short enough and obstacle-free.
"""

import logging
import time
from collections import defaultdict
from typing import Any, Dict, List, Set, Tuple

from ..core.exceptions import InternalInvariantError
from ..core.path_planner import PathPlanner
from ..core.node import Node
from ..utils.geometry import supercover_cells

logger = logging.getLogger(__name__)


class RRTPlanner(PathPlanner):
    """
    RRT path planning algorithm on a grid.

    Each sample is a random cell. It is accepted when it is not yet in the
    tree, is within ``threshold`` of its nearest tree node and the segment
    to that node is obstacle-free. Planning stops as soon as the goal is
    visible from a tree node, or when the iteration budget of
    ``max_iter_x_factor * rows * cols`` samples is used up.

    The tree maps node ids to nodes; nodes point to their parent through
    ``parent_id`` and the start is its own parent.

    Attributes:
        tree (Dict[int, Node]): Tree nodes by id
        children (Dict[int, Set[int]]): Child ids per node id
        obstacle_list (Set[Tuple[int, int]]): Obstacle cells of the grid
        threshold (float): Maximum edge length
        max_iter_x_factor (int): Iteration budget per grid cell
        iterations (int): Samples drawn in the last run
    """

    name = 'RRT'
    movement_model = 'straight-line'

    def _initialize_algorithm(self) -> None:
        """Initialize RRT-specific data structures."""
        threshold = self.params.setdefault('threshold', 1.5)
        factor = self.params.setdefault('max_iter_x_factor', 500)
        max_time = self.params.get('max_time')

        self.threshold = float(self._require(
            'threshold', threshold,
            isinstance(threshold, (int, float)) and not isinstance(threshold, bool) and threshold > 0,
            "a positive number"))
        self.max_iter_x_factor = int(self._require(
            'max_iter_x_factor', factor,
            isinstance(factor, int) and not isinstance(factor, bool) and factor > 0,
            "a positive integer"))
        self.max_time = None if max_time is None else float(self._require(
            'max_time', max_time,
            isinstance(max_time, (int, float)) and max_time > 0,
            "a positive number of seconds"))

        self.tree: Dict[int, Node] = {}
        self.children: Dict[int, Set[int]] = defaultdict(set)
        self.obstacle_list: Set[Tuple[int, int]] = set()
        self.iterations = 0
        self.rewires = 0
        self._on_reset()

    @property
    def max_iterations(self) -> int:
        """Sampling budget for the current grid."""
        return self.max_iter_x_factor * self.grid.rows * self.grid.cols

    def _create_obstacle_list(self) -> None:
        """Extract obstacle positions from the grid once per run."""
        self.obstacle_list = {(int(x), int(y)) for x, y in self.grid.obstacle_cells()}

    def _generate_random_node(self, rng) -> Node:
        """
        Sample a uniformly random cell (row drawn first, then column).

        Args:
            rng: Generator exposing ``integers(low, high)``

        Returns:
            Node for the sampled cell
        """
        x = int(rng.integers(0, self.grid.rows))
        y = int(rng.integers(0, self.grid.cols))
        return self.grid.node(x, y)

    def _find_nearest_point(self, new_node: Node) -> Tuple[bool, Node]:
        """
        Find the tree node closest to new_node.

        Ties are broken by the smaller id. The cost of reaching the tree
        node is not considered.

        Returns:
            (found, nearest) where found is False if the nearest node is
            farther than the threshold
        """
        nearest = min(self.tree.values(), key=lambda n: (n.distance_to(new_node), n.id))
        return nearest.distance_to(new_node) <= self.threshold, nearest

    def _is_any_obstacle_in_path(self, n_1: Node, n_2: Node) -> bool:
        """
        Check if any obstacle square touches the segment between two nodes.

        Obstacles are the unit squares of the obstacle cells; the cells of
        both endpoints are checked as well.
        """
        if n_1.position in self.obstacle_list or n_2.position in self.obstacle_list:
            return True
        return any(cell in self.obstacle_list for cell in supercover_cells(n_1.position, n_2.position))

    def _attach(self, node: Node, parent: Node, cost: float) -> None:
        """Insert node into the tree below parent."""
        node.parent_id = parent.id
        node.cost = cost
        self.tree[node.id] = node
        self.children[parent.id].add(node.id)

    def _extend(self, new_node: Node, nearest: Node) -> None:
        """Connect an accepted sample to its nearest tree node."""
        self._attach(new_node, nearest, nearest.cost + nearest.distance_to(new_node))

    def _check_goal_visible(self, new_node: Node) -> bool:
        """
        Check if the goal can be reached from new_node and attach it if so.

        Args:
            new_node: Node just added to the tree

        Returns:
            True if the goal is now part of the tree
        """
        goal = self.goal_node
        if new_node.id == goal.id:
            return True

        distance = new_node.distance_to(goal)
        if distance > self.threshold or self._is_any_obstacle_in_path(new_node, goal):
            return False

        goal_node = self.grid.node(goal.x, goal.y)
        self._attach(goal_node, new_node, new_node.cost + distance)
        return True

    def _create_path(self) -> List[Node]:
        """
        Extract the path by following parent ids from the goal to the start.

        Raises:
            InternalInvariantError: If a parent is missing or the parent
                                    chain loops
        """
        node = self.tree[self.goal_node.id]
        path = [node]
        while node.parent_id != node.id:
            if node.parent_id not in self.tree:
                raise InternalInvariantError(f"{self.name}: parent {node.parent_id} of {node} is not in the tree")
            node = self.tree[node.parent_id]
            path.append(node)
            if len(path) > len(self.tree):
                raise InternalInvariantError(f"{self.name}: parent chain from the goal contains a cycle")
        return path[::-1]  # Reverse to get start-to-goal order

    def check_tree(self) -> None:
        """
        Verify that every tree node reaches the start through its parents.

        Raises:
            InternalInvariantError: On a missing parent, a cycle, or a
                                    cost that decreases towards a leaf
        """
        root_id = self.start_node.id if self.start_node else None
        for node in self.tree.values():
            seen = set()
            current = node
            while current.id != root_id:
                if current.id in seen:
                    raise InternalInvariantError(f"{self.name}: cycle through node {current.id}")
                seen.add(current.id)
                parent = self.tree.get(current.parent_id)
                if parent is None or parent.id == current.id:
                    raise InternalInvariantError(f"{self.name}: node {current.id} does not reach the start")
                if parent.cost > current.cost:
                    raise InternalInvariantError(f"{self.name}: cost decreases from {parent.id} to {current.id}")
                current = parent

    def _plan(self, start: Node, goal: Node) -> Tuple[bool, List[Node]]:
        """
        Grow the tree until the goal is visible or the budget runs out.

        Args:
            start: Start node
            goal: Goal node

        Returns:
            (True, path) if the goal was connected, (False, []) otherwise
        """
        rng = self._make_rng()
        self._create_obstacle_list()
        self.tree = {start.id: start}
        self.children = defaultdict(set)
        self.iterations = 0
        self.rewires = 0
        self._on_reset()

        if self._check_goal_visible(start):
            return True, self._create_path()

        started = time.perf_counter()
        max_iterations = self.max_iterations
        while self.iterations < max_iterations:
            self.iterations += 1
            if self.max_time is not None and time.perf_counter() - started > self.max_time:
                logger.debug("%s: wall-clock budget of %.3fs exceeded", self.name, self.max_time)
                break

            new_node = self._generate_random_node(rng)
            if new_node.id in self.tree or new_node.position in self.obstacle_list:
                continue

            found, nearest = self._find_nearest_point(new_node)
            if not found or self._is_any_obstacle_in_path(nearest, new_node):
                continue

            self._extend(new_node, nearest)
            if self._check_goal_visible(new_node):
                logger.debug("%s: goal connected after %d iterations, tree size %d",
                             self.name, self.iterations, len(self.tree))
                return True, self._create_path()

        logger.debug("%s: budget exhausted after %d iterations, tree size %d",
                     self.name, self.iterations, len(self.tree))
        return False, []

    def _on_reset(self) -> None:
        """Hook for subclasses to clear per-run state."""
        pass

    def get_metrics(self) -> Dict[str, Any]:
        """Get sampling planner performance metrics."""
        goal_node = self.tree.get(self.goal_node.id) if self.goal_node else None
        return {
            'algorithm': self.name,
            'path_length': self.get_path_length(),
            'planning_time': self.planning_time,
            'nodes_explored': self.iterations,
            'iterations': self.iterations,
            'tree_size': len(self.tree),
            'rewires': self.rewires,
            'goal_cost': goal_node.cost if (self.success and goal_node) else None,
            'path_exists': self.success
        }

    def visualize(self, ax, show_tree: bool = True, **kwargs) -> None:
        """
        Visualize the tree and path.

        Args:
            ax: Matplotlib axis
            show_tree: Whether to draw the full tree
            **kwargs: Additional options passed to ``draw_grid``
        """
        from ..utils.visualization import draw_tree

        super().visualize(ax, **kwargs)
        if show_tree:
            visualization = self.config.get('visualization', {})
            draw_tree(ax, self.tree,
                      color=visualization.get('tree_color', 'blue'),
                      alpha=visualization.get('tree_alpha', 0.3))
        ax.set_title(f"{self.name} Algorithm\n"
                     f"Length: {self.get_path_length():.2f}, "
                     f"Time: {self.planning_time:.3f}s, "
                     f"Nodes: {len(self.tree)}")
