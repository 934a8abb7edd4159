"""
Ant Colony Optimization (ACO) on a 4-connected grid.

A colony of ants repeatedly walks from the start towards the goal. Ants
prefer moves with more pheromone and moves that bring them closer to the
goal; successful ants deposit pheromone inversely proportional to their
path length, and all pheromone evaporates between iterations.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from ..core.grid import MOTIONS_4
from ..core.path_planner import PathPlanner
from ..core.node import Node
from ..utils.geometry import manhattan_distance

logger = logging.getLogger(__name__)

Cell = Tuple[int, int]


class AntColonyPlanner(PathPlanner):
    """
    Ant Colony Optimization path planner.

    Pheromone lives on directed moves and is stored as an array of shape
    (rows, cols, 4), one entry per cell and direction of ``MOTIONS_4``.
    Ants never revisit a cell; an ant with no unvisited free neighbour
    dies. The shortest successful walk over all iterations is returned.

    Attributes:
        n_ants (int): Ants per iteration
        alpha (float): Pheromone exponent
        beta (float): Heuristic exponent
        evaporation_rate (float): Fraction of pheromone lost per iteration
        iterations (int): Number of iterations
        Q (float): Pheromone deposited per successful walk, divided by its length
        pheromones (np.ndarray): Pheromone per cell and direction
    """

    name = 'Ant Colony Optimization'
    movement_model = '4-connected'

    def _initialize_algorithm(self) -> None:
        """Initialize ACO parameters and pheromone storage."""
        p = self.params
        self.n_ants = int(p.get('n_ants', 10))
        self.alpha = float(p.get('alpha', 1.0))
        self.beta = float(p.get('beta', 0.7))
        self.evaporation_rate = float(p.get('evaporation_rate', 0.3))
        self.iterations = int(p.get('iterations', 50))
        self.Q = float(p.get('Q', 10.0))

        self._require('n_ants', self.n_ants, self.n_ants > 0, "a positive integer")
        self._require('iterations', self.iterations, self.iterations > 0, "a positive integer")
        self._require('evaporation_rate', self.evaporation_rate,
                      0.0 <= self.evaporation_rate < 1.0, "in [0, 1)")
        self._require('Q', self.Q, self.Q > 0, "positive")

        self.pheromones = np.ones((self.grid.rows, self.grid.cols, len(MOTIONS_4)))
        self.successful_ants = 0
        self.nodes_explored = 0

    def _send_ant(self, start: Cell, goal: Cell, rng) -> Optional[List[Cell]]:
        """
        Let one ant walk from start until it reaches the goal or gets stuck.

        Returns:
            The walk as a list of cells, or None if the ant got stuck
        """
        current = start
        walk = [start]
        visited = {start}

        while current != goal:
            options = []
            weights = []
            for direction, (dx, dy) in enumerate(MOTIONS_4):
                nxt = (current[0] + dx, current[1] + dy)
                if nxt in visited or not self.grid.is_free(*nxt):
                    continue
                pheromone = self.pheromones[current[0], current[1], direction]
                desirability = 1.0 / (1.0 + manhattan_distance(nxt, goal))
                options.append(nxt)
                weights.append(pheromone ** self.alpha * desirability ** self.beta)

            if not options:
                return None

            weights = np.asarray(weights)
            current = options[rng.choice(len(options), p=weights / weights.sum())]
            walk.append(current)
            visited.add(current)
            self.nodes_explored += 1

        return walk

    def _deposit(self, walk: List[Cell]) -> None:
        """Add Q / len(walk) pheromone on every move of a successful walk."""
        amount = self.Q / len(walk)
        for (x, y), (nx, ny) in zip(walk, walk[1:]):
            direction = MOTIONS_4.index((nx - x, ny - y))
            self.pheromones[x, y, direction] += amount

    def _plan(self, start: Node, goal: Node) -> Tuple[bool, List[Node]]:
        """
        Run the colony for the configured number of iterations.

        Args:
            start: Start node
            goal: Goal node

        Returns:
            (True, path) with the best walk found, (False, []) if no ant
            ever reached the goal
        """
        rng = self._make_rng()
        self.pheromones = np.ones((self.grid.rows, self.grid.cols, len(MOTIONS_4)))
        self.successful_ants = 0
        self.nodes_explored = 0
        best: Optional[List[Cell]] = None

        for iteration in range(self.iterations):
            walks = []
            for _ in range(self.n_ants):
                walk = self._send_ant(start.position, goal.position, rng)
                if walk is None:
                    continue
                walks.append(walk)
                if best is None or len(walk) < len(best):
                    best = walk

            self.pheromones *= (1.0 - self.evaporation_rate)
            for walk in walks:
                self._deposit(walk)
            self.successful_ants += len(walks)
            logger.debug("ACO iteration %d: %d/%d ants reached the goal, best length %s",
                         iteration, len(walks), self.n_ants, len(best) if best else None)

        if best is None:
            return False, []

        path = []
        for i, (x, y) in enumerate(best):
            node = self.grid.node(x, y, cost=float(i),
                                  heuristic=manhattan_distance((x, y), goal.position))
            if path:
                node.parent_id = path[-1].id
            path.append(node)
        return True, path

    def get_metrics(self) -> Dict[str, Any]:
        """Get ACO performance metrics."""
        return {
            'algorithm': 'Ant Colony Optimization',
            'path_length': self.get_path_length(),
            'planning_time': self.planning_time,
            'nodes_explored': self.nodes_explored,
            'successful_ants': self.successful_ants,
            'path_exists': self.success
        }
