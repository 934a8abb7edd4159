"""
Genetic Algorithm (GA) path planner on a 4-connected grid.

Each chromosome is a fixed-length sequence of moves. A chromosome is
decoded by walking from the start, skipping moves into obstacles or off
the grid and stopping at the goal. Selection favours walks that end close
to the goal and, among those, short walks.
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


class GeneticAlgorithmPlanner(PathPlanner):
    """
    Genetic Algorithm path planner.

    Chromosomes are arrays of direction indices into ``MOTIONS_4``. Loops
    in a decoded walk are cut out, so every returned path visits each cell
    once. Tournament selection, single-point crossover, per-gene mutation
    and elitism produce each new generation; the shortest walk that
    reached the goal in any generation is returned.

    Attributes:
        generations (int): Number of generations to evolve
        population_size (int): Chromosomes per generation
        chromosome_length (Optional[int]): Moves per chromosome; when unset,
            twice the Manhattan distance from start to goal
        mutation_rate (float): Per-gene mutation probability
        tournament_size (int): Contestants per tournament
        elite_count (int): Best chromosomes copied unchanged
    """

    name = 'Genetic Algorithm'
    movement_model = '4-connected'

    def _initialize_algorithm(self) -> None:
        """Initialize GA parameters."""
        p = self.params
        self.generations = int(p.get('generations', 200))
        self.population_size = int(p.get('population_size', 30))
        self.chromosome_length = p.get('chromosome_length')
        self.mutation_rate = float(p.get('mutation_rate', 0.1))
        self.tournament_size = int(p.get('tournament_size', 3))
        self.elite_count = int(p.get('elite_count', min(2, self.population_size - 1)))

        self._require('generations', self.generations, self.generations > 0, "a positive integer")
        self._require('population_size', self.population_size, self.population_size > 1,
                      "an integer greater than 1")
        self._require('mutation_rate', self.mutation_rate, 0.0 <= self.mutation_rate <= 1.0, "in [0, 1]")
        self._require('tournament_size', self.tournament_size, self.tournament_size > 0, "a positive integer")
        self._require('elite_count', self.elite_count, 0 <= self.elite_count < self.population_size,
                      "between 0 and population_size - 1")
        if self.chromosome_length is not None:
            self.chromosome_length = int(self.chromosome_length)
            self._require('chromosome_length', self.chromosome_length, self.chromosome_length > 0,
                          "a positive integer")

        self.best_fitness: Optional[float] = None
        self.nodes_explored = 0

    def _decode(self, chromosome: np.ndarray, start: Cell, goal: Cell) -> List[Cell]:
        """
        Turn a chromosome into a loop-free walk starting at start.

        Moves into obstacles or off the grid are skipped. Revisiting a cell
        cuts the walk back to its first visit.
        """
        walk = [start]
        index = {start: 0}
        current = start

        for gene in chromosome:
            if current == goal:
                break
            dx, dy = MOTIONS_4[gene]
            nxt = (current[0] + dx, current[1] + dy)
            if not self.grid.is_free(*nxt):
                continue

            if nxt in index:
                cut = index[nxt]
                for cell in walk[cut + 1:]:
                    del index[cell]
                del walk[cut + 1:]
            else:
                index[nxt] = len(walk)
                walk.append(nxt)
            current = nxt

        return walk

    def _fitness(self, walk: List[Cell], goal: Cell, length: int) -> float:
        """Lower is better: distance to goal dominates, then walk length."""
        return manhattan_distance(walk[-1], goal) * (length + 1) + len(walk)

    def _tournament(self, population: np.ndarray, scores: np.ndarray, rng) -> np.ndarray:
        contestants = rng.integers(0, len(population), size=self.tournament_size)
        winner = contestants[np.argmin(scores[contestants])]
        return population[winner]

    def _plan(self, start: Node, goal: Node) -> Tuple[bool, List[Node]]:
        """
        Evolve a population of move sequences towards the goal.

        Args:
            start: Start node
            goal: Goal node

        Returns:
            (True, path) with the best walk that reached the goal,
            (False, []) if none did
        """
        rng = self._make_rng()
        start_cell, goal_cell = start.position, goal.position
        start.heuristic = manhattan_distance(start_cell, goal_cell)
        length = self.chromosome_length or max(1, 2 * int(start.heuristic))

        population = rng.integers(0, len(MOTIONS_4), size=(self.population_size, length))
        best: Optional[List[Cell]] = None
        self.nodes_explored = 0

        for generation in range(self.generations + 1):
            walks = [self._decode(chromosome, start_cell, goal_cell) for chromosome in population]
            scores = np.array([self._fitness(walk, goal_cell, length) for walk in walks])
            self.nodes_explored += len(walks)

            for walk in walks:
                if walk[-1] == goal_cell and (best is None or len(walk) < len(best)):
                    best = walk
            self.best_fitness = float(scores.min())

            if generation == self.generations:
                break

            order = np.argsort(scores, kind='stable')
            offspring = [population[i].copy() for i in order[:self.elite_count]]
            while len(offspring) < self.population_size:
                parent_a = self._tournament(population, scores, rng)
                parent_b = self._tournament(population, scores, rng)
                if length > 1:
                    cut = int(rng.integers(1, length))
                    child = np.concatenate([parent_a[:cut], parent_b[cut:]])
                else:
                    child = parent_a.copy()

                mutate = rng.random(length) < self.mutation_rate
                child[mutate] = rng.integers(0, len(MOTIONS_4), size=int(mutate.sum()))
                offspring.append(child)
            population = np.array(offspring)

            if generation % 50 == 0:
                logger.debug("GA generation %d: best fitness %.1f, goal reached: %s",
                             generation, self.best_fitness, best is not None)

        if best is None:
            return False, []

        path = []
        for i, (x, y) in enumerate(best):
            node = self.grid.node(x, y, cost=float(i),
                                  heuristic=manhattan_distance((x, y), goal_cell))
            if path:
                node.parent_id = path[-1].id
            path.append(node)
        return True, path

    def get_metrics(self) -> Dict[str, Any]:
        """Get GA performance metrics."""
        return {
            'algorithm': 'Genetic Algorithm',
            'path_length': self.get_path_length(),
            'planning_time': self.planning_time,
            'nodes_explored': self.nodes_explored,
            'best_fitness': self.best_fitness,
            'path_exists': self.success
        }
