"""
conftest.py - pytest fixtures shared across the test suite.

Provides standard grids, per-planner test parameters and a scripted
random generator, so individual test modules stay short and focused.
"""

import matplotlib
matplotlib.use('Agg')

import pytest

from grid_planning.algorithms import ALGORITHM_MAP
from grid_planning.core.grid import Grid


# Small budgets keep the stochastic planners fast; seeds make them repeatable
PLANNER_PARAMS = {
    'dijkstra': {},
    'astar': {},
    'jump_point_search': {},
    'lpa_star': {},
    'd_star_lite': {},
    'rrt': {'threshold': 1.5, 'random_seed': 1},
    'rrt_star': {'threshold': 1.5, 'random_seed': 1},
    'ant_colony': {'iterations': 20, 'random_seed': 3},
    'genetic_algorithm': {'generations': 150, 'random_seed': 5},
}


def make_planner(name, grid, **extra):
    """Build a registry planner with its test parameters."""
    params = dict(PLANNER_PARAMS[name], **extra)
    return ALGORITHM_MAP[name](grid, {'parameters': params})


class ScriptedRng:
    """
    Stand-in generator returning preset values from ``integers``.

    Lets a test dictate the exact sample sequence of a sampling planner:
    every call consumes the next value, whatever its bounds.
    """

    def __init__(self, values):
        self.values = list(values)
        self.calls = 0

    def integers(self, low, high=None, size=None):
        if not self.values:
            raise AssertionError("scripted random values exhausted")
        value = self.values.pop(0)
        upper = high if high is not None else low
        assert 0 <= value < upper, f"scripted value {value} outside [0, {upper})"
        self.calls += 1
        return value


# =========================================================================
# Grid fixtures
# =========================================================================

@pytest.fixture
def open_grid():
    """5x5 grid without obstacles."""
    return Grid.empty(5)


@pytest.fixture
def small_open_grid():
    """3x3 grid without obstacles."""
    return Grid.empty(3)


@pytest.fixture
def blocked_grid():
    """3x3 grid whose middle row is a wall."""
    return Grid([[0, 0, 0],
                 [1, 1, 1],
                 [0, 0, 0]])


@pytest.fixture
def wall_grid():
    """5x5 grid with a wall in column 2 open only at the bottom row."""
    return Grid.from_obstacles(5, 5, [(0, 2), (1, 2), (2, 2), (3, 2)])


@pytest.fixture
def maze_grid():
    """5x5 grid with two partial walls; (0, 0) to (4, 4) stays reachable."""
    return Grid([[0, 0, 0, 0, 0],
                 [0, 1, 1, 1, 0],
                 [0, 0, 0, 0, 0],
                 [0, 1, 1, 1, 0],
                 [0, 0, 0, 0, 0]])


@pytest.fixture
def scripted_rng():
    """Factory for ScriptedRng instances."""
    return ScriptedRng


@pytest.fixture
def planner_factory():
    """Factory building registry planners with their test parameters."""
    return make_planner
