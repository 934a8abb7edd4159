"""
Concrete grid planners and the name -> class registry used by the CLI.
"""

from typing import Type

from ..core.path_planner import PathPlanner
from .dijkstra import DijkstraPlanner
from .astar import AStarPlanner
from .jump_point_search import JumpPointSearchPlanner
from .lpa_star import LPAStarPlanner
from .d_star_lite import DStarLitePlanner
from .rrt import RRTPlanner
from .rrt_star import RRTStarPlanner
from .ant_colony import AntColonyPlanner
from .genetic_algorithm import GeneticAlgorithmPlanner


ALGORITHM_MAP = {
    'dijkstra': DijkstraPlanner,
    'astar': AStarPlanner,
    'jump_point_search': JumpPointSearchPlanner,
    'lpa_star': LPAStarPlanner,
    'd_star_lite': DStarLitePlanner,
    'rrt': RRTPlanner,
    'rrt_star': RRTStarPlanner,
    'ant_colony': AntColonyPlanner,
    'genetic_algorithm': GeneticAlgorithmPlanner,
}


def get_planner_class(algorithm_name: str) -> Type[PathPlanner]:
    """
    Look up a planner class by its registry name.

    Raises:
        KeyError: If the name is unknown
    """
    try:
        return ALGORITHM_MAP[algorithm_name]
    except KeyError:
        raise KeyError(f"Unknown algorithm '{algorithm_name}'. "
                       f"Available algorithms: {', '.join(ALGORITHM_MAP)}") from None


__all__ = [
    'ALGORITHM_MAP',
    'get_planner_class',
    'DijkstraPlanner',
    'AStarPlanner',
    'JumpPointSearchPlanner',
    'LPAStarPlanner',
    'DStarLitePlanner',
    'RRTPlanner',
    'RRTStarPlanner',
    'AntColonyPlanner',
    'GeneticAlgorithmPlanner',
]
