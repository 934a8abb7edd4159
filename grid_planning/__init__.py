"""
Grid Planning - Path Planning on 2D Occupancy Grids

A collection of planners that find a path between two cells of a discrete
occupancy grid, all sharing one planner interface.

Modules:
    core: Grid, Node, planner base classes and exceptions
    algorithms: Dijkstra, A*, JPS, LPA*, D* Lite, RRT, RRT*, ACO, GA
    utils: Geometry, priority queue, YAML configuration, visualization
"""

from .core.grid import Grid, CellType
from .core.node import Node
from .core.path_planner import PathPlanner, IncrementalPathPlanner
from .core.exceptions import (
    PlanningError,
    InvalidInputError,
    ConfigurationError,
    InternalInvariantError,
)
from .algorithms import ALGORITHM_MAP, get_planner_class

__version__ = "1.0.0"

__all__ = [
    'Grid',
    'CellType',
    'Node',
    'PathPlanner',
    'IncrementalPathPlanner',
    'PlanningError',
    'InvalidInputError',
    'ConfigurationError',
    'InternalInvariantError',
    'ALGORITHM_MAP',
    'get_planner_class',
]
