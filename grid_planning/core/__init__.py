"""
Core data model shared by every planner: grid, node, planner base classes
and the error taxonomy.
"""

from .exceptions import PlanningError, InvalidInputError, ConfigurationError, InternalInvariantError
from .node import Node
from .grid import Grid, CellType
from .path_planner import PathPlanner, IncrementalPathPlanner
