"""
Exceptions raised by the grid planners.

Failing to find a path is not an error: planners report it as
``(False, [])``. The exceptions below cover bad inputs, bad configuration
and broken internal state.
"""


class PlanningError(Exception):
    """Base class for all planner errors."""


class InvalidInputError(PlanningError, ValueError):
    """
    Start or goal cannot be planned for.

    Raised when a cell lies outside the grid or on an obstacle. The planner
    state is left untouched, so the caller can repair the input and retry.
    """


class ConfigurationError(PlanningError, ValueError):
    """A planner parameter has an invalid value."""


class InternalInvariantError(PlanningError, RuntimeError):
    """
    A planner's internal structure is inconsistent.

    Signals a programming error, e.g. a rewire that created a cycle in the
    RRT* tree or a parent identifier that is not in the tree.
    """
