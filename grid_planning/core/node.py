"""
Node class for grid-based path planning algorithms.

A node is a grid cell plus the bookkeeping fields the planners need.
"""

import math
from typing import Tuple


class Node:
    """
    Represents a cell in a planner's search tree/graph.

    Nodes compare equal (and hash) by coordinates only, so two nodes for the
    same cell are interchangeable regardless of cost or parent.

    Attributes:
        x (int): Row index
        y (int): Column index
        id (int): Canonical identifier, ``x * cols + y``
        parent_id (int): Identifier of the predecessor (own id for a root)
        cost (float): Cost from the start to this node
        heuristic (float): Estimated cost from this node to the goal
    """

    def __init__(self, x: int, y: int, cost: float = 0.0, heuristic: float = 0.0,
                 node_id: int = -1, parent_id: int = -1):
        """
        Initialize a node at given grid coordinates.

        Args:
            x: Row index
            y: Column index
            cost: Cost from start (default: 0.0)
            heuristic: Estimated cost to goal (default: 0.0)
            node_id: Canonical identifier; use ``Grid.node`` to fill it in
            parent_id: Identifier of the parent node
        """
        self.x = int(x)
        self.y = int(y)
        self.cost = cost
        self.heuristic = heuristic
        self.id = node_id
        self.parent_id = parent_id

    @property
    def position(self) -> Tuple[int, int]:
        """Grid coordinates as an (x, y) tuple."""
        return self.x, self.y

    def distance_to(self, other: 'Node') -> float:
        """Euclidean distance to another node."""
        return math.hypot(self.x - other.x, self.y - other.y)

    def copy(self) -> 'Node':
        """Return an independent node with the same fields."""
        return Node(self.x, self.y, self.cost, self.heuristic, self.id, self.parent_id)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Node):
            return NotImplemented
        return self.x == other.x and self.y == other.y

    def __hash__(self) -> int:
        return hash((self.x, self.y))

    def __lt__(self, other: 'Node') -> bool:
        """For priority queue ordering"""
        return (self.cost + self.heuristic, self.id) < (other.cost + other.heuristic, other.id)

    def __repr__(self) -> str:
        """String representation of the node."""
        return (f"Node({self.x}, {self.y}, id={self.id}, pid={self.parent_id}, "
                f"cost={self.cost:.2f}, h={self.heuristic:.2f})")
