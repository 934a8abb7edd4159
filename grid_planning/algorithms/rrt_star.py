"""
RRT* (Rapidly-exploring Random Tree Star) on an occupancy grid.

RRT* extends RRT with two local optimizations applied to every accepted
sample: it picks the cheapest parent in the sample's neighbourhood, and
it rewires neighbours through the sample when that lowers their cost.
"""

import logging
from collections import defaultdict
from typing import Dict, List, Set

from ..core.exceptions import InternalInvariantError
from ..core.node import Node
from .rrt import RRTPlanner

logger = logging.getLogger(__name__)


class RRTStarPlanner(RRTPlanner):
    """
    RRT* path planning algorithm on a grid.

    The threshold is both the maximum edge length and the neighbourhood
    radius for choosing parents, rewiring and seeing the goal. Given the
    same random samples, RRT* accepts exactly the cells RRT accepts, but
    its costs are never higher.

    Attributes:
        near_nodes (Dict[int, Set[int]]): Symmetric neighbour cache; ids of
            tree nodes within threshold and with a free segment
        rewires (int): Number of rewires in the last run
    """

    name = 'RRT*'

    def _on_reset(self) -> None:
        self.near_nodes: Dict[int, Set[int]] = defaultdict(set)

    def _find_near_nodes(self, new_node: Node) -> List[Node]:
        """
        Find tree nodes that could be connected to new_node.

        Returns:
            Nodes within threshold whose segment to new_node is free
        """
        return [node for node in self.tree.values()
                if node.distance_to(new_node) <= self.threshold
                and not self._is_any_obstacle_in_path(node, new_node)]

    def _extend(self, new_node: Node, nearest: Node) -> None:
        """
        Connect an accepted sample through its cheapest neighbour, then rewire.

        The nearest node is always one of the candidates, since the caller
        checked its distance and segment.
        """
        near_nodes = self._find_near_nodes(new_node)

        # Choose parent: minimum cost through the candidate, ties by smaller id
        parent = min(near_nodes, key=lambda n: (n.cost + n.distance_to(new_node), n.id))
        self._attach(new_node, parent, parent.cost + parent.distance_to(new_node))

        for node in near_nodes:
            self.near_nodes[node.id].add(new_node.id)
            self.near_nodes[new_node.id].add(node.id)

        self._rewire(new_node)

    def _rewire(self, new_node: Node) -> None:
        """
        Rewire the tree through new_node.

        Every neighbour whose cost drops by going through new_node is
        reparented to it, and the costs of its descendants are updated.

        Args:
            new_node: Node just added to the tree
        """
        for near_id in sorted(self.near_nodes[new_node.id]):
            if near_id == new_node.parent_id:
                continue

            near_node = self.tree[near_id]
            new_cost = new_node.cost + new_node.distance_to(near_node)
            if new_cost < near_node.cost:
                logger.debug("RRT*: rewire %s through %s, cost %.3f -> %.3f",
                             near_node.position, new_node.position, near_node.cost, new_cost)
                self.children[near_node.parent_id].discard(near_id)
                near_node.parent_id = new_node.id
                near_node.cost = new_cost
                self.children[new_node.id].add(near_id)
                self._propagate_cost(near_node)
                self.rewires += 1

    def _propagate_cost(self, root: Node) -> None:
        """
        Recompute the costs of all descendants of root, parents first.

        Each descendant's cost becomes its parent's cost plus the edge
        length, so costs stay exact sums along the parent chain.

        Raises:
            InternalInvariantError: If a descendant is reached twice, which
                                    means the rewire closed a cycle
        """
        visited = set()
        stack = [root.id]
        while stack:
            node_id = stack.pop()
            if node_id in visited:
                raise InternalInvariantError(f"RRT*: cycle below node {root.id} after rewire")
            visited.add(node_id)

            node = self.tree[node_id]
            for child_id in self.children[node_id]:
                child = self.tree[child_id]
                child.cost = node.cost + node.distance_to(child)
                stack.append(child_id)
