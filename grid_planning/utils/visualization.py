"""
Visualization utilities for grid path planning.

This module provides matplotlib drawing functions for occupancy grids,
paths and the trees grown by the sampling planners.
"""

from typing import Dict, List, Optional, Tuple

from matplotlib.colors import ListedColormap

from ..core.grid import CellType
from ..core.node import Node


def draw_grid(ax,
              grid,
              path: Optional[List[Tuple[int, int]]] = None,
              start: Optional[Tuple[int, int]] = None,
              goal: Optional[Tuple[int, int]] = None,
              path_color: str = 'blue',
              path_label: str = "Path"):
    """
    Draw the grid with obstacles, start, goal, and optional path.

    Rows are drawn top to bottom, so cell (x, y) appears at plot
    coordinates (y, x).

    Args:
        ax: Matplotlib axis to draw on
        grid: Grid object to draw
        path: Optional list of (x, y) cells
        start: Optional start cell (x, y)
        goal: Optional goal cell (x, y)
        path_color: Color for the path line
        path_label: Label for the path in legend

    Example:
        >>> fig, ax = plt.subplots()
        >>> draw_grid(ax, Grid.empty(10), start=(0, 0), goal=(9, 9))
        >>> plt.show()
    """
    ax.clear()

    obstacles = (grid.cells == CellType.OBSTACLE).astype(int)
    ax.imshow(obstacles, cmap=ListedColormap(['white', 'grey']), vmin=0, vmax=1,
              origin='upper', zorder=0)

    # Cell borders
    ax.set_xticks([c - 0.5 for c in range(grid.cols + 1)], minor=True)
    ax.set_yticks([r - 0.5 for r in range(grid.rows + 1)], minor=True)
    ax.grid(which='minor', color='black', linewidth=0.5, alpha=0.3)

    if path:
        path_x, path_y = zip(*path)
        ax.plot(path_y, path_x, color=path_color, linewidth=2,
                label=path_label, zorder=3, marker='o', markersize=4)

    # Draw start point (green)
    if start is not None:
        ax.scatter(start[1], start[0], color='green', s=100, marker='o',
                   label="Start", zorder=10, edgecolors='black', linewidths=1.5)

    # Draw goal point (red)
    if goal is not None:
        ax.scatter(goal[1], goal[0], color='red', s=100, marker='*',
                   label="Goal", zorder=10, edgecolors='black', linewidths=1.5)

    ax.set_xlabel("Y (column)")
    ax.set_ylabel("X (row)")
    ax.set_aspect('equal', adjustable='box')
    if path or start is not None or goal is not None:
        ax.legend(loc='best')


def draw_tree(ax, tree: Dict[int, Node], color: str = 'blue', alpha: float = 0.3):
    """
    Draw the parent links of a sampling planner's tree.

    Args:
        ax: Matplotlib axis
        tree: Mapping from node id to node
        color: Edge color
        alpha: Edge transparency
    """
    for node in tree.values():
        if node.parent_id == node.id or node.parent_id not in tree:
            continue
        parent = tree[node.parent_id]
        ax.plot([node.y, parent.y], [node.x, parent.x],
                color=color, linewidth=0.5, alpha=alpha, zorder=1)

