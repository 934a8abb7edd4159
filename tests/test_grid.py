"""tests/test_grid.py - Grid, CellType and Node unit tests"""
import math

import numpy as np
import pytest

from grid_planning.core.grid import Grid, CellType, MOTIONS_4
from grid_planning.core.node import Node


class TestGridConstruction:

    def test_from_nested_list(self):
        grid = Grid([[0, 1, 0],
                     [0, 0, 0]])
        assert grid.shape == (2, 3)
        assert grid.rows == 2 and grid.cols == 3
        assert grid.size == 6

    def test_input_array_is_copied(self):
        cells = np.zeros((3, 3), dtype=int)
        grid = Grid(cells)
        cells[1, 1] = CellType.OBSTACLE
        assert grid.is_free(1, 1)

    @pytest.mark.parametrize("cells", [[], [[]], [0, 1, 0], [[[0]]]])
    def test_rejects_bad_shapes(self, cells):
        with pytest.raises(ValueError):
            Grid(cells)

    def test_empty_square_and_rectangular(self):
        assert Grid.empty(4).shape == (4, 4)
        assert Grid.empty(2, 7).shape == (2, 7)
        assert len(Grid.empty(3).obstacle_cells()) == 0

    def test_from_obstacles(self):
        grid = Grid.from_obstacles(3, 4, [(0, 1), (2, 3)])
        assert grid.is_obstacle(0, 1)
        assert grid.is_obstacle(2, 3)
        assert sorted(map(tuple, grid.obstacle_cells())) == [(0, 1), (2, 3)]

    def test_from_config_cells(self):
        grid = Grid.from_config({'cells': [[0, 1], [0, 0]]})
        assert grid.is_obstacle(0, 1)

    def test_from_config_size_and_obstacles(self):
        grid = Grid.from_config({'size': {'rows': 3, 'cols': 5}, 'obstacles': [[1, 4]]})
        assert grid.shape == (3, 5)
        assert grid.is_obstacle(1, 4)

    def test_from_config_square_size(self):
        assert Grid.from_config({'size': 6}).shape == (6, 6)

    def test_from_config_requires_layout(self):
        with pytest.raises(ValueError):
            Grid.from_config({'start': [0, 0]})


class TestGridQueries:

    def test_bounds_and_occupancy(self):
        grid = Grid([[0, 1],
                     [CellType.PATH, 0]])
        assert grid.in_bounds(1, 1)
        assert not grid.in_bounds(2, 0)
        assert not grid.in_bounds(0, -1)
        assert grid.is_obstacle(0, 1)
        # Overlay codes are traversable
        assert grid.is_free(1, 0)
        # Outside the grid is neither free nor an obstacle
        assert not grid.is_free(5, 5)
        assert not grid.is_obstacle(5, 5)

    def test_node_ids(self):
        grid = Grid.empty(3, 4)
        assert grid.node_id(0, 0) == 0
        assert grid.node_id(2, 3) == 11
        assert grid.coords(grid.node_id(1, 2)) == (1, 2)

    def test_node_factory_makes_root(self):
        grid = Grid.empty(5)
        node = grid.node(2, 3, cost=1.5)
        assert node.id == 13
        assert node.parent_id == node.id
        assert node.cost == 1.5

    def test_set_cell(self):
        grid = Grid.empty(3)
        grid.set_cell(1, 1, CellType.OBSTACLE)
        assert grid.is_obstacle(1, 1)
        with pytest.raises(IndexError):
            grid.set_cell(3, 0, CellType.OBSTACLE)

    def test_four_neighbours_in_motion_order(self):
        grid = Grid.empty(3)
        expected = [(1 + dx, 1 + dy) for dx, dy in MOTIONS_4]
        assert grid.neighbors(1, 1) == expected

    def test_neighbours_skip_obstacles_and_edges(self):
        grid = Grid.from_obstacles(3, 3, [(0, 1)])
        assert grid.neighbors(0, 0) == [(1, 0)]

    def test_eight_neighbours_do_not_cut_corners(self):
        grid = Grid.from_obstacles(3, 3, [(0, 1)])
        neighbours = grid.neighbors(1, 1, connectivity=8)
        # Diagonals beside the obstacle are excluded
        assert (0, 0) not in neighbours
        assert (0, 2) not in neighbours
        assert (2, 0) in neighbours and (2, 2) in neighbours
        assert len(neighbours) == 5

    def test_invalid_connectivity(self):
        with pytest.raises(ValueError):
            Grid.empty(3).neighbors(1, 1, connectivity=6)

    def test_free_cells(self):
        grid = Grid.from_obstacles(2, 2, [(0, 0)])
        assert len(grid.free_cells()) == 3


class TestSegmentCheck:

    def test_straight_segment(self):
        grid = Grid.from_obstacles(3, 3, [(1, 1)])
        assert grid.is_segment_free((0, 0), (0, 2))
        assert not grid.is_segment_free((1, 0), (1, 2))

    def test_diagonal_touching_obstacle_corner_is_blocked(self):
        grid = Grid.from_obstacles(2, 2, [(0, 1)])
        assert not grid.is_segment_free((0, 0), (1, 1))

    def test_endpoint_on_obstacle(self):
        grid = Grid.from_obstacles(3, 3, [(2, 2)])
        assert not grid.is_segment_free((0, 0), (2, 2))

    def test_shallow_segment_passes_obstacle(self):
        grid = Grid.from_obstacles(3, 3, [(0, 2), (1, 0)])
        # (0, 0) -> (1, 2) touches (0, 1) and (1, 1) only
        assert grid.is_segment_free((0, 0), (1, 2))


class TestOverlay:

    def test_overlay_codes(self):
        grid = Grid.from_obstacles(3, 3, [(1, 1)])
        path = [grid.node(0, 0), grid.node(0, 1), grid.node(0, 2), grid.node(1, 2)]
        overlay = grid.with_path_overlay(path)
        assert overlay[0, 0] == CellType.START
        assert overlay[0, 1] == CellType.PATH
        assert overlay[1, 2] == CellType.GOAL
        assert overlay[1, 1] == CellType.OBSTACLE
        # The grid itself is untouched
        assert grid.cells[0, 1] == CellType.FREE

    def test_copy_is_independent(self):
        grid = Grid.empty(2)
        clone = grid.copy()
        clone.set_cell(0, 0, CellType.OBSTACLE)
        assert grid.is_free(0, 0)


class TestNode:

    def test_equality_by_coordinates(self):
        a = Node(1, 2, cost=3.0, node_id=7, parent_id=7)
        b = Node(1, 2, cost=9.0, node_id=7, parent_id=1)
        assert a == b
        assert len({a, b}) == 1
        assert a != Node(2, 1)

    def test_ordering_by_total_cost_then_id(self):
        a = Node(0, 0, cost=1.0, heuristic=2.0, node_id=5)
        b = Node(0, 1, cost=2.0, heuristic=1.0, node_id=3)
        c = Node(0, 2, cost=0.5, heuristic=0.5, node_id=9)
        assert sorted([a, b, c]) == [c, b, a]

    def test_position_and_distance(self):
        a = Node(0, 0)
        b = Node(3, 4)
        assert b.position == (3, 4)
        assert a.distance_to(b) == pytest.approx(5.0)
        assert Node(1, 1).distance_to(Node(2, 2)) == pytest.approx(math.sqrt(2))

    def test_copy(self):
        node = Node(1, 1, cost=2.0, node_id=4, parent_id=0)
        clone = node.copy()
        clone.cost = 10.0
        clone.parent_id = 4
        assert node.cost == 2.0
        assert node.parent_id == 0
        assert clone == node
