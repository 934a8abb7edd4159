"""tests/test_rrt_star.py - RRT / RRT* sampling planners"""
import math

import pytest

from grid_planning.algorithms.rrt import RRTPlanner
from grid_planning.algorithms.rrt_star import RRTStarPlanner
from grid_planning.core.exceptions import ConfigurationError, InternalInvariantError
from grid_planning.core.grid import Grid


# Samples as (x, y) pairs, flattened in draw order. On an open 7x7 grid with
# threshold 1.5 the first four samples build a chain (0,0)-(1,1)-(2,2)-(1,3)-(1,4);
# (0,1) and (0,2) then open a cheaper route and (0,2) rewires (1,3); (1,5)
# finally sees the goal (0,6).
REWIRE_SAMPLES = [1, 1, 2, 2, 1, 3, 1, 4, 0, 1, 0, 2, 1, 5]


class RecordingRRTStar(RRTStarPlanner):
    """RRT* that checks every rewire as it happens."""

    def _on_reset(self):
        super()._on_reset()
        self.rewire_log = []

    def _rewire(self, new_node):
        before = {node_id: (node.parent_id, node.cost) for node_id, node in self.tree.items()}
        super()._rewire(new_node)

        for node_id, (parent_id, cost) in before.items():
            node = self.tree[node_id]
            if node.parent_id != parent_id:
                self.rewire_log.append((node_id, cost, node.cost))
        assert_costs_are_exact(self)


def assert_costs_are_exact(planner):
    """Every node's cost equals its parent's cost plus the edge length."""
    for node in planner.tree.values():
        if node.parent_id == node.id:
            assert node.cost == 0.0
            continue
        parent = planner.tree[node.parent_id]
        assert node.cost == pytest.approx(parent.cost + parent.distance_to(node))


class TestConfiguration:

    def test_defaults(self, open_grid):
        planner = RRTStarPlanner(open_grid)
        assert planner.threshold == 1.5
        assert planner.max_iter_x_factor == 500
        assert planner.max_iterations == 500 * 25
        assert planner.max_time is None

    def test_yaml_parameters_and_overrides(self, open_grid):
        config = {'name': 'RRT*', 'parameters': {'threshold': 2.0, 'max_iter_x_factor': 10}}
        assert RRTStarPlanner(open_grid, config).threshold == 2.0
        planner = RRTStarPlanner(open_grid, config, threshold=3.0)
        assert planner.threshold == 3.0
        assert planner.max_iter_x_factor == 10

    @pytest.mark.parametrize("params", [
        {'threshold': 0},
        {'threshold': -1.0},
        {'threshold': 'far'},
        {'max_iter_x_factor': 0},
        {'max_iter_x_factor': 2.5},
        {'max_time': -1},
    ])
    def test_invalid_parameters(self, params, open_grid):
        with pytest.raises(ConfigurationError):
            RRTStarPlanner(open_grid, {'parameters': params})
        with pytest.raises(ValueError):
            RRTPlanner(open_grid, **params)


class TestScenarios:

    def test_straight_corridor(self, open_grid):
        # S2
        planner = RRTStarPlanner(open_grid, threshold=1.5, random_seed=4)
        success, path = planner.plan((0, 0), (0, 4))
        assert success
        for a, b in zip(path, path[1:]):
            assert a.distance_to(b) <= 1.5
        assert planner.validate_path()

    def test_blocked(self, blocked_grid):
        # S3
        planner = RRTStarPlanner(blocked_grid, max_iter_x_factor=50, random_seed=0)
        assert planner.plan((0, 1), (2, 1)) == (False, [])
        assert planner.iterations == planner.max_iterations
        assert planner.get_metrics()['goal_cost'] is None

    def test_diagonal_steps(self, open_grid):
        # S4
        planner = RRTStarPlanner(open_grid, threshold=2.0, random_seed=8)
        success, path = planner.plan((0, 0), (4, 4))
        assert success
        for a, b in zip(path, path[1:]):
            assert a.distance_to(b) <= 2.0
            assert open_grid.is_segment_free(a.position, b.position)

    def test_goal_visible_from_start(self, open_grid, scripted_rng):
        rng = scripted_rng([])
        planner = RRTStarPlanner(open_grid, rng=rng)
        success, path = planner.plan((2, 2), (3, 3))
        assert success
        assert [n.position for n in path] == [(2, 2), (3, 3)]
        assert rng.calls == 0

    def test_wall_is_not_crossed(self, wall_grid):
        planner = RRTStarPlanner(wall_grid, threshold=2.0, random_seed=3)
        success, path = planner.plan((0, 0), (0, 4))
        assert success
        assert planner.validate_path()
        # Any route has to pass below the wall
        assert max(n.x for n in path) >= 3

    def test_corner_between_obstacles_is_not_squeezed(self):
        grid = Grid([[0, 1],
                     [1, 0]])
        planner = RRTStarPlanner(grid, threshold=2.0, max_iter_x_factor=20, random_seed=1)
        assert planner.plan((0, 0), (1, 1)) == (False, [])

    def test_wall_clock_budget(self):
        planner = RRTStarPlanner(Grid([[0, 1, 0]]), max_time=0.01, random_seed=2)
        assert planner.plan((0, 0), (0, 2)) == (False, [])
        assert planner.iterations <= planner.max_iterations


class TestRewire:
    """S5: a rewire lowers the goal cost below what plain RRT reaches."""

    def _plan_both(self, scripted_rng):
        grid = Grid.empty(7)
        rrt = RRTPlanner(grid, threshold=1.5, rng=scripted_rng(REWIRE_SAMPLES))
        rrt_star = RecordingRRTStar(grid, threshold=1.5, rng=scripted_rng(REWIRE_SAMPLES))
        rrt_result = rrt.plan((0, 0), (0, 6))
        star_result = rrt_star.plan((0, 0), (0, 6))
        return rrt, rrt_result, rrt_star, star_result

    def test_goal_cost_below_plain_rrt(self, scripted_rng):
        rrt, (rrt_ok, _), rrt_star, (star_ok, star_path) = self._plan_both(scripted_rng)
        assert rrt_ok and star_ok

        rrt_cost = rrt.get_metrics()['goal_cost']
        star_cost = rrt_star.get_metrics()['goal_cost']
        assert rrt_cost == pytest.approx(2 + 4 * math.sqrt(2))
        assert star_cost == pytest.approx(4 + 2 * math.sqrt(2))
        assert star_cost < rrt_cost

        assert [n.position for n in star_path] == [
            (0, 0), (0, 1), (0, 2), (1, 3), (1, 4), (1, 5), (0, 6)]
        assert star_path[-1].cost == pytest.approx(star_cost)

    def test_same_samples_same_nodes(self, scripted_rng):
        rrt, _, rrt_star, _ = self._plan_both(scripted_rng)
        assert set(rrt.tree) == set(rrt_star.tree)
        assert rrt.iterations == rrt_star.iterations == 7
        assert rrt.rewires == 0

    def test_rewire_strictly_improves(self, scripted_rng):
        _, _, rrt_star, _ = self._plan_both(scripted_rng)
        grid = rrt_star.grid
        assert rrt_star.rewires == 1
        node_id, old_cost, new_cost = rrt_star.rewire_log[0]
        assert node_id == grid.node_id(1, 3)
        assert old_cost == pytest.approx(3 * math.sqrt(2))
        assert new_cost == pytest.approx(2 + math.sqrt(2))

    def test_descendants_follow_rewire(self, scripted_rng):
        _, _, rrt_star, _ = self._plan_both(scripted_rng)
        grid = rrt_star.grid
        descendant = rrt_star.tree[grid.node_id(1, 4)]
        assert descendant.parent_id == grid.node_id(1, 3)
        assert descendant.cost == pytest.approx(3 + math.sqrt(2))
        assert grid.node_id(1, 3) in rrt_star.children[grid.node_id(0, 2)]
        assert grid.node_id(1, 3) not in rrt_star.children[grid.node_id(2, 2)]

    def test_neighbour_cache_is_symmetric(self, scripted_rng):
        _, _, rrt_star, _ = self._plan_both(scripted_rng)
        for node_id, near in rrt_star.near_nodes.items():
            for other in near:
                assert node_id in rrt_star.near_nodes[other]


class TestTreeInvariants:

    @pytest.mark.parametrize("seed", range(5))
    def test_random_runs_keep_tree_consistent(self, seed):
        grid = Grid.from_obstacles(10, 10, [(3, y) for y in range(7)] + [(6, y) for y in range(3, 10)])
        planner = RecordingRRTStar(grid, threshold=2.0, max_iter_x_factor=30, random_seed=seed)
        success, path = planner.plan((0, 0), (9, 9))

        planner.check_tree()
        assert_costs_are_exact(planner)
        assert all(new < old for _, old, new in planner.rewire_log)
        assert len(planner.rewire_log) == planner.rewires
        if success:
            assert planner.validate_path()
            assert path[-1].cost == pytest.approx(planner.get_path_length())

    def test_rrt_star_never_costlier_than_rrt_on_same_seed(self):
        grid = Grid.empty(8)
        for seed in range(3):
            rrt = RRTPlanner(grid, threshold=2.0, random_seed=seed)
            rrt_star = RRTStarPlanner(grid, threshold=2.0, random_seed=seed)
            assert rrt.plan((0, 0), (7, 7))[0]
            assert rrt_star.plan((0, 0), (7, 7))[0]
            assert set(rrt.tree) == set(rrt_star.tree)
            assert rrt_star.get_metrics()['goal_cost'] <= rrt.get_metrics()['goal_cost'] + 1e-9

    def test_cycle_is_detected(self, scripted_rng):
        planner = RRTStarPlanner(Grid.empty(7), threshold=1.5, rng=scripted_rng(REWIRE_SAMPLES))
        planner.plan((0, 0), (0, 6))
        grid = planner.grid
        first, second = planner.tree[grid.node_id(0, 1)], planner.tree[grid.node_id(0, 2)]

        first.parent_id = second.id
        planner.children[second.id].add(first.id)
        with pytest.raises(InternalInvariantError):
            planner.check_tree()
        with pytest.raises(InternalInvariantError):
            planner._propagate_cost(first)
        with pytest.raises(InternalInvariantError):
            planner._create_path()

    def test_dangling_parent_is_detected(self, scripted_rng):
        planner = RRTStarPlanner(Grid.empty(7), threshold=1.5, rng=scripted_rng(REWIRE_SAMPLES))
        planner.plan((0, 0), (0, 6))
        planner.tree[planner.grid.node_id(1, 5)].parent_id = 999
        with pytest.raises(InternalInvariantError):
            planner._create_path()
        with pytest.raises(InternalInvariantError):
            planner.check_tree()


class TestMetricsAndDrawing:

    def test_metrics(self, open_grid):
        planner = RRTStarPlanner(open_grid, random_seed=5)
        planner.plan((0, 0), (4, 4))
        metrics = planner.get_metrics()
        assert metrics['algorithm'] == 'RRT*'
        assert metrics['tree_size'] == len(planner.tree)
        assert metrics['iterations'] == planner.iterations
        assert metrics['goal_cost'] == pytest.approx(planner.path[-1].cost)

    def test_visualize_draws_tree_and_path(self, maze_grid):
        import matplotlib.pyplot as plt

        planner = RRTStarPlanner(maze_grid, random_seed=6)
        planner.plan((0, 0), (4, 4))
        fig, ax = plt.subplots()
        planner.visualize(ax)
        # Path line plus one line per tree edge
        assert len(ax.lines) >= len(planner.tree)
        assert 'RRT*' in ax.get_title()
        plt.close(fig)
