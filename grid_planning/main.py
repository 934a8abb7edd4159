"""
Command-line runner for the grid planners.

Loads a grid and an algorithm configuration from YAML files, runs one
planner and reports its metrics.
"""

import argparse
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from .algorithms import ALGORITHM_MAP, get_planner_class
from .core.grid import Grid
from .core.path_planner import PathPlanner
from .utils.config_loader import load_grid_config, load_algorithm_config, merge_configs

logger = logging.getLogger(__name__)


def create_grid_from_config(grid_config: Dict[str, Any]) -> Grid:
    """Build the occupancy grid described by the ``grid`` section."""
    return Grid.from_config(grid_config)


def _plot_path(planner: PathPlanner, algorithm_name: str, output: Dict[str, Any],
               show: bool, save: bool):
    import matplotlib.pyplot as plt

    fig, ax = plt.subplots(figsize=(8, 8))
    planner.visualize(ax)
    fig.tight_layout()

    if save:
        directory = Path(output.get('save_path', f'outputs/{algorithm_name}/'))
        directory.mkdir(parents=True, exist_ok=True)
        target = directory / output.get('plot_filename', f'{algorithm_name}.png')
        fig.savefig(target, dpi=150, bbox_inches='tight')
        print(f"Saved plot as {target}")

    if show:
        plt.show()
    else:
        plt.close(fig)


def run_planner(algorithm_name: str, config_dir: str = 'configs', visualize: bool = True,
                save: bool = False, seed: Optional[int] = None) -> Optional[PathPlanner]:
    """
    Plan once between the configured start and goal.

    Args:
        algorithm_name: Registry key of the planner ('astar', 'rrt_star', ...)
        config_dir: Directory with ``grid.yaml`` and the per-algorithm files
        visualize: Open a plot window once planning succeeds
        save: Write the plot to the configured output location
        seed: Replaces ``parameters.random_seed`` from the YAML file

    Returns:
        The planner after planning, or None when the name is not registered
    """
    if algorithm_name not in ALGORITHM_MAP:
        print(f"Unknown algorithm '{algorithm_name}', choose one of: "
              f"{', '.join(sorted(ALGORITHM_MAP))}")
        return None

    grid_config = load_grid_config(config_dir)
    alg_config = load_algorithm_config(algorithm_name, config_dir)
    if seed is not None:
        alg_config = merge_configs(alg_config, {'parameters': {'random_seed': seed}})

    grid = create_grid_from_config(grid_config)
    start = tuple(grid_config['start'])
    goal = tuple(grid_config['goal'])
    logger.info("Grid %dx%d, start %s, goal %s", grid.rows, grid.cols, start, goal)

    planner = get_planner_class(algorithm_name)(grid, alg_config)
    print(f"{planner}: planning {start} -> {goal}")

    success, path = planner.plan(start, goal)
    for key, value in planner.get_metrics().items():
        print(f"  {key:>16}: {value}")

    if not success:
        print("No path found!")
        return planner

    print(f"Path found with {len(path)} nodes: {planner.path_positions()}")
    if visualize or save:
        _plot_path(planner, algorithm_name, alg_config.get('output') or {}, visualize, save)
    return planner


def main(argv=None):
    """Parse the command line and run one planner; returns the exit status."""
    parser = argparse.ArgumentParser(
        prog='grid-planning',
        description='Plan a path on an occupancy grid with one of the bundled planners.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
examples:
  grid-planning -a astar
  grid-planning -a rrt_star --seed 7 --save --no-viz
  grid-planning -a d_star_lite -c ../my_configs
        """
    )
    parser.add_argument('--algorithm', '-a', required=True, choices=sorted(ALGORITHM_MAP),
                        help='planner to run')
    parser.add_argument('--config-dir', '-c', default='configs',
                        help='where grid.yaml and <algorithm>.yaml live (default: %(default)s)')
    parser.add_argument('--seed', type=int, default=None,
                        help='seed for the randomised planners (rrt, rrt_star, ant_colony, genetic_algorithm)')
    parser.add_argument('--save', '-s', action='store_true',
                        help='write the plot under output.save_path')
    parser.add_argument('--no-viz', action='store_true',
                        help='do not open a plot window')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='log at DEBUG level')
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s %(name)s %(levelname)s: %(message)s'
    )

    planner = run_planner(args.algorithm, config_dir=args.config_dir,
                          visualize=not args.no_viz, save=args.save, seed=args.seed)
    return 0 if planner is not None and planner.success else 1


if __name__ == '__main__':
    raise SystemExit(main())
