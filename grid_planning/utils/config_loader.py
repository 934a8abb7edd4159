"""
YAML configuration loading for the grid planners.

A configuration directory holds ``grid.yaml`` (the occupancy grid with
start and goal) and one ``<algorithm>.yaml`` per planner whose
``algorithm`` section carries the planner's ``parameters``.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Union

import yaml

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def load_yaml_config(filepath: PathLike) -> Dict[str, Any]:
    """
    Read one YAML file into a dictionary.

    Args:
        filepath: YAML file to read

    Returns:
        Parsed mapping; an empty file gives an empty dictionary

    Raises:
        FileNotFoundError: If the file is missing
        yaml.YAMLError: If the file cannot be parsed

    Example:
        >>> config = load_yaml_config('configs/grid.yaml')
        >>> config['grid']['start']
        [0, 0]
    """
    path = Path(filepath)
    if not path.is_file():
        raise FileNotFoundError(f"Configuration file {path} does not exist")

    text = path.read_text()
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise yaml.YAMLError(f"Malformed YAML in {path}: {exc}") from exc

    logger.debug("Loaded configuration from %s", path)
    return data or {}


def load_grid_config(config_dir: PathLike = 'configs') -> Dict[str, Any]:
    """
    Load the ``grid`` section of ``grid.yaml``.

    The section describes the grid either as explicit ``cells`` rows or
    as a ``size`` plus an ``obstacles`` list, and names the ``start`` and
    ``goal`` cells as ``[x, y]`` pairs.
    """
    return load_yaml_config(Path(config_dir) / 'grid.yaml').get('grid', {})


def load_algorithm_config(algorithm_name: str, config_dir: PathLike = 'configs') -> Dict[str, Any]:
    """
    Load the ``algorithm`` section of ``<algorithm_name>.yaml``.

    Planners without a file run with their built-in defaults.

    Args:
        algorithm_name: Registry name of the planner ('astar', 'rrt_star', ...)
        config_dir: Directory holding the YAML files

    Returns:
        The algorithm section (``name``, ``parameters``, ``visualization``,
        ``output``), or an empty dictionary when there is no file

    Example:
        >>> load_algorithm_config('rrt_star')['parameters']['threshold']
        2.0
    """
    path = Path(config_dir) / f'{algorithm_name}.yaml'
    if not path.exists():
        logger.info("No %s, running %s with default parameters", path.name, algorithm_name)
        return {}
    return load_yaml_config(path).get('algorithm', {})


def merge_configs(*configs: Dict[str, Any]) -> Dict[str, Any]:
    """
    Combine algorithm configurations, later ones winning.

    ``parameters`` sections are merged key by key; every other key is
    replaced as a whole.

    Example:
        >>> merge_configs({'parameters': {'threshold': 1.5}},
        ...               {'parameters': {'random_seed': 7}})
        {'parameters': {'threshold': 1.5, 'random_seed': 7}}
    """
    merged: Dict[str, Any] = {}
    for config in configs:
        for key, value in config.items():
            if key == 'parameters':
                merged[key] = {**merged.get(key, {}), **(value or {})}
            else:
                merged[key] = value
    return merged
