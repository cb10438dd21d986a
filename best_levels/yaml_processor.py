"""
Settings for level selection, read from YAML.

Example file:

    defaults:
      n_levels: 50
      min_obs: 5
      positive_class: "Y"
      fun: sum
      missing_fill: 0
    groups:
      drug:
        n_levels: 20
      diagnosis:
        min_obs: 10

Per-group sections override defaults, which override LevelSettings' own values.
"""

import logging
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Optional

import numpy as np
import yaml

logger = logging.getLogger(__name__)


@dataclass
class LevelSettings:
    """Arguments for get_best_levels / add_best_levels that usually live in config."""
    n_levels: int = 100
    min_obs: int = 1
    positive_class: Any = "Y"
    fun: str = "sum"
    missing_fill: Any = None

    @property
    def fill_value(self):
        """missing_fill as passed to add_best_levels; None in YAML means NaN."""
        return np.nan if self.missing_fill is None else self.missing_fill

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def load_config(yaml_path: str) -> Dict[str, Any]:
    """
    Load and parse the YAML configuration file.

    Args:
        yaml_path: Path to the YAML configuration file

    Returns:
        Dictionary containing the parsed configuration
    """
    try:
        with open(yaml_path, 'r') as file:
            config = yaml.safe_load(file)
        return config or {}
    except FileNotFoundError:
        raise FileNotFoundError(f"Configuration file not found: {yaml_path}")
    except yaml.YAMLError as e:
        raise yaml.YAMLError(f"Error parsing YAML configuration: {e}")


def get_group_info(config: Dict[str, Any], group_col: str) -> Dict[str, Any]:
    """
    Get the section for a specific grouping attribute.

    Args:
        config: Loaded configuration dictionary
        group_col: Name of the grouping column

    Returns:
        Dictionary of overrides for that grouping attribute
    """
    groups = config.get('groups') or {}
    return groups.get(group_col) or {}


def get_level_settings(config: Optional[Dict[str, Any]], group_col: Optional[str] = None) -> LevelSettings:
    """
    Resolve LevelSettings for a grouping attribute.

    Args:
        config: Loaded configuration dictionary, or None for plain defaults
        group_col: Grouping column whose overrides apply, if any

    Returns:
        LevelSettings with defaults and group overrides applied
    """
    config = config or {}
    merged = dict(config.get('defaults') or {})
    if group_col is not None:
        merged.update(get_group_info(config, group_col))

    known = {f.name for f in fields(LevelSettings)}
    unknown = sorted(set(merged) - known)
    if unknown:
        logger.warning(f"Ignoring unknown level settings: {unknown}")

    return LevelSettings(**{k: v for k, v in merged.items() if k in known})
