"""
Level-set registry and replay.

The levels chosen for a grouping attribute in training must be added again, in
full, at deployment time. add_best_levels therefore returns its table together
with a LevelSetRegistry mapping '<group>_levels' to the chosen levels, and
accepts that registry (or anything carrying it) back through its `levels`
argument.

Accepted `levels` shapes, resolved once by LevelsSource.from_value:

    AugmentedFrame       -> AUGMENTED_TABLE  (registry of a previous result)
    object.best_levels   -> TRAINED_MODEL    (a model that kept the registry)
    Mapping / registry   -> RAW_REGISTRY
    list-like of values  -> CATEGORY_LIST    (used verbatim)
"""

import logging
from collections import OrderedDict
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Tuple

import numpy as np
import pandas as pd
import yaml

from .errors import InvalidLevelsArgument, MissingLevelSetKey

logger = logging.getLogger(__name__)


def levels_key(group_col: str) -> str:
    """Registry key under which the levels of group_col are kept."""
    return f"{group_col}_levels"


def convert_numpy_types(obj):
    """Convert numpy scalars and containers to native Python for YAML output."""
    if isinstance(obj, np.integer):
        return int(obj)
    elif isinstance(obj, np.floating):
        return float(obj)
    elif isinstance(obj, np.bool_):
        return bool(obj)
    elif isinstance(obj, np.ndarray):
        return obj.tolist()
    elif isinstance(obj, dict):
        return {key: convert_numpy_types(value) for key, value in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [convert_numpy_types(item) for item in obj]
    return obj


class LevelSetRegistry(Mapping):
    """Ordered, read-only mapping of '<group>_levels' keys to level lists."""

    def __init__(self, entries: Mapping = None):
        self._entries = OrderedDict(
            (str(key), list(value)) for key, value in (entries or {}).items()
        )

    @classmethod
    def from_mapping(cls, mapping: Mapping) -> "LevelSetRegistry":
        if isinstance(mapping, cls):
            return mapping
        return cls(mapping)

    def __getitem__(self, key: str) -> list:
        return list(self._entries[key])

    def __iter__(self):
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"LevelSetRegistry({dict(self._entries)!r})"

    def levels_for(self, group_col: str) -> list:
        """Levels recorded for group_col; MissingLevelSetKey if there are none."""
        key = levels_key(group_col)
        if key not in self._entries:
            raise MissingLevelSetKey(key, available=list(self._entries))
        return list(self._entries[key])

    def with_levels(self, group_col: str, levels: Iterable) -> "LevelSetRegistry":
        """Copy of this registry with the entry for group_col set to levels."""
        entries = OrderedDict(self._entries)
        entries[levels_key(group_col)] = list(levels)
        return LevelSetRegistry(entries)

    def to_dict(self) -> Dict[str, list]:
        return {key: list(value) for key, value in self._entries.items()}

    def save(self, path: str) -> None:
        """Write the registry to a YAML file."""
        with open(path, "w") as file:
            yaml.safe_dump(convert_numpy_types(self.to_dict()), file, sort_keys=False)
        logger.info(f"Saved level-set registry with {len(self)} entries to {path}")

    @classmethod
    def load(cls, path: str) -> "LevelSetRegistry":
        """Read a registry written by save()."""
        try:
            with open(path, "r") as file:
                entries = yaml.safe_load(file)
        except FileNotFoundError:
            raise FileNotFoundError(f"Registry file not found: {path}")
        if entries is None:
            return cls()
        if not isinstance(entries, dict):
            raise ValueError(f"Registry file {path} must hold a mapping, got {type(entries).__name__}")
        return cls(entries)


@dataclass
class AugmentedFrame:
    """A table returned by add_best_levels and the level sets used to build it."""

    frame: pd.DataFrame
    registry: LevelSetRegistry = field(default_factory=LevelSetRegistry)

    @property
    def best_levels(self) -> LevelSetRegistry:
        return self.registry


class LevelsKind(Enum):
    AUGMENTED_TABLE = "augmented_table"
    TRAINED_MODEL = "trained_model"
    RAW_REGISTRY = "raw_registry"
    CATEGORY_LIST = "category_list"


def _as_category_list(levels) -> List[Any]:
    if isinstance(levels, (pd.Series, pd.Index)):
        values = levels.tolist()
    elif isinstance(levels, np.ndarray):
        if levels.ndim != 1:
            raise InvalidLevelsArgument(levels)
        values = levels.tolist()
    else:
        values = list(levels)
    if not all(pd.api.types.is_scalar(v) for v in values):
        raise InvalidLevelsArgument(levels)
    return values


@dataclass(frozen=True)
class LevelsSource:
    """The `levels` argument of add_best_levels, tagged with its shape."""

    kind: LevelsKind
    value: Any

    @classmethod
    def from_value(cls, levels) -> "LevelsSource":
        if isinstance(levels, LevelsSource):
            return levels
        if isinstance(levels, AugmentedFrame):
            return cls(LevelsKind.AUGMENTED_TABLE, levels.registry)
        if isinstance(levels, Mapping):
            return cls(LevelsKind.RAW_REGISTRY, LevelSetRegistry.from_mapping(levels))
        if isinstance(levels, (list, tuple, pd.Series, pd.Index, np.ndarray)):
            return cls(LevelsKind.CATEGORY_LIST, _as_category_list(levels))
        if not isinstance(levels, (str, bytes, pd.DataFrame)):
            carried = getattr(levels, "best_levels", None)
            if isinstance(carried, Mapping):
                return cls(LevelsKind.TRAINED_MODEL, LevelSetRegistry.from_mapping(carried))
        raise InvalidLevelsArgument(levels)

    def resolve(self, group_col: str) -> list:
        """Levels to add for group_col."""
        if self.kind is LevelsKind.CATEGORY_LIST:
            return list(self.value)
        return self.value.levels_for(group_col)


def partition_levels(levels: Iterable, present_values: Iterable) -> Tuple[list, list]:
    """
    Split levels into those found in present_values and those that are not.

    Both parts keep the order of levels.
    """
    present_set = set(present_values)
    present = [lev for lev in levels if lev in present_set]
    absent = [lev for lev in levels if lev not in present_set]
    return present, absent
