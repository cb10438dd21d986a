"""
best_levels: features from high-cardinality, multiple-membership factors.

This package scores every level of a grouping attribute (e.g. each medication
a patient received) by how informative its presence is for an outcome, keeps
a small set balanced between positive and negative predictors, and pivots them
onto the model table. The chosen levels are recorded so deployment can add the
same columns.
"""

__version__ = "0.1.0"

from .errors import (
    BestLevelsError,
    MissingOutcomeColumn,
    InvalidParameter,
    NoQualifyingLevels,
    InvalidLevelsArgument,
    MissingLevelSetKey
)

from .levels import (
    get_best_levels,
    add_best_levels,
    materialize_levels
)

from .level_scorer import (
    OutcomeType,
    detect_outcome_type,
    score_levels,
    score_regression,
    score_classification,
    split_by_polarity,
    unscored_levels
)

from .presence_joiner import build_analysis_table
from .zipper import zip_levels, select_balanced
from .pivot import pivot

from .registry import (
    AugmentedFrame,
    LevelSetRegistry,
    LevelsKind,
    LevelsSource,
    levels_key,
    partition_levels
)

from .yaml_processor import LevelSettings, load_config, get_level_settings
from .report import summarize_selection, plot_level_scores

# Define what should be available in "from best_levels import *"
__all__ = [
    # Public surface
    'get_best_levels',
    'add_best_levels',
    'materialize_levels',

    # Building blocks
    'build_analysis_table',
    'OutcomeType',
    'detect_outcome_type',
    'score_levels',
    'score_regression',
    'score_classification',
    'split_by_polarity',
    'unscored_levels',
    'zip_levels',
    'select_balanced',
    'pivot',

    # Registry and replay
    'AugmentedFrame',
    'LevelSetRegistry',
    'LevelsKind',
    'LevelsSource',
    'levels_key',
    'partition_levels',

    # Configuration and reporting
    'LevelSettings',
    'load_config',
    'get_level_settings',
    'summarize_selection',
    'plot_level_scores',

    # Errors
    'BestLevelsError',
    'MissingOutcomeColumn',
    'InvalidParameter',
    'NoQualifyingLevels',
    'InvalidLevelsArgument',
    'MissingLevelSetKey',
]
