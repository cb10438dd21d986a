"""
Efficient features from high-cardinality, multiple-membership factors.

In healthcare we are often faced with attributes where each observation may
have zero, one, or more levels, e.g. medications for a model at the patient
grain. One-hot encoding every medication is expensive and dilutes the signal.
get_best_levels identifies a subset of levels likely to be useful predictors,
and add_best_levels adds them, pivoted, to the model table.

Key Driver Functions:
    get_best_levels() - ranked, polarity-balanced list of levels
    add_best_levels() - pivot those levels onto the model table and record
                        them so deployment can add the same columns

Usage Examples:

    from best_levels import get_best_levels, add_best_levels

    get_best_levels(d=df, longsheet=meds, id="patient", groups="drug",
                    outcome="survived", n_levels=3)

    train = add_best_levels(d=df, longsheet=meds, id="patient", groups="drug",
                            outcome="survived", n_levels=4, fill="dose",
                            fun="sum", missing_fill=0)
    train.frame        # df plus one column per selected drug
    train.registry     # {"drug_levels": [...]}

    # Deployment: same columns, even for drugs absent from deployment_meds
    deploy = add_best_levels(d=deployment_df, longsheet=deployment_meds,
                             id="patient", groups="drug", levels=train,
                             fill="dose", missing_fill=0)

The levels are chosen from presence/absence alone; fill and fun only shape the
values of the added columns.
"""

import logging
import math
import numbers
from typing import Any, Callable, Iterable, List, Optional, Union

import numpy as np
import pandas as pd

from .errors import InvalidParameter, MissingOutcomeColumn, NoQualifyingLevels
from .level_scorer import OutcomeType, score_levels, split_by_polarity, unscored_levels
from .pivot import pivot, pivot_column_name
from .presence_joiner import build_analysis_table
from .registry import AugmentedFrame, LevelSetRegistry, LevelsSource, levels_key, partition_levels
from .zipper import select_balanced

logger = logging.getLogger(__name__)


def _check_count(name: str, value) -> None:
    if isinstance(value, (bool, np.bool_)) or not isinstance(value, numbers.Real):
        raise InvalidParameter(f"{name} should be a non-negative number, got {value!r}")
    if math.isnan(value) or value < 0:
        raise InvalidParameter(f"{name} should be a non-negative number, got {value!r}")


def _check_outcome(d: pd.DataFrame, outcome: Optional[str]) -> None:
    if outcome is None or outcome not in d.columns or d[outcome].isna().all():
        raise MissingOutcomeColumn(str(outcome))


def get_best_levels(
    d: pd.DataFrame,
    longsheet: pd.DataFrame,
    id: str,
    groups: str,
    outcome: str,
    n_levels: int = 100,
    min_obs: int = 1,
    positive_class: Any = "Y",
    outcome_type: Optional[OutcomeType] = None,
) -> List[Any]:
    """
    Find levels of groups likely to be useful predictors of outcome.

    Args:
        d: Model table at the desired grain, has id and outcome
        longsheet: Table with zero or more rows per grain, has id and groups
        id: Identifier column, present in both tables
        groups: Grouping column in longsheet
        outcome: Outcome column in d. Numeric outcomes are scored as
            regression, anything else as classification.
        n_levels: Number of levels to return. Half are taken from levels
            positively associated with the outcome and half from negatively
            associated ones where possible. If fewer exist, all are returned.
        min_obs: Minimum number of observations a level must be found in to
            be considered
        positive_class: Positive class of a classification outcome
        outcome_type: Override the regime detected from the outcome's dtype

    Returns:
        List of levels, best first, alternating between polarities
    """
    _check_outcome(d, outcome)
    _check_count("n_levels", n_levels)
    _check_count("min_obs", min_obs)

    try:
        tomodel = build_analysis_table(d, longsheet, id, groups, outcome, min_obs)
    except NoQualifyingLevels as e:
        logger.warning(str(e))
        return []

    scores = score_levels(tomodel, id, groups, outcome, positive_class, outcome_type)
    best = select_balanced(
        split_by_polarity(scores, groups), n_levels, tail=unscored_levels(scores, groups)
    )
    logger.info(f"Selected {len(best)} of {len(scores)} levels of '{groups}'")
    return best


def materialize_levels(
    d: pd.DataFrame,
    longsheet: pd.DataFrame,
    id: str,
    groups: str,
    present: Iterable,
    absent: Iterable = (),
    fill: Optional[str] = None,
    fun: Union[str, Callable] = "sum",
    missing_fill: Any = np.nan,
) -> pd.DataFrame:
    """
    Left-join one pivoted column per level onto a copy of d.

    Levels in `absent` get a column of missing_fill even though no row of
    longsheet has them. Rows of d with none of the levels are also filled with
    missing_fill.
    """
    present = list(present)
    subset = longsheet[longsheet[groups].isin(present)]
    pivoted = pivot(
        subset,
        grain=id,
        spread=groups,
        fill=fill,
        fun=fun,
        missing_fill=missing_fill,
        extra_cols=absent,
    )

    new_cols = [c for c in pivoted.columns if c != id]
    clashes = [c for c in new_cols if c in d.columns]
    if clashes:
        raise ValueError(f"Columns {clashes} already exist in d; were these levels added before?")

    out = d.merge(pivoted, on=id, how="left")
    out.index = d.index
    if new_cols and not pd.isna(missing_fill):
        out[new_cols] = out[new_cols].fillna(missing_fill)
    return out


def add_best_levels(
    d: Union[pd.DataFrame, AugmentedFrame],
    longsheet: pd.DataFrame,
    id: str,
    groups: str,
    outcome: Optional[str] = None,
    n_levels: int = 100,
    min_obs: int = 1,
    positive_class: Any = "Y",
    levels: Any = None,
    fill: Optional[str] = None,
    fun: Union[str, Callable] = "sum",
    missing_fill: Any = np.nan,
) -> AugmentedFrame:
    """
    Add columns for the best levels of groups to d.

    Args:
        d: Model table, or the AugmentedFrame from a previous call when adding
            levels of several grouping attributes in turn. If d already holds
            levels of groups, their columns are replaced.
        longsheet, id, groups, outcome, n_levels, min_obs, positive_class:
            As in get_best_levels. outcome is only needed when levels is None.
        levels: Levels to add instead of selecting them, e.g. in deployment.
            An AugmentedFrame from add_best_levels, a model trained on one
            (anything with a `best_levels` registry), the registry mapping
            itself, or a list of levels.
        fill: Column of longsheet whose values fill the new columns after
            aggregation by fun. If None, occurrences are counted.
        fun: Aggregation function or name, defaults to "sum"
        missing_fill: Value for entities without a level

    Returns:
        AugmentedFrame whose registry holds '<groups>_levels' merged with any
        entries that came in on d
    """
    if isinstance(d, AugmentedFrame):
        frame, registry = d.frame, d.registry
        if levels_key(groups) in registry:
            # Adding groups again replaces the columns from the earlier call
            previous = [pivot_column_name(groups, lev) for lev in registry[levels_key(groups)]]
            frame = frame.drop(columns=[c for c in previous if c in frame.columns])
    else:
        frame, registry = d, LevelSetRegistry()

    add_as_empty = []
    if levels is None:
        to_add = get_best_levels(
            frame, longsheet, id, groups, outcome, n_levels, min_obs, positive_class
        )
        recorded = to_add
    else:
        recorded = LevelsSource.from_value(levels).resolve(groups)
        to_add, add_as_empty = partition_levels(recorded, longsheet[groups].dropna().unique())
        logger.info(
            f"Replaying {len(recorded)} levels of '{groups}': {len(to_add)} present, "
            f"{len(add_as_empty)} added as empty columns"
        )

    augmented = materialize_levels(
        frame,
        longsheet,
        id,
        groups,
        present=to_add,
        absent=add_as_empty,
        fill=fill,
        fun=fun,
        missing_fill=missing_fill,
    )
    return AugmentedFrame(augmented, registry.with_levels(groups, recorded))
