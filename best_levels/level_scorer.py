"""
Level scoring.

Each level of the grouping attribute gets a scalar describing how useful its
presence is likely to be as a predictor of the outcome, plus a polarity telling
whether it is associated with higher (1) or lower (0) outcomes.

Two regimes, chosen once from the outcome's dtype:

    Regression:      mean_ssd = centered_mean(group) / sqrt(var(group) / n(group))
                     larger |mean_ssd| is better.
    Classification:  badness = log_loss(group) * log_dist_from_in_all(group)
                     smaller badness is better.

Both score frames are sorted best-first with ties kept in category order, so the
ranking is reproducible.
"""

import logging
from enum import Enum
from typing import Any, List, Optional

import numpy as np
import pandas as pd
from scipy.special import xlogy

logger = logging.getLogger(__name__)


class OutcomeType(Enum):
    REGRESSION = "regression"
    CLASSIFICATION = "classification"


STATISTIC_COLUMNS = {
    OutcomeType.REGRESSION: "mean_ssd",
    OutcomeType.CLASSIFICATION: "badness",
}


def detect_outcome_type(outcome: pd.Series) -> OutcomeType:
    """Numeric outcomes are scored as regression, everything else as classification."""
    if pd.api.types.is_bool_dtype(outcome):
        return OutcomeType.CLASSIFICATION
    if pd.api.types.is_numeric_dtype(outcome):
        return OutcomeType.REGRESSION
    return OutcomeType.CLASSIFICATION


def statistic_column(scores: pd.DataFrame) -> str:
    """Name of the ranking statistic held by a score frame."""
    for col in STATISTIC_COLUMNS.values():
        if col in scores.columns:
            return col
    raise KeyError("Score frame has neither 'mean_ssd' nor 'badness'")


def score_regression(tomodel: pd.DataFrame, group_col: str, outcome_col: str) -> pd.DataFrame:
    """
    Distance of each group's mean from the grand mean, in units of the group's
    standard error.

    Groups with no variance in outcome rise to the top with an infinite score
    carrying the sign of their centered mean. Single observations have no
    sample variance; their mean_ssd is NaN and they rank after every scored
    group.

    Returns:
        DataFrame with columns [group_col, n, mean, mean_ssd, polarity], best first
    """
    centered = tomodel[outcome_col] - tomodel[outcome_col].mean()
    stats = (
        centered.groupby(tomodel[group_col], sort=True, observed=True)
        .agg(["count", "mean", "var"])
        .rename(columns={"count": "n"})
    )

    no_variance = stats["var"] == 0
    with np.errstate(divide="ignore", invalid="ignore"):
        mean_ssd = stats["mean"] / np.sqrt(stats["var"] / stats["n"])
    saturated = np.where(stats["mean"] > 0, np.inf, np.where(stats["mean"] < 0, -np.inf, 0.0))
    stats["mean_ssd"] = np.where(no_variance, saturated, mean_ssd)

    scores = (
        stats.reset_index()[[group_col, "n", "mean", "mean_ssd"]]
        .sort_values("mean_ssd", key=np.abs, ascending=False, kind="mergesort")
        .reset_index(drop=True)
    )
    # A statistic of exactly zero is filed with the positive predictors
    scores["polarity"] = (scores["mean"] >= 0).astype(int)
    return scores


def score_classification(
    tomodel: pd.DataFrame,
    id_col: str,
    group_col: str,
    outcome_col: str,
    positive_class: Any = "Y",
) -> pd.DataFrame:
    """
    Log-loss-like badness of each group as a predictor of its typical class.

    Two quantities are multiplied:
      * log_dist_from_in_all: -log of the share of observations the group is
        found in; zero for a group present everywhere, growing with rarity.
      * log_loss: log-loss of predicting every member of the group to be of
        the class the group leans toward. Which class that is depends on which
        side of the median positive-rate the group falls on, so that both
        positive and negative predictors are retained even for skewed outcomes.

    Perfect separation is softened to half an observation wrong, and presence
    in every observation to presence in all but half of one, so logs stay finite.

    Returns:
        DataFrame with columns [group_col, fraction_positive, present_in,
        log_dist_from_in_all, predictor_of, log_loss, badness, polarity], best first
    """
    total_observations = tomodel[id_col].nunique()
    epsilon = 0.5 / total_observations

    grouped = tomodel.groupby(group_col, sort=True, observed=True)
    levs = pd.DataFrame(
        {
            "fraction_positive": (tomodel[outcome_col] == positive_class)
            .groupby(tomodel[group_col], sort=True, observed=True)
            .mean(),
            "present_in": grouped[id_col].nunique().astype(float),
        }
    )
    levs["fraction_positive"] = (
        levs["fraction_positive"]
        .mask(levs["fraction_positive"] == 1, 1 - epsilon)
        .mask(levs["fraction_positive"] == 0, epsilon)
    )
    levs["present_in"] = levs["present_in"].mask(
        levs["present_in"] == total_observations, total_observations - 0.5
    )
    levs["log_dist_from_in_all"] = -np.log(levs["present_in"] / total_observations)

    median_positive = levs["fraction_positive"].median()
    levs["predictor_of"] = (levs["fraction_positive"] > median_positive).astype(int)
    levs["log_loss"] = -(
        xlogy(levs["predictor_of"], levs["fraction_positive"])
        + xlogy(1 - levs["predictor_of"], 1 - levs["fraction_positive"])
    )
    levs["badness"] = levs["log_loss"] * levs["log_dist_from_in_all"]
    levs["polarity"] = levs["predictor_of"]

    return (
        levs.reset_index()
        .sort_values("badness", kind="mergesort")
        .reset_index(drop=True)
    )


def score_levels(
    tomodel: pd.DataFrame,
    id_col: str,
    group_col: str,
    outcome_col: str,
    positive_class: Any = "Y",
    outcome_type: Optional[OutcomeType] = None,
) -> pd.DataFrame:
    """Score every level in an analysis table with the regime fitting the outcome."""
    if outcome_type is None:
        outcome_type = detect_outcome_type(tomodel[outcome_col])
    logger.debug(f"Scoring levels of '{group_col}' as {outcome_type.value}")
    if outcome_type is OutcomeType.REGRESSION:
        return score_regression(tomodel, group_col, outcome_col)
    return score_classification(tomodel, id_col, group_col, outcome_col, positive_class)


def split_by_polarity(scores: pd.DataFrame, group_col: str) -> List[list]:
    """
    Split ranked levels into polarity buckets, negative predictors first.

    Levels without a statistic are left out (see unscored_levels). Empty
    buckets are dropped, so the result has at most two lists.
    """
    scored = scores[scores[statistic_column(scores)].notna()]
    buckets = [
        scored.loc[scored["polarity"] == polarity, group_col].tolist()
        for polarity in (0, 1)
    ]
    return [bucket for bucket in buckets if bucket]


def unscored_levels(scores: pd.DataFrame, group_col: str) -> list:
    """Levels whose statistic is undefined, in score-frame order."""
    return scores.loc[scores[statistic_column(scores)].isna(), group_col].tolist()
