import logging

import pandas as pd

from .errors import NoQualifyingLevels

logger = logging.getLogger(__name__)


def _require_columns(df: pd.DataFrame, columns, table_name: str) -> None:
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise KeyError(f"Column(s) {missing} not found in {table_name}")


def build_analysis_table(
    wide: pd.DataFrame,
    long: pd.DataFrame,
    id_col: str,
    group_col: str,
    outcome_col: str,
    min_obs: int = 1,
) -> pd.DataFrame:
    """
    Attach each entity's outcome to every level the entity has.

    An (entity, level) pair is kept once no matter how many long rows produced
    it, so a drug given twice to the same patient counts as one observation.
    Entities with a missing outcome are left out.

    Args:
        wide: Table at prediction grain, one row per entity
        long: Zero or more rows per entity naming a level
        id_col: Identifier column present in both tables
        group_col: Grouping column in long
        outcome_col: Outcome column in wide
        min_obs: Minimum number of distinct entities a level must appear in

    Returns:
        DataFrame with columns [id_col, outcome_col, group_col]

    Raises:
        NoQualifyingLevels: if no level survives the min_obs filter
    """
    _require_columns(wide, [id_col, outcome_col], "wide table")
    _require_columns(long, [id_col, group_col], "long table")

    pairs = (
        long[[id_col, group_col]]
        .drop_duplicates()
        .dropna(subset=[group_col])
    )
    outcomes = wide[[id_col, outcome_col]].dropna(subset=[outcome_col])
    joined = outcomes.merge(pairs, on=id_col, how="inner")

    entities_per_level = joined.groupby(group_col, observed=True)[id_col].transform("nunique")
    tomodel = joined[entities_per_level >= min_obs].reset_index(drop=True)

    if tomodel.empty:
        raise NoQualifyingLevels(min_obs)

    logger.debug(
        f"{tomodel[group_col].nunique()} levels of '{group_col}' found in at least "
        f"{min_obs} of {tomodel[id_col].nunique()} observations"
    )
    return tomodel
