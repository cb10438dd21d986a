import logging
from typing import Any, Callable, Iterable, Optional, Union

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)


def pivot_column_name(spread: str, level: Any) -> str:
    """Name of the column holding values for one level of spread."""
    return f"{spread}_{level}"


def pivot(
    table: pd.DataFrame,
    grain: str,
    spread: str,
    fill: Optional[str] = None,
    fun: Union[str, Callable] = "sum",
    missing_fill: Any = np.nan,
    extra_cols: Optional[Iterable] = None,
) -> pd.DataFrame:
    """
    Spread a long table into one row per grain and one column per level.

    Args:
        table: Long table with grain and spread columns
        grain: Column whose values become rows
        spread: Column whose values become columns, named '<spread>_<level>'
        fill: Column to aggregate into cells. If None, rows are counted, as
            though a column of 1s had been provided.
        fun: Aggregation applied to fill within each grain x level, any
            function or name accepted by pandas' groupby.agg
        missing_fill: Value for cells with no rows
        extra_cols: Levels that get a column of missing_fill even though no
            row has them

    Returns:
        DataFrame with a grain column and one column per level
    """
    extra_cols = list(extra_cols or [])
    table = table.dropna(subset=[spread]).reset_index(drop=True)
    if fill is None:
        fill = "_fill"
        table = table.assign(**{fill: 1})

    if table.empty:
        wide = pd.DataFrame({grain: pd.Series([], dtype=table[grain].dtype)})
    else:
        aggregated = table.groupby(
            [grain, spread], sort=True, observed=True
        )[fill].agg(fun)
        wide = aggregated.unstack(spread)
        if not pd.isna(missing_fill):
            wide = wide.fillna(missing_fill)
        wide.columns = [pivot_column_name(spread, level) for level in wide.columns]
        wide = wide.reset_index()
        wide.columns.name = None

    for level in extra_cols:
        col = pivot_column_name(spread, level)
        if col not in wide.columns:
            wide[col] = missing_fill
    logger.debug(f"Pivoted '{spread}' into {wide.shape[1] - 1} columns over {len(wide)} '{grain}' rows")
    return wide
