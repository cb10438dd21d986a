"""
Human-readable views of a level selection: a short text summary and a bar chart
of level scores by polarity.
"""

import logging
from typing import Any, List, Optional, Sequence

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from jinja2 import Template

from .level_scorer import statistic_column

logger = logging.getLogger(__name__)

COLORS = {
    'positive': '#2ecc71',       # Green for positive predictors
    'negative': '#e74c3c',       # Red for negative predictors
    'unselected': '#BDC3C7',     # Light gray for levels not selected
    'zero_line': '#34495e',      # Dark blue-gray for the zero line
}

SUMMARY_TEMPLATE = (
    "{{ group }}: {{ n_scored }} levels scored by {{ statistic }}, {{ n_selected }} selected.\n"
    "Positive predictors ({{ positive | length }}): {{ positive | join(', ') if positive else 'none' }}\n"
    "Negative predictors ({{ negative | length }}): {{ negative | join(', ') if negative else 'none' }}"
)


def _polarity_lookup(scores: pd.DataFrame, group_col: str) -> dict:
    return dict(zip(scores[group_col], scores['polarity']))


def summarize_selection(scores: pd.DataFrame, selected: Sequence, group_col: str) -> str:
    """
    Render a plain-text summary of which levels were kept and on which side.

    Args:
        scores: Score frame from score_levels
        selected: Levels returned by get_best_levels
        group_col: Name of the grouping column

    Returns:
        Rendered text
    """
    polarity = _polarity_lookup(scores, group_col)
    context = {
        'group': group_col,
        'statistic': statistic_column(scores),
        'n_scored': len(scores),
        'n_selected': len(selected),
        'positive': [str(lev) for lev in selected if polarity.get(lev) == 1],
        'negative': [str(lev) for lev in selected if polarity.get(lev) == 0],
    }
    return Template(SUMMARY_TEMPLATE).render(**context)


def plot_level_scores(
    scores: pd.DataFrame,
    group_col: str,
    selected: Optional[Sequence] = None,
    ax: Optional[plt.Axes] = None,
    max_levels: int = 30,
) -> plt.Axes:
    """
    Horizontal bar chart of the ranking statistic for the best-ranked levels.

    Infinite regression scores (groups with no variance) are drawn at 10% past
    the largest finite magnitude. Levels without a score get an empty bar. Levels not in `selected` are grayed out when
    `selected` is given.

    Returns:
        The axes drawn on
    """
    if ax is None:
        _, ax = plt.subplots(figsize=(8, max(2.0, 0.3 * min(len(scores), max_levels))))
    ax.clear()

    stat_col = statistic_column(scores)
    shown = scores.head(max_levels)
    values = shown[stat_col].to_numpy(dtype=float)
    finite = np.abs(values[np.isfinite(values)])
    cap = 1.1 * finite.max() if finite.size and finite.max() > 0 else 1.0
    values = np.nan_to_num(values, nan=0.0, posinf=cap, neginf=-cap)

    chosen = set(selected) if selected is not None else None
    colors: List[str] = []
    for lev, pol in zip(shown[group_col], shown['polarity']):
        if chosen is not None and lev not in chosen:
            colors.append(COLORS['unselected'])
        else:
            colors.append(COLORS['positive'] if pol == 1 else COLORS['negative'])

    positions = np.arange(len(shown))
    ax.barh(positions, values, color=colors)
    ax.set_yticks(positions)
    ax.set_yticklabels([str(lev) for lev in shown[group_col]])
    ax.invert_yaxis()
    ax.axvline(0, color=COLORS['zero_line'], linewidth=0.8)
    ax.set_xlabel(stat_col)
    ax.set_title(f"{group_col}: level scores")
    return ax
