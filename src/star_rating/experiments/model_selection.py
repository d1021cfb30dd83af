# model_selection.py
"""
Choosing one grid entry per model family from its CV summary.

A summary is a DataFrame with one row per grid entry: the parameter columns
plus ``mean`` and ``std_err`` of the selection metric (higher is better).
"""
from typing import Dict, List, Tuple

import numpy as np
import pandas as pd

# (parameter, ascending): rows sorted this way go from simplest to most complex
COMPLEXITY_ORDER: Dict[str, List[Tuple[str, bool]]] = {
    "naive_bayes": [("alpha", False)],
    "boosted_trees": [("max_features", True), ("max_depth", True)],
    "lasso": [("penalty", False)],
}


def _scored(summary: pd.DataFrame) -> pd.DataFrame:
    scored = summary[summary["mean"].notna()]
    if scored.empty:
        raise ValueError("summary has no scored grid entries")
    return scored


def select_best(summary: pd.DataFrame) -> pd.Series:
    """Row with the highest mean score."""
    scored = _scored(summary)
    return scored.loc[scored["mean"].idxmax()]


def select_by_one_std_err(
    summary: pd.DataFrame, order: List[Tuple[str, bool]]
) -> pd.Series:
    """
    One-standard-error rule.

    Threshold = best mean - std_err of the best entry. Among entries at or
    above the threshold, return the simplest one according to ``order``.
    Ties keep the summary's row order.
    """
    scored = _scored(summary)
    best = scored.loc[scored["mean"].idxmax()]
    se = best["std_err"]
    threshold = best["mean"] - (0.0 if pd.isna(se) else se)

    candidates = scored[scored["mean"] >= threshold]
    if order:
        missing = [p for p, _ in order if p not in candidates.columns]
        if missing:
            raise ValueError(f"complexity parameters not in summary: {missing}")
        candidates = candidates.sort_values(
            by=[p for p, _ in order],
            ascending=[asc for _, asc in order],
            kind="mergesort",
        )
    return candidates.iloc[0]


def within_one_std_err(summary: pd.DataFrame) -> np.ndarray:
    """Boolean mask of the entries eligible under the one-standard-error rule."""
    best = select_best(summary)
    se = 0.0 if pd.isna(best["std_err"]) else best["std_err"]
    return (summary["mean"] >= best["mean"] - se).to_numpy()
