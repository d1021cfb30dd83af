#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Hyperparameter Tuning Implementation

This module implements grid search with k-fold cross-validation for the
star-rating models.

Features:
- Every (grid entry, fold) pair is an independent fit/score job
- Optional parallel execution of the jobs with joblib
- Grid entries whose fit fails are dropped instead of aborting the search
- Per-entry aggregation (mean, standard error) of accuracy and ROC AUC
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from joblib import Parallel, delayed

from ..core.cross_validation import grid_dict_product, stratified_kfold_indices
from ..core.metrics import compute_all_metrics, standard_error
from ..models.models_registry import HYPERPARAMETER_GRIDS, HYPERPARAMETER_GRIDS_FAST
from .model_selection import COMPLEXITY_ORDER, select_best, select_by_one_std_err

METRICS = ("accuracy", "roc_auc")


@dataclass
class TuningResult:
    """Fold-level scores of one model family's grid search."""

    model_name: str
    family: str
    param_grid: Dict[str, List[Any]]
    configs: Dict[str, Dict[str, Any]]
    fold_metrics: pd.DataFrame
    failed: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def tuned_params(self) -> List[str]:
        """Parameters that take more than one value in the grid."""
        return [k for k, v in self.param_grid.items() if len(v) > 1]

    def collect_metrics(self) -> pd.DataFrame:
        """Long table: one row per (config, metric) with mean, n and std_err."""
        rows = []
        for config, g in self.fold_metrics.groupby("config", sort=True):
            for metric in METRICS:
                values = g[metric].dropna().to_numpy()
                rows.append(
                    {
                        "config": config,
                        **self.configs[config],
                        "metric": metric,
                        "mean": float(np.mean(values)) if len(values) else float("nan"),
                        "n": int(len(values)),
                        "std_err": standard_error(values),
                    }
                )
        return pd.DataFrame(rows)

    def summary(self, metric: str = "roc_auc") -> pd.DataFrame:
        """One row per surviving grid entry for a single metric."""
        cm = self.collect_metrics()
        return cm[cm["metric"] == metric].drop(columns="metric").reset_index(drop=True)

    def best_params(self, metric: str = "roc_auc") -> Dict[str, Any]:
        return dict(self.configs[select_best(self.summary(metric))["config"]])

    def one_std_err_params(self, metric: str = "roc_auc") -> Dict[str, Any]:
        row = select_by_one_std_err(self.summary(metric), COMPLEXITY_ORDER.get(self.family, []))
        return dict(self.configs[row["config"]])


def _fit_and_score(
    model_factory: Callable,
    params: Dict[str, Any],
    X: Sequence,
    y: np.ndarray,
    train_idx: np.ndarray,
    val_idx: np.ndarray,
) -> Dict[str, Any]:
    """Fit on one fold's training documents, score on its validation documents."""
    try:
        est = model_factory(params)
        est.fit([X[i] for i in train_idx], y[train_idx])
        X_val = [X[i] for i in val_idx]
        y_val = y[val_idx]
        proba = est.predict_proba(X_val)
        pred = est.classes_[np.argmax(proba, axis=1)]
        return compute_all_metrics(y_val, pred, proba, est.classes_)
    except Exception as e:  # a failing candidate is dropped by the caller
        return {"error": f"{type(e).__name__}: {e}"}


class HyperparameterTuner:
    """
    Hyperparameter tuning with k-fold cross-validation.

    This class provides a unified interface for tuning hyperparameters
    across the model families. Folds are shared by all families.
    """

    def __init__(
        self,
        n_folds: int = 5,
        random_state: int = 42,
        n_jobs: int = 1,
        verbose: bool = True,
    ):
        """
        Initialize hyperparameter tuner.

        Args:
            n_folds: Number of CV folds
            random_state: Random seed for the fold assignment
            n_jobs: joblib workers for the (grid entry, fold) fits; 1 runs in-process
            verbose: Print per-entry progress
        """
        self.n_folds = n_folds
        self.random_state = random_state
        self.n_jobs = n_jobs
        self.verbose = verbose

        # Store results
        self.results: Dict[str, TuningResult] = {}

    def make_folds(self, y) -> List[Tuple[np.ndarray, np.ndarray]]:
        return stratified_kfold_indices(y, k=self.n_folds, seed=self.random_state)

    def tune_model(
        self,
        X: Sequence,
        y,
        model_factory: Callable,
        param_grid: Dict[str, List[Any]],
        model_name: str = "model",
        family: str = "",
        folds: Optional[List[Tuple[np.ndarray, np.ndarray]]] = None,
    ) -> TuningResult:
        """
        Tune hyperparameters for a specific model.

        Args:
            X: Documents (raw strings or analyzed token lists)
            y: Target labels
            model_factory: Function that creates model instances from a params dict
            param_grid: Dictionary of hyperparameter value lists
            model_name: Name for this model (for results tracking)
            family: Model family key (used for complexity ordering)
            folds: Precomputed (train_idx, val_idx) pairs; built from y if None

        Returns:
            TuningResult with fold-level metrics of the surviving grid entries
        """
        y = np.asarray(y)
        if folds is None:
            folds = self.make_folds(y)
        candidates = list(grid_dict_product(param_grid))
        configs = {f"Model{i + 1:02d}": p for i, p in enumerate(candidates)}

        print(f"\n{'='*60}")
        print(f"Tuning hyperparameters for: {model_name}")
        print(f"{'='*60}")
        print(f"Parameter grid: {param_grid}")
        print(f"Data length: {len(X)}, folds: {len(folds)}, candidates: {len(candidates)}")

        jobs = [
            (config, fi, params, tr, va)
            for config, params in configs.items()
            for fi, (tr, va) in enumerate(folds, 1)
        ]
        outputs = Parallel(n_jobs=self.n_jobs)(
            delayed(_fit_and_score)(model_factory, params, X, y, tr, va)
            for _, _, params, tr, va in jobs
        )

        rows, errors = [], {}
        for (config, fi, params, _, _), out in zip(jobs, outputs):
            if "error" in out:
                errors.setdefault(config, out["error"])
                continue
            rows.append({"config": config, "fold": f"Fold{fi}", **params, **out})

        failed = []
        for config, err in errors.items():
            print(f"[warn] dropping {config} params={configs[config]}: {err}")
            failed.append({"config": config, "params": configs[config], "error": err})

        fold_metrics = pd.DataFrame(rows)
        if fold_metrics.empty:
            raise RuntimeError(f"All {len(candidates)} candidates failed for {model_name}")
        fold_metrics = fold_metrics[~fold_metrics["config"].isin(list(errors))].reset_index(drop=True)
        if fold_metrics.empty:
            raise RuntimeError(f"All {len(candidates)} candidates failed for {model_name}")

        result = TuningResult(
            model_name=model_name,
            family=family,
            param_grid=param_grid,
            configs={c: p for c, p in configs.items() if c not in errors},
            fold_metrics=fold_metrics,
            failed=failed,
        )

        if self.verbose:
            summary = result.summary("roc_auc")
            acc = result.summary("accuracy").set_index("config")["mean"]
            for pi, row in enumerate(summary.itertuples(index=False), 1):
                print(
                    f"    [{pi}/{len(summary)}] params={result.configs[row.config]}  "
                    f"accuracy={acc[row.config]:.4f}  roc_auc={row.mean:.4f} (se {row.std_err:.4f})"
                )

        self.results[model_name] = result
        return result

    def compare_models(
        self, metric: str = "roc_auc", results: Optional[Dict[str, TuningResult]] = None
    ) -> pd.DataFrame:
        """
        Compare the best CV score of every tuned model.

        Args:
            metric: Metric to compare on
            results: Tuning results to compare (defaults to the ones tuned by this instance,
                pass loaded results when they came from the cache)

        Returns:
            DataFrame with model comparison results
        """
        comparison_data = []
        for model_name, result in (self.results if results is None else results).items():
            best = select_best(result.summary(metric))
            comparison_data.append(
                {
                    "Model": model_name,
                    "Best_Params": str(result.configs[best["config"]]),
                    "CV_Score": best["mean"],
                    "CV_StdErr": best["std_err"],
                    "Dropped": len(result.failed),
                }
            )
        columns = ["Model", "Best_Params", "CV_Score", "CV_StdErr", "Dropped"]
        return pd.DataFrame(comparison_data, columns=columns).sort_values("CV_Score", ascending=False)


__all__ = [
    "HyperparameterTuner",
    "TuningResult",
    "HYPERPARAMETER_GRIDS",
    "HYPERPARAMETER_GRIDS_FAST",
    "METRICS",
]
