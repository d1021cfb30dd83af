#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Main Experimental Pipeline for Star-Rating Prediction

Research question: how well do Naive Bayes, gradient-boosted trees and a
LASSO multinomial regression predict a review's star rating from its text?

The pipeline coordinates:
1. Data loading, sampling and the stratified train/test split
2. A preview of the preprocessing pipeline's feature table
3. Cross-validated hyperparameter tuning of every model family
4. One-standard-error model selection
5. Final fit on the training set and a single test-set evaluation
6. Results collection and visualization
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

import numpy as np
import pandas as pd

from ..core.caching import ResultCache
from ..core.text_pipeline import PREPROCESSING_DEFAULTS, build_text_pipeline, feature_table
from ..models.models_registry import MODEL_NAMES, get_factory_and_grid, resolve_family
from ..prepare_dataset import load_reviews, sample_reviews
from .hyperparameter_tuning import HyperparameterTuner, TuningResult
from .test_evaluation import TestEvaluator
from .visualization import (
    export_summary_table,
    export_top_features,
    export_tuning_metrics,
    plot_confusion_matrices,
    plot_label_distribution,
    plot_tuning_results,
)


class ExperimentalPipeline:
    """
    Main experimental pipeline for star-rating prediction.

    This class orchestrates the complete experimental workflow from data loading
    to results visualization.
    """

    def __init__(
        self,
        raw_data_path: str,
        results_dir: str = "results",
        cache_dir: str = "cache",
        use_cache: bool = True,
        random_state: int = 42,
        sample_size: int = 10_000,
        train_size: float = 0.75,
        n_folds: int = 5,
        models: Sequence[str] = ("naive_bayes", "boosted_trees", "lasso"),
        preprocessing: Optional[Dict[str, Any]] = None,
        param_grids: Optional[Dict[str, Dict[str, list]]] = None,
        selection_metric: str = "roc_auc",
        fast: bool = False,
        n_jobs: int = 1,
        preview_max_tokens: int = 100,
    ):
        """
        Initialize experimental pipeline.

        Args:
            raw_data_path: Path to the semicolon-delimited review CSV
            results_dir: Directory to save results
            cache_dir: Directory of cached tuning/final results
            use_cache: Read and write the result cache
            random_state: Random seed for sampling, splitting, folds and models
            sample_size: Number of reviews sampled from the filtered file
            train_size: Training fraction of the stratified split
            n_folds: Number of CV folds
            models: Model families to run (aliases accepted)
            preprocessing: Overrides for PREPROCESSING_DEFAULTS
            param_grids: Per-family grid overrides
            selection_metric: Metric of the one-standard-error rule
            fast: Use the small grids
            n_jobs: Parallel fits during tuning
            preview_max_tokens: Vocabulary cap of the feature-table preview
        """
        self.raw_data_path = Path(raw_data_path)
        self.results_dir = Path(results_dir)
        self.random_state = random_state
        self.sample_size = sample_size
        self.n_folds = n_folds
        self.families = [resolve_family(m) for m in models]
        self.preprocessing = {**PREPROCESSING_DEFAULTS, **(preprocessing or {})}
        self.param_grids = param_grids or {}
        self.selection_metric = selection_metric
        self.fast = fast
        self.preview_max_tokens = preview_max_tokens
        self.cache = ResultCache(cache_dir, enabled=use_cache)
        self.tuner = HyperparameterTuner(n_folds=n_folds, random_state=random_state, n_jobs=n_jobs)
        self.evaluator = TestEvaluator(
            train_size=train_size, random_state=random_state, preprocessing=self.preprocessing
        )

        self.data: Optional[pd.DataFrame] = None
        self.results: Dict[str, Any] = {}

    # ------------------------------------------------------------------
    def load_and_prepare_data(self):
        """Load, filter, sample and split the review data."""
        print("=" * 60)
        print("STEP 1: Loading and Preparing Data")
        print("=" * 60)

        reviews = load_reviews(self.raw_data_path)
        self.data = sample_reviews(reviews, n=self.sample_size, random_state=self.random_state)
        balance = {str(k): int(v) for k, v in self.data["stars"].value_counts(sort=False).items()}
        print(f"[data] rows={len(self.data)}, balance={balance}")
        self.evaluator.split_data(self.data)
        return self.evaluator.train_data, self.evaluator.test_data

    def preview_features(self) -> pd.DataFrame:
        """Feature table of a reduced pipeline fit on the training set."""
        print("\n" + "=" * 60)
        print("STEP 2: Preprocessing Preview")
        print("=" * 60)

        train = self.evaluator.train_data
        settings = {**self.preprocessing, "max_tokens": self.preview_max_tokens}
        pipeline = build_text_pipeline(**settings)
        pipeline.fit(train["text"].tolist())
        table = feature_table(pipeline, train["text"], train["stars"])
        print(f"[info] feature table: {table.shape[0]} rows x {table.shape[1]} columns")
        print(table.iloc[:5, :6])
        self.results["feature_preview_shape"] = list(table.shape)
        return table

    def _grid_for(self, family: str):
        factory, grid = get_factory_and_grid(
            family, fast=self.fast, preprocessing=self.preprocessing, random_state=self.random_state
        )
        return factory, self.param_grids.get(family, grid)

    def run_hyperparameter_tuning(self, recompute: bool = True) -> Dict[str, TuningResult]:
        """Tune every model family on shared folds (cached per family)."""
        print("\n" + "=" * 60)
        print("STEP 3: Hyperparameter Tuning")
        print("=" * 60)

        train = self.evaluator.train_data
        y = train["stars"].to_numpy()
        folds = self.tuner.make_folds(y)

        tuning_results = {}
        for family in self.families:
            model_name = MODEL_NAMES[family]
            factory, grid = self._grid_for(family)
            config = {
                "model": family,
                "grid": grid,
                "preprocessing": self.preprocessing,
                "n_folds": self.n_folds,
                "seed": self.random_state,
            }
            tuning_results[model_name] = self.cache.get_or_compute(
                "tuning",
                config,
                train,
                lambda: self.tuner.tune_model(
                    self.evaluator.train_tokens, y, factory, grid,
                    model_name=model_name, family=family, folds=folds,
                ),
                recompute=recompute,
            )

        comparison = self.tuner.compare_models(self.selection_metric, results=tuning_results)
        print(f"\nBest cross-validated {self.selection_metric} per model:")
        print(comparison.round(4).to_string(index=False))

        self.results["hyperparameter_tuning"] = tuning_results
        self.results["cv_comparison"] = comparison
        return tuning_results

    def select_models(self) -> Dict[str, Any]:
        """Apply the one-standard-error rule to every tuned family."""
        print("\n" + "=" * 60)
        print("STEP 4: Model Selection (one-standard-error rule)")
        print("=" * 60)

        selections = {}
        for model_name, result in self.results["hyperparameter_tuning"].items():
            best = result.best_params(self.selection_metric)
            chosen = result.one_std_err_params(self.selection_metric)
            print(f"{model_name}: best={best}  selected={chosen}")
            selections[model_name] = (result.family, chosen)

        self.results["selections"] = selections
        return selections

    def run_test_evaluation(self, recompute: bool = True) -> Dict[str, Any]:
        """Refit the selected configurations and evaluate once on the test set."""
        print("\n" + "=" * 60)
        print("STEP 5: Final Fit and Test Evaluation")
        print("=" * 60)

        data_version = pd.concat(
            [self.evaluator.train_data, self.evaluator.test_data], keys=["train", "test"]
        )
        test_results = {}
        for model_name, (family, params) in self.results["selections"].items():
            config = {
                "model": family,
                "params": params,
                "preprocessing": self.preprocessing,
                "seed": self.random_state,
            }
            test_results[model_name] = self.cache.get_or_compute(
                "final",
                config,
                data_version,
                lambda: self.evaluator.evaluate_model(model_name, family, params),
                recompute=recompute,
            )

        comparison = self.evaluator.create_comparison_table(test_results)
        print("\n" + "=" * 60)
        print("FINAL TEST SET COMPARISON")
        print("=" * 60)
        print(comparison.round(4).to_string(index=False))

        self.results["test_evaluation"] = test_results
        self.results["comparison"] = comparison
        return test_results

    def create_visualizations(self):
        """Create visualizations for the results."""
        print("\n" + "=" * 60)
        print("STEP 6: Creating Visualizations")
        print("=" * 60)

        self.results_dir.mkdir(parents=True, exist_ok=True)
        if self.data is not None:
            plot_label_distribution(self.data, self.results_dir)
        if "hyperparameter_tuning" in self.results:
            plot_tuning_results(self.results["hyperparameter_tuning"], self.results_dir)
        if "test_evaluation" in self.results:
            plot_confusion_matrices(self.results["test_evaluation"], self.results_dir)

        print(f"Visualizations saved to {self.results_dir}/")

    def save_results(self) -> Path:
        """Save all results to files."""
        print("\n" + "=" * 60)
        print("STEP 7: Saving Results")
        print("=" * 60)

        self.results_dir.mkdir(parents=True, exist_ok=True)
        results_path = (
            self.results_dir
            / f"experiment_results_{datetime.now().strftime('%Y%m%d_%H%M%S')}.json"
        )

        tuning = self.results.get("hyperparameter_tuning", {})
        tests = self.results.get("test_evaluation", {})
        json_results = {
            "config": {
                "raw_data_path": str(self.raw_data_path),
                "sample_size": self.sample_size,
                "n_folds": self.n_folds,
                "random_state": self.random_state,
                "preprocessing": self.preprocessing,
                "selection_metric": self.selection_metric,
            },
            "feature_preview_shape": self.results.get("feature_preview_shape"),
            "cv_comparison": (
                self.results["cv_comparison"].to_dict(orient="records")
                if "cv_comparison" in self.results
                else None
            ),
            "hyperparameter_tuning": {
                name: {
                    "family": res.family,
                    "summary": res.summary(self.selection_metric).to_dict(orient="records"),
                    "failed": res.failed,
                }
                for name, res in tuning.items()
            },
            "test_evaluation": {name: _jsonable_test_result(res) for name, res in tests.items()},
        }

        with open(results_path, "w", encoding="utf-8") as f:
            json.dump(json_results, f, indent=2, ensure_ascii=False, default=_to_builtin)
        print(f"Results saved to: {results_path}")

        if tuning:
            export_tuning_metrics(tuning, self.results_dir)
        if tests:
            export_summary_table(tests, self.results_dir)
            export_top_features(tests, self.results_dir)
            self._save_summary_text()
        return results_path

    def _save_summary_text(self):
        """
        Save the final comparison table to a .txt file for quick viewing.
        """
        out = self.results_dir / "experiment_summary.txt"
        lines = ["MODEL SUMMARY (held-out test set)", "=" * 60]
        header = f"{'Model':30} | {'Acc':>6} | {'AUC':>6} | {'Tokens':>6}"
        lines.append(header)
        lines.append("-" * len(header))
        for model_name, res in self.results["test_evaluation"].items():
            tm = res["test_metrics"]
            lines.append(
                f"{model_name:30} | {tm['accuracy']:.4f} | {tm['roc_auc']:.4f} | {res['n_nonzero']:>6}"
            )
        lines.append("=" * 60)
        out.write_text("\n".join(lines), encoding="utf-8")
        print("\n".join(lines))
        print(f"\nSummary written to: {out}")

    def run_complete_pipeline(self) -> Dict[str, Any]:
        """Run the complete experimental pipeline."""
        self.load_and_prepare_data()
        self.preview_features()
        self.run_hyperparameter_tuning()
        self.select_models()
        self.run_test_evaluation()
        self.create_visualizations()
        self.save_results()
        return self.results


def _to_builtin(obj):
    if isinstance(obj, np.generic):
        return obj.item()
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, Path):
        return str(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def _jsonable_test_result(res: Dict[str, Any]) -> Dict[str, Any]:
    cm = res["confusion_matrix"]
    return {
        "family": res["family"],
        "best_params": res["best_params"],
        "test_metrics": res["test_metrics"],
        "confusion_matrix": {
            "labels": [str(label) for label in cm.index],
            "matrix": cm.to_numpy().tolist(),
        },
        "top_features": res["top_features"].to_dict(orient="records"),
        "n_features": res["n_features"],
        "n_nonzero": res["n_nonzero"],
        "test_size": res["test_size"],
        "train_size": res["train_size"],
    }


def load_test_results_json(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Rebuild the plotting/reporting view of test results from a saved JSON file."""
    out = {}
    for name, res in payload.items():
        cm = res["confusion_matrix"]
        out[name] = {
            **res,
            "confusion_matrix": pd.DataFrame(
                cm["matrix"],
                index=pd.Index(cm["labels"], name="Truth"),
                columns=pd.Index(cm["labels"], name="Prediction"),
            ),
            "top_features": pd.DataFrame(res.get("top_features", [])),
        }
    return out
