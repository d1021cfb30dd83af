#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Test Set Evaluation for Star-Rating Models

Each selected configuration is refit on the whole training partition and
applied exactly once to the held-out test partition.
"""

import numpy as np
import pandas as pd
from typing import Any, Dict, List, Optional, Tuple

from ..core.metrics import compute_all_metrics, confusion_matrix
from ..core.text_pipeline import PREPROCESSING_DEFAULTS, build_analyzer
from ..models.models_registry import create_estimator
from ..prepare_dataset import stratified_split


class TestEvaluator:
    __test__ = False  # not a pytest test class

    def __init__(
        self,
        train_size: float = 0.75,
        random_state: int = 42,
        preprocessing: Optional[Dict[str, Any]] = None,
        label_col: str = "stars",
        text_col: str = "text",
        top_n: int = 20,
    ):
        """
        Initialize test evaluator.

        Args:
            train_size: Fraction of data used for training
            random_state: Random seed for the split and the models
            preprocessing: Overrides for PREPROCESSING_DEFAULTS
            label_col: Star-rating column
            text_col: Review text column
            top_n: Number of top features kept per model
        """
        self.train_size = train_size
        self.random_state = random_state
        self.preprocessing = {**PREPROCESSING_DEFAULTS, **(preprocessing or {})}
        self.label_col = label_col
        self.text_col = text_col
        self.top_n = top_n
        self.train_data = None
        self.test_data = None
        self._tokens: Dict[str, List[List[str]]] = {}

    def split_data(self, data: pd.DataFrame) -> Tuple[pd.DataFrame, pd.DataFrame]:
        # Stratified split to keep the star distribution
        train_data, test_data = stratified_split(
            data,
            train_size=self.train_size,
            random_state=self.random_state,
            label_col=self.label_col,
        )
        return self.use_partitions(train_data, test_data)

    def use_partitions(
        self, train_data: pd.DataFrame, test_data: pd.DataFrame
    ) -> Tuple[pd.DataFrame, pd.DataFrame]:
        self.train_data = train_data.reset_index(drop=True)
        self.test_data = test_data.reset_index(drop=True)
        self._tokens = {}

        print(f"Data split: {len(self.train_data)} train, {len(self.test_data)} test")
        print(
            f"Train class balance: {self._balance(self.train_data)}"
        )
        print(
            f"Test class balance: {self._balance(self.test_data)}"
        )
        return self.train_data, self.test_data

    def _balance(self, df: pd.DataFrame) -> Dict[str, float]:
        shares = df[self.label_col].value_counts(normalize=True, sort=False)
        return {str(k): round(float(v), 4) for k, v in shares.items()}

    def _analyzed(self, part: str) -> List[List[str]]:
        # 分词/词干/停用词均为无状态步骤，train 与 test 各自处理不会泄漏
        if part not in self._tokens:
            df = self.train_data if part == "train" else self.test_data
            analyzer = build_analyzer(
                language=self.preprocessing["language"],
                stop_words=self.preprocessing["stop_words"],
            )
            self._tokens[part] = analyzer.fit_transform(df[self.text_col].tolist())
        return self._tokens[part]

    @property
    def train_tokens(self) -> List[List[str]]:
        self._require_split()
        return self._analyzed("train")

    @property
    def test_tokens(self) -> List[List[str]]:
        self._require_split()
        return self._analyzed("test")

    def _require_split(self):
        if self.test_data is None or self.train_data is None:
            raise ValueError("Must call split_data() or use_partitions() first")

    def evaluate_model(
        self, model_name: str, family: str, best_params: Dict[str, Any]
    ) -> Dict[str, Any]:
        """
        Refit one selected configuration and evaluate it on the test set.

        Args:
            model_name: Display name of the model
            family: Model family key
            best_params: Selected hyperparameters

        Returns:
            Dictionary with test results
        """
        self._require_split()

        print(f"\n{'='*60}")
        print(f"Evaluating {model_name} on Test Set")
        print(f"{'='*60}")
        print(f"Selected params: {best_params}")

        y_train = self.train_data[self.label_col].to_numpy()
        y_test = self.test_data[self.label_col].to_numpy()
        label_dtype = self.train_data[self.label_col].dtype
        if isinstance(label_dtype, pd.CategoricalDtype):
            labels = list(label_dtype.categories)
        else:
            labels = sorted(set(y_train) | set(y_test))

        print("Training model on the full training set...")
        model = create_estimator(
            family, best_params, preprocessing=self.preprocessing, random_state=self.random_state
        )
        model.fit(self.train_tokens, y_train)

        print("Making predictions...")
        proba = model.predict_proba(self.test_tokens)
        y_pred = model.classes_[np.argmax(proba, axis=1)]

        test_metrics = compute_all_metrics(y_test, y_pred, proba, model.classes_)
        cm = confusion_matrix(y_test, y_pred, labels=labels)

        results = {
            "model_name": model_name,
            "family": family,
            "best_params": dict(best_params),
            "estimator": model,
            "classes": list(model.classes_),
            "y_true": y_test,
            "y_pred": y_pred,
            "proba": proba,
            "confusion_matrix": cm,
            "test_metrics": test_metrics,
            "top_features": model.feature_importance(self.top_n),
            "n_features": int(len(model.vocabulary)),
            "n_nonzero": model.n_nonzero(),
            "test_size": len(self.test_data),
            "train_size": len(self.train_data),
        }

        print(f"\nTest Set Results:")
        print(f"  Accuracy:  {test_metrics['accuracy']:.4f}")
        print(f"  ROC AUC:   {test_metrics['roc_auc']:.4f}")
        print(f"  Tokens used: {results['n_nonzero']} of {results['n_features']}")
        print("\nConfusion Matrix (rows = truth):")
        print(cm)

        return results

    def evaluate_all_models(
        self, selections: Dict[str, Tuple[str, Dict[str, Any]]]
    ) -> Dict[str, Any]:
        """
        Evaluate all selected models.

        Args:
            selections: model name -> (family, selected params)

        Returns:
            Dictionary with all test results
        """
        return {
            model_name: self.evaluate_model(model_name, family, params)
            for model_name, (family, params) in selections.items()
        }

    def create_comparison_table(self, test_results: Dict[str, Any]) -> pd.DataFrame:
        """
        Create a comparison table of test results.

        Args:
            test_results: Results from evaluate_all_models

        Returns:
            DataFrame with one row per model
        """
        comparison_data = []

        for model_name, results in test_results.items():
            test_metrics = results["test_metrics"]
            comparison_data.append(
                {
                    "Model": model_name,
                    "Accuracy": test_metrics["accuracy"],
                    "ROC_AUC": test_metrics["roc_auc"],
                    "Params": str(results["best_params"]),
                    "Test_Size": results["test_size"],
                    "Train_Size": results["train_size"],
                }
            )

        return pd.DataFrame(comparison_data)
