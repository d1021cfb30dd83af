# lasso_regression.py
from typing import Any, Dict

import numpy as np
from sklearn.linear_model import LogisticRegression

from .base import TextClassifierEstimator


class LassoEstimator(TextClassifierEstimator):
    """L1-regularized multinomial logistic regression on TF-IDF features.

    params:
      - penalty: regularization strength lambda of the mean-loss objective
        (loss / n + lambda * |w|_1); converted to sklearn's C = 1 / (n * lambda)
      - max_iter, tol: saga solver settings
    """

    family = "lasso"

    def _build_classifier(self, n_samples: int, n_features: int):
        penalty = float(self.p.get("penalty", 1e-3))
        if penalty <= 0:
            raise ValueError(f"penalty must be positive, got {penalty}")
        return LogisticRegression(
            penalty="l1",
            solver="saga",
            C=1.0 / (n_samples * penalty),
            max_iter=self.p.get("max_iter", 1000),
            tol=self.p.get("tol", 1e-4),
            random_state=self.random_state,
        )

    def _importances(self):
        coef = self.model.coef_
        if coef.shape[0] == 1:
            # binary: a single coefficient row for classes_[1]
            return np.abs(coef[0]), self.classes_[(coef[0] > 0).astype(int)]
        return np.abs(coef).max(axis=0), self.classes_[np.argmax(np.abs(coef), axis=0)]

    def n_nonzero(self) -> int:
        """Number of tokens kept by the L1 penalty (non-zero in any class)."""
        return int(np.count_nonzero(np.any(self.model.coef_ != 0, axis=0)))


def create_lasso_factory(preprocessing: Dict[str, Any] = None, random_state: int = 42):
    def factory(params: Dict[str, Any]):
        return LassoEstimator(preprocessing=preprocessing, random_state=random_state, **params)

    return factory
