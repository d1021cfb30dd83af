# naive_bayes.py
from typing import Any, Dict

import numpy as np
from sklearn.naive_bayes import MultinomialNB

from .base import TextClassifierEstimator


class NaiveBayesEstimator(TextClassifierEstimator):
    """Multinomial Naive Bayes on TF-IDF features.

    params:
      - alpha: additive (Laplace/Lidstone) smoothing strength
    """

    family = "naive_bayes"

    def _build_classifier(self, n_samples: int, n_features: int):
        return MultinomialNB(alpha=self.p.get("alpha", 1.0))

    def _importances(self):
        # 类间对数概率差越大，token 越有区分度
        log_prob = self.model.feature_log_prob_
        spread = log_prob.max(axis=0) - log_prob.min(axis=0)
        return spread, self.classes_[np.argmax(log_prob, axis=0)]


def create_naive_bayes_factory(preprocessing: Dict[str, Any] = None, random_state: int = 42):
    def factory(params: Dict[str, Any]):
        return NaiveBayesEstimator(preprocessing=preprocessing, random_state=random_state, **params)

    return factory
