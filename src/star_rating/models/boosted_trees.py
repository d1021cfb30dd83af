# boosted_trees.py
from typing import Any, Dict

from sklearn.ensemble import GradientBoostingClassifier

from .base import TextClassifierEstimator


class BoostedTreesEstimator(TextClassifierEstimator):
    """Gradient-boosted decision trees on TF-IDF features.

    params:
      - max_features: number of features sampled at each split (capped at the vocabulary size)
      - max_depth: tree depth
      - n_estimators, learning_rate: boosting rounds and shrinkage
    """

    family = "boosted_trees"

    def _build_classifier(self, n_samples: int, n_features: int):
        return GradientBoostingClassifier(
            n_estimators=self.p.get("n_estimators", 15),
            learning_rate=self.p.get("learning_rate", 0.3),
            max_depth=self.p.get("max_depth", 6),
            max_features=max(1, min(int(self.p.get("max_features", n_features)), n_features)),
            random_state=self.random_state,
        )

    def _importances(self):
        return self.model.feature_importances_, None


def create_boosted_trees_factory(preprocessing: Dict[str, Any] = None, random_state: int = 42):
    def factory(params: Dict[str, Any]):
        return BoostedTreesEstimator(preprocessing=preprocessing, random_state=random_state, **params)

    return factory
