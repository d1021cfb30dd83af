# Model implementations for star-rating classification

from .base import TextClassifierEstimator
from .naive_bayes import NaiveBayesEstimator, create_naive_bayes_factory
from .boosted_trees import BoostedTreesEstimator, create_boosted_trees_factory
from .lasso_regression import LassoEstimator, create_lasso_factory
from .models_registry import (
    HYPERPARAMETER_GRIDS,
    HYPERPARAMETER_GRIDS_FAST,
    MODEL_NAMES,
    create_estimator,
    get_factory_and_grid,
    resolve_family,
)

__all__ = [
    "TextClassifierEstimator",
    "NaiveBayesEstimator",
    "create_naive_bayes_factory",
    "BoostedTreesEstimator",
    "create_boosted_trees_factory",
    "LassoEstimator",
    "create_lasso_factory",
    "HYPERPARAMETER_GRIDS",
    "HYPERPARAMETER_GRIDS_FAST",
    "MODEL_NAMES",
    "create_estimator",
    "get_factory_and_grid",
    "resolve_family",
]
