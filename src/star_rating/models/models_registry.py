# models_registry.py
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..core.cross_validation import regular_grid
from .base import TextClassifierEstimator
from .boosted_trees import BoostedTreesEstimator, create_boosted_trees_factory
from .lasso_regression import LassoEstimator, create_lasso_factory
from .naive_bayes import NaiveBayesEstimator, create_naive_bayes_factory

MODEL_ALIASES = {
    "nb": "naive_bayes",
    "bayes": "naive_bayes",
    "naive_bayes": "naive_bayes",
    "boost": "boosted_trees",
    "gbm": "boosted_trees",
    "boosted_trees": "boosted_trees",
    "lasso": "lasso",
    "glmnet": "lasso",
}

MODEL_NAMES = {
    "naive_bayes": "Naive Bayes",
    "boosted_trees": "Boosted Trees",
    "lasso": "LASSO Regression",
}

ESTIMATORS: Dict[str, type] = {
    "naive_bayes": NaiveBayesEstimator,
    "boosted_trees": BoostedTreesEstimator,
    "lasso": LassoEstimator,
}

_FACTORIES: Dict[str, Callable] = {
    "naive_bayes": create_naive_bayes_factory,
    "boosted_trees": create_boosted_trees_factory,
    "lasso": create_lasso_factory,
}

# ---------------- Hyperparameter grids ----------------
# dict of lists; the tuner expands the cross product

HYPERPARAMETER_GRIDS: Dict[str, Dict[str, List[Any]]] = {
    "naive_bayes": {
        "alpha": regular_grid(0.5, 1.5, levels=3),
    },
    "boosted_trees": {
        "max_features": regular_grid(10, 100, levels=3, integer=True),
        "max_depth": regular_grid(1, 15, levels=3, integer=True),
        "n_estimators": [15],
        "learning_rate": [0.3],
    },
    "lasso": {
        # mixture fixed at pure L1, only the penalty is tuned
        "penalty": regular_grid(-10, 0, levels=10, log10=True),
        "max_iter": [1000],
    },
}
HYPERPARAMETER_GRIDS_FAST: Dict[str, Dict[str, List[Any]]] = {
    "naive_bayes": {
        "alpha": regular_grid(0.5, 1.5, levels=2),
    },
    "boosted_trees": {
        "max_features": [10, 50],
        "max_depth": [1, 4],
        "n_estimators": [10],
        "learning_rate": [0.3],
    },
    "lasso": {
        "penalty": regular_grid(-4, -1, levels=4, log10=True),
        "max_iter": [500],
    },
}


def resolve_family(model: str) -> str:
    family = MODEL_ALIASES.get(model.lower())
    if family is None:
        raise ValueError(f"Unknown model: {model}")
    return family


def create_estimator(
    model: str, params: Dict[str, Any], preprocessing: Optional[Dict[str, Any]] = None, random_state: int = 42
) -> TextClassifierEstimator:
    return ESTIMATORS[resolve_family(model)](preprocessing=preprocessing, random_state=random_state, **params)


def get_factory_and_grid(
    model: str,
    fast: bool = False,
    preprocessing: Optional[Dict[str, Any]] = None,
    random_state: int = 42,
) -> Tuple[Callable, Dict[str, List[Any]]]:
    """
    返回 (factory, param_grid)。factory: params(dict) -> estimator
    param_grid: Dict[str, List]
    """
    family = resolve_family(model)
    grids = HYPERPARAMETER_GRIDS_FAST if fast else HYPERPARAMETER_GRIDS
    factory = _FACTORIES[family](preprocessing=preprocessing, random_state=random_state)
    return factory, {k: list(v) for k, v in grids[family].items()}
