# Experimental components for star-rating prediction

from .hyperparameter_tuning import (
    HyperparameterTuner,
    TuningResult,
    HYPERPARAMETER_GRIDS,
    HYPERPARAMETER_GRIDS_FAST,
)
from .model_selection import COMPLEXITY_ORDER, select_best, select_by_one_std_err
from .test_evaluation import TestEvaluator
from .experimental_pipeline import ExperimentalPipeline, load_test_results_json

__all__ = [
    "HyperparameterTuner",
    "TuningResult",
    "HYPERPARAMETER_GRIDS",
    "HYPERPARAMETER_GRIDS_FAST",
    "COMPLEXITY_ORDER",
    "select_best",
    "select_by_one_std_err",
    "TestEvaluator",
    "ExperimentalPipeline",
    "load_test_results_json",
]
