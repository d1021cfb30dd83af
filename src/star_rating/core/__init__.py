# Core components: CV splitting, metrics, text preprocessing, result cache

from .cross_validation import stratified_kfold_indices, grid_dict_product, regular_grid
from .metrics import (
    accuracy_score,
    roc_auc_ovr,
    confusion_matrix,
    standard_error,
    compute_all_metrics,
)
from .text_pipeline import (
    PREPROCESSING_DEFAULTS,
    build_analyzer,
    build_weighting_pipeline,
    build_text_pipeline,
    feature_table,
)
from .caching import ResultCache, CacheMissError

__all__ = [
    "stratified_kfold_indices",
    "grid_dict_product",
    "regular_grid",
    "accuracy_score",
    "roc_auc_ovr",
    "confusion_matrix",
    "standard_error",
    "compute_all_metrics",
    "PREPROCESSING_DEFAULTS",
    "build_analyzer",
    "build_weighting_pipeline",
    "build_text_pipeline",
    "feature_table",
    "ResultCache",
    "CacheMissError",
]
