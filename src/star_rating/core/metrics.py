#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Performance Metrics

Classification metrics used for tuning and final evaluation:
- Accuracy
- One-vs-rest averaged ROC AUC (multiclass)
- Confusion Matrix (square, over all label categories)
- Mean / standard error aggregation of fold scores

Per-class ROC AUC is delegated to sklearn.metrics.roc_auc_score; the averaging
and the handling of classes absent from a validation fold are done here.
"""

import numpy as np
import pandas as pd
from typing import Dict, List, Optional, Sequence
from sklearn.metrics import roc_auc_score


def confusion_matrix(
    y_true: np.ndarray, y_pred: np.ndarray, labels: Optional[List] = None
) -> pd.DataFrame:
    """
    Compute confusion matrix.

    Args:
        y_true: Ground truth labels
        y_pred: Predicted labels
        labels: Label categories to include (if None, use the union of observed labels)

    Returns:
        Square DataFrame, rows = truth, columns = prediction
    """
    y_true = np.asarray(y_true)
    y_pred = np.asarray(y_pred)

    if len(y_true) != len(y_pred):
        raise ValueError("y_true and y_pred must have the same length")

    if labels is None:
        labels = sorted(set(y_true) | set(y_pred))

    n_labels = len(labels)
    label_to_idx = {label: i for i, label in enumerate(labels)}

    cm = np.zeros((n_labels, n_labels), dtype=int)
    for true_label, pred_label in zip(y_true, y_pred):
        cm[label_to_idx[true_label], label_to_idx[pred_label]] += 1

    return pd.DataFrame(
        cm,
        index=pd.Index(labels, name="Truth"),
        columns=pd.Index(labels, name="Prediction"),
    )


def accuracy_score(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    """
    Compute accuracy score.

    Args:
        y_true: Ground truth labels
        y_pred: Predicted labels

    Returns:
        Accuracy score (0.0 to 1.0)
    """
    y_true = np.asarray(y_true)
    y_pred = np.asarray(y_pred)

    if len(y_true) != len(y_pred):
        raise ValueError("y_true and y_pred must have the same length")

    if len(y_true) == 0:
        return 0.0

    return float(np.mean(y_true == y_pred))


def roc_auc_ovr(
    y_true: np.ndarray, proba: np.ndarray, classes: Sequence
) -> float:
    """
    One-vs-rest ROC AUC, macro averaged over classes.

    Args:
        y_true: Ground truth labels
        proba: Class probabilities, shape (n_samples, n_classes)
        classes: Class label of each probability column

    Returns:
        Mean of the per-class AUCs. Classes without both positives and
        negatives in y_true are skipped; NaN if none can be scored.
    """
    y_true = np.asarray(y_true)
    proba = np.asarray(proba, dtype=float)

    if proba.ndim != 2 or proba.shape != (len(y_true), len(classes)):
        raise ValueError(
            f"proba must have shape ({len(y_true)}, {len(classes)}), got {proba.shape}"
        )

    aucs = []
    for k, cls in enumerate(classes):
        positives = y_true == cls
        if positives.all() or not positives.any():
            continue
        aucs.append(roc_auc_score(positives.astype(int), proba[:, k]))

    if not aucs:
        return float("nan")
    return float(np.mean(aucs))


def standard_error(values: Sequence[float]) -> float:
    """Sample standard deviation over sqrt(n); NaN for fewer than two values."""
    values = np.asarray(values, dtype=float)
    if len(values) < 2:
        return float("nan")
    return float(np.std(values, ddof=1) / np.sqrt(len(values)))


def compute_all_metrics(
    y_true: np.ndarray,
    y_pred: np.ndarray,
    proba: np.ndarray,
    classes: Sequence,
) -> Dict[str, float]:
    """
    Compute the metrics reported for every fit.

    Returns:
        Dictionary with ``accuracy`` and ``roc_auc``
    """
    return {
        "accuracy": accuracy_score(y_true, y_pred),
        "roc_auc": roc_auc_ovr(y_true, proba, classes),
    }
