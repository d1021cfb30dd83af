# cross_validation.py
from __future__ import annotations
import itertools
import random
from typing import Any, Dict, Iterator, List, Tuple

import numpy as np


def stratified_kfold_indices(
    y, k: int = 5, seed: int = 42
) -> List[Tuple[np.ndarray, np.ndarray]]:
    """
    Stratified k-fold split as a list of (train_idx, val_idx).

    Every label bucket is shuffled with a seeded RNG and dealt into k slices;
    the remainder of a bucket goes to the first folds so slice sizes differ
    by at most one.
    """
    y = list(y)
    if k < 2:
        raise ValueError(f"k must be at least 2, got {k}")
    if len(y) < k:
        raise ValueError(f"cannot split {len(y)} samples into {k} folds")

    rng = random.Random(seed)
    buckets: Dict[Any, List[int]] = {}
    for i, yi in enumerate(y):
        buckets.setdefault(yi, []).append(i)
    # 按标签排序，保证与字典插入顺序无关
    for label in sorted(buckets):
        rng.shuffle(buckets[label])

    val_splits: List[List[int]] = [[] for _ in range(k)]
    for label in sorted(buckets):
        idxs = buckets[label]
        size, r = divmod(len(idxs), k)
        start = 0
        for j in range(k):
            take = size + (1 if j < r else 0)
            val_splits[j].extend(idxs[start:start + take])
            start += take

    all_idx = np.arange(len(y))
    out = []
    for j in range(k):
        val_idx = np.array(sorted(val_splits[j]), dtype=int)
        train_idx = np.setdiff1d(all_idx, val_idx)
        out.append((train_idx, val_idx))
    return out


def grid_dict_product(grid: Dict[str, List[Any]]) -> Iterator[Dict[str, Any]]:
    keys = list(grid.keys())
    for values in itertools.product(*[grid[k] for k in keys]):
        yield dict(zip(keys, values))


def regular_grid(
    lower: float, upper: float, levels: int = 3, log10: bool = False, integer: bool = False
) -> List[Any]:
    """
    Evenly spaced candidate values over [lower, upper].

    With ``log10=True`` the bounds are exponents and the values are spaced on
    the log10 scale. With ``integer=True`` values are rounded and deduplicated.
    """
    if levels < 1:
        raise ValueError(f"levels must be positive, got {levels}")
    values = np.linspace(lower, upper, levels)
    if log10:
        values = 10.0 ** values
    if integer:
        return sorted({int(round(v)) for v in values})
    return [float(v) for v in values]
