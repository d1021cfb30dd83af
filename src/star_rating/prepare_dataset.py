#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Prepare the review dataset (semicolon-delimited CSV):
- Drop malformed rows and rows without a valid postal code (1-5 digits)
- Draw a fixed-size seeded sample, star rating -> ordered categorical label
- Stratified train/test split by star rating

This module provides functions to prepare the dataset programmatically.
"""
from __future__ import annotations
import json
from pathlib import Path
import numpy as np
import pandas as pd

REQUIRED_COLUMNS = ("postal_code", "starsReview", "text")
POSTAL_CODE_PATTERN = r"\d{1,5}"
VALID_STARS = (1, 2, 3, 4, 5)


def load_reviews(src_path: str | Path, sep: str = ";") -> pd.DataFrame:
    """
    Read the raw review file and keep only well-formed rows.

    Rows with unparsable structure, missing text/rating, a rating outside 1-5
    or a postal code that is not 1-5 digits are dropped.

    Args:
        src_path: Path to the semicolon-delimited review CSV
        sep: Field delimiter

    Returns:
        DataFrame with a ``review_id`` column (row position after filtering)
        plus the original columns
    """
    src = Path(src_path)
    if not src.exists():
        raise FileNotFoundError(f"Review file not found: {src}")

    df = pd.read_csv(
        src,
        sep=sep,
        dtype={"postal_code": str},
        on_bad_lines="skip",
    )
    missing = set(REQUIRED_COLUMNS) - set(df.columns)
    if missing:
        raise ValueError(f"missing expected columns: {sorted(missing)} in {src}")

    before = len(df)
    df = df.dropna(subset=["text", "starsReview", "postal_code"]).copy()
    df["starsReview"] = pd.to_numeric(df["starsReview"], errors="coerce")
    df = df[df["starsReview"].isin(VALID_STARS)]
    postal = df["postal_code"].astype(str).str.strip()
    df = df[postal.str.fullmatch(POSTAL_CODE_PATTERN)]
    df = df.reset_index(drop=True)
    df.insert(0, "review_id", np.arange(len(df)))

    print(f"[data] loaded {before} rows from {src.name}, kept {len(df)} well-formed rows")
    return df


def sample_reviews(
    df: pd.DataFrame, n: int = 10_000, random_state: int = 42
) -> pd.DataFrame:
    """Seeded simple random sample without replacement, projected to {review_id, stars, text}."""
    if len(df) < n:
        print(f"[warn] only {len(df)} reviews available, sampling all of them (requested {n})")
        n = len(df)
    sample = df.sample(n=n, random_state=random_state)

    stars = sample["starsReview"].astype(int)
    categories = sorted(stars.unique())
    out = pd.DataFrame(
        {
            "review_id": sample["review_id"].to_numpy(),
            "stars": pd.Categorical(stars, categories=categories, ordered=True),
            "text": sample["text"].astype(str).to_numpy(),
        }
    )
    return out.reset_index(drop=True)


def stratified_split(
    df: pd.DataFrame,
    train_size: float = 0.75,
    random_state: int = 42,
    label_col: str = "stars",
) -> tuple[pd.DataFrame, pd.DataFrame]:
    """
    Split into train/test keeping the label distribution.

    Each stratum contributes floor(train_size * n_stratum) rows to training.
    Strata are visited in sorted order with one seeded RandomState, so the
    result only depends on the input order and the seed.
    """
    if not 0.0 < train_size < 1.0:
        raise ValueError(f"train_size must be in (0, 1), got {train_size}")

    rng = np.random.RandomState(random_state)
    train_parts = []
    for _, g in df.groupby(label_col, sort=True, observed=True):
        n_train = int(np.floor(train_size * len(g)))
        train_parts.append(g.sample(n=n_train, random_state=rng))

    train_idx = pd.concat(train_parts).index
    train = df.loc[sorted(train_idx)].reset_index(drop=True)
    test = df.drop(index=train_idx).reset_index(drop=True)
    return train, test


def prepare_dataset(
    src_path: str | Path,
    sample_size: int = 10_000,
    train_size: float = 0.75,
    random_state: int = 42,
) -> dict:
    """
    Load, sample and split the review dataset.

    Args:
        src_path: Path to raw review CSV file
        sample_size: Number of reviews to sample
        train_size: Training fraction of the stratified split
        random_state: Random seed for reproducibility

    Returns:
        Dictionary with the sample, the two partitions and metadata
    """
    reviews = load_reviews(src_path)
    sample = sample_reviews(reviews, n=sample_size, random_state=random_state)
    train, test = stratified_split(sample, train_size=train_size, random_state=random_state)

    meta = {
        "src": str(src_path),
        "filtered_rows": int(len(reviews)),
        "sample_rows": int(len(sample)),
        "train_rows": int(len(train)),
        "test_rows": int(len(test)),
        "class_balance_sample": {
            str(k): int(v) for k, v in sample["stars"].value_counts(sort=False).items()
        },
    }
    return {"sample": sample, "train": train, "test": test, "meta": meta}


def main():
    """CLI interface: print split metadata for a review file."""
    import argparse

    parser = argparse.ArgumentParser()
    parser.add_argument("--src", required=True, help="Path to semicolon-delimited review CSV")
    parser.add_argument("--sample-size", type=int, default=10_000)
    parser.add_argument("--seed", type=int, default=42)

    args = parser.parse_args()

    prepared = prepare_dataset(
        src_path=args.src, sample_size=args.sample_size, random_state=args.seed
    )

    print(json.dumps(prepared["meta"], ensure_ascii=False, indent=2))


if __name__ == "__main__":
    main()
