# cli.py
"""Command-line flags shared by the runner scripts.

Every flag that enters a cache key (models, folds, seed, sample size, grids,
preprocessing) is defined here once, so a run finalized by
``run_test_evaluation.py`` finds the tuning results written by
``run_experiment.py`` with the same flags.
"""
import argparse
from pathlib import Path
from typing import Any, Dict

from .core.text_pipeline import PREPROCESSING_DEFAULTS

MODEL_CHOICES = {
    "nb": ["naive_bayes"],
    "boost": ["boosted_trees"],
    "lasso": ["lasso"],
    "all": ["naive_bayes", "boosted_trees", "lasso"],
}


def add_pipeline_arguments(ap: argparse.ArgumentParser, default_csv: Path = Path("data/reviews.csv")):
    ap.add_argument("--csv", type=Path, default=default_csv,
                    help="Semicolon-delimited review file (postal_code;starsReview;text)")
    ap.add_argument("--results-dir", type=Path, default=Path("results"))
    ap.add_argument("--cache-dir", type=Path, default=Path("cache"))
    ap.add_argument("--model", choices=sorted(MODEL_CHOICES), default="all")
    ap.add_argument("--sample-size", type=int, default=10_000)
    ap.add_argument("--seed", "--random-state", dest="seed", type=int, default=42)
    ap.add_argument("--folds", type=int, default=5)
    ap.add_argument("--fast", action="store_true", help="Use the small hyperparameter grids")
    ap.add_argument("--n-jobs", type=int, default=1, help="Parallel fits during tuning (-1 = all cores)")

    # Preprocessing overrides
    ap.add_argument("--max-tokens", type=int, default=PREPROCESSING_DEFAULTS["max_tokens"])
    ap.add_argument("--min-df", type=float, default=PREPROCESSING_DEFAULTS["min_df"])
    ap.add_argument("--max-df", type=float, default=PREPROCESSING_DEFAULTS["max_df"])
    ap.add_argument("--stop-words", choices=["nltk", "sklearn"], default=PREPROCESSING_DEFAULTS["stop_words"])
    return ap


def pipeline_kwargs(args: argparse.Namespace) -> Dict[str, Any]:
    """ExperimentalPipeline keyword arguments from parsed shared flags."""
    return dict(
        raw_data_path=args.csv,
        results_dir=args.results_dir,
        cache_dir=args.cache_dir,
        random_state=args.seed,
        sample_size=args.sample_size,
        n_folds=args.folds,
        models=MODEL_CHOICES[args.model],
        preprocessing={
            "max_tokens": args.max_tokens,
            "min_df": args.min_df,
            "max_df": args.max_df,
            "stop_words": args.stop_words,
        },
        fast=args.fast,
        n_jobs=args.n_jobs,
    )
