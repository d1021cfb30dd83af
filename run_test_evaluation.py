#!/usr/bin/env python
"""
Finalize the selected models from cached tuning results and evaluate them once
on the held-out test set.

Pass the same flags as the run_experiment.py run that produced the cache.
"""
import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).parent.resolve()
sys.path.insert(0, str(ROOT / "src"))

from star_rating.cli import add_pipeline_arguments, pipeline_kwargs  # noqa: E402
from star_rating.core.caching import CacheMissError  # noqa: E402
from star_rating.experiments.experimental_pipeline import ExperimentalPipeline  # noqa: E402


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Refit selected configurations and evaluate them on the test set"
    )
    add_pipeline_arguments(parser, default_csv=ROOT / "data" / "reviews.csv")
    parser.add_argument(
        "--recompute",
        action="store_true",
        help="Run the tuning again when no cached result is found",
    )
    return parser


def main():
    args = build_parser().parse_args()

    print("=" * 80)
    print("TEST SET EVALUATION")
    print("=" * 80)
    print("This will:")
    print("1. Rebuild the same sample and 75/25 stratified split")
    print("2. Load the cached tuning results and apply the one-standard-error rule")
    print("3. Refit each selected configuration on the full training set")
    print("4. Evaluate each model once on the test set")
    print("=" * 80)

    pipeline = ExperimentalPipeline(**pipeline_kwargs(args))
    pipeline.load_and_prepare_data()

    try:
        pipeline.run_hyperparameter_tuning(recompute=args.recompute)
    except CacheMissError as e:
        print(f"No cached tuning results: {e}")
        print("Run run_experiment.py with the same flags first, or pass --recompute.")
        sys.exit(1)

    pipeline.select_models()
    pipeline.run_test_evaluation()
    pipeline.create_visualizations()
    pipeline.save_results()

    print("\n" + "=" * 80)
    print("EVALUATION COMPLETE!")
    print("=" * 80)


if __name__ == "__main__":
    main()
