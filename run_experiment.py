#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Unified runner for the star-rating experiment.

- Run from project root.
- Imports the package from src/ (works with or without `pip install -e .`).
- Supports running one model family (nb/boost/lasso) or all three.
- Steps: load + split -> preview features -> tune -> select (1-SE) -> test -> plots.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

# ---------------------------------------------------------------------
# Ensure we can import `star_rating` from src/
# ---------------------------------------------------------------------
ROOT = Path(__file__).parent.resolve()
SRC_DIR = ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from star_rating.cli import add_pipeline_arguments, pipeline_kwargs  # noqa: E402
from star_rating.experiments.experimental_pipeline import ExperimentalPipeline  # noqa: E402


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Predict review star ratings from text")
    add_pipeline_arguments(ap, default_csv=ROOT / "data" / "reviews.csv")
    ap.add_argument("--no-cache", action="store_true", help="Do not read or write cached results")
    return ap


def main() -> None:
    args = build_parser().parse_args()

    if not args.csv.exists():
        raise FileNotFoundError(f"Review file not found: {args.csv}")

    pipeline = ExperimentalPipeline(use_cache=not args.no_cache, **pipeline_kwargs(args))
    pipeline.run_complete_pipeline()


if __name__ == "__main__":
    main()
