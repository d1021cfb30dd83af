#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Standalone script to re-plot test results from the latest experiment results JSON file
"""

import sys
import json
from pathlib import Path

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent / "src"))

from star_rating.experiments.experimental_pipeline import load_test_results_json  # noqa: E402
from star_rating.experiments.visualization import (  # noqa: E402
    export_summary_table,
    export_top_features,
    plot_confusion_matrices,
)


def find_latest_results_file(results_dir: Path):
    """Find the most recent experiment results file"""
    if not results_dir.exists():
        return None

    experiment_files = list(results_dir.glob("experiment_results_*.json"))
    if not experiment_files:
        return None

    return max(experiment_files, key=lambda p: p.stat().st_mtime)


def main():
    """Plot results from the latest (or a given) experiment results JSON file"""
    results_dir = Path(sys.argv[2]) if len(sys.argv) > 2 else Path("results")
    results_file = Path(sys.argv[1]) if len(sys.argv) > 1 else find_latest_results_file(results_dir)

    if not results_file or not results_file.exists():
        print(f"Error: No experiment results files found in {results_dir}/ directory")
        return

    print(f"Loading results from: {results_file}")
    with open(results_file, "r", encoding="utf-8") as f:
        data = json.load(f)

    if not data.get("test_evaluation"):
        print("Error: No test_evaluation results found in the file")
        return

    test_results = load_test_results_json(data["test_evaluation"])
    print(f"Found {len(test_results)} models:")
    for model_name in test_results:
        print(f"  - {model_name}")

    results_dir.mkdir(parents=True, exist_ok=True)

    print("\nGenerating visualizations...")
    plot_confusion_matrices(test_results, results_dir)
    export_summary_table(test_results, results_dir)
    print(f"✓ Summary table saved to {results_dir}/model_summary.csv and model_summary.md")
    export_top_features(test_results, results_dir)

    print("\nVisualization complete!")


if __name__ == "__main__":
    main()
