import json

import pandas as pd
import pytest

from star_rating.core.caching import CacheMissError
from star_rating.experiments import ExperimentalPipeline, load_test_results_json
from star_rating.experiments.visualization import plot_confusion_matrices

SMALL_GRIDS = {
    "naive_bayes": {"alpha": [0.5, 1.5]},
    "boosted_trees": {
        "max_features": [5, 20],
        "max_depth": [1, 2],
        "n_estimators": [5],
        "learning_rate": [0.3],
    },
    "lasso": {"penalty": [1e-3, 1e-2], "max_iter": [500]},
}


def make_pipeline(csv, tmp_path, **overrides):
    kwargs = dict(
        raw_data_path=csv,
        results_dir=tmp_path / "results",
        cache_dir=tmp_path / "cache",
        sample_size=400,
        n_folds=3,
        preprocessing={"stop_words": "sklearn", "max_tokens": 200},
        param_grids=SMALL_GRIDS,
    )
    kwargs.update(overrides)
    return ExperimentalPipeline(**kwargs)


@pytest.fixture(scope="module")
def completed(reviews_csv, tmp_path_factory):
    tmp_path = tmp_path_factory.mktemp("run")
    pipeline = make_pipeline(reviews_csv, tmp_path)
    results = pipeline.run_complete_pipeline()
    return pipeline, results, tmp_path


class TestCompletePipeline:
    def test_feature_preview(self, completed):
        pipeline, results, _ = completed
        assert results["feature_preview_shape"] == [len(pipeline.evaluator.train_data), 101]

    def test_every_family_tuned_and_selected(self, completed):
        _, results, _ = completed
        assert set(results["hyperparameter_tuning"]) == {"Naive Bayes", "Boosted Trees", "LASSO Regression"}
        for name, (family, params) in results["selections"].items():
            grid = SMALL_GRIDS[family]
            assert all(params[k] in grid[k] for k in params)

    def test_cv_comparison_reported(self, completed):
        _, results, run_dir = completed
        comparison = results["cv_comparison"]
        assert set(comparison["Model"]) == {"Naive Bayes", "Boosted Trees", "LASSO Regression"}
        assert comparison["CV_Score"].between(0, 1).all()

        path = next((run_dir / "results").glob("experiment_results_*.json"))
        payload = json.loads(path.read_text(encoding="utf-8"))
        assert len(payload["cv_comparison"]) == 3
        for res in payload["test_evaluation"].values():
            assert 0 <= res["n_nonzero"] <= res["n_features"]

    def test_test_metrics(self, completed):
        pipeline, results, _ = completed
        n_test = len(pipeline.evaluator.test_data)
        for res in results["test_evaluation"].values():
            assert 0.0 <= res["test_metrics"]["accuracy"] <= 1.0
            assert 0.0 <= res["test_metrics"]["roc_auc"] <= 1.0
            assert int(res["confusion_matrix"].to_numpy().sum()) == n_test
        assert len(results["comparison"]) == 3

    def test_output_files(self, completed):
        _, _, tmp_path = completed
        out = tmp_path / "results"
        for name in [
            "star_distribution.png",
            "confusion_matrices.png",
            "tuning_naive_bayes.png",
            "tuning_boosted_trees.png",
            "tuning_lasso_regression.png",
            "tuning_lasso_regression.csv",
            "model_summary.csv",
            "model_summary.md",
            "top_features.csv",
            "experiment_summary.txt",
        ]:
            assert (out / name).exists(), name
        assert len(list(out.glob("experiment_results_*.json"))) == 1
        assert len(list((tmp_path / "cache").glob("tuning_*.joblib"))) == 3
        assert len(list((tmp_path / "cache").glob("final_*.joblib"))) == 3

    def test_saved_json_can_be_replotted(self, completed, tmp_path):
        _, results, run_dir = completed
        path = next((run_dir / "results").glob("experiment_results_*.json"))
        payload = json.loads(path.read_text(encoding="utf-8"))
        assert payload["config"]["n_folds"] == 3

        restored = load_test_results_json(payload["test_evaluation"])
        for name, res in restored.items():
            original = results["test_evaluation"][name]["confusion_matrix"]
            assert res["confusion_matrix"].to_numpy().tolist() == original.to_numpy().tolist()
        assert plot_confusion_matrices(restored, tmp_path).exists()


class TestCachedRun:
    def test_tuning_loaded_from_cache(self, completed, reviews_csv):
        first, _, tmp_path = completed
        again = make_pipeline(reviews_csv, tmp_path)
        again.load_and_prepare_data()
        tuned = again.run_hyperparameter_tuning(recompute=False)
        for name, result in tuned.items():
            pd.testing.assert_frame_equal(
                result.fold_metrics, first.results["hyperparameter_tuning"][name].fold_metrics
            )

    def test_cache_miss_without_recompute(self, reviews_csv, tmp_path):
        pipeline = make_pipeline(reviews_csv, tmp_path, models=["nb"])
        pipeline.load_and_prepare_data()
        with pytest.raises(CacheMissError):
            pipeline.run_hyperparameter_tuning(recompute=False)


class TestReproducibility:
    def test_same_seed_same_results(self, reviews_csv, tmp_path):
        runs = []
        for i in range(2):
            pipeline = make_pipeline(reviews_csv, tmp_path / str(i), models=["nb"], use_cache=False)
            pipeline.load_and_prepare_data()
            pipeline.run_hyperparameter_tuning()
            pipeline.select_models()
            runs.append(pipeline.run_test_evaluation())
        a, b = (r["Naive Bayes"] for r in runs)
        assert a["best_params"] == b["best_params"]
        assert a["test_metrics"] == b["test_metrics"]
        pd.testing.assert_frame_equal(a["confusion_matrix"], b["confusion_matrix"])
