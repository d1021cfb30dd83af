import numpy as np
import pytest

from star_rating.experiments.test_evaluation import TestEvaluator

SELECTIONS = {
    "Naive Bayes": ("naive_bayes", {"alpha": 1.0}),
    "Boosted Trees": ("boosted_trees", {"max_features": 20, "max_depth": 2, "n_estimators": 5}),
    "LASSO Regression": ("lasso", {"penalty": 1e-3}),
}


@pytest.fixture(scope="module")
def evaluated(split):
    train, test = split
    evaluator = TestEvaluator(preprocessing={"stop_words": "sklearn", "max_tokens": 200})
    evaluator.use_partitions(train, test)
    return evaluator, evaluator.evaluate_all_models(SELECTIONS)


class TestEvaluation:
    def test_all_models_evaluated(self, evaluated):
        _, results = evaluated
        assert set(results) == set(SELECTIONS)
        for name, res in results.items():
            assert res["family"] == SELECTIONS[name][0]
            assert res["best_params"] == SELECTIONS[name][1]

    def test_metrics_in_unit_interval(self, evaluated):
        _, results = evaluated
        for res in results.values():
            assert 0.0 <= res["test_metrics"]["accuracy"] <= 1.0
            assert 0.0 <= res["test_metrics"]["roc_auc"] <= 1.0

    def test_confusion_matrix_rows_match_test_counts(self, evaluated, split):
        _, test = split
        _, results = evaluated
        counts = test["stars"].value_counts()
        for res in results.values():
            cm = res["confusion_matrix"]
            assert list(cm.index) == [1, 2, 3, 4, 5]
            assert list(cm.columns) == [1, 2, 3, 4, 5]
            for label, row_sum in cm.sum(axis=1).items():
                assert row_sum == counts[label]
            assert int(cm.to_numpy().sum()) == len(test)

    def test_predictions_follow_probabilities(self, evaluated):
        _, results = evaluated
        for res in results.values():
            assert res["proba"].shape == (res["test_size"], 5)
            expected = np.asarray(res["classes"])[res["proba"].argmax(axis=1)]
            assert np.array_equal(res["y_pred"], expected)

    def test_vocabulary_learned_from_training_only(self, evaluated):
        evaluator, results = evaluated
        train_vocab = {tok for doc in evaluator.train_tokens for tok in doc}
        for res in results.values():
            assert set(res["estimator"].vocabulary) <= train_vocab
            assert res["n_features"] == len(res["estimator"].vocabulary)

    def test_tokens_used(self, evaluated):
        _, results = evaluated
        nb = results["Naive Bayes"]
        lasso = results["LASSO Regression"]
        assert nb["n_nonzero"] == nb["n_features"]
        assert 0 < lasso["n_nonzero"] <= lasso["n_features"]
        assert lasso["n_nonzero"] == lasso["estimator"].n_nonzero()

    def test_comparison_table(self, evaluated):
        evaluator, results = evaluated
        table = evaluator.create_comparison_table(results)
        assert list(table.columns) == ["Model", "Accuracy", "ROC_AUC", "Params", "Test_Size", "Train_Size"]
        assert len(table) == 3


class TestSplitHandling:
    def test_requires_split(self):
        with pytest.raises(ValueError):
            TestEvaluator().evaluate_model("Naive Bayes", "naive_bayes", {"alpha": 1.0})

    def test_split_data(self, sample):
        evaluator = TestEvaluator(preprocessing={"stop_words": "sklearn"})
        train, test = evaluator.split_data(sample)
        assert len(train) + len(test) == len(sample)
        assert evaluator.train_data is train
