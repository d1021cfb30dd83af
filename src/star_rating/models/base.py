# base.py
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

from ..core.text_pipeline import (
    PREPROCESSING_DEFAULTS,
    build_analyzer,
    build_weighting_pipeline,
)


class TextClassifierEstimator:
    """将 token 过滤 + TF-IDF 与分类器封装为 sklearn 风格估计器。

    Documents may be raw strings or token lists that already went through the
    stateless analyzer (tokenize -> stem -> stopwords); the vocabulary and IDF
    weights are always learned in ``fit`` from the documents passed there.

    params: model hyperparameters, see the subclasses
    preprocessing: overrides for PREPROCESSING_DEFAULTS
    """

    family: str = ""

    def __init__(self, preprocessing: Optional[Dict[str, Any]] = None, random_state: int = 42, **params: Any):
        self.p = params
        self.preprocessing = {**PREPROCESSING_DEFAULTS, **(preprocessing or {})}
        self.random_state = random_state
        self.analyzer = None
        self.weighting = None
        self.model = None
        self.classes_ = None

    # ---------- preprocessing ----------
    def _analyze(self, docs) -> List[List[str]]:
        docs = list(docs)
        if docs and not isinstance(docs[0], str):
            return docs
        if self.analyzer is None:
            self.analyzer = build_analyzer(
                language=self.preprocessing["language"],
                stop_words=self.preprocessing["stop_words"],
            )
            return self.analyzer.fit_transform(docs)
        return self.analyzer.transform(docs)

    def _features(self, docs):
        if self.weighting is None:
            raise RuntimeError(f"{type(self).__name__} is not fitted yet")
        return self.weighting.transform(self._analyze(docs))

    # ---------- model ----------
    def _build_classifier(self, n_samples: int, n_features: int):
        raise NotImplementedError

    def _importances(self) -> Tuple[np.ndarray, Optional[np.ndarray]]:
        """Per-feature importance and, where defined, the class it points to."""
        raise NotImplementedError

    def fit(self, docs, y):
        tokens = self._analyze(docs)
        y = np.asarray(y)
        self.weighting = build_weighting_pipeline(
            min_df=self.preprocessing["min_df"],
            max_df=self.preprocessing["max_df"],
            max_tokens=self.preprocessing["max_tokens"],
        )
        X = self.weighting.fit_transform(tokens)
        self.model = self._build_classifier(*X.shape)
        self.model.fit(X, y)
        self.classes_ = self.model.classes_
        return self

    def predict(self, docs):
        return self.model.predict(self._features(docs))

    def predict_proba(self, docs):
        return self.model.predict_proba(self._features(docs))

    def n_nonzero(self) -> int:
        """Number of tokens the fitted classifier can use."""
        return int(len(self.vocabulary))

    @property
    def vocabulary(self) -> np.ndarray:
        return self.weighting.named_steps["tokenfilter"].vocabulary_

    def feature_importance(self, top_n: int = 20) -> pd.DataFrame:
        """Most influential tokens, sorted by decreasing importance."""
        importance, classes = self._importances()
        df = pd.DataFrame({"token": self.vocabulary, "importance": importance})
        if classes is not None:
            df["class"] = classes
        df = df.sort_values(["importance", "token"], ascending=[False, True], kind="mergesort")
        return df.head(top_n).reset_index(drop=True)

    def get_params(self) -> Dict[str, Any]:
        return dict(self.p)

    def __repr__(self):
        return f"{type(self).__name__}({self.p})"
