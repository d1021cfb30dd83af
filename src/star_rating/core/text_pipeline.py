#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Text Preprocessing Pipeline

Turns raw review text into a TF-IDF feature matrix with an ordered chain of
sklearn-style transformers:

    tokenize -> stem -> stopwords -> tokenfilter -> tfidf

The first three steps are stateless (per-document), so they can be applied to
train and test data independently. The token filter (vocabulary) and the
TF-IDF weights are learned in ``fit`` on training data only and are frozen
afterwards: ``transform`` on new documents never adds a column.
"""

from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

import numpy as np
import pandas as pd
import regex as re
from scipy import sparse
from nltk.stem.snowball import SnowballStemmer
from sklearn.base import BaseEstimator, TransformerMixin
from sklearn.feature_extraction.text import (
    ENGLISH_STOP_WORDS,
    CountVectorizer,
    TfidfTransformer,
)
from sklearn.pipeline import Pipeline

WORD_RE = re.compile(r"[\p{L}\p{N}]+(?:['’][\p{L}]+)*")

# min_df=0.0 keeps rare tokens; use 0.01 for a 1% document-frequency floor
PREPROCESSING_DEFAULTS: Dict[str, Any] = {
    "language": "english",
    "stop_words": "nltk",
    "min_df": 0.0,
    "max_df": 0.75,
    "max_tokens": 1000,
}


def _identity_analyzer(doc):
    return doc


def ensure_nltk_stopwords():
    """Download the nltk stop-word corpus if it is not installed yet."""
    import nltk
    from nltk.corpus import stopwords

    try:
        stopwords.words("english")
    except LookupError:
        nltk.download("stopwords", quiet=True)


def load_stop_words(source: Union[str, Iterable[str]] = "nltk", language: str = "english") -> frozenset:
    """
    Resolve a stop-word list.

    Args:
        source: "nltk" (Snowball list shipped with the nltk corpus),
            "sklearn" (scikit-learn's built-in English list) or an iterable of words
        language: Corpus language for the nltk list
    """
    if isinstance(source, str):
        if source == "nltk":
            from nltk.corpus import stopwords

            ensure_nltk_stopwords()
            return frozenset(stopwords.words(language))
        if source == "sklearn":
            return frozenset(ENGLISH_STOP_WORDS)
        raise ValueError(f"Unknown stop-word source: {source}")
    return frozenset(w.lower() for w in source)


class WordTokenizer(BaseEstimator, TransformerMixin):
    """Lower-case and split text into word tokens."""

    def __init__(self, lowercase: bool = True):
        self.lowercase = lowercase

    def fit(self, X, y=None):
        return self

    def transform(self, X) -> List[List[str]]:
        out = []
        for text in X:
            text = "" if text is None else str(text)
            if self.lowercase:
                text = text.lower()
            out.append(WORD_RE.findall(text))
        return out


class TokenStemmer(BaseEstimator, TransformerMixin):
    """Snowball (Porter2) stemming of every token."""

    def __init__(self, language: str = "english"):
        self.language = language

    def fit(self, X, y=None):
        return self

    def transform(self, X) -> List[List[str]]:
        stemmer = SnowballStemmer(self.language)
        cache: Dict[str, str] = {}
        out = []
        for tokens in X:
            stemmed = []
            for tok in tokens:
                if tok not in cache:
                    cache[tok] = stemmer.stem(tok)
                stemmed.append(cache[tok])
            out.append(stemmed)
        return out


class StopWordRemover(BaseEstimator, TransformerMixin):
    """Drop tokens found in a stop-word list."""

    def __init__(self, stop_words: Union[str, Sequence[str]] = "nltk", language: str = "english"):
        self.stop_words = stop_words
        self.language = language

    def fit(self, X, y=None):
        self.stop_words_ = load_stop_words(self.stop_words, self.language)
        return self

    def transform(self, X) -> List[List[str]]:
        stop_words = getattr(self, "stop_words_", None)
        if stop_words is None:
            stop_words = load_stop_words(self.stop_words, self.language)
        return [[tok for tok in tokens if tok not in stop_words] for tokens in X]


class TokenFrequencyFilter(BaseEstimator, TransformerMixin):
    """
    Learn a vocabulary and count tokens against it.

    Tokens whose document frequency is below ``min_df`` or above ``max_df``
    are dropped, then the vocabulary is capped at the ``max_tokens`` most
    frequent tokens (corpus-wide counts).
    """

    def __init__(self, min_df: float = 0.0, max_df: float = 0.75, max_tokens: Optional[int] = 1000):
        self.min_df = min_df
        self.max_df = max_df
        self.max_tokens = max_tokens

    def fit(self, X, y=None):
        self.vectorizer_ = CountVectorizer(
            analyzer=_identity_analyzer,
            min_df=self.min_df,
            max_df=self.max_df,
            max_features=self.max_tokens,
        )
        self.vectorizer_.fit(X)
        self.vocabulary_ = self.vectorizer_.get_feature_names_out()
        return self

    def transform(self, X):
        return self.vectorizer_.transform(X)

    def get_feature_names_out(self, input_features=None):
        return np.asarray(self.vocabulary_, dtype=object)


class TfidfWeighter(BaseEstimator, TransformerMixin):
    """TF-IDF weighting of a count matrix; IDF learned in fit."""

    def __init__(self, norm: Optional[str] = "l2", smooth_idf: bool = True, sublinear_tf: bool = False):
        self.norm = norm
        self.smooth_idf = smooth_idf
        self.sublinear_tf = sublinear_tf

    def fit(self, X, y=None):
        self.transformer_ = TfidfTransformer(
            norm=self.norm, smooth_idf=self.smooth_idf, sublinear_tf=self.sublinear_tf
        )
        self.transformer_.fit(X)
        self.idf_ = self.transformer_.idf_
        return self

    def transform(self, X):
        return self.transformer_.transform(X)


def build_analyzer(language: str = "english", stop_words="nltk") -> Pipeline:
    """Stateless prefix: tokenize -> stem -> stopwords."""
    return Pipeline(
        [
            ("tokenize", WordTokenizer()),
            ("stem", TokenStemmer(language=language)),
            ("stopwords", StopWordRemover(stop_words=stop_words, language=language)),
        ]
    )


def build_weighting_pipeline(
    min_df: float = 0.0, max_df: float = 0.75, max_tokens: Optional[int] = 1000
) -> Pipeline:
    """Stateful suffix: tokenfilter -> tfidf."""
    return Pipeline(
        [
            ("tokenfilter", TokenFrequencyFilter(min_df=min_df, max_df=max_df, max_tokens=max_tokens)),
            ("tfidf", TfidfWeighter()),
        ]
    )


def build_text_pipeline(
    language: str = "english",
    stop_words="nltk",
    min_df: float = 0.0,
    max_df: float = 0.75,
    max_tokens: Optional[int] = 1000,
) -> Pipeline:
    """Full chain from raw text to the TF-IDF matrix."""
    analyzer = build_analyzer(language=language, stop_words=stop_words)
    weighting = build_weighting_pipeline(min_df=min_df, max_df=max_df, max_tokens=max_tokens)
    return Pipeline(analyzer.steps + weighting.steps)


def feature_names(pipeline: Pipeline) -> List[str]:
    """Column names of a fitted pipeline, ``tfidf_text_<token>``."""
    vocab = pipeline.named_steps["tokenfilter"].vocabulary_
    return [f"tfidf_text_{tok}" for tok in vocab]


def feature_table(
    pipeline: Pipeline, texts, labels=None, label_col: str = "stars"
) -> pd.DataFrame:
    """
    Dense DataFrame view of a fitted pipeline's output.

    One row per document, one column per retained token, plus the label
    column carried alongside when ``labels`` is given.
    """
    X = pipeline.transform(list(texts))
    dense = X.toarray() if sparse.issparse(X) else np.asarray(X)
    df = pd.DataFrame(dense, columns=feature_names(pipeline))
    if labels is not None:
        df.insert(0, label_col, pd.Series(labels).reset_index(drop=True))
    return df
