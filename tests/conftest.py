"""Shared fixtures: a small synthetic review file with a few malformed rows."""

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

from star_rating.prepare_dataset import load_reviews, sample_reviews, stratified_split

PREPROCESSING = {"stop_words": "sklearn", "max_tokens": 200}

CLASS_WORDS = {
    1: ["terrible", "awful", "horrible", "disgusting", "worst", "rude"],
    2: ["bad", "poor", "bland", "disappointing", "mediocre", "slow"],
    3: ["okay", "average", "decent", "ordinary", "acceptable", "fair"],
    4: ["good", "tasty", "friendly", "pleasant", "fresh", "recommend"],
    5: ["excellent", "amazing", "wonderful", "perfect", "fantastic", "outstanding"],
}
COMMON_WORDS = ["food", "service", "restaurant", "place", "staff", "meal", "price"]
SYLLABLES = ["ka", "lo", "mi", "nu", "pe", "ri", "so", "tu", "va", "ze", "bo", "da"]
FILLER_WORDS = [a + b + c + "x" for a in SYLLABLES for b in SYLLABLES[:5] for c in SYLLABLES[:5]]
N_PER_CLASS = 120


def make_review(rng, stars: int) -> str:
    words = list(rng.choice(CLASS_WORDS[stars], size=4))
    neighbour = min(5, max(1, stars + rng.choice([-1, 1])))
    words += list(rng.choice(CLASS_WORDS[neighbour], size=1))
    words += list(rng.choice(COMMON_WORDS, size=3))
    words += list(rng.choice(FILLER_WORDS, size=3))
    rng.shuffle(words)
    return "The " + " ".join(words[:4]) + ", and it was " + " ".join(words[4:]) + "!"


def make_review_frame(seed: int = 0) -> pd.DataFrame:
    rng = np.random.RandomState(seed)
    rows = []
    for stars in CLASS_WORDS:
        for _ in range(N_PER_CLASS):
            rows.append(
                {
                    "postal_code": str(rng.randint(1000, 99999)),
                    "starsReview": stars,
                    "text": make_review(rng, stars),
                }
            )
    # malformed rows: all of them must be filtered out
    rows += [
        {"postal_code": "AB123", "starsReview": 5, "text": "great food"},
        {"postal_code": "123456", "starsReview": 4, "text": "good food"},
        {"postal_code": "", "starsReview": 3, "text": "okay food"},
        {"postal_code": "12-34", "starsReview": 2, "text": "bad food"},
        {"postal_code": "4711", "starsReview": "n/a", "text": "no rating"},
        {"postal_code": "4711", "starsReview": 7, "text": "rating out of range"},
        {"postal_code": "4711", "starsReview": 1, "text": None},
    ]
    df = pd.DataFrame(rows)
    return df.sample(frac=1.0, random_state=seed).reset_index(drop=True)


N_VALID = N_PER_CLASS * len(CLASS_WORDS)


@pytest.fixture(scope="session")
def reviews_csv(tmp_path_factory):
    path = tmp_path_factory.mktemp("data") / "reviews.csv"
    make_review_frame().to_csv(path, sep=";", index=False)
    return path


@pytest.fixture(scope="session")
def reviews(reviews_csv):
    return load_reviews(reviews_csv)


@pytest.fixture(scope="session")
def sample(reviews):
    return sample_reviews(reviews, n=500, random_state=42)


@pytest.fixture(scope="session")
def split(sample):
    return stratified_split(sample, train_size=0.75, random_state=42)


@pytest.fixture
def preprocessing():
    return dict(PREPROCESSING)
