"""Shared fixtures for WordTrend tests."""

import os

import pandas as pd
import pytest

from src.models.review import ReviewRecord
from src.models.token import Token

FIRST_YEAR = 2010
N_YEARS = 10
REVIEWS_PER_YEAR = 12


def make_record(title="", text="", rating=4.0, is_recommended=True, year=2015, product_id="P1"):
    return ReviewRecord(
        product_id=product_id,
        rating=rating,
        is_recommended=is_recommended,
        year=year,
        review_title=title,
        review_text=text,
    )


def make_tokens(word, count, year=2015, rating=4.0, is_recommended=True):
    return [Token(word=word, rating=rating, is_recommended=is_recommended, year=year)] * count


def review_row(product_id, submission_time, rating, title, text, is_recommended=1.0):
    return {
        "product_id": product_id,
        "product_name": "Moisturizer",
        "brand_name": "Acme",
        "submission_time": submission_time,
        "rating": rating,
        "is_recommended": is_recommended,
        "review_title": title,
        "review_text": text,
    }


def synthetic_rows():
    """
    Ten years of reviews:
    - "improving": rating rises 0.4 per year
    - "steady": rating always 3
    - "rare": only in three years
    """
    rows = []
    for offset in range(N_YEARS):
        year = FIRST_YEAR + offset
        for i in range(REVIEWS_PER_YEAR):
            stamp = f"{year}-03-{i + 1:02d}"
            rows.append(review_row(f"I{year}{i}", stamp, 1.0 + 0.4 * offset, "Improving!", ""))
            rows.append(review_row(f"S{year}{i}", stamp, 3.0, "", "steady.", 0.0))
            if offset < 3:
                rows.append(review_row(f"R{year}{i}", stamp, 5.0, "rare", "", None))
    return rows


@pytest.fixture
def corpus_dir(tmp_path):
    """Synthetic corpus split over two files that share a duplicated row."""
    rows = synthetic_rows()
    half = len(rows) // 2
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    pd.DataFrame(rows[:half]).to_csv(data_dir / "reviews_0.csv", index=False)
    # Last row of file 0 repeated at the top of file 1
    pd.DataFrame(rows[half - 1:]).to_csv(data_dir / "reviews_1.csv", index=False)
    return str(data_dir)


@pytest.fixture
def output_dir(tmp_path):
    path = tmp_path / "output"
    return str(path)


def read_bytes(directory, name):
    with open(os.path.join(directory, name), "rb") as f:
        return f.read()
