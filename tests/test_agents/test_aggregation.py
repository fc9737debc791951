"""
Unit tests for the global and yearly word aggregators.
"""

from collections import Counter

import pytest

from conftest import make_record, make_tokens
from src.agents.aggregation import (
    GlobalWordAggregator,
    RatingAccumulator,
    YearlyWordAggregator,
)
from src.agents.tokenization import ReviewTokenizer
from src.models.token import Token
from src.models.word_stat import WordYearStat


def test_accumulator_ignores_undefined_values():
    """Missing ratings are excluded from numerator and denominator."""
    acc = RatingAccumulator()
    acc.add(Token("good", 5.0, True, 2015))
    acc.add(Token("good", None, None, 2015))
    acc.add(Token("good", 3.0, False, 2015))

    assert acc.n == 3
    assert acc.average_rating == 4.0
    assert acc.average_recommendation == 0.5


def test_accumulator_empty_group_is_undefined():
    acc = RatingAccumulator()
    acc.add(Token("meh", None, None, 2015))

    assert acc.n == 1
    assert acc.average_rating is None
    assert acc.average_recommendation is None


def test_word_count_conservation():
    """n per word equals the number of tokens for that word."""
    records = [
        make_record(title="Good good", text="bad"),
        make_record(title="good", text="okay, bad", year=2016),
        make_record(title="", text=""),
    ]
    tokens = ReviewTokenizer(records)
    expected = Counter(t.word for t in tokens)

    stats = GlobalWordAggregator(min_global_count=0).unfiltered(tokens)

    assert {s.word: s.n for s in stats} == dict(expected)
    assert sum(s.n for s in stats) == tokens.count()


def test_global_filter_is_strict():
    """Exactly min_global_count occurrences is excluded; one more is kept."""
    tokens = make_tokens("edge", 150) + make_tokens("over", 151)
    stats = GlobalWordAggregator(min_global_count=150).aggregate(tokens)

    assert [s.word for s in stats] == ["over"]
    assert stats[0].n == 151


def test_global_stats_sorted_by_count():
    tokens = make_tokens("b", 3) + make_tokens("a", 3) + make_tokens("c", 5)
    stats = GlobalWordAggregator(min_global_count=0).aggregate(tokens)
    assert [s.word for s in stats] == ["c", "a", "b"]


def test_global_undefined_average_kept_as_none():
    tokens = make_tokens("unrated", 3, rating=None, is_recommended=None)
    stats = GlobalWordAggregator(min_global_count=0).aggregate(tokens)

    assert stats[0].average_rating is None
    assert stats[0].average_recommendation is None


def test_yearly_statistics_per_pair():
    tokens = (
        make_tokens("glow", 11, year=2015, rating=4.0)
        + make_tokens("glow", 11, year=2016, rating=2.0, is_recommended=False)
    )
    rows = YearlyWordAggregator(min_year_count=10, min_years_present=2).aggregate(tokens)

    assert rows == (
        WordYearStat("glow", 2015, 11, 4.0, 1.0),
        WordYearStat("glow", 2016, 11, 2.0, 0.0),
    )


def test_yearly_high_total_but_low_per_year_is_absent():
    """10 years x 9 occurrences: total 90 but every year fails the per-year filter."""
    tokens = []
    for year in range(2010, 2020):
        tokens += make_tokens("spiky", 9, year=year)

    aggregator = YearlyWordAggregator(min_year_count=10, min_years_present=5)
    rows = aggregator.aggregate(tokens)

    assert rows == ()
    assert aggregator.last_report.pairs_below_year_count == 10


def test_years_present_counted_after_year_count_filter():
    """A word with many years but few qualifying years is dropped entirely."""
    tokens = []
    for year in range(2010, 2020):
        # Only 2010-2012 exceed the per-year threshold
        tokens += make_tokens("burst", 50 if year < 2013 else 5, year=year)
    for year in range(2010, 2015):
        tokens += make_tokens("steady", 11, year=year)

    aggregator = YearlyWordAggregator(min_year_count=10, min_years_present=5)
    rows = aggregator.aggregate(tokens)

    assert {r.word for r in rows} == {"steady"}
    assert len(rows) == 5
    assert aggregator.last_report.words_below_years_present == ["burst"]


def test_every_surviving_word_has_min_years():
    tokens = []
    for year in range(2010, 2016):
        tokens += make_tokens("a", 20, year=year)
    for year in range(2010, 2013):
        tokens += make_tokens("b", 20, year=year)

    rows = YearlyWordAggregator(min_year_count=10, min_years_present=4).aggregate(tokens)

    years_by_word = Counter(r.word for r in rows)
    assert years_by_word == {"a": 6}


def test_yearly_skips_undated_tokens():
    tokens = make_tokens("dated", 11, year=2015) + make_tokens("dated", 4, year=None)
    aggregator = YearlyWordAggregator(min_year_count=10, min_years_present=1)
    rows = aggregator.aggregate(tokens)

    assert len(rows) == 1
    assert rows[0].n == 11
    assert aggregator.last_report.undated_tokens == 4


def test_filter_passes_are_independent_steps():
    aggregator = YearlyWordAggregator(min_year_count=10, min_years_present=2)
    rows = [
        WordYearStat("x", 2010, 11),
        WordYearStat("x", 2011, 10),
        WordYearStat("y", 2010, 12),
        WordYearStat("y", 2011, 12),
    ]

    frequent = aggregator.filter_by_year_count(rows)
    assert [(r.word, r.year) for r in frequent] == [("x", 2010), ("y", 2010), ("y", 2011)]

    sustained = aggregator.filter_by_years_present(frequent)
    assert {r.word for r in sustained} == {"y"}


def test_word_stat_rejects_zero_count():
    with pytest.raises(ValueError):
        WordYearStat("x", 2010, 0)
