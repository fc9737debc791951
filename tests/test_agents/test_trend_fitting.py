"""
Unit tests for the trend fitter.
"""

import pytest

from src.agents.trend_fitting import TrendFitter, fit_trend
from src.errors import ModelUnderdetermined
from src.models.word_stat import WordYearStat


def linear_rows(word="linear", slope=0.2, base=3.0, years=range(2010, 2020), n=20):
    return [
        WordYearStat(word, year, n, base + slope * (year - 2010))
        for year in years
    ]


def test_recovers_exact_linear_trend():
    """rating = 3.0 + 0.2 * (year - 2010) gives slope 0.2 and p near 0."""
    fits = TrendFitter().fit(linear_rows())

    assert len(fits) == 1
    fit = fits[0]
    assert fit.word == "linear"
    assert fit.slope == pytest.approx(0.2, abs=1e-9)
    assert fit.intercept == pytest.approx(3.0 - 0.2 * 2010, abs=1e-6)
    assert fit.p_value < 1e-10


def test_flat_series_is_not_significant():
    fit = fit_trend("flat", [(year, 3.0, 15) for year in range(2010, 2016)])

    assert fit.slope == pytest.approx(0.0)
    assert fit.p_value == pytest.approx(1.0)


def test_noisy_series_matches_ols_formula():
    points = [(2010, 4.1, 11), (2011, 3.7, 11), (2012, 4.0, 11),
              (2013, 3.5, 11), (2014, 3.6, 11), (2015, 3.2, 11)]
    fit = fit_trend("noisy", points)

    # Sxy = -2.65, Sxx = 17.5; t is about -3.3 with df = 4
    assert fit.slope == pytest.approx(-2.65 / 17.5, rel=1e-6)
    assert 0.02 < fit.p_value < 0.05


def test_single_year_is_underdetermined():
    with pytest.raises(ModelUnderdetermined) as excinfo:
        fit_trend("lonely", [(2015, 4.0, 30)])
    assert excinfo.value.n_points == 1


def test_undefined_ratings_are_not_points():
    with pytest.raises(ModelUnderdetermined):
        fit_trend("sparse", [(2015, 4.0, 30), (2016, None, 30)])


def test_two_points_fit_exactly():
    fit = fit_trend("pair", [(2010, 2.0, 11), (2012, 3.0, 11)])
    assert fit.slope == pytest.approx(0.5)
    assert fit.p_value == 0.0


def test_fitter_skips_and_reports_underdetermined_words():
    rows = linear_rows() + [WordYearStat("lonely", 2015, 40, 4.0)]
    fitter = TrendFitter()
    fits = fitter.fit(rows)

    assert [f.word for f in fits] == ["linear"]
    assert list(fitter.last_report.underdetermined) == ["lonely"]
    assert fitter.last_report.fitted == 1


def test_fits_sorted_by_word():
    rows = linear_rows("zeta") + linear_rows("alpha", slope=-0.1)
    assert [f.word for f in TrendFitter().fit(rows)] == ["alpha", "zeta"]


def test_count_weighting_with_equal_counts_matches_ols():
    points = [(2010, 4.1, 20), (2011, 3.7, 20), (2012, 4.0, 20),
              (2013, 3.5, 20), (2014, 3.6, 20), (2015, 3.2, 20)]
    unweighted = fit_trend("w", points, weighting="none")
    weighted = fit_trend("w", points, weighting="count")

    assert weighted.slope == pytest.approx(unweighted.slope)
    assert weighted.intercept == pytest.approx(unweighted.intercept)
    assert weighted.p_value == pytest.approx(unweighted.p_value)


def test_count_weighting_discounts_thin_years():
    """A low-volume outlier year moves the weighted slope less."""
    points = [(2010, 2.0, 100), (2011, 2.0, 100), (2012, 2.1, 100), (2013, 5.0, 1)]
    unweighted = fit_trend("w", points, weighting="none")
    weighted = fit_trend("w", points, weighting="count")

    assert 0.0 < weighted.slope < unweighted.slope


def test_parallel_fit_matches_serial():
    rows = []
    for i, word in enumerate(["a", "b", "c", "d", "e"]):
        rows += linear_rows(word, slope=0.05 * i)
    rows[3] = WordYearStat(rows[3].word, rows[3].year, rows[3].n, 1.0)

    serial = TrendFitter(workers=1).fit(rows)
    parallel = TrendFitter(workers=2).fit(rows)

    assert parallel == serial
