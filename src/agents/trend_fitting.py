"""
Trend Fitter.

Fits average rating against year for each word that survived the yearly
filters, and reports words with too few year points to fit.
"""

import logging
import math
from collections import defaultdict
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np
from scipy import stats

from src.errors import ModelUnderdetermined
from src.models.trend import TrendFit
from src.models.word_stat import WordYearStat

logger = logging.getLogger(__name__)

# (year, average_rating, n)
YearPoint = Tuple[int, Optional[float], int]


def fit_trend(word: str, points: Sequence[YearPoint], weighting: str = "none") -> TrendFit:
    """
    Regress average rating on year for one word.

    Args:
        word: The word being fitted
        points: (year, average_rating, n) per year; None ratings are ignored
        weighting: "none" for ordinary least squares (one observation per
            year) or "count" to weight each year by its token count n

    Returns:
        TrendFit with slope, intercept and two-sided p-value for slope == 0

    Raises:
        ModelUnderdetermined: If fewer than two distinct years have a rating
    """
    usable = [(year, rating, n) for year, rating, n in points if rating is not None]
    distinct_years = len({year for year, _, _ in usable})
    if distinct_years < 2:
        raise ModelUnderdetermined(word, distinct_years)

    usable.sort()
    x = np.array([year for year, _, _ in usable], dtype=np.float64)
    y = np.array([rating for _, rating, _ in usable], dtype=np.float64)

    if weighting == "count":
        w = np.array([n for _, _, n in usable], dtype=np.float64)
        slope, intercept, p_value = _weighted_least_squares(x, y, w)
    else:
        result = stats.linregress(x, y)
        slope, intercept, p_value = result.slope, result.intercept, result.pvalue

    if math.isnan(p_value):
        logger.debug(f"Undefined p-value for '{word}', treating slope as not significant")
        p_value = 1.0

    return TrendFit(
        word=word,
        slope=float(slope),
        intercept=float(intercept),
        p_value=float(min(1.0, max(0.0, p_value))),
    )


def _weighted_least_squares(
    x: np.ndarray, y: np.ndarray, w: np.ndarray
) -> Tuple[float, float, float]:
    """Weighted simple regression with a t-test on the slope (df = k - 2)."""
    if np.ptp(y) == 0.0:
        return 0.0, float(y[0]), 1.0

    total = w.sum()
    x_mean = (w * x).sum() / total
    y_mean = (w * y).sum() / total
    sxx = (w * (x - x_mean) ** 2).sum()
    sxy = (w * (x - x_mean) * (y - y_mean)).sum()

    slope = sxy / sxx
    intercept = y_mean - slope * x_mean

    df = len(x) - 2
    residuals = y - (intercept + slope * x)
    ssr = (w * residuals ** 2).sum()
    if df == 0 or ssr == 0.0:
        # Exact fit: significant unless the line is flat
        return slope, intercept, 1.0 if slope == 0.0 else 0.0

    std_err = math.sqrt(ssr / df / sxx)
    t_stat = slope / std_err
    p_value = 2.0 * stats.t.sf(abs(t_stat), df)
    return slope, intercept, p_value


def _fit_series(args: Tuple[str, List[YearPoint], str]) -> Tuple[str, Optional[TrendFit], Optional[str]]:
    word, points, weighting = args
    try:
        return word, fit_trend(word, points, weighting), None
    except ModelUnderdetermined as e:
        return word, None, str(e)


@dataclass
class TrendFitReport:
    """Words the fitter could not model."""
    fitted: int = 0
    underdetermined: Dict[str, str] = field(default_factory=dict)  # word -> reason

    def to_dict(self) -> Dict:
        return {
            "fitted": self.fitted,
            "underdetermined": sorted(self.underdetermined),
        }


class TrendFitter:
    """
    Fits one trend line per word.

    Words are independent, so with workers > 1 the per-word fits are spread
    across processes and the results concatenated.
    """

    def __init__(self, weighting: str = "none", workers: int = 1):
        """
        Args:
            weighting: "none" (unweighted OLS) or "count" (weight years by n)
            workers: Number of processes used for fitting
        """
        self.weighting = weighting
        self.workers = workers
        self.last_report = TrendFitReport()

    @staticmethod
    def series_by_word(rows: Iterable[WordYearStat]) -> Dict[str, List[YearPoint]]:
        """Collect each word's (year, average_rating, n) points."""
        series: Dict[str, List[YearPoint]] = defaultdict(list)
        for row in rows:
            series[row.word].append((row.year, row.average_rating, row.n))
        return dict(series)

    def fit(self, rows: Iterable[WordYearStat]) -> Tuple[TrendFit, ...]:
        """
        Fit every word in rows.

        Args:
            rows: WordYearStats (typically the yearly aggregator's output)

        Returns:
            TrendFits sorted by word; underdetermined words are skipped
            and listed in last_report
        """
        series = self.series_by_word(rows)
        jobs = [(word, points, self.weighting) for word, points in sorted(series.items())]

        if self.workers > 1 and len(jobs) > 1:
            chunksize = max(1, len(jobs) // (self.workers * 4))
            with ProcessPoolExecutor(max_workers=self.workers) as executor:
                results = list(executor.map(_fit_series, jobs, chunksize=chunksize))
        else:
            results = [_fit_series(job) for job in jobs]

        report = TrendFitReport()
        fits = []
        for word, fit, error in results:
            if fit is None:
                report.underdetermined[word] = error
                logger.warning(error)
            else:
                fits.append(fit)
        report.fitted = len(fits)

        fits.sort(key=lambda f: f.word)
        self.last_report = report
        logger.info(
            f"Fitted {report.fitted} trends ({len(report.underdetermined)} words underdetermined, "
            f"weighting={self.weighting})"
        )
        return tuple(fits)
