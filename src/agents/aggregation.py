"""
Global and Yearly Word Aggregators.

Group tokens by word (and by word and year), compute usage counts and
missing-aware rating/recommendation means, and apply frequency filters.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from src.models.token import Token
from src.models.word_stat import WordStat, WordYearStat

logger = logging.getLogger(__name__)


@dataclass
class RatingAccumulator:
    """
    Running sums for one group.
    Undefined ratings/recommendations are left out of both sum and count.
    """
    n: int = 0
    rating_sum: float = 0.0
    rating_count: int = 0
    recommendation_sum: int = 0
    recommendation_count: int = 0

    def add(self, token: Token) -> None:
        self.n += 1
        if token.rating is not None:
            self.rating_sum += token.rating
            self.rating_count += 1
        if token.is_recommended is not None:
            self.recommendation_sum += int(token.is_recommended)
            self.recommendation_count += 1

    @property
    def average_rating(self) -> Optional[float]:
        if self.rating_count == 0:
            return None
        return self.rating_sum / self.rating_count

    @property
    def average_recommendation(self) -> Optional[float]:
        if self.recommendation_count == 0:
            return None
        return self.recommendation_sum / self.recommendation_count


class GlobalWordAggregator:
    """
    Per-word statistics over the whole corpus.
    Keeps words used strictly more than min_global_count times.
    """

    def __init__(self, min_global_count: int = 150):
        self.min_global_count = min_global_count

    def group(self, tokens: Iterable[Token]) -> Dict[str, RatingAccumulator]:
        """Group tokens by word without filtering."""
        groups: Dict[str, RatingAccumulator] = defaultdict(RatingAccumulator)
        for token in tokens:
            groups[token.word].add(token)
        return dict(groups)

    def unfiltered(self, tokens: Iterable[Token]) -> Tuple[WordStat, ...]:
        """Every word's statistics, sorted by n descending then word."""
        return self._to_stats(self.group(tokens))

    def aggregate(self, tokens: Iterable[Token]) -> Tuple[WordStat, ...]:
        """
        Compute WordStats and apply the global frequency filter.

        Args:
            tokens: Token stream

        Returns:
            WordStats with n > min_global_count, sorted by n descending
        """
        groups = self.group(tokens)
        kept = {
            word: acc for word, acc in groups.items()
            if acc.n > self.min_global_count
        }
        stats = self._to_stats(kept)

        empty = sum(1 for s in stats if s.average_rating is None)
        if empty:
            logger.warning(f"{empty} words have no rated tokens; average_rating left undefined")

        logger.info(
            f"Global aggregation: {len(groups)} distinct words, "
            f"{len(stats)} with n > {self.min_global_count}"
        )
        return stats

    @staticmethod
    def _to_stats(groups: Dict[str, RatingAccumulator]) -> Tuple[WordStat, ...]:
        stats = [
            WordStat(
                word=word,
                n=acc.n,
                average_rating=acc.average_rating,
                average_recommendation=acc.average_recommendation,
            )
            for word, acc in groups.items()
        ]
        stats.sort(key=lambda s: (-s.n, s.word))
        return tuple(stats)


@dataclass
class YearlyAggregationReport:
    """What each yearly filter pass removed."""
    undated_tokens: int = 0
    pairs_total: int = 0
    pairs_below_year_count: int = 0
    words_below_years_present: List[str] = field(default_factory=list)
    words_kept: int = 0

    def to_dict(self) -> Dict:
        return {
            "undated_tokens": self.undated_tokens,
            "pairs_total": self.pairs_total,
            "pairs_below_year_count": self.pairs_below_year_count,
            "words_below_years_present": len(self.words_below_years_present),
            "words_kept": self.words_kept,
        }


class YearlyWordAggregator:
    """
    Per-(word, year) statistics with sustained-usage filtering.

    Two passes, in order:
    1. drop (word, year) pairs with n <= min_year_count
    2. drop words left with fewer than min_years_present distinct years
    """

    def __init__(self, min_year_count: int = 10, min_years_present: int = 8):
        self.min_year_count = min_year_count
        self.min_years_present = min_years_present
        self.last_report = YearlyAggregationReport()

    def group(
        self,
        tokens: Iterable[Token],
        report: Optional[YearlyAggregationReport] = None
    ) -> Dict[Tuple[str, int], RatingAccumulator]:
        """Group dated tokens by (word, year); undated tokens are counted and skipped."""
        groups: Dict[Tuple[str, int], RatingAccumulator] = defaultdict(RatingAccumulator)
        for token in tokens:
            if token.year is None:
                if report is not None:
                    report.undated_tokens += 1
                continue
            groups[(token.word, token.year)].add(token)
        return dict(groups)

    def filter_by_year_count(self, rows: Iterable[WordYearStat]) -> List[WordYearStat]:
        """Pass 1: keep pairs with n > min_year_count."""
        return [row for row in rows if row.n > self.min_year_count]

    def filter_by_years_present(self, rows: List[WordYearStat]) -> List[WordYearStat]:
        """Pass 2: keep words with >= min_years_present distinct years in rows."""
        years_by_word: Dict[str, set] = defaultdict(set)
        for row in rows:
            years_by_word[row.word].add(row.year)
        return [
            row for row in rows
            if len(years_by_word[row.word]) >= self.min_years_present
        ]

    def aggregate(self, tokens: Iterable[Token]) -> Tuple[WordYearStat, ...]:
        """
        Compute WordYearStats and apply both filters.

        Args:
            tokens: Token stream

        Returns:
            Surviving rows sorted by word then year
        """
        report = YearlyAggregationReport()
        groups = self.group(tokens, report)
        rows = [
            WordYearStat(
                word=word,
                year=year,
                n=acc.n,
                average_rating=acc.average_rating,
                average_recommendation=acc.average_recommendation,
            )
            for (word, year), acc in groups.items()
        ]
        report.pairs_total = len(rows)

        frequent = self.filter_by_year_count(rows)
        report.pairs_below_year_count = len(rows) - len(frequent)

        sustained = self.filter_by_years_present(frequent)
        kept_words = {row.word for row in sustained}
        report.words_below_years_present = sorted(
            {row.word for row in frequent} - kept_words
        )
        report.words_kept = len(kept_words)

        sustained.sort(key=lambda r: (r.word, r.year))
        self.last_report = report

        if report.undated_tokens:
            logger.warning(f"Skipped {report.undated_tokens} tokens without a year")
        logger.info(
            f"Yearly aggregation: {report.pairs_total} (word, year) pairs, "
            f"{report.pairs_below_year_count} with n <= {self.min_year_count}, "
            f"{len(report.words_below_years_present)} words in < {self.min_years_present} years; "
            f"{report.words_kept} words kept"
        )
        return tuple(sustained)
