"""
Word statistics data models.

WordStat covers the whole corpus; WordYearStat covers one calendar year.
Averages are None when the group held no defined values.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class WordStat:
    """Usage and rating statistics for one word across the corpus."""
    word: str
    n: int
    average_rating: Optional[float] = None
    average_recommendation: Optional[float] = None

    def __post_init__(self):
        if self.n < 1:
            raise ValueError(f"Invalid count for '{self.word}': {self.n}. Must be >= 1")


@dataclass(frozen=True)
class WordYearStat:
    """Usage and rating statistics for one word within one year."""
    word: str
    year: int
    n: int
    average_rating: Optional[float] = None
    average_recommendation: Optional[float] = None

    def __post_init__(self):
        if self.n < 1:
            raise ValueError(
                f"Invalid count for '{self.word}' in {self.year}: {self.n}. Must be >= 1"
            )
