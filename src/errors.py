"""
WordTrend error types.

Only ConfigurationError is fatal to a run. The other conditions are raised
by per-item helpers and caught by the batch stages, which skip and report.
"""


class WordTrendError(Exception):
    """Base error for all WordTrend failures."""


class ConfigurationError(WordTrendError):
    """Thresholds are invalid or would make every filter vacuous."""


class MalformedRecord(WordTrendError):
    """A review row lacks a derivable year or has an unusable rating."""

    def __init__(self, message: str, field: str):
        super().__init__(message)
        self.field = field


class ModelUnderdetermined(WordTrendError):
    """Fewer than two distinct year points are available for a word."""

    def __init__(self, word: str, n_points: int):
        super().__init__(
            f"Cannot fit trend for '{word}': {n_points} distinct year point(s), need at least 2"
        )
        self.word = word
        self.n_points = n_points
