"""
Trend data models.

TrendFit is the regression of mean rating on year for one word.
TrendProfile names a pair of selection thresholds.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class TrendFit:
    """
    Linear fit of average rating against year for one word.
    slope is the change in average rating per year.
    """
    word: str
    slope: float
    intercept: float
    p_value: float  # two-sided, H0: slope == 0

    def __post_init__(self):
        if not (0.0 <= self.p_value <= 1.0):
            raise ValueError(f"Invalid p_value for '{self.word}': {self.p_value}. Must be in [0, 1]")

    @property
    def abs_slope(self) -> float:
        return abs(self.slope)


@dataclass(frozen=True)
class TrendProfile:
    """
    Significance and effect-size cutoffs for one presentation view.
    A trend passes when p_value < alpha and |slope| >= min_slope_abs.
    """
    name: str
    alpha: float
    min_slope_abs: float = 0.0

    def accepts(self, fit: TrendFit) -> bool:
        return fit.p_value < self.alpha and fit.abs_slope >= self.min_slope_abs
