"""
Trend Selector.

Keeps fitted trends that pass a profile's significance and effect-size
cutoffs, ranked by how much the rating moved per year.
"""

import logging
from typing import Iterable, Optional, Tuple

from src.models.trend import TrendFit, TrendProfile

logger = logging.getLogger(__name__)


class TrendSelector:
    """
    Applies a TrendProfile to TrendFits.
    """

    def __init__(self, profile: TrendProfile):
        self.profile = profile

    def select(
        self,
        fits: Iterable[TrendFit],
        top_n: Optional[int] = None
    ) -> Tuple[TrendFit, ...]:
        """
        Filter and rank trends.

        Args:
            fits: TrendFit collection
            top_n: Keep only the first top_n after ranking (None = all)

        Returns:
            Passing trends ordered by |slope| descending, ties by word
        """
        fits = list(fits)
        selected = [fit for fit in fits if self.profile.accepts(fit)]
        selected.sort(key=lambda f: (-f.abs_slope, f.word))
        if top_n is not None:
            selected = selected[:top_n]

        logger.info(
            f"Profile '{self.profile.name}' (alpha={self.profile.alpha}, "
            f"min |slope|={self.profile.min_slope_abs}): "
            f"{len(selected)} of {len(fits)} trends selected"
        )
        return tuple(selected)
