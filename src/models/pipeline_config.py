"""
Pipeline configuration model.

Carries the effective thresholds from config.settings (or CLI overrides)
into the pipeline and rejects combinations that cannot produce output.
"""

import math
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, Optional, Tuple

import config.settings as settings
from src.errors import ConfigurationError
from src.models.trend import TrendProfile

WEIGHTING_MODES = ("none", "count")


@dataclass(frozen=True)
class PipelineConfig:
    """
    Thresholds and policies for one pipeline run.
    min_years_present=None derives the value from the observed year span.
    """
    min_global_count: int = 150
    min_year_count: int = 10
    min_years_present: Optional[int] = None
    profiles: Tuple[TrendProfile, ...] = field(default_factory=lambda: (
        TrendProfile("broad", alpha=0.05, min_slope_abs=0.0),
        TrendProfile("strict", alpha=0.01, min_slope_abs=0.1),
    ))
    rating_min: float = 1.0
    rating_max: float = 5.0
    weighting: str = "none"
    fit_workers: int = 1

    @classmethod
    def from_settings(cls, **overrides) -> "PipelineConfig":
        """Build a config from config.settings, applying non-None overrides."""
        profiles = tuple(
            TrendProfile(name, alpha=alpha, min_slope_abs=min_slope)
            for name, (alpha, min_slope) in settings.TREND_PROFILES.items()
        )
        config = cls(
            min_global_count=settings.MIN_GLOBAL_COUNT,
            min_year_count=settings.MIN_YEAR_COUNT,
            min_years_present=settings.MIN_YEARS_PRESENT,
            profiles=profiles,
            rating_min=settings.RATING_MIN,
            rating_max=settings.RATING_MAX,
            weighting=settings.REGRESSION_WEIGHTING,
            fit_workers=settings.FIT_WORKERS,
        )
        overrides = {k: v for k, v in overrides.items() if v is not None}
        return replace(config, **overrides) if overrides else config

    def profile(self, name: str) -> TrendProfile:
        for profile in self.profiles:
            if profile.name == name:
                return profile
        raise KeyError(f"Unknown trend profile: {name}")

    def with_profile(self, name: str, alpha: Optional[float] = None,
                     min_slope_abs: Optional[float] = None) -> "PipelineConfig":
        """Return a copy with one profile's thresholds replaced."""
        current = self.profile(name)
        updated = TrendProfile(
            name,
            alpha=current.alpha if alpha is None else alpha,
            min_slope_abs=current.min_slope_abs if min_slope_abs is None else min_slope_abs,
        )
        profiles = tuple(updated if p.name == name else p for p in self.profiles)
        return replace(self, profiles=profiles)

    def validate(self) -> None:
        """
        Check thresholds that are wrong regardless of the data.

        Raises:
            ConfigurationError: On the first invalid value
        """
        if self.min_global_count < 0:
            raise ConfigurationError(f"min_global_count must be >= 0, got {self.min_global_count}")
        if self.min_year_count < 0:
            raise ConfigurationError(f"min_year_count must be >= 0, got {self.min_year_count}")
        if self.min_years_present is not None and self.min_years_present < 1:
            raise ConfigurationError(
                f"min_years_present must be >= 1, got {self.min_years_present}"
            )
        if self.rating_min >= self.rating_max:
            raise ConfigurationError(
                f"rating_min ({self.rating_min}) must be below rating_max ({self.rating_max})"
            )
        if self.weighting not in WEIGHTING_MODES:
            raise ConfigurationError(
                f"weighting must be one of {WEIGHTING_MODES}, got '{self.weighting}'"
            )
        if self.fit_workers < 1:
            raise ConfigurationError(f"fit_workers must be >= 1, got {self.fit_workers}")
        if not self.profiles:
            raise ConfigurationError("At least one trend profile is required")

        seen = set()
        for profile in self.profiles:
            if profile.name in seen:
                raise ConfigurationError(f"Duplicate trend profile: {profile.name}")
            seen.add(profile.name)
            if not (0.0 < profile.alpha <= 1.0):
                raise ConfigurationError(
                    f"Profile '{profile.name}': alpha must be in (0, 1], got {profile.alpha}"
                )
            if profile.min_slope_abs < 0:
                raise ConfigurationError(
                    f"Profile '{profile.name}': min_slope_abs must be >= 0, "
                    f"got {profile.min_slope_abs}"
                )

    def resolve_min_years_present(self, years: Iterable[int]) -> int:
        """
        Return min_years_present, deriving it from the observed years when unset.

        Raises:
            ConfigurationError: If no years were observed, or the threshold
                exceeds the number of distinct observed years
        """
        distinct_years = sorted(set(years))
        if not distinct_years:
            raise ConfigurationError("No dated records observed; yearly filters would be vacuous")

        if self.min_years_present is None:
            span = distinct_years[-1] - distinct_years[0] + 1
            resolved = max(1, math.ceil(span / 2))
        else:
            resolved = self.min_years_present

        if resolved > len(distinct_years):
            raise ConfigurationError(
                f"min_years_present={resolved} exceeds the {len(distinct_years)} distinct "
                f"years observed ({distinct_years[0]}-{distinct_years[-1]}); "
                f"every word would be filtered out"
            )
        return resolved

    def to_dict(self) -> Dict:
        return {
            "min_global_count": self.min_global_count,
            "min_year_count": self.min_year_count,
            "min_years_present": self.min_years_present,
            "profiles": {
                p.name: {"alpha": p.alpha, "min_slope_abs": p.min_slope_abs}
                for p in self.profiles
            },
            "rating_bounds": [self.rating_min, self.rating_max],
            "weighting": self.weighting,
            "fit_workers": self.fit_workers,
        }
