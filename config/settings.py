"""
Configuration settings for WordTrend.

Centralized configuration for all pipeline stages.
Every value can be overridden with a WORDTREND_* environment variable.
"""

import os
from pathlib import Path


def _env_int(name: str, default):
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return int(value)


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return float(value)


# Project paths
PROJECT_ROOT = Path(__file__).parent.parent
DATA_ROOT = Path(os.getenv("WORDTREND_DATA_ROOT", PROJECT_ROOT / "data"))
OUTPUT_ROOT = Path(os.getenv("WORDTREND_OUTPUT_ROOT", PROJECT_ROOT / "output"))

# Ingestion
INPUT_PATTERN = os.getenv("WORDTREND_INPUT_PATTERN", "reviews_*.csv")
RATING_MIN = _env_float("WORDTREND_RATING_MIN", 1.0)
RATING_MAX = _env_float("WORDTREND_RATING_MAX", 5.0)

# Global Aggregator
# ~10 occurrences/year over a ~15-year corpus span
EXPECTED_YEAR_SPAN = 15
MIN_OCCURRENCES_PER_YEAR = 10
MIN_GLOBAL_COUNT = _env_int(
    "WORDTREND_MIN_GLOBAL_COUNT", MIN_OCCURRENCES_PER_YEAR * EXPECTED_YEAR_SPAN
)

# Yearly Aggregator
MIN_YEAR_COUNT = _env_int("WORDTREND_MIN_YEAR_COUNT", 10)
# None = half the observed year span, rounded up
MIN_YEARS_PRESENT = _env_int("WORDTREND_MIN_YEARS_PRESENT", None)

# Trend Fitter
REGRESSION_WEIGHTING = os.getenv("WORDTREND_REGRESSION_WEIGHTING", "none")  # "none" or "count"
FIT_WORKERS = _env_int("WORDTREND_FIT_WORKERS", 1)

# Trend Selector profiles: name -> (alpha, min_slope_abs)
BROAD_ALPHA = _env_float("WORDTREND_BROAD_ALPHA", 0.05)
STRICT_ALPHA = _env_float("WORDTREND_STRICT_ALPHA", 0.01)
STRICT_MIN_SLOPE_ABS = _env_float("WORDTREND_STRICT_MIN_SLOPE_ABS", 0.1)
TREND_PROFILES = {
    "broad": (BROAD_ALPHA, 0.0),
    "strict": (STRICT_ALPHA, STRICT_MIN_SLOPE_ABS),
}
DEFAULT_TOP_N = _env_int("WORDTREND_TOP_N", 25)

# Stop words (display-time only)
STOP_WORDS_FILE = os.getenv("WORDTREND_STOP_WORDS_FILE", "")

# Pipeline behaviour
WRITE_TOKEN_DUMP = os.getenv("WORDTREND_WRITE_TOKEN_DUMP", "1") not in ("0", "false", "False")

# Logging
LOG_LEVEL = os.getenv("WORDTREND_LOG_LEVEL", "INFO")  # DEBUG, INFO, WARNING, ERROR
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FILE = os.getenv("WORDTREND_LOG_FILE", "wordtrend.log")
