"""
Review data model.

Represents one deduplicated product-review record entering the pipeline.
"""

import math
from dataclasses import dataclass
from typing import Any, Optional

from src.errors import MalformedRecord


@dataclass(frozen=True)
class ReviewRecord:
    """
    A single product review.
    Rating and year are None when the source row could not supply them.
    """
    product_id: str
    rating: Optional[float]  # bounded star rating, e.g. 1-5
    is_recommended: Optional[bool]
    year: Optional[int]  # first 4 characters of submission_time
    review_title: str = ""
    review_text: str = ""

    @property
    def text(self) -> str:
        """Title and body joined by a single space."""
        return f"{self.review_title or ''} {self.review_text or ''}"


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    # pandas.NA and NaT
    try:
        return bool(value != value)
    except TypeError:
        return True


def parse_year(submission_time: Any) -> int:
    """
    Derive the calendar year from a submission timestamp.

    Raises:
        MalformedRecord: If the first 4 characters are not a year
    """
    if _is_missing(submission_time):
        raise MalformedRecord("submission_time is missing", field="year")
    prefix = str(submission_time).strip()[:4]
    if len(prefix) != 4 or not prefix.isdigit():
        raise MalformedRecord(
            f"Cannot derive year from submission_time {submission_time!r}", field="year"
        )
    return int(prefix)


def parse_rating(value: Any, rating_min: float = 1.0, rating_max: float = 5.0) -> float:
    """
    Parse a numeric rating within [rating_min, rating_max].

    Raises:
        MalformedRecord: If the rating is missing, non-numeric or out of bounds
    """
    if _is_missing(value):
        raise MalformedRecord("rating is missing", field="rating")
    if isinstance(value, bool):
        raise MalformedRecord(f"Non-numeric rating: {value!r}", field="rating")
    try:
        rating = float(value)
    except (TypeError, ValueError):
        raise MalformedRecord(f"Non-numeric rating: {value!r}", field="rating")
    if math.isnan(rating) or not (rating_min <= rating <= rating_max):
        raise MalformedRecord(
            f"Rating {value!r} outside [{rating_min}, {rating_max}]", field="rating"
        )
    return rating


def parse_recommendation(value: Any) -> Optional[bool]:
    """Coerce 1/0, True/False and their string forms; anything else is None."""
    if _is_missing(value):
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        if value == 1:
            return True
        if value == 0:
            return False
        return None
    text = str(value).strip().lower()
    if text in ("1", "1.0", "true", "yes", "y"):
        return True
    if text in ("0", "0.0", "false", "no", "n"):
        return False
    return None


def parse_text(value: Any) -> str:
    if _is_missing(value):
        return ""
    return str(value)
