"""
Token data model.

One normalized word from a review, tagged with its record's metadata.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Token:
    word: str
    rating: Optional[float]
    is_recommended: Optional[bool]
    year: Optional[int]
