"""
Tokenization Agent.

Splits each review's title and body into lowercase word tokens
tagged with the review's rating, recommendation flag and year.
"""

import logging
import re
from typing import Iterator, List, Sequence

from src.models.review import ReviewRecord
from src.models.token import Token

logger = logging.getLogger(__name__)

# Letter/digit runs; an apostrophe between two runs stays inside the word
_WORD_RE = re.compile(r"[^\W_]+(?:'[^\W_]+)*")


def tokenize_text(text: str) -> List[str]:
    """Lowercase text and return its words in order."""
    if not text:
        return []
    return _WORD_RE.findall(text.lower().replace("’", "'"))


class ReviewTokenizer:
    """
    Lazy, restartable token stream over a sequence of reviews.

    Each iteration walks the records again, so the same tokenizer can feed
    several aggregators. No filtering happens here.
    """

    def __init__(self, records: Sequence[ReviewRecord]):
        """
        Args:
            records: Deduplicated review records (must be re-iterable)
        """
        self.records = records

    def __iter__(self) -> Iterator[Token]:
        for record in self.records:
            yield from self.tokenize_record(record)

    @staticmethod
    def tokenize_record(record: ReviewRecord) -> Iterator[Token]:
        """Yield one Token per word of the record's title and body."""
        for word in tokenize_text(record.text):
            yield Token(
                word=word,
                rating=record.rating,
                is_recommended=record.is_recommended,
                year=record.year,
            )

    def count(self) -> int:
        """Total number of tokens (consumes one pass)."""
        return sum(1 for _ in self)
