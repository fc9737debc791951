"""
Stop-word service.

Membership test for common words. Used only when building presentation
tables; raw statistics are never filtered by it.
"""

import logging
from typing import FrozenSet, Iterable, Optional

import nltk
import pandas as pd
from nltk.corpus import stopwords

logger = logging.getLogger(__name__)


class StopWordService:
    """
    Wraps a set of stop words behind `word in service`.
    """

    def __init__(self, words: Iterable[str] = ()):
        self._words: FrozenSet[str] = frozenset(w.strip().lower() for w in words if w.strip())

    def __contains__(self, word: object) -> bool:
        return isinstance(word, str) and word.lower() in self._words

    def __len__(self) -> int:
        return len(self._words)

    @classmethod
    def from_file(cls, path: str) -> "StopWordService":
        """Load one word per line; blank lines and '#' comments are ignored."""
        with open(path, "r", encoding="utf-8") as f:
            words = [line for line in f if not line.lstrip().startswith("#")]
        service = cls(words)
        logger.info(f"Loaded {len(service)} stop words from {path}")
        return service

    @classmethod
    def from_nltk(cls, language: str = "english") -> "StopWordService":
        """
        Load NLTK's stop-word corpus, downloading it on first use.

        Returns an empty service when the corpus cannot be found or
        downloaded; presentation tables then keep every word.
        """
        try:
            nltk.data.find("corpora/stopwords")
        except LookupError:
            if not nltk.download("stopwords", quiet=True):
                logger.warning("Could not download the NLTK stop-word corpus")

        try:
            words = stopwords.words(language)
        except LookupError as e:
            logger.warning(f"NLTK '{language}' stop words unavailable, keeping all words: {e}")
            return cls()

        service = cls(words)
        logger.info(f"Loaded {len(service)} NLTK '{language}' stop words")
        return service

    def exclude(self, frame: pd.DataFrame, column: str = "word") -> pd.DataFrame:
        """Anti-join: drop rows whose `column` is a stop word."""
        if frame.empty or not self._words:
            return frame
        mask = frame[column].map(lambda w: w in self)
        return frame.loc[~mask].reset_index(drop=True)


def load_stop_words(path: Optional[str] = None) -> StopWordService:
    """Stop words from path when given, otherwise from NLTK."""
    if path:
        return StopWordService.from_file(path)
    return StopWordService.from_nltk()
