"""
Storage utility.

CSV dump/reload for every pipeline stage, plus presentation tables and
run metadata.
"""

import json
import logging
import math
import os
from dataclasses import asdict
from typing import Dict, Iterable, List, Optional

import pandas as pd

from src.models.review import parse_recommendation
from src.models.token import Token
from src.models.trend import TrendFit
from src.models.word_stat import WordStat, WordYearStat

logger = logging.getLogger(__name__)

TOKEN_COLUMNS = ["word", "rating", "is_recommended", "year"]
WORD_STAT_COLUMNS = ["word", "n", "average_rating", "average_recommendation"]
WORD_YEAR_STAT_COLUMNS = ["word", "year", "n", "average_rating", "average_recommendation"]
TREND_FIT_COLUMNS = ["word", "slope", "intercept", "p_value"]

TABLE_FILES = {
    "tokens": "tokens.csv",
    "word_stats": "word_stats.csv",
    "word_year_stats": "word_year_stats.csv",
    "trend_fits": "trend_fits.csv",
}


def _optional_float(value) -> Optional[float]:
    if value is None:
        return None
    value = float(value)
    return None if math.isnan(value) else value


def _optional_int(value) -> Optional[int]:
    if value is None or pd.isna(value):
        return None
    return int(value)


def to_frame(rows: Iterable, columns: List[str]) -> pd.DataFrame:
    """Convert dataclass rows into a DataFrame with a fixed column order."""
    records = [asdict(row) for row in rows]
    frame = pd.DataFrame.from_records(records, columns=columns)
    for column in ("average_rating", "average_recommendation", "rating"):
        if column in frame.columns:
            frame[column] = pd.to_numeric(frame[column], errors="coerce").astype("float64")
    return frame


def tokens_to_frame(tokens: Iterable[Token]) -> pd.DataFrame:
    columns: Dict[str, list] = {name: [] for name in TOKEN_COLUMNS}
    for token in tokens:
        columns["word"].append(token.word)
        columns["rating"].append(token.rating)
        columns["is_recommended"].append(token.is_recommended)
        columns["year"].append(token.year)
    return pd.DataFrame({
        "word": pd.Series(columns["word"], dtype="object"),
        "rating": pd.Series(columns["rating"], dtype="float64"),
        "is_recommended": pd.Series(columns["is_recommended"], dtype="boolean"),
        "year": pd.Series(columns["year"], dtype="Int64"),
    })


class StorageManager:
    """
    Manages file I/O for all pipeline tables.

    Handles:
    - Stage tables (output/tokens.csv, word_stats.csv, word_year_stats.csv, trend_fits.csv)
    - Presentation tables (output/trends_<profile>.csv)
    - Run metadata (output/run_metadata.json)
    """

    def __init__(self, output_root: str):
        """
        Initialize storage manager.

        Args:
            output_root: Directory for all tables (created if missing)
        """
        self.output_root = output_root
        os.makedirs(output_root, exist_ok=True)
        logger.info(f"Initialized StorageManager with output_root={output_root}")

    def table_path(self, table: str) -> str:
        return os.path.join(self.output_root, TABLE_FILES[table])

    def has_table(self, table: str) -> bool:
        return os.path.exists(self.table_path(table))

    def _write(self, frame: pd.DataFrame, path: str) -> str:
        try:
            frame.to_csv(path, index=False)
        except OSError as e:
            logger.error(f"Failed to write {path}: {e}")
            raise
        logger.info(f"Saved {len(frame)} rows to {path}")
        return path

    def _read(self, table: str, dtypes: Dict) -> Optional[pd.DataFrame]:
        path = self.table_path(table)
        if not os.path.exists(path):
            logger.warning(f"No {table} table found at {path}")
            return None
        # keep_default_na=False so words like "nan" or "null" stay words
        frame = pd.read_csv(path, dtype=dtypes, keep_default_na=False, na_values=[""],
                            float_precision="round_trip")
        logger.debug(f"Loaded {len(frame)} rows from {path}")
        return frame

    # Tokens

    def save_tokens(self, tokens: Iterable[Token]) -> str:
        return self._write(tokens_to_frame(tokens), self.table_path("tokens"))

    def load_tokens(self) -> Optional[List[Token]]:
        frame = self._read("tokens", {"word": str, "rating": "float64",
                                      "is_recommended": str, "year": "Int64"})
        if frame is None:
            return None
        return [
            Token(
                word=row["word"],
                rating=_optional_float(row["rating"]),
                is_recommended=parse_recommendation(row["is_recommended"]),
                year=_optional_int(row["year"]),
            )
            for row in frame.to_dict(orient="records")
        ]

    # Global statistics

    def save_word_stats(self, stats: Iterable[WordStat]) -> str:
        return self._write(to_frame(stats, WORD_STAT_COLUMNS), self.table_path("word_stats"))

    def load_word_stats(self) -> Optional[List[WordStat]]:
        frame = self._read("word_stats", {"word": str, "n": "int64",
                                          "average_rating": "float64",
                                          "average_recommendation": "float64"})
        if frame is None:
            return None
        return [
            WordStat(
                word=row["word"],
                n=int(row["n"]),
                average_rating=_optional_float(row["average_rating"]),
                average_recommendation=_optional_float(row["average_recommendation"]),
            )
            for row in frame.to_dict(orient="records")
        ]

    # Yearly statistics

    def save_word_year_stats(self, stats: Iterable[WordYearStat]) -> str:
        return self._write(
            to_frame(stats, WORD_YEAR_STAT_COLUMNS), self.table_path("word_year_stats")
        )

    def load_word_year_stats(self) -> Optional[List[WordYearStat]]:
        frame = self._read("word_year_stats", {"word": str, "year": "int64", "n": "int64",
                                               "average_rating": "float64",
                                               "average_recommendation": "float64"})
        if frame is None:
            return None
        return [
            WordYearStat(
                word=row["word"],
                year=int(row["year"]),
                n=int(row["n"]),
                average_rating=_optional_float(row["average_rating"]),
                average_recommendation=_optional_float(row["average_recommendation"]),
            )
            for row in frame.to_dict(orient="records")
        ]

    # Trend fits

    def save_trend_fits(self, fits: Iterable[TrendFit]) -> str:
        return self._write(to_frame(fits, TREND_FIT_COLUMNS), self.table_path("trend_fits"))

    def load_trend_fits(self) -> Optional[List[TrendFit]]:
        frame = self._read("trend_fits", {"word": str, "slope": "float64",
                                          "intercept": "float64", "p_value": "float64"})
        if frame is None:
            return None
        return [
            TrendFit(
                word=row["word"],
                slope=float(row["slope"]),
                intercept=float(row["intercept"]),
                p_value=float(row["p_value"]),
            )
            for row in frame.to_dict(orient="records")
        ]

    # Presentation and metadata

    def save_presentation(self, frame: pd.DataFrame, profile_name: str) -> str:
        """Save a ranked trend table for one selection profile."""
        path = os.path.join(self.output_root, f"trends_{profile_name}.csv")
        return self._write(frame, path)

    def save_metadata(self, metadata: Dict) -> str:
        path = os.path.join(self.output_root, "run_metadata.json")
        try:
            with open(path, "w") as f:
                json.dump(metadata, f, indent=2, sort_keys=True)
        except OSError as e:
            logger.error(f"Failed to save run metadata: {e}")
            raise
        logger.info(f"Metadata saved to {path}")
        return path
