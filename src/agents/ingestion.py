"""
Ingestion Agent.

Loads review tables matched by a filename pattern, concatenates them,
drops duplicate rows and converts the remainder into ReviewRecords.
"""

import glob
import logging
import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import pandas as pd

from src.errors import MalformedRecord
from src.models.review import (
    ReviewRecord,
    parse_rating,
    parse_recommendation,
    parse_text,
    parse_year,
)

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = [
    "product_id",
    "product_name",
    "brand_name",
    "submission_time",
    "rating",
    "is_recommended",
    "review_title",
    "review_text",
]


@dataclass
class IngestionReport:
    """Counts describing one ingestion run."""
    files_read: List[str] = field(default_factory=list)
    rows_read: int = 0
    duplicates_dropped: int = 0
    records: int = 0
    missing_year: int = 0
    invalid_rating: int = 0

    @property
    def malformed_records(self) -> int:
        return self.missing_year + self.invalid_rating

    def to_dict(self) -> Dict:
        return {
            "files_read": list(self.files_read),
            "rows_read": self.rows_read,
            "duplicates_dropped": self.duplicates_dropped,
            "records": self.records,
            "missing_year": self.missing_year,
            "invalid_rating": self.invalid_rating,
        }


class ReviewIngestionAgent:
    """
    Reads review CSV exports into ReviewRecords.

    Malformed rows are not dropped: a row without a derivable year keeps
    year=None and a row with an unusable rating keeps rating=None, so both
    still contribute to count-only aggregates.
    """

    def __init__(self, rating_min: float = 1.0, rating_max: float = 5.0):
        """
        Initialize ingestion agent.

        Args:
            rating_min: Lowest valid rating
            rating_max: Highest valid rating
        """
        self.rating_min = rating_min
        self.rating_max = rating_max

    def load_directory(
        self,
        data_dir: str,
        pattern: str = "reviews_*.csv"
    ) -> Tuple[List[ReviewRecord], IngestionReport]:
        """
        Load every file in data_dir matching pattern.

        Args:
            data_dir: Directory holding review exports
            pattern: Glob pattern for file names (e.g., "reviews_*.csv")

        Returns:
            (records, report)

        Raises:
            FileNotFoundError: If no file matches
        """
        paths = sorted(glob.glob(os.path.join(data_dir, pattern)))
        if not paths:
            raise FileNotFoundError(f"No files matching '{pattern}' in {data_dir}")
        return self.load_files(paths)

    def load_files(self, paths: List[str]) -> Tuple[List[ReviewRecord], IngestionReport]:
        """
        Load and concatenate the given files, in order.

        Raises:
            ValueError: If a file lacks a required column
        """
        frames = []
        for path in paths:
            frame = pd.read_csv(path, dtype={"product_id": str}, low_memory=False)
            missing = [c for c in REQUIRED_COLUMNS if c not in frame.columns]
            if missing:
                raise ValueError(f"{path} is missing required columns: {missing}")
            logger.debug(f"Read {len(frame)} rows from {path}")
            frames.append(frame)

        combined = pd.concat(frames, ignore_index=True)
        records, report = self.from_frame(combined)
        report.files_read = list(paths)

        logger.info(
            f"Ingested {report.records} records from {len(paths)} file(s) "
            f"({report.duplicates_dropped} duplicates dropped, "
            f"{report.malformed_records} malformed)"
        )
        return records, report

    def from_frame(self, frame: pd.DataFrame) -> Tuple[List[ReviewRecord], IngestionReport]:
        """
        Drop duplicate full rows and convert the rest to records.

        Every column takes part in duplicate detection, including ones
        the records do not carry.

        Args:
            frame: DataFrame with at least the required columns

        Returns:
            (records, report)
        """
        report = IngestionReport(rows_read=len(frame))
        deduped = frame.drop_duplicates(keep="first")
        report.duplicates_dropped = len(frame) - len(deduped)
        deduped = deduped[REQUIRED_COLUMNS]

        records = []
        for row in deduped.to_dict(orient="records"):
            records.append(self.to_record(row, report))
        report.records = len(records)

        if report.malformed_records:
            logger.warning(
                f"{report.malformed_records} malformed records kept with undefined fields "
                f"({report.missing_year} without year, {report.invalid_rating} without usable rating)"
            )
        return records, report

    def to_record(self, row: Dict, report: Optional[IngestionReport] = None) -> ReviewRecord:
        """Convert one raw row, recording malformed fields in report."""
        try:
            year = parse_year(row.get("submission_time"))
        except MalformedRecord as e:
            logger.debug(f"Product {row.get('product_id')}: {e}")
            year = None
            if report is not None:
                report.missing_year += 1

        try:
            rating = parse_rating(row.get("rating"), self.rating_min, self.rating_max)
        except MalformedRecord as e:
            logger.debug(f"Product {row.get('product_id')}: {e}")
            rating = None
            if report is not None:
                report.invalid_rating += 1

        return ReviewRecord(
            product_id=parse_text(row.get("product_id")),
            rating=rating,
            is_recommended=parse_recommendation(row.get("is_recommended")),
            year=year,
            review_title=parse_text(row.get("review_title")),
            review_text=parse_text(row.get("review_text")),
        )
