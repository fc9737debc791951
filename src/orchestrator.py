"""
Pipeline Orchestrator.

Coordinates the stages in order:
Ingestion -> Tokenization -> {Global, Yearly} Aggregation -> Trend Fitting -> Selection
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional, Tuple

import pandas as pd

from src.agents.aggregation import GlobalWordAggregator, YearlyWordAggregator
from src.agents.ingestion import IngestionReport, ReviewIngestionAgent
from src.agents.tokenization import ReviewTokenizer
from src.agents.trend_fitting import TrendFitter
from src.agents.trend_selection import TrendSelector
from src.models.pipeline_config import PipelineConfig
from src.models.token import Token
from src.models.trend import TrendFit
from src.models.word_stat import WordStat, WordYearStat
from src.utils.stop_words import StopWordService
from src.utils.storage import TREND_FIT_COLUMNS, StorageManager, to_frame

logger = logging.getLogger(__name__)

RESUME_STAGES = ("tokens", "yearly", "trends")


@dataclass
class PipelineResult:
    """Every stage snapshot from one run, plus what was skipped."""
    word_stats: Tuple[WordStat, ...] = ()
    word_year_stats: Tuple[WordYearStat, ...] = ()
    trend_fits: Tuple[TrendFit, ...] = ()
    selections: Dict[str, Tuple[TrendFit, ...]] = field(default_factory=dict)
    presentation_paths: Dict[str, str] = field(default_factory=dict)
    min_years_present: Optional[int] = None
    metadata: Dict = field(default_factory=dict)


class PipelineOrchestrator:
    """
    Runs the word-trend pipeline and persists each stage.

    A run can resume from a persisted stage: "tokens" skips ingestion and
    tokenization, "yearly" reloads the aggregates and refits, "trends"
    reloads the fits and only reselects.
    """

    def __init__(
        self,
        config: PipelineConfig,
        output_root: str,
        data_root: Optional[str] = None,
        input_pattern: str = "reviews_*.csv",
        stop_words: Optional[StopWordService] = None,
        top_n: Optional[int] = None,
        write_token_dump: bool = True
    ):
        """
        Initialize pipeline orchestrator.

        Args:
            config: Thresholds and policies
            output_root: Directory for persisted tables
            data_root: Directory holding review exports (not needed when resuming)
            input_pattern: Glob pattern for review exports
            stop_words: Words excluded from presentation tables
            top_n: Rows kept per presentation table (None = all)
            write_token_dump: Persist the full token stream
        """
        config.validate()
        self.config = config
        self.data_root = data_root
        self.input_pattern = input_pattern
        self.stop_words = stop_words or StopWordService()
        self.top_n = top_n
        self.write_token_dump = write_token_dump

        self.storage = StorageManager(output_root)
        self.ingestion_agent = ReviewIngestionAgent(
            rating_min=config.rating_min,
            rating_max=config.rating_max
        )
        self.global_aggregator = GlobalWordAggregator(
            min_global_count=config.min_global_count
        )
        self.trend_fitter = TrendFitter(
            weighting=config.weighting,
            workers=config.fit_workers
        )
        self.selectors = {
            profile.name: TrendSelector(profile) for profile in config.profiles
        }

        logger.info("Pipeline initialized successfully")

    def run(self, resume_from: Optional[str] = None) -> PipelineResult:
        """
        Run the pipeline from ingestion or from a persisted stage.

        Args:
            resume_from: None, "tokens", "yearly" or "trends"

        Returns:
            PipelineResult with every stage snapshot

        Raises:
            ConfigurationError: If thresholds cannot produce output
            FileNotFoundError: If inputs or the resumed stage are missing
        """
        if resume_from is not None and resume_from not in RESUME_STAGES:
            raise ValueError(f"Invalid resume stage: {resume_from}. Must be one of {RESUME_STAGES}")

        start_time = datetime.now()
        result = PipelineResult()
        metadata: Dict = {
            "config": self.config.to_dict(),
            "resumed_from": resume_from,
        }

        if resume_from in ("yearly", "trends"):
            result.word_stats = tuple(self._require("word_stats", self.storage.load_word_stats))
            result.word_year_stats = tuple(
                self._require("word_year_stats", self.storage.load_word_year_stats)
            )
            logger.info(
                f"Resumed {len(result.word_stats)} word stats and "
                f"{len(result.word_year_stats)} word-year stats"
            )
        else:
            tokens, years, ingestion = self._token_source(resume_from)
            if ingestion is not None:
                metadata["ingestion"] = ingestion.to_dict()

            # Fail on vacuous thresholds before any aggregation work
            result.min_years_present = self.config.resolve_min_years_present(years)
            if ingestion is not None and self.write_token_dump:
                self.storage.save_tokens(tokens)
            self._aggregate(tokens, result, metadata)

        if resume_from == "trends":
            result.trend_fits = tuple(self._require("trend_fits", self.storage.load_trend_fits))
            logger.info(f"Resumed {len(result.trend_fits)} trend fits")
        else:
            result.trend_fits = self.trend_fitter.fit(result.word_year_stats)
            self.storage.save_trend_fits(result.trend_fits)
            metadata["trend_fitting"] = self.trend_fitter.last_report.to_dict()

        for name, selector in self.selectors.items():
            selected = selector.select(result.trend_fits)
            result.selections[name] = selected
            frame = self.build_presentation(selected, result.word_stats)
            result.presentation_paths[name] = self.storage.save_presentation(frame, name)

        metadata["selections"] = {name: len(rows) for name, rows in result.selections.items()}
        metadata["word_stats"] = len(result.word_stats)
        metadata["word_year_stats"] = len(result.word_year_stats)
        metadata["trend_fits"] = len(result.trend_fits)
        metadata["min_years_present"] = result.min_years_present
        metadata["processing_time_seconds"] = (datetime.now() - start_time).total_seconds()
        metadata["generated_at"] = datetime.now(timezone.utc).isoformat()
        self.storage.save_metadata(metadata)
        result.metadata = metadata

        logger.info(
            f"Pipeline complete: {len(result.trend_fits)} trends fitted, "
            + ", ".join(f"{n} '{p}'" for p, n in metadata["selections"].items())
        )
        return result

    def _token_source(
        self,
        resume_from: Optional[str]
    ) -> Tuple[Iterable[Token], List[int], Optional[IngestionReport]]:
        """
        Fresh tokens from the review files, or the persisted token dump.

        Returns:
            (tokens, observed years, ingestion report or None when resumed)
        """
        if resume_from == "tokens":
            tokens = self._require("tokens", self.storage.load_tokens)
            logger.info(f"Resumed {len(tokens)} tokens")
            years = [token.year for token in tokens if token.year is not None]
            return tokens, years, None

        if not self.data_root:
            raise FileNotFoundError("data_root is required unless resuming from a persisted stage")

        records, report = self.ingestion_agent.load_directory(self.data_root, self.input_pattern)
        years = [record.year for record in records if record.year is not None]
        return ReviewTokenizer(records), years, report

    def _aggregate(self, tokens: Iterable[Token], result: PipelineResult, metadata: Dict) -> None:
        result.word_stats = self.global_aggregator.aggregate(tokens)
        self.storage.save_word_stats(result.word_stats)

        yearly_aggregator = YearlyWordAggregator(
            min_year_count=self.config.min_year_count,
            min_years_present=result.min_years_present
        )
        result.word_year_stats = yearly_aggregator.aggregate(tokens)
        self.storage.save_word_year_stats(result.word_year_stats)
        metadata["yearly_aggregation"] = yearly_aggregator.last_report.to_dict()

    def build_presentation(
        self,
        selected: Iterable[TrendFit],
        word_stats: Iterable[WordStat]
    ) -> pd.DataFrame:
        """
        Ranked trend table for display: corpus-wide usage joined in,
        stop words removed, truncated to top_n.
        """
        frame = to_frame(selected, TREND_FIT_COLUMNS)
        usage = to_frame(word_stats, ["word", "n", "average_rating"])
        frame = frame.merge(usage, on="word", how="left")
        frame = self.stop_words.exclude(frame)
        if self.top_n is not None:
            frame = frame.head(self.top_n)
        return frame

    def _require(self, table: str, loader: Callable[[], List]) -> List:
        if not self.storage.has_table(table):
            raise FileNotFoundError(
                f"Cannot resume: no persisted {table} table at {self.storage.table_path(table)}"
            )
        return loader()
