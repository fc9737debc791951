"""
WordTrend - Review Word Rating Trends

CLI entry point for running the pipeline.
"""

import argparse
import logging
import sys

from src.errors import ConfigurationError
from src.models.pipeline_config import PipelineConfig
from src.orchestrator import RESUME_STAGES, PipelineOrchestrator
from src.utils.stop_words import StopWordService, load_stop_words
import config.settings as settings


def setup_logging(log_level: str = "INFO", log_file: str = settings.LOG_FILE):
    """Configure logging for the entire application."""
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format=settings.LOG_FORMAT,
        handlers=handlers
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="WordTrend - find review words whose rating moved over time",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Analyse every reviews_*.csv export in data/
  python main.py --data-dir data

  # Stricter sustained-usage filter, weighted regression
  python main.py --data-dir data --min-years-present 10 --weighting count

  # Reselect with a different strict cutoff without refitting
  python main.py --resume-from trends --strict-alpha 0.001
        """
    )

    # Input / output
    parser.add_argument(
        "--data-dir",
        default=str(settings.DATA_ROOT),
        help=f"Directory with review exports (default: {settings.DATA_ROOT})"
    )
    parser.add_argument(
        "--pattern",
        default=settings.INPUT_PATTERN,
        help=f"File name pattern for review exports (default: {settings.INPUT_PATTERN})"
    )
    parser.add_argument(
        "--output-dir",
        default=str(settings.OUTPUT_ROOT),
        help=f"Directory for result tables (default: {settings.OUTPUT_ROOT})"
    )
    parser.add_argument(
        "--resume-from",
        choices=RESUME_STAGES,
        help="Reuse persisted tables from a previous run instead of re-tokenizing"
    )
    parser.add_argument(
        "--no-token-dump",
        action="store_true",
        help="Do not persist the full token stream"
    )

    # Thresholds
    parser.add_argument("--min-global-count", type=int,
                        help=f"Keep words used more than this (default: {settings.MIN_GLOBAL_COUNT})")
    parser.add_argument("--min-year-count", type=int,
                        help=f"Keep (word, year) pairs used more than this (default: {settings.MIN_YEAR_COUNT})")
    parser.add_argument("--min-years-present", type=int,
                        help="Distinct qualifying years a word needs (default: half the observed span)")
    parser.add_argument("--broad-alpha", type=float,
                        help=f"Significance cutoff for the broad view (default: {settings.BROAD_ALPHA})")
    parser.add_argument("--strict-alpha", type=float,
                        help=f"Significance cutoff for the strict view (default: {settings.STRICT_ALPHA})")
    parser.add_argument("--min-slope-abs", type=float,
                        help=f"Minimum |slope| for the strict view (default: {settings.STRICT_MIN_SLOPE_ABS})")
    parser.add_argument("--weighting", choices=["none", "count"],
                        help=f"Regression weighting (default: {settings.REGRESSION_WEIGHTING})")
    parser.add_argument("--workers", type=int,
                        help=f"Processes used for trend fitting (default: {settings.FIT_WORKERS})")

    # Presentation
    parser.add_argument(
        "--top-n",
        type=int,
        default=settings.DEFAULT_TOP_N,
        help=f"Rows per presentation table (default: {settings.DEFAULT_TOP_N})"
    )
    parser.add_argument(
        "--stop-words-file",
        default=settings.STOP_WORDS_FILE,
        help="One stop word per line (default: NLTK English list)"
    )
    parser.add_argument(
        "--keep-stop-words",
        action="store_true",
        help="Do not remove stop words from presentation tables"
    )

    parser.add_argument(
        "--log-level",
        default=settings.LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help=f"Logging level (default: {settings.LOG_LEVEL})"
    )
    return parser


def build_config(args: argparse.Namespace) -> PipelineConfig:
    config = PipelineConfig.from_settings(
        min_global_count=args.min_global_count,
        min_year_count=args.min_year_count,
        min_years_present=args.min_years_present,
        weighting=args.weighting,
        fit_workers=args.workers,
    )
    config = config.with_profile("broad", alpha=args.broad_alpha)
    config = config.with_profile("strict", alpha=args.strict_alpha, min_slope_abs=args.min_slope_abs)
    return config


def main(argv=None):
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    setup_logging(args.log_level)
    logger = logging.getLogger(__name__)

    print("=" * 60)
    print("WordTrend - Review Word Rating Trends")
    print("=" * 60)
    if args.resume_from:
        print(f"Resuming from: {args.resume_from} ({args.output_dir})")
    else:
        print(f"Input: {args.data_dir}/{args.pattern}")
    print(f"Output: {args.output_dir}")
    print("=" * 60)
    print()

    try:
        config = build_config(args)
        if args.keep_stop_words:
            stop_words = StopWordService()
        else:
            stop_words = load_stop_words(args.stop_words_file or None)

        orchestrator = PipelineOrchestrator(
            config=config,
            output_root=args.output_dir,
            data_root=args.data_dir,
            input_pattern=args.pattern,
            stop_words=stop_words,
            top_n=args.top_n,
            write_token_dump=settings.WRITE_TOKEN_DUMP and not args.no_token_dump
        )
        result = orchestrator.run(resume_from=args.resume_from)

        print()
        print("=" * 60)
        print("Pipeline completed successfully!")
        print("=" * 60)
        print(f"Words kept globally: {len(result.word_stats)}")
        print(f"Trends fitted: {len(result.trend_fits)}")
        for name, path in result.presentation_paths.items():
            print(f"{name}: {len(result.selections[name])} trends -> {path}")
        print("=" * 60)

        logger.info("WordTrend completed successfully")
        return 0

    except ConfigurationError as e:
        logger.error(f"Invalid configuration: {e}")
        print(f"\nInvalid configuration: {e}")
        return 1

    except KeyboardInterrupt:
        logger.warning("Pipeline interrupted by user")
        print("\nPipeline interrupted")
        return 1

    except Exception as e:
        logger.error(f"Pipeline failed: {e}", exc_info=True)
        print(f"\nPipeline failed: {e}")
        print(f"Check {settings.LOG_FILE} for details")
        return 1


if __name__ == "__main__":
    sys.exit(main())
