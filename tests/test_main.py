"""
Tests for the command-line entry point.

Each test changes into tmp_path so wordtrend.log lands there.
"""

import os
from unittest.mock import MagicMock, patch

import main


def run_cli(*args):
    return main.main(list(args))


def test_cli_run(corpus_dir, output_dir, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    code = run_cli(
        "--data-dir", corpus_dir,
        "--output-dir", output_dir,
        "--min-global-count", "50",
        "--keep-stop-words",
        "--log-level", "WARNING",
    )

    assert code == 0
    assert os.path.exists(os.path.join(output_dir, "trends_strict.csv"))


def test_cli_rejects_vacuous_config(corpus_dir, output_dir, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    code = run_cli(
        "--data-dir", corpus_dir,
        "--output-dir", output_dir,
        "--min-years-present", "40",
        "--keep-stop-words",
    )
    assert code == 1


def test_cli_missing_input(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    code = run_cli(
        "--data-dir", str(tmp_path / "nowhere"),
        "--output-dir", str(tmp_path / "out"),
        "--keep-stop-words",
    )
    assert code == 1


def test_build_config_applies_profile_flags():
    args = main.build_parser().parse_args([
        "--strict-alpha", "0.001", "--min-slope-abs", "0.25", "--broad-alpha", "0.1",
        "--weighting", "count",
    ])
    config = main.build_config(args)

    assert config.profile("strict").alpha == 0.001
    assert config.profile("strict").min_slope_abs == 0.25
    assert config.profile("broad").alpha == 0.1
    assert config.weighting == "count"


def test_cli_runs_without_stop_word_corpus(corpus_dir, output_dir, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    corpus = MagicMock()
    corpus.words.side_effect = LookupError("Resource stopwords not found")
    with patch("nltk.data.find", side_effect=LookupError), \
            patch("nltk.download", return_value=False), \
            patch("src.utils.stop_words.stopwords", new=corpus):
        code = run_cli(
            "--data-dir", corpus_dir,
            "--output-dir", output_dir,
            "--min-global-count", "50",
            "--log-level", "WARNING",
        )

    assert code == 0
    for name in ["tokens.csv", "word_stats.csv", "word_year_stats.csv", "trend_fits.csv"]:
        assert os.path.exists(os.path.join(output_dir, name))
