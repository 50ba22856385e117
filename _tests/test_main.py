"""
CLI Tests: argument mapping, exit codes and an end-to-end run

Tests:
1. build_config_from_args() maps flags without touching CONFIG
2. main() returns 2 on an invalid configuration
3. main() end to end writes the CSV / JSON exports and a run log

Run with: python -m pytest _tests/test_main.py -v
"""

import json
import logging

import pytest

from Amp_Gain_Search.config import CONFIG
from Amp_Gain_Search.config_types import AppConfig
from Amp_Gain_Search.main import (
    EXIT_INVALID_CONFIG,
    EXIT_OK,
    build_arg_parser,
    build_config_from_args,
    main,
    run_amp_search,
)

SMALL_ARGS = ["-i", "1", "4", "-o", "2", "8", "-s", "1", "-w", "1"]


@pytest.fixture(autouse=True)
def _reset_run_logger():
    """Drop the handlers main.setup_logging() attaches during a test."""
    yield
    run_logger = logging.getLogger("AmpSearch")
    for handler in list(run_logger.handlers):
        handler.close()
        run_logger.removeHandler(handler)


# ============================================================================
# ARGUMENT MAPPING
# ============================================================================


class TestArgumentMapping:
    """CLI flags -> CONFIG-shaped dict."""

    def test_required_intervals(self):
        with pytest.raises(SystemExit):
            build_arg_parser().parse_args(["-i", "1", "4"])

    def test_flags_applied(self):
        args = build_arg_parser().parse_args(
            SMALL_ARGS
            + ["--mode", "monotone", "--first-only", "--dispatch", "chunks"]
            + ["--max-gain", "6", "--no-cache", "--no-progress", "--csv"]
        )
        config = build_config_from_args(args)
        assert config["search"]["x1"] == 1.0
        assert config["search"]["v_max"] == 8.0
        assert config["search"]["max_gain"] == 6.0
        assert config["feasibility"]["assignment_mode"] == "monotone"
        assert config["feasibility"]["report_mode"] == "first"
        assert config["parallel"]["dispatch"] == "chunks"
        assert config["cache"]["enabled"] is False
        assert config["progress"]["enabled"] is False
        assert config["export"]["csv"] is True

    def test_base_config_untouched(self):
        search_before = dict(CONFIG["search"])
        cache_before = dict(CONFIG["cache"])
        args = build_arg_parser().parse_args(SMALL_ARGS + ["--no-cache"])
        build_config_from_args(args)
        assert CONFIG["search"] == search_before
        assert CONFIG["cache"] == cache_before

    def test_parsed_config_builds(self):
        args = build_arg_parser().parse_args(SMALL_ARGS)
        app_config = AppConfig.from_dict(build_config_from_args(args))
        assert app_config.search.step == 1.0
        assert app_config.search.workers == 1


# ============================================================================
# EXIT CODES / END TO END
# ============================================================================


class TestMain:
    """main() entry point."""

    def test_invalid_interval(self, capsys):
        code = main(["-i", "4", "1", "-o", "2", "8"])
        assert code == EXIT_INVALID_CONFIG
        assert "Invalid configuration" in capsys.readouterr().err

    def test_invalid_workers(self, capsys):
        code = main(["-i", "1", "4", "-o", "2", "8", "-w", "0"])
        assert code == EXIT_INVALID_CONFIG

    def test_end_to_end(self, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        code = main(SMALL_ARGS + ["--no-cache", "--no-progress", "--no-color", "--csv"])
        assert code == EXIT_OK

        out = capsys.readouterr().out
        assert "Search Parameters:" in out
        assert "valid solutions:" in out

        assert (tmp_path / "Output" / "solutions.csv").exists()
        with open(tmp_path / "Output" / "run_summary.json", encoding="utf-8") as f:
            summary = json.load(f)
        assert summary["result"]["progress"]["total"] == 784
        assert list((tmp_path / "logs").glob("production_*/main.log"))

    def test_run_amp_search_returns_result(self, tmp_path):
        config = {
            "search": {"x1": 1.0, "x2": 4.0, "v_min": 2.0, "v_max": 8.0, "workers": 2},
            "progress": {"enabled": False},
            "cache": {"enabled": False},
            "export": {"summary_json": False, "html": True},
            "file_paths": {
                "output_dir": str(tmp_path / "out"),
                "log_dir": str(tmp_path / "logs"),
            },
        }
        result = run_amp_search(AppConfig.from_dict(config), print_report=False)
        assert result.solution_count > 0
        assert (tmp_path / "out" / "solutions.html").exists()
        assert not (tmp_path / "out" / "run_summary.json").exists()
