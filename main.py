#!/usr/bin/env python3
"""
Amp Gain Search - Main Entry Point

Exhaustive search for two-stage gain-switchable amplifier configurations.

Usage:
    python -m Amp_Gain_Search.main -i 0.03 0.6 -o 1 1.9 -s 0.5

    Or, once installed:
    amp-gain-search -i 0.03 0.6 -o 1 1.9 -s 0.5 --csv --html
"""

import argparse
import copy
import logging
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Tuple

# Fix Windows console encoding for emoji support
if sys.platform == "win32":
    sys.stdout.reconfigure(encoding="utf-8", errors="replace")
    sys.stderr.reconfigure(encoding="utf-8", errors="replace")

from Amp_Gain_Search.config import CONFIG
from Amp_Gain_Search.config_types import AppConfig
from Amp_Gain_Search.exporters import (
    export_run_summary,
    export_solutions_to_csv,
    format_search_parameters,
    format_solution_report,
)
from Amp_Gain_Search.models.search_stats import SearchResult
from Amp_Gain_Search.parallel.cached_search_orchestrator import run_cached_search
from Amp_Gain_Search.parallel.progress_monitor import Renderer
from Amp_Gain_Search.visualization.html_builder import generate_solution_html

EXIT_OK = 0
EXIT_INVALID_CONFIG = 2
EXIT_INTERRUPTED = 130


# ═══════════════════════════════════════════════════════════════════════════
# 📋 LOGGING SETUP
# ═══════════════════════════════════════════════════════════════════════════


def setup_logging(app_config: AppConfig) -> Tuple[logging.Logger, Path]:
    """Configure logging with file and console handlers.

    Handlers are attached to the "AmpSearch" logger so every module logger
    (AmpSearch.Parallel.*, AmpSearch.Solvers.*, ...) ends up in both.

    Returns:
        Tuple of (logger, run_log_folder) where run_log_folder is the path
        to store all logs for this run.

    Folder naming convention:
        - Testing mode: testing_{MMDD}_{HHMM}
        - Production mode: production_{MMDD}_{HHMM}
    """
    log_dir = app_config.log_dir
    log_dir.mkdir(parents=True, exist_ok=True)

    # Compact timestamp: MMDD_HHMM
    timestamp = datetime.now().strftime("%m%d_%H%M")
    prefix = "testing" if app_config.testing_mode.enabled else "production"
    run_log_folder = log_dir / f"{prefix}_{timestamp}"
    run_log_folder.mkdir(parents=True, exist_ok=True)

    log_path = run_log_folder / "main.log"

    logger = logging.getLogger("AmpSearch")
    logger.setLevel(logging.INFO)
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()

    # File handler
    fh = logging.FileHandler(log_path, encoding="utf-8")
    fh.setLevel(logging.INFO)
    fh.setFormatter(
        logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
        )
    )

    # Console handler
    ch = logging.StreamHandler(sys.stdout)
    ch.setLevel(logging.INFO)
    ch.setFormatter(logging.Formatter("%(message)s"))

    logger.addHandler(fh)
    logger.addHandler(ch)

    return logger, run_log_folder


# ═══════════════════════════════════════════════════════════════════════════
# ⌨️ COMMAND LINE
# ═══════════════════════════════════════════════════════════════════════════


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="amp-gain-search",
        description=(
            "Find every two-stage gain configuration that maps the input "
            "interval onto the output interval through four contiguous zones."
        ),
        epilog="Example: amp-gain-search -i 0.03 0.6 -o 1 1.9 -s 0.5",
    )
    parser.add_argument(
        "-i", "--input", nargs=2, type=float, required=True,
        metavar=("X1", "X2"), help="Input interval [X1, X2]",
    )
    parser.add_argument(
        "-o", "--output", nargs=2, type=float, required=True,
        metavar=("VMIN", "VMAX"), help="Output interval [VMIN, VMAX]",
    )
    parser.add_argument("-s", "--step", type=float, help="Gain grid step")
    parser.add_argument(
        "-w", "--workers", type=int, help="Worker threads (-1 = all cores)"
    )
    parser.add_argument(
        "--mode", choices=("exhaustive", "monotone"),
        help="Zone assignment mode (monotone may miss solutions)",
    )
    parser.add_argument(
        "--first-only", action="store_true",
        help="Keep only the first feasible assignment per combination",
    )
    parser.add_argument(
        "--dispatch", choices=("cursor", "chunks"), help="Work distribution mode"
    )
    parser.add_argument("--max-gain", type=float, help="Absolute per-stage gain ceiling")
    parser.add_argument("--csv", action="store_true", help="Export solutions to CSV")
    parser.add_argument("--html", action="store_true", help="Export an HTML plot")
    parser.add_argument(
        "--no-progress", action="store_true", help="Disable the progress bar"
    )
    parser.add_argument("--no-cache", action="store_true", help="Disable the result cache")
    parser.add_argument("--no-color", action="store_true", help="Plain console output")
    parser.add_argument("--output-dir", help="Directory for exports")
    return parser


def build_config_from_args(
    args: argparse.Namespace,
    base_config: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Apply CLI arguments on top of a CONFIG-shaped dict.

    The base dict is deep-copied and never modified.
    """
    config = copy.deepcopy(base_config if base_config is not None else CONFIG)

    search = config.setdefault("search", {})
    search["x1"], search["x2"] = args.input
    search["v_min"], search["v_max"] = args.output
    if args.step is not None:
        search["step"] = args.step
    if args.workers is not None:
        search["workers"] = args.workers
    if args.max_gain is not None:
        search["max_gain"] = args.max_gain

    feasibility = config.setdefault("feasibility", {})
    if args.mode is not None:
        feasibility["assignment_mode"] = args.mode
    if args.first_only:
        feasibility["report_mode"] = "first"

    if args.dispatch is not None:
        config.setdefault("parallel", {})["dispatch"] = args.dispatch

    progress = config.setdefault("progress", {})
    if args.no_progress:
        progress["enabled"] = False
    if args.no_color:
        progress["color"] = False

    if args.no_cache:
        config.setdefault("cache", {})["enabled"] = False

    export = config.setdefault("export", {})
    if args.csv:
        export["csv"] = True
    if args.html:
        export["html"] = True

    if args.output_dir:
        config.setdefault("file_paths", {})["output_dir"] = args.output_dir

    return config


# ═══════════════════════════════════════════════════════════════════════════
# 📤 OUTPUTS
# ═══════════════════════════════════════════════════════════════════════════


def _log_run_configuration(app_config: AppConfig, logger: logging.Logger) -> None:
    """Log solver and parallel processing configuration."""
    search = app_config.effective_search()
    feasibility = app_config.feasibility
    logger.info(f"   🧮 Assignment mode: {feasibility.assignment_mode.upper()}")
    logger.info(f"   📋 Report mode: {feasibility.report_mode.upper()}")
    logger.info(f"   👷 Requested workers: {search.workers}")
    logger.info(f"   🔀 Dispatch: {app_config.parallel.dispatch.upper()}")
    if search.max_gain is not None:
        logger.info(f"   📈 Max gain: {search.max_gain:g}")
    logger.info(
        "   💾 Result cache: %s", "ENABLED" if app_config.cache.enabled else "DISABLED"
    )
    if app_config.testing_mode.enabled:
        logger.info(f"   🧪 TESTING MODE: step={search.step:g}, workers={search.workers}")


def _export_outputs(
    result: SearchResult,
    app_config: AppConfig,
    logger: logging.Logger,
) -> Dict[str, str]:
    """Write the exports enabled in app_config.export. Returns name -> path."""
    export = app_config.export
    search = app_config.effective_search()
    output_dir = app_config.output_dir
    solutions = result.sorted_solutions()
    written: Dict[str, str] = {}

    if export.csv:
        written.update(
            export_solutions_to_csv(
                solutions,
                output_dir,
                filename=export.csv_filename,
                zones_filename=export.zones_csv_filename,
                config=search,
                log=logger,
            )
        )
    if export.summary_json:
        written["summary"] = export_run_summary(
            result, search, output_dir, feasibility=app_config.feasibility, log=logger
        )
    if export.html:
        html_path = output_dir / export.html_filename
        generate_solution_html(
            solutions,
            search,
            html_path,
            visualization_config=app_config.visualization,
        )
        written["html"] = str(html_path)
    return written


# ═══════════════════════════════════════════════════════════════════════════
# 🚀 RUN
# ═══════════════════════════════════════════════════════════════════════════


def run_amp_search(
    app_config: AppConfig,
    renderer: Optional[Renderer] = None,
    print_report: bool = True,
) -> SearchResult:
    """Run the search workflow: log setup, cached search, report, exports."""
    logger, run_log_folder = setup_logging(app_config)
    logger.info("=" * 60)
    logger.info("🎯 Amp Gain Search")
    logger.info("=" * 60)
    logger.info(f"   Log folder: {run_log_folder}")
    _log_run_configuration(app_config, logger)

    color = app_config.progress.color
    search = app_config.effective_search()
    if print_report:
        print("\n" + format_search_parameters(search, color=color) + "\n")

    total_start = time.perf_counter()
    try:
        result = run_cached_search(app_config, renderer=renderer)

        if print_report:
            print(
                "\n"
                + format_solution_report(
                    result.sorted_solutions(),
                    search,
                    color=color,
                    max_solutions=app_config.export.max_report_solutions,
                    epsilon=app_config.feasibility.epsilon,
                )
            )

        _export_outputs(result, app_config, logger)
    except Exception as e:
        logger.error(f"❌ Search failed: {e}")
        logger.exception("Traceback:")
        raise

    logger.info(f"✅ Search completed in {time.perf_counter() - total_start:.2f}s")
    return result


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Console entry point. Returns the process exit status."""
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    try:
        app_config = AppConfig.from_dict(build_config_from_args(args))
    except ValueError as e:  # ConfigValidationError included
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return EXIT_INVALID_CONFIG

    try:
        run_amp_search(app_config)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_INTERRUPTED
    return EXIT_OK


# ═══════════════════════════════════════════════════════════════════════════
# 🚀 ENTRY POINT
# ═══════════════════════════════════════════════════════════════════════════


if __name__ == "__main__":
    sys.exit(main())
