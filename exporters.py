"""
Amp Gain Search Export Module - CSV, JSON and text report exports.

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Turn a finished SearchResult into files and console text.

Export Formats:
- CSV: One row per solution, plus a long-form one-row-per-zone table
- JSON: Run summary (config, counters, timings)
- Text: Search parameter banner and per-solution report with zone marks

Key Entry Points:
- solutions_to_dataframe() / zones_to_dataframe(): pandas views of solutions
- export_solutions_to_csv(): CSV export for solutions and zones
- export_run_summary(): JSON summary that overwrites on each run
- format_search_parameters() / format_solution_report(): console report

For Navigation: Use VS Code outline (Ctrl+Shift+O)
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from Amp_Gain_Search.config_types import SearchConfig
from Amp_Gain_Search.models.data_models import Solution, solutions_to_dicts
from Amp_Gain_Search.models.search_stats import SearchResult
from Amp_Gain_Search.solvers.solver_config import DEFAULT_EPSILON, FeasibilityConfig

logger = logging.getLogger("AmpSearch.Exporters")

COLOR_RESET = "\033[0m"
COLOR_GREEN = "\033[32m"
COLOR_YELLOW = "\033[33m"

SOLUTION_COLUMNS = [
    "stage1_min",
    "stage1_max",
    "stage2_min",
    "stage2_max",
    "gain_0",
    "gain_1",
    "gain_2",
    "gain_3",
    "breakpoint_0",
    "breakpoint_1",
    "breakpoint_2",
    "zone_0_out_min",
    "zone_0_out_max",
    "zone_1_out_min",
    "zone_1_out_max",
    "zone_2_out_min",
    "zone_2_out_max",
    "zone_3_out_min",
    "zone_3_out_max",
]

ZONE_COLUMNS = [
    "solution_id",
    "zone",
    "gain",
    "input_min",
    "input_max",
    "output_min",
    "output_max",
    "in_output_range",
]


# ═══════════════════════════════════════════════════════════════════════════
# 🔧 HELPER FUNCTIONS
# ═══════════════════════════════════════════════════════════════════════════


def _zone_within_limits(
    output_lower: float,
    output_upper: float,
    config: SearchConfig,
    epsilon: float = DEFAULT_EPSILON,
) -> bool:
    """Check a zone's output sub-range against [v_min, v_max]."""
    return output_lower >= config.v_min - epsilon and output_upper <= config.v_max + epsilon


def _paint(text: str, color_code: str, enabled: bool) -> str:
    return f"{color_code}{text}{COLOR_RESET}" if enabled else text


# ═══════════════════════════════════════════════════════════════════════════
# 🐼 DATAFRAME VIEWS
# ═══════════════════════════════════════════════════════════════════════════


def solutions_to_dataframe(solutions: Sequence[Solution]) -> pd.DataFrame:
    """
    Build a one-row-per-solution DataFrame.

    Columns are the stage ranges, the four zone gains, the three breakpoints
    and the per-zone output sub-ranges (see SOLUTION_COLUMNS). An empty input
    still yields the full column set.
    """
    rows = solutions_to_dicts(list(solutions))
    df = pd.DataFrame(rows, columns=SOLUTION_COLUMNS)
    df.index.name = "solution_id"
    return df


def zones_to_dataframe(
    solutions: Sequence[Solution],
    config: Optional[SearchConfig] = None,
    epsilon: float = DEFAULT_EPSILON,
) -> pd.DataFrame:
    """
    Build a long-form DataFrame with one row per (solution, zone).

    Args:
        solutions: Solutions in the order they should be numbered.
        config: When given, in_output_range is evaluated against
            [v_min, v_max]; otherwise it is left as None.
        epsilon: Comparison tolerance for in_output_range.
    """
    rows: List[Dict[str, Any]] = []
    for solution_id, solution in enumerate(solutions):
        for zone in solution.zones:
            in_range = None
            if config is not None:
                in_range = _zone_within_limits(
                    zone.output_lower, zone.output_upper, config, epsilon
                )
            rows.append(
                {
                    "solution_id": solution_id,
                    "zone": zone.index,
                    "gain": zone.gain,
                    "input_min": zone.lower,
                    "input_max": zone.upper,
                    "output_min": zone.output_lower,
                    "output_max": zone.output_upper,
                    "in_output_range": in_range,
                }
            )
    return pd.DataFrame(rows, columns=ZONE_COLUMNS)


# ═══════════════════════════════════════════════════════════════════════════
# 📤 CSV EXPORT
# ═══════════════════════════════════════════════════════════════════════════


def export_solutions_to_csv(
    solutions: Sequence[Solution],
    output_dir: Path,
    filename: str = "solutions.csv",
    zones_filename: Optional[str] = "solution_zones.csv",
    config: Optional[SearchConfig] = None,
    log: Optional[logging.Logger] = None,
) -> Dict[str, str]:
    """
    Export solutions (and optionally their zones) to CSV files.

    Files are overwritten if they already exist.

    Args:
        solutions: Solutions to export, already in the desired order.
        output_dir: Directory for the CSV files (created if missing).
        filename: Solutions CSV file name.
        zones_filename: Zones CSV file name, or None to skip it.
        config: Search config used for the zone in-range column.
        log: Logger instance (optional).

    Returns:
        Dict mapping "solutions" / "zones" -> absolute path of created files.
    """
    if log is None:
        log = logger

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    log.info(f"📤 Exporting {len(solutions):,} solutions to: {output_dir}")

    exported: Dict[str, str] = {}

    csv_path = output_dir / filename
    solutions_to_dataframe(solutions).to_csv(csv_path)
    exported["solutions"] = str(csv_path.resolve())

    if zones_filename:
        zones_path = output_dir / zones_filename
        zones_to_dataframe(solutions, config).to_csv(zones_path, index=False)
        exported["zones"] = str(zones_path.resolve())

    log.info(f"   ✅ Created {len(exported)} CSV files")
    return exported


# ═══════════════════════════════════════════════════════════════════════════
# 📝 RUN SUMMARY
# ═══════════════════════════════════════════════════════════════════════════


def build_run_summary(
    result: SearchResult,
    config: SearchConfig,
    feasibility: Optional[FeasibilityConfig] = None,
) -> Dict[str, Any]:
    """Assemble the JSON-serializable summary of one run."""
    feasibility = feasibility or FeasibilityConfig()
    return {
        "generated": datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
        "search": config.as_dict(),
        "feasibility": feasibility.as_dict(),
        "complete_search": feasibility.is_complete and not result.cancelled,
        "result": result.to_dict(),
    }


def export_run_summary(
    result: SearchResult,
    config: SearchConfig,
    output_dir: Path,
    feasibility: Optional[FeasibilityConfig] = None,
    filename: str = "run_summary.json",
    log: Optional[logging.Logger] = None,
) -> str:
    """
    Export the run summary to a JSON file that overwrites on each run.

    Returns:
        Path to the created summary file.
    """
    if log is None:
        log = logger

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    summary_path = output_dir / filename

    summary = build_run_summary(result, config, feasibility)
    with open(summary_path, "w", encoding="utf-8") as f:
        json.dump(summary, f, indent=2)

    log.info(f"📝 Run summary written to: {summary_path}")
    return str(summary_path)


# ═══════════════════════════════════════════════════════════════════════════
# 🖨️ CONSOLE REPORT
# ═══════════════════════════════════════════════════════════════════════════


def format_search_parameters(config: SearchConfig, color: bool = True) -> str:
    """
    Format the search parameter banner.

    Example:
        Search Parameters:
        Input:  [0.03, 0.6]
        Output: [1, 1.9]
        Step:   0.5
    """
    lines = [
        _paint("Search Parameters:", COLOR_YELLOW, color),
        f"Input:  [{config.x1:g}, {config.x2:g}]",
        f"Output: [{config.v_min:g}, {config.v_max:g}]",
        f"Step:   {config.step:g}",
    ]
    if config.max_gain is not None:
        lines.append(f"Max gain: {config.max_gain:g}")
    return "\n".join(lines)


def format_solution(
    number: int,
    solution: Solution,
    config: SearchConfig,
    color: bool = True,
    epsilon: float = DEFAULT_EPSILON,
) -> str:
    """Format one solution block with per-zone ✓/⚠ marks."""
    lines = [
        _paint(f"# Solution {number} #####################", COLOR_GREEN, color),
        f"Stage 1: [{solution.stage1.min_gain:g} ~ {solution.stage1.max_gain:g}]",
        f"Stage 2: [{solution.stage2.min_gain:g} ~ {solution.stage2.max_gain:g}]",
        _paint("Gains: ", COLOR_YELLOW, color)
        + " ".join(f"{g:g}" for g in solution.gains),
        "Thresholds: " + " ".join(f"{t:g}" for t in solution.breakpoints),
        "Output Ranges:",
    ]
    for zone in solution.zones:
        ok = _zone_within_limits(zone.output_lower, zone.output_upper, config, epsilon)
        mark = _paint("✓", COLOR_GREEN, color) if ok else _paint("⚠", COLOR_YELLOW, color)
        lines.append(
            f"[{zone.lower:5.3f}, {zone.upper:5.3f}] => "
            f"[{zone.output_lower:5.3f}, {zone.output_upper:5.3f}] {mark}"
        )
    return "\n".join(lines)


def format_solution_report(
    solutions: Sequence[Solution],
    config: SearchConfig,
    color: bool = True,
    max_solutions: Optional[int] = None,
    epsilon: float = DEFAULT_EPSILON,
) -> str:
    """
    Format the full solution report.

    Args:
        solutions: Solutions in report order.
        config: Search config (zone marks are recomputed against it).
        color: Emit ANSI color codes.
        max_solutions: Print at most this many solution blocks.
        epsilon: Comparison tolerance for the zone marks.

    Returns:
        Multi-line report text, starting with "Found N valid solutions:".
    """
    blocks = [f"Found {len(solutions)} valid solutions:"]
    shown = solutions if max_solutions is None else solutions[:max_solutions]
    for i, solution in enumerate(shown, start=1):
        blocks.append(format_solution(i, solution, config, color, epsilon))
    hidden = len(solutions) - len(shown)
    if hidden > 0:
        blocks.append(f"... {hidden} more solutions not shown (see CSV export)")
    return "\n\n".join(blocks)


__all__ = [
    "solutions_to_dataframe",
    "zones_to_dataframe",
    "export_solutions_to_csv",
    "build_run_summary",
    "export_run_summary",
    "format_search_parameters",
    "format_solution",
    "format_solution_report",
]
