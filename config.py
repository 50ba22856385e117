#!/usr/bin/env python3
"""
Amp Gain Search - Configuration

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Centralized configuration for the two-stage gain search.
Single source of truth for the search problem, solver settings, worker pool,
cache, exports and file paths.

Configuration Sections (ordered by importance for search tuning):
1. search: Input/output intervals, grid step, worker count
2. testing_mode: Quick toggle for dev testing (highest visibility)
3. gain_grid: Optional absolute gain ceiling
4. feasibility: Tolerance, zone assignment and report modes
5. parallel: Worker pool dispatch settings
6. progress: Live progress bar
7. cache: Result cache settings
8. export: CSV / JSON / HTML outputs
9. visualization: Plotly styling settings (bottom)
10. file_paths: Output/log locations (bottom - rarely changed)

Navigation Guide:
- Use VS Code outline (Ctrl+Shift+O) to jump between sections
"""

import os
from typing import Dict, Any, TypeVar, Callable, Optional

T = TypeVar("T")


def _env_or_default(
    key: str, default: T, type_fn: Optional[Callable[[str], T]] = None
) -> T:
    """
    Get value from environment variable or use default.

    Args:
        key: Environment variable name (e.g., "AMP_STEP")
        default: Default value if env var not set
        type_fn: Optional type conversion function (e.g., float, int)

    Returns:
        Value from environment (converted) or default

    Example:
        >>> _env_or_default("AMP_STEP", 1.0, float)
        1.0  # If env var not set
    """
    val = os.getenv(key)
    if val is not None:
        if type_fn is not None:
            return type_fn(val)
        return val  # type: ignore
    return default


def _env_bool(key: str, default: bool) -> bool:
    """
    Get boolean value from environment variable.

    Treats "true", "1", "yes" as True (case-insensitive).
    Any other value or unset returns default.
    """
    val = os.getenv(key)
    if val is None:
        return default
    return val.lower() in ("true", "1", "yes")


# ═══════════════════════════════════════════════════════════════════════════
# 🔧 ENVIRONMENT VARIABLE OVERRIDES
# ═══════════════════════════════════════════════════════════════════════════
# These settings can be overridden via environment variables for testing:
#
# AMP_STEP             - float, gain grid step (default: 1.0)
# AMP_WORKERS          - int, worker threads (default: -1 = os.cpu_count())
# AMP_ASSIGNMENT_MODE  - "exhaustive" or "monotone" (default: "exhaustive")
# AMP_REPORT_MODE      - "all" or "first" (default: "all")
# AMP_DISPATCH         - "cursor" or "chunks" (default: "cursor")
# AMP_BATCH_SIZE       - int, combinations per cursor claim (default: 256)
# AMP_EPSILON          - float, comparison tolerance (default: 1e-6)
# AMP_CACHE_ENABLED    - "true" or "false" (default: "true")
#
# Example usage:
#   export AMP_STEP=0.5
#   export AMP_WORKERS=16
#   export AMP_DISPATCH=chunks
#   python -m Amp_Gain_Search.main -i 0.03 0.6 -o 1 1.9
# ═══════════════════════════════════════════════════════════════════════════

# ═══════════════════════════════════════════════════════════════════════════
# ⚙️ MASTER CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════

CONFIG: Dict[str, Any] = {
    # ═══════════════════════════════════════════════════════════════════════
    # 🔎 SEARCH PROBLEM
    # ═══════════════════════════════════════════════════════════════════════
    # Input interval [x1, x2] must be mapped onto output interval
    # [v_min, v_max] by four contiguous zones.
    #
    # step controls the gain grid: magnitudes are k*step up to v_max/x1.
    # The combination count grows with the 4th power of 1/step:
    # - 2.0: coarse (~216k combinations for the default intervals)
    # - 1.0: standard, the default (~3.8M combinations)
    # - 0.5: fine (~62M combinations - minutes on many cores)
    #
    # ENV OVERRIDE: AMP_STEP (float), AMP_WORKERS (int, -1 = all cores)
    "search": {
        "x1": 0.03,
        "x2": 0.6,
        "v_min": 1.0,
        "v_max": 1.9,
        "step": _env_or_default("AMP_STEP", 1.0, float),
        "workers": _env_or_default("AMP_WORKERS", -1, int),
    },
    # ═══════════════════════════════════════════════════════════════════════
    # 🧪 TESTING MODE CONFIGURATION (High visibility - frequently toggled)
    # ═══════════════════════════════════════════════════════════════════════
    "testing_mode": {
        # Master toggle - set True for a quick reproducible run
        "enabled": False,
        # Coarse grid step used instead of search.step (None keeps search.step)
        "step_override": 4.0,
        # Force single worker - runs parallel with n_jobs=1 (same code path, sequential execution)
        "force_single_worker": True,
        # Cache overwrite - always recompute (recommended for algorithm testing)
        "force_cache_overwrite": True,
    },
    # ═══════════════════════════════════════════════════════════════════════
    # 📈 GAIN GRID
    # ═══════════════════════════════════════════════════════════════════════
    # Optional absolute ceiling on a single stage gain. None means the grid
    # runs up to v_max / x1 only.
    "gain_grid": {
        "max_gain": None,
    },
    # ═══════════════════════════════════════════════════════════════════════
    # ✅ FEASIBILITY SOLVER
    # ═══════════════════════════════════════════════════════════════════════
    # assignment_mode:
    #   - "exhaustive": try all 24 zone orderings (COMPLETE - recommended)
    #   - "monotone": only the descending ordering (fast, may miss solutions)
    # report_mode:
    #   - "all": one Solution per feasible ordering (COMPLETE - recommended)
    #   - "first": stop at the first feasible ordering per combination
    # Any non-default mode is logged as incomplete at the start of a run.
    #
    # ENV OVERRIDE: AMP_ASSIGNMENT_MODE, AMP_REPORT_MODE, AMP_EPSILON
    "feasibility": {
        "epsilon": _env_or_default("AMP_EPSILON", 1e-6, float),
        "assignment_mode": _env_or_default("AMP_ASSIGNMENT_MODE", "exhaustive"),
        "report_mode": _env_or_default("AMP_REPORT_MODE", "all"),
        # Re-check every stored solution after the run (debug aid)
        "verify_solutions": False,
    },
    # ═══════════════════════════════════════════════════════════════════════
    # ⚡ PARALLEL PROCESSING
    # ═══════════════════════════════════════════════════════════════════════
    # dispatch:
    #   - "cursor": workers claim batches of batch_size from a shared cursor
    #     (RECOMMENDED - balances uneven per-combination cost)
    #   - "chunks": one static contiguous range per worker
    #
    # ENV OVERRIDE: AMP_DISPATCH, AMP_BATCH_SIZE
    "parallel": {
        "enabled": True,
        "dispatch": _env_or_default("AMP_DISPATCH", "cursor"),
        "batch_size": _env_or_default("AMP_BATCH_SIZE", 256, int),
        # Below this many combinations a single worker is used
        "min_combinations_for_parallel": 64,
        # joblib verbosity (0 = silent)
        "verbose": 0,
    },
    # ═══════════════════════════════════════════════════════════════════════
    # 📊 PROGRESS BAR
    # ═══════════════════════════════════════════════════════════════════════
    "progress": {
        "enabled": True,
        "interval_s": 0.1,
        "bar_width": 50,
        "color": True,
    },
    # ═══════════════════════════════════════════════════════════════════════
    # 💾 RESULT CACHE
    # ═══════════════════════════════════════════════════════════════════════
    # ENV OVERRIDE: AMP_CACHE_ENABLED ("true"/"false")
    "cache": {
        "enabled": _env_bool("AMP_CACHE_ENABLED", True),
        "cache_dir": ".amp_gain_cache",
        "max_cache_entries": 20,
        "lock_timeout_s": 30.0,
        "force_overwrite": False,
    },
    # ═══════════════════════════════════════════════════════════════════════
    # 📤 EXPORTS
    # ═══════════════════════════════════════════════════════════════════════
    "export": {
        "csv": False,
        "csv_filename": "solutions.csv",
        "zones_csv_filename": "solution_zones.csv",
        "summary_json": True,
        "html": False,
        "html_filename": "solutions.html",
        # Solutions printed in the console report (the rest go to CSV)
        "max_report_solutions": 50,
    },
    # ═══════════════════════════════════════════════════════════════════════
    # 🎨 VISUALIZATION
    # ═══════════════════════════════════════════════════════════════════════
    "visualization": {
        "zone_colors": ("#1f77b4", "#ff7f0e", "#2ca02c", "#d62728"),
        "limit_color": "rgba(120, 120, 120, 0.8)",
        "line_width": 3,
        "max_solutions": 12,
        "row_height_px": 260,
    },
    # ═══════════════════════════════════════════════════════════════════════
    # 📁 FILE PATHS
    # ═══════════════════════════════════════════════════════════════════════
    "file_paths": {
        "output_dir": "Output",
        "log_dir": "logs",
    },
}
