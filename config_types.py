"""
═══════════════════════════════════════════════════════════════════════════════
📋 UNIFIED CONFIGURATION TYPES
═══════════════════════════════════════════════════════════════════════════════

ARCHITECTURAL OVERVIEW
----------------------
Responsibility: Define all configuration dataclasses for the amplifier gain
search. Wraps the CONFIG dictionary from config.py in typed, validated,
immutable objects.

It provides:
1. SearchConfig - the validated search problem (input/output intervals, step)
2. Sub-configs for the parallel scheduler, progress bar, cache and exports
3. A single AppConfig facade with from_dict() built from CONFIG

Usage:
    from Amp_Gain_Search.config import CONFIG
    from Amp_Gain_Search.config_types import AppConfig

    # Create once at application startup
    app_config = AppConfig.from_dict(CONFIG)

    # Use throughout the application
    result = run_gain_search(app_config.search, app_config.feasibility)

For Navigation: Use VS Code outline (Ctrl+Shift+O)

NAVIGATION GUIDE
----------------
# ═════ 1. ERRORS
# ═════ 2. SEARCH PROBLEM CONFIGURATION
# ═════ 3. PARALLEL PROCESSING CONFIGURATION
# ═════ 4. PROGRESS CONFIGURATION
# ═════ 5. CACHE CONFIGURATION
# ═════ 6. EXPORT / VISUALIZATION / FILE PATHS
# ═════ 7. TESTING MODE CONFIGURATION
# ═════ 8. APP CONFIG (MASTER FACADE)

═══════════════════════════════════════════════════════════════════════════════
"""

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, Any, Optional

from Amp_Gain_Search.solvers.solver_config import (
    DEFAULT_EPSILON,
    FeasibilityConfig,
)


# ═══════════════════════════════════════════════════════════════════════════════
# ❌ 1. ERRORS
# ═══════════════════════════════════════════════════════════════════════════════


class ConfigValidationError(ValueError):
    """Raised when a search configuration is rejected before any search work."""


def _default_workers() -> int:
    return os.cpu_count() or 1


# ═══════════════════════════════════════════════════════════════════════════════
# 📐 2. SEARCH PROBLEM CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class SearchConfig:
    """
    The search problem: one immutable description of a run.

    Attributes:
        x1: Lower end of the input interval.
        x2: Upper end of the input interval.
        v_min: Lower end of the allowed output interval.
        v_max: Upper end of the allowed output interval.
        step: Gain quantization step (grid quantum).
        workers: Number of worker threads. Defaults to the CPU count.
        max_gain: Optional absolute cap on single-stage gain magnitudes.
            None means the grid is bounded only by v_max / x1.

    Raises:
        ConfigValidationError: If x1 >= x2, v_min >= v_max, step <= epsilon,
            workers <= 0, or max_gain <= 0.
    """

    x1: float
    x2: float
    v_min: float
    v_max: float
    step: float = 1.0
    workers: int = field(default_factory=_default_workers)
    max_gain: Optional[float] = None

    def __post_init__(self) -> None:
        """Validate the problem once, before any search work."""
        if not self.x1 < self.x2:
            raise ConfigValidationError(
                f"input interval must satisfy x1 < x2, got [{self.x1}, {self.x2}]"
            )
        if not self.v_min < self.v_max:
            raise ConfigValidationError(
                f"output interval must satisfy Vmin < Vmax, "
                f"got [{self.v_min}, {self.v_max}]"
            )
        if not self.step > DEFAULT_EPSILON:
            raise ConfigValidationError(
                f"step must be > {DEFAULT_EPSILON}, got {self.step}"
            )
        if isinstance(self.workers, bool) or not isinstance(self.workers, int):
            raise ConfigValidationError(
                f"workers must be an integer, got {self.workers!r}"
            )
        if self.workers <= 0:
            raise ConfigValidationError(f"workers must be > 0, got {self.workers}")
        if self.max_gain is not None and self.max_gain <= 0:
            raise ConfigValidationError(
                f"max_gain must be > 0 when set, got {self.max_gain}"
            )

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "SearchConfig":
        """Create SearchConfig from CONFIG['search'] dictionary."""
        workers = d.get("workers")
        return cls(
            x1=d["x1"],
            x2=d["x2"],
            v_min=d["v_min"],
            v_max=d["v_max"],
            step=d.get("step", 1.0),
            workers=_default_workers() if workers in (None, -1) else workers,
            max_gain=d.get("max_gain"),
        )

    @property
    def gain_ceiling(self) -> float:
        """Largest gain magnitude allowed on the grid."""
        if self.x1 <= 0:
            # v_max / x1 gives no usable bound; only an explicit cap does
            return self.max_gain if self.max_gain is not None else 0.0
        ceiling = self.v_max / self.x1
        if self.max_gain is not None:
            ceiling = min(ceiling, self.max_gain)
        return ceiling

    def with_overrides(self, **changes: Any) -> "SearchConfig":
        """Return a re-validated copy with the given fields replaced."""
        return replace(self, **changes)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "x1": self.x1,
            "x2": self.x2,
            "v_min": self.v_min,
            "v_max": self.v_max,
            "step": self.step,
            "workers": self.workers,
            "max_gain": self.max_gain,
        }


# ═══════════════════════════════════════════════════════════════════════════════
# ⚡ 3. PARALLEL PROCESSING CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class ParallelConfig:
    """
    Configuration for the worker pool.

    Attributes:
        enabled: Master toggle. When False the same code path runs with n_jobs=1.
        dispatch: "cursor" (shared atomically-claimed cursor) or "chunks"
            (static contiguous ranges, one per worker).
        batch_size: Combinations claimed per cursor claim.
        min_combinations_for_parallel: Below this, run with a single worker.
        verbose: joblib verbosity level.
    """

    enabled: bool = True
    dispatch: str = "cursor"
    batch_size: int = 256
    min_combinations_for_parallel: int = 64
    verbose: int = 0

    def __post_init__(self) -> None:
        """Validate dispatch mode and batch size."""
        if self.dispatch not in ("cursor", "chunks"):
            raise ValueError(
                f"dispatch must be 'cursor' or 'chunks', got '{self.dispatch}'"
            )
        if self.batch_size <= 0:
            raise ValueError(f"batch_size must be > 0, got {self.batch_size}")

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ParallelConfig":
        """Create ParallelConfig from CONFIG['parallel'] dictionary."""
        return cls(
            enabled=d.get("enabled", True),
            dispatch=d.get("dispatch", "cursor"),
            batch_size=d.get("batch_size", 256),
            min_combinations_for_parallel=d.get("min_combinations_for_parallel", 64),
            verbose=d.get("verbose", 0),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# 📊 4. PROGRESS CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class ProgressConfig:
    """Progress bar settings (poll interval in seconds, bar width in chars)."""

    enabled: bool = True
    interval_s: float = 0.1
    bar_width: int = 50
    color: bool = True

    def __post_init__(self) -> None:
        if self.interval_s <= 0:
            raise ValueError(f"interval_s must be > 0, got {self.interval_s}")
        if self.bar_width <= 0:
            raise ValueError(f"bar_width must be > 0, got {self.bar_width}")

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ProgressConfig":
        """Create ProgressConfig from CONFIG['progress'] dictionary."""
        return cls(
            enabled=d.get("enabled", True),
            interval_s=d.get("interval_s", 0.1),
            bar_width=d.get("bar_width", 50),
            color=d.get("color", True),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# 💾 5. CACHE CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class CacheConfig:
    """
    Configuration for the on-disk result cache.

    Attributes:
        enabled: Master toggle for caching.
        cache_dir: Directory holding pickled results and the manifest.
        max_cache_entries: Oldest entries beyond this count are pruned.
        lock_timeout_s: Seconds to wait for the per-entry file lock.
        force_overwrite: Always recompute and overwrite cached results.
    """

    enabled: bool = True
    cache_dir: str = ".amp_gain_cache"
    max_cache_entries: int = 20
    lock_timeout_s: float = 30.0
    force_overwrite: bool = False

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CacheConfig":
        """Create CacheConfig from CONFIG['cache'] dictionary."""
        return cls(
            enabled=d.get("enabled", True),
            cache_dir=d.get("cache_dir", ".amp_gain_cache"),
            max_cache_entries=d.get("max_cache_entries", 20),
            lock_timeout_s=d.get("lock_timeout_s", 30.0),
            force_overwrite=d.get("force_overwrite", False),
        )

    @property
    def cache_path(self) -> Path:
        return Path(self.cache_dir)


# ═══════════════════════════════════════════════════════════════════════════════
# 📤 6. EXPORT / VISUALIZATION / FILE PATHS
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class ExportConfig:
    """Which result files to write after a run."""

    csv: bool = False
    csv_filename: str = "solutions.csv"
    zones_csv_filename: str = "solution_zones.csv"
    summary_json: bool = True
    html: bool = False
    html_filename: str = "solutions.html"
    max_report_solutions: int = 50

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ExportConfig":
        """Create ExportConfig from CONFIG['export'] dictionary."""
        return cls(
            csv=d.get("csv", False),
            csv_filename=d.get("csv_filename", "solutions.csv"),
            zones_csv_filename=d.get("zones_csv_filename", "solution_zones.csv"),
            summary_json=d.get("summary_json", True),
            html=d.get("html", False),
            html_filename=d.get("html_filename", "solutions.html"),
            max_report_solutions=d.get("max_report_solutions", 50),
        )


@dataclass(frozen=True)
class VisualizationConfig:
    """
    Plotly styling for transfer-curve plots.

    Attributes:
        zone_colors: One color per zone (left to right).
        limit_color: Color of the Vmin/Vmax limit lines.
        line_width: Transfer curve line width.
        max_solutions: Maximum number of solutions drawn in one HTML file.
        row_height_px: Height of each subplot row.
    """

    zone_colors: tuple = ("#1f77b4", "#ff7f0e", "#2ca02c", "#d62728")
    limit_color: str = "rgba(120, 120, 120, 0.8)"
    line_width: int = 3
    max_solutions: int = 12
    row_height_px: int = 260

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "VisualizationConfig":
        """Create VisualizationConfig from CONFIG['visualization'] dictionary."""
        return cls(
            zone_colors=tuple(
                d.get("zone_colors", ("#1f77b4", "#ff7f0e", "#2ca02c", "#d62728"))
            ),
            limit_color=d.get("limit_color", "rgba(120, 120, 120, 0.8)"),
            line_width=d.get("line_width", 3),
            max_solutions=d.get("max_solutions", 12),
            row_height_px=d.get("row_height_px", 260),
        )


@dataclass(frozen=True)
class FilePathsConfig:
    """
    File path configuration for outputs.

    Attributes:
        output_dir: Directory for CSV/JSON/HTML outputs.
        log_dir: Directory for log files.
    """

    output_dir: str = "Output"
    log_dir: str = "logs"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "FilePathsConfig":
        """Create FilePathsConfig from CONFIG['file_paths'] dictionary."""
        return cls(
            output_dir=d.get("output_dir", "Output"),
            log_dir=d.get("log_dir", "logs"),
        )

    @property
    def output_path(self) -> Path:
        """Get output directory as relative Path object."""
        return Path(self.output_dir)

    @property
    def log_path(self) -> Path:
        """Get log directory as relative Path object."""
        return Path(self.log_dir)


# ═══════════════════════════════════════════════════════════════════════════════
# 🧪 7. TESTING MODE CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class TestingModeConfig:
    """
    Configuration for testing/debug mode.

    When testing mode is enabled, it overrides the search settings to create
    a quick, reproducible run.

    Attributes:
        enabled: Master toggle for testing mode.
        step_override: Coarse step used instead of search.step (None keeps it).
        force_single_worker: Run with a single worker.
        force_cache_overwrite: Always recompute instead of using the cache.
    """

    __test__ = False  # not a pytest test class

    enabled: bool = False
    step_override: Optional[float] = None
    force_single_worker: bool = True
    force_cache_overwrite: bool = True

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "TestingModeConfig":
        """Create TestingModeConfig from CONFIG['testing_mode'] dictionary."""
        return cls(
            enabled=d.get("enabled", False),
            step_override=d.get("step_override"),
            force_single_worker=d.get("force_single_worker", True),
            force_cache_overwrite=d.get("force_cache_overwrite", True),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# 🎯 8. APP CONFIG (MASTER FACADE)
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class AppConfig:
    """
    Master configuration object for the gain search application.

    Create it once at application startup using AppConfig.from_dict(CONFIG)
    and pass it to all functions that need settings.

    Attributes:
        search: The validated search problem.
        feasibility: Solver tolerance and assignment/report modes.
        parallel: Worker pool configuration.
        progress: Progress bar configuration.
        cache: Result cache configuration.
        export: Export toggles and file names.
        visualization: Plot styling.
        file_paths: Output and log directories.
        testing_mode: Testing mode configuration.

    Example:
        from Amp_Gain_Search.config import CONFIG
        from Amp_Gain_Search.config_types import AppConfig

        app_config = AppConfig.from_dict(CONFIG)
        effective = app_config.effective_search()
    """

    search: SearchConfig
    feasibility: FeasibilityConfig = field(default_factory=FeasibilityConfig)
    parallel: ParallelConfig = field(default_factory=ParallelConfig)
    progress: ProgressConfig = field(default_factory=ProgressConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    export: ExportConfig = field(default_factory=ExportConfig)
    visualization: VisualizationConfig = field(default_factory=VisualizationConfig)
    file_paths: FilePathsConfig = field(default_factory=FilePathsConfig)
    testing_mode: TestingModeConfig = field(default_factory=TestingModeConfig)

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "AppConfig":
        """
        Create AppConfig from the CONFIG dictionary.

        Args:
            config_dict: The CONFIG dictionary from config.py (or a dict of
                the same shape built by the CLI).

        Returns:
            AppConfig instance with all settings populated.

        Raises:
            ConfigValidationError: If the search section is invalid.
        """
        search_dict = dict(config_dict.get("search", {}))
        grid = config_dict.get("gain_grid", {})
        if "max_gain" not in search_dict and grid.get("max_gain") is not None:
            search_dict["max_gain"] = grid["max_gain"]

        return cls(
            search=SearchConfig.from_dict(search_dict),
            feasibility=FeasibilityConfig.from_dict(
                config_dict.get("feasibility", {})
            ),
            parallel=ParallelConfig.from_dict(config_dict.get("parallel", {})),
            progress=ProgressConfig.from_dict(config_dict.get("progress", {})),
            cache=CacheConfig.from_dict(config_dict.get("cache", {})),
            export=ExportConfig.from_dict(config_dict.get("export", {})),
            visualization=VisualizationConfig.from_dict(
                config_dict.get("visualization", {})
            ),
            file_paths=FilePathsConfig.from_dict(config_dict.get("file_paths", {})),
            testing_mode=TestingModeConfig.from_dict(
                config_dict.get("testing_mode", {})
            ),
        )

    def effective_search(self) -> SearchConfig:
        """
        Get the SearchConfig actually used for the run.

        Applies testing mode overrides (single worker, coarse step) on top of
        the configured search problem.
        """
        if not self.testing_mode.enabled:
            return self.search
        changes: Dict[str, Any] = {}
        if self.testing_mode.force_single_worker:
            changes["workers"] = 1
        if self.testing_mode.step_override is not None:
            changes["step"] = self.testing_mode.step_override
        return self.search.with_overrides(**changes) if changes else self.search

    @property
    def log_dir(self) -> Path:
        """Get log directory as Path object."""
        return self.file_paths.log_path

    @property
    def output_dir(self) -> Path:
        """Get output directory as Path object."""
        return self.file_paths.output_path
