"""
Orchestrator for the parallel gain search.

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Build the search space once, dispatch the combination index
range to a pool of workers, watch progress, and hand back one SearchResult.

Follows the orchestrator/worker split used across the package:
- should_use_parallel() check before dispatch
- Build shared inputs ONCE before dispatch (SearchSpace, store, counters)
- joblib Parallel with delayed; threads with shared memory so every worker
  appends to the same ResultStore and counters
- Always uses the parallel infrastructure (n_jobs=1 for sequential)
- Explicit join (Parallel returns) before any Solution is read

Key Functions/Classes:
- GainSearchEngine: run() / progress_snapshot() / cancel()
- run_gain_search(): functional entry point
- should_use_parallel(), get_effective_worker_count(): dispatch decisions
- _dispatch_workers(): builds the joblib job list for "cursor" or "chunks"

For Navigation: Use VS Code outline (Ctrl+Shift+O)
"""

import logging
import threading
import time
from typing import Any, Dict, List, Optional, Tuple

from joblib import Parallel, delayed

from Amp_Gain_Search.config_types import ParallelConfig, ProgressConfig, SearchConfig
from Amp_Gain_Search.models.search_stats import ProgressSnapshot, SearchResult
from Amp_Gain_Search.parallel.progress_monitor import (
    ConsoleProgressRenderer,
    ProgressMonitor,
    Renderer,
)
from Amp_Gain_Search.parallel.result_store import (
    ProgressCounters,
    ResultStore,
    SharedCursor,
)
from Amp_Gain_Search.parallel.search_worker import (
    worker_claim_loop,
    worker_process_range,
)
from Amp_Gain_Search.solvers.combinations import SearchSpace, build_search_space
from Amp_Gain_Search.solvers.feasibility import verify_solution
from Amp_Gain_Search.solvers.solver_config import FeasibilityConfig

logger = logging.getLogger("AmpSearch.Parallel.Orchestrator")


# ═══════════════════════════════════════════════════════════════════════════
# 🔍 PARALLEL DECISION LOGIC
# ═══════════════════════════════════════════════════════════════════════════


def should_use_parallel(
    n_combinations: int,
    parallel_config: ParallelConfig,
) -> Tuple[bool, str]:
    """
    Determine if more than one worker should be used.

    Args:
        n_combinations: Number of combinations to process.
        parallel_config: Worker pool settings.

    Returns:
        Tuple of (should_use: bool, reason: str).
    """
    if not parallel_config.enabled:
        return False, "Parallel disabled in config"

    min_combos = parallel_config.min_combinations_for_parallel
    if n_combinations < min_combos:
        return False, f"Only {n_combinations} combinations (< {min_combos} threshold)"

    return True, f"OK ({n_combinations:,} combinations)"


def get_effective_worker_count(n_combinations: int, requested_workers: int) -> int:
    """
    Calculate the worker count actually used.

    Args:
        n_combinations: Number of combinations to process.
        requested_workers: SearchConfig.workers.

    Returns:
        Number of workers, at least 1 and never more than the combinations.
    """
    return max(1, min(requested_workers, n_combinations))


# ═══════════════════════════════════════════════════════════════════════════
# 🚀 SEARCH ENGINE
# ═══════════════════════════════════════════════════════════════════════════


class GainSearchEngine:
    """
    Runs one exhaustive search per run() call.

    The engine owns the ResultStore, counters, cursor and cancel flag for the
    duration of a run; the returned SearchResult belongs to the caller.
    progress_snapshot() may be polled from any thread while run() executes.

    Usage:
        engine = GainSearchEngine(SearchConfig(x1=1, x2=4, v_min=2, v_max=8))
        result = engine.run()
        for solution in result.sorted_solutions():
            ...
    """

    def __init__(
        self,
        config: SearchConfig,
        feasibility: Optional[FeasibilityConfig] = None,
        parallel: Optional[ParallelConfig] = None,
        progress: Optional[ProgressConfig] = None,
        renderer: Optional[Renderer] = None,
    ) -> None:
        self.config = config
        self.feasibility = feasibility or FeasibilityConfig()
        self.parallel = parallel or ParallelConfig()
        self.progress = progress or ProgressConfig(enabled=False)
        self.renderer = renderer
        self._counters: Optional[ProgressCounters] = None
        self._cancel_event = threading.Event()

    # ── progress / cancellation ────────────────────────────────────────────

    def progress_snapshot(self) -> ProgressSnapshot:
        """Current (processed, total, found). Zeros before the first run."""
        counters = self._counters
        if counters is None:
            return ProgressSnapshot()
        return counters.snapshot()

    def cancel(self) -> None:
        """Ask every worker to stop after its current combination."""
        self._cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    # ── run ────────────────────────────────────────────────────────────────

    def _make_renderer(self) -> Renderer:
        if self.renderer is not None:
            return self.renderer
        return ConsoleProgressRenderer(
            width=self.progress.bar_width, color=self.progress.color
        )

    def run(self) -> SearchResult:
        """
        Run the search to completion (or cancellation).

        Returns:
            SearchResult with solutions in storage order and final counters.
        """
        start_time = time.perf_counter()
        config = self.config

        logger.info("=" * 60)
        logger.info("🔎 TWO-STAGE GAIN SEARCH")
        logger.info("=" * 60)
        logger.info(f"   Input:  [{config.x1:g}, {config.x2:g}]")
        logger.info(f"   Output: [{config.v_min:g}, {config.v_max:g}]")
        logger.info(f"   Step:   {config.step:g}")
        if not self.feasibility.is_complete:
            logger.warning(
                f"⚠️ Incomplete solver settings "
                f"(assignment_mode={self.feasibility.assignment_mode}, "
                f"report_mode={self.feasibility.report_mode}): "
                f"feasible assignments may be skipped"
            )

        space = build_search_space(config, epsilon=self.feasibility.epsilon)
        total = space.total

        store = ResultStore()
        counters = ProgressCounters(total)
        self._counters = counters

        use_parallel, reason = should_use_parallel(total, self.parallel)
        n_workers = (
            get_effective_worker_count(total, config.workers) if use_parallel else 1
        )
        if not use_parallel:
            reason = f"{reason} -> using n_jobs=1"
        logger.info(f"   ⚡ Workers: {n_workers} ({reason})")

        monitor = None
        if self.progress.enabled:
            monitor = ProgressMonitor(
                counters, self._make_renderer(), interval_s=self.progress.interval_s
            ).start()

        worker_stats: List[Dict[str, Any]] = []
        try:
            if total > 0:
                worker_stats = _dispatch_workers(
                    space,
                    config,
                    self.feasibility,
                    self.parallel,
                    n_workers,
                    store,
                    counters,
                    self._cancel_event,
                )
        except BaseException:
            # Stop the workers still running in the pool before propagating.
            # They keep a reference to the old event, so a fresh one lets the
            # engine run again.
            self._cancel_event.set()
            self._cancel_event = threading.Event()
            raise
        finally:
            if monitor is not None:
                monitor.stop()

        # All workers have joined; the store is safe to read
        solutions = store.solutions()
        cancelled = self._cancel_event.is_set() and counters.processed < total
        self._cancel_event.clear()
        elapsed = time.perf_counter() - start_time

        if self.feasibility.verify_solutions:
            _verify_all(solutions, config, self.feasibility.epsilon)

        stats = {
            "n_magnitudes": len(space.magnitudes),
            "ranges_per_stage": space.n_ranges_per_stage,
            "dispatch": self.parallel.dispatch,
            "assignment_mode": self.feasibility.assignment_mode,
            "report_mode": self.feasibility.report_mode,
            "batches": sum(s.get("batches", 0) for s in worker_stats),
        }
        result = SearchResult(
            solutions=solutions,
            snapshot=counters.snapshot(),
            n_workers=n_workers,
            duration_seconds=elapsed,
            cancelled=cancelled,
            stats=stats,
        )

        logger.info("=" * 60)
        if cancelled:
            logger.info("🛑 SEARCH CANCELLED")
        else:
            logger.info("✅ SEARCH COMPLETE")
        logger.info(f"   Processed: {counters.processed:,}/{total:,}")
        logger.info(f"   Solutions: {len(solutions):,}")
        logger.info(f"   Total time: {elapsed:.2f}s")
        logger.info("=" * 60)
        return result


def run_gain_search(
    config: SearchConfig,
    feasibility: Optional[FeasibilityConfig] = None,
    parallel: Optional[ParallelConfig] = None,
    progress: Optional[ProgressConfig] = None,
    renderer: Optional[Renderer] = None,
) -> SearchResult:
    """
    Run one search and return its result.

    Args:
        config: Validated SearchConfig.
        feasibility: Solver settings (default: exhaustive, report all).
        parallel: Worker pool settings.
        progress: Progress bar settings (default: disabled).
        renderer: Optional progress renderer overriding the console bar.

    Returns:
        SearchResult.
    """
    engine = GainSearchEngine(
        config,
        feasibility=feasibility,
        parallel=parallel,
        progress=progress,
        renderer=renderer,
    )
    return engine.run()


# ═══════════════════════════════════════════════════════════════════════════
# ⚡ PARALLEL DISPATCH
# ═══════════════════════════════════════════════════════════════════════════


def _dispatch_workers(
    space: SearchSpace,
    config: SearchConfig,
    feasibility: FeasibilityConfig,
    parallel_config: ParallelConfig,
    n_workers: int,
    store: ResultStore,
    counters: ProgressCounters,
    cancel_event: threading.Event,
) -> List[Dict[str, Any]]:
    """
    Dispatch workers over the combination index range.

    "cursor" mode starts n_workers claim loops over one SharedCursor.
    "chunks" mode splits the range into n_workers contiguous slices.
    Threads share memory, so the store and counters are passed by reference.

    Returns:
        List of per-worker stats dicts.
    """
    logger.info(
        f"🚀 Dispatching {space.total:,} combinations to {n_workers} workers "
        f"({parallel_config.dispatch} mode)..."
    )

    if parallel_config.dispatch == "chunks":
        ranges = space.combinations.split_ranges(n_workers)
        jobs = [
            delayed(worker_process_range)(
                worker_id=worker_id,
                start=start,
                stop=stop,
                space=space,
                config=config,
                feasibility=feasibility,
                store=store,
                counters=counters,
                cancel_event=cancel_event,
            )
            for worker_id, (start, stop) in enumerate(ranges)
        ]
    else:
        cursor = SharedCursor(space.total, parallel_config.batch_size)
        jobs = [
            delayed(worker_claim_loop)(
                worker_id=worker_id,
                cursor=cursor,
                space=space,
                config=config,
                feasibility=feasibility,
                store=store,
                counters=counters,
                cancel_event=cancel_event,
            )
            for worker_id in range(n_workers)
        ]

    dispatch_start = time.perf_counter()
    worker_stats = Parallel(
        n_jobs=n_workers,
        prefer="threads",
        require="sharedmem",
        verbose=parallel_config.verbose,
    )(jobs)
    dispatch_time = time.perf_counter() - dispatch_start
    logger.info(f"   ⏱️ Parallel dispatch completed in {dispatch_time:.2f}s")

    return list(worker_stats)


# ═══════════════════════════════════════════════════════════════════════════
# ✅ POST-RUN VERIFICATION
# ═══════════════════════════════════════════════════════════════════════════


def _verify_all(solutions, config: SearchConfig, epsilon: float) -> None:
    """Re-check every solution and log violations (debug aid)."""
    bad = 0
    for solution in solutions:
        violations = verify_solution(solution, config, epsilon)
        if violations:
            bad += 1
            logger.error(f"❌ Invalid solution {solution.combination.key}: {violations}")
    if bad:
        logger.error(f"❌ {bad}/{len(solutions)} solutions failed verification")
    else:
        logger.info(f"   ✅ Verified {len(solutions)} solutions")


# ═══════════════════════════════════════════════════════════════════════════
# 📦 MODULE EXPORTS
# ═══════════════════════════════════════════════════════════════════════════

__all__ = [
    "GainSearchEngine",
    "run_gain_search",
    "should_use_parallel",
    "get_effective_worker_count",
]
