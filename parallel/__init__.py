"""
Gain Search Parallel Processing Module

Runs the exhaustive search over all stage-range combinations on a thread pool.
Follows the package's parallel architecture patterns:
- Thin workers calling solvers/feasibility.py
- Always uses parallel infrastructure (n_jobs=1 for sequential)
- Shared-memory result store and counters, read after explicit join

Module Structure:
- search_orchestrator.py: GainSearchEngine + dispatch decisions
- search_worker.py: Thin workers for static ranges and cursor batches
- result_store.py: ResultStore, ProgressCounters, SharedCursor
- progress_monitor.py: Polling progress bar thread
- cached_search_orchestrator.py: Caching wrapper (decorator pattern)
- result_cache.py: Cache storage and fingerprinting
"""

from Amp_Gain_Search.parallel.search_orchestrator import (
    GainSearchEngine,
    run_gain_search,
    should_use_parallel,
    get_effective_worker_count,
)

from Amp_Gain_Search.parallel.result_store import (
    ProgressCounters,
    ResultStore,
    SharedCursor,
)

from Amp_Gain_Search.parallel.progress_monitor import (
    ConsoleProgressRenderer,
    LoggingProgressRenderer,
    ProgressMonitor,
    render_progress_bar,
)

from Amp_Gain_Search.parallel.cached_search_orchestrator import run_cached_search

__all__ = [
    # Orchestrator
    "GainSearchEngine",
    "run_gain_search",
    "run_cached_search",
    "should_use_parallel",
    "get_effective_worker_count",
    # Shared state
    "ProgressCounters",
    "ResultStore",
    "SharedCursor",
    # Progress
    "ConsoleProgressRenderer",
    "LoggingProgressRenderer",
    "ProgressMonitor",
    "render_progress_bar",
]
