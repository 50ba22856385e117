"""
Worker functions for evaluating slices of the combination space.

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Evaluate combinations and push accepted Solutions into the
shared ResultStore.
THIN WRAPPER pattern - the feasibility logic lives in
solvers/feasibility.py: evaluate_combination().

Two entry points, one per dispatch mode:
- worker_process_range(): one static contiguous (start, stop) range
- worker_claim_loop(): claim batches from a SharedCursor until exhausted

Follows the orchestrator/worker split:
- Workers share the read-only SearchSpace by reference
- processed is counted once per combination, found once per Solution
- The cancel event is checked once per outer loop iteration
- Silent logging (debug only) to avoid interleaved output
- Return a small stats dict, never the solutions themselves

For Navigation: Use VS Code outline (Ctrl+Shift+O)
"""

import logging
import threading
import time
from typing import Any, Dict, Optional, TYPE_CHECKING

from Amp_Gain_Search.parallel.result_store import (
    ProgressCounters,
    ResultStore,
    SharedCursor,
)
from Amp_Gain_Search.solvers.combinations import SearchSpace
from Amp_Gain_Search.solvers.feasibility import evaluate_combination
from Amp_Gain_Search.solvers.solver_config import FeasibilityConfig

if TYPE_CHECKING:
    from Amp_Gain_Search.config_types import SearchConfig

# Flush counters to the shared object every this many combinations
COUNTER_FLUSH_EVERY = 64


# ═══════════════════════════════════════════════════════════════════════════
# 🔧 WORKER LOGGING SETUP
# ═══════════════════════════════════════════════════════════════════════════


def _setup_worker_logging(worker_id: int) -> logging.Logger:
    """
    Get a named logger for this worker.

    Args:
        worker_id: Index of the worker in the pool (used in logger name)

    Returns:
        Logger instance for this worker
    """
    return logging.getLogger(f"AmpSearch.Worker.{worker_id}")


# ═══════════════════════════════════════════════════════════════════════════
# 📊 WORKER RESULT HELPERS
# ═══════════════════════════════════════════════════════════════════════════


def _create_worker_stats(worker_id: int) -> Dict[str, Any]:
    """Create the initial per-worker stats structure."""
    return {
        "worker_id": worker_id,
        "processed": 0,
        "found": 0,
        "batches": 0,
        "cancelled": False,
        "duration_seconds": 0.0,
    }


def _evaluate_slice(
    start: int,
    stop: int,
    space: SearchSpace,
    config: "SearchConfig",
    feasibility: FeasibilityConfig,
    store: ResultStore,
    counters: ProgressCounters,
    cancel_event: Optional[threading.Event],
    stats: Dict[str, Any],
) -> bool:
    """
    Evaluate combinations [start, stop).

    Counter updates are batched locally and flushed every
    COUNTER_FLUSH_EVERY combinations, and always before returning.

    Returns:
        False if the cancel event was seen, True otherwise.
    """
    pending_processed = 0
    pending_found = 0
    completed = True

    for _, combination in space.combinations.iter_range(start, stop):
        if cancel_event is not None and cancel_event.is_set():
            completed = False
            break

        solutions = evaluate_combination(combination, config, feasibility)
        if solutions:
            pending_found += store.extend(solutions)
        pending_processed += 1

        if pending_processed >= COUNTER_FLUSH_EVERY:
            counters.add(processed=pending_processed, found=pending_found)
            stats["processed"] += pending_processed
            stats["found"] += pending_found
            pending_processed = pending_found = 0

    if pending_processed or pending_found:
        counters.add(processed=pending_processed, found=pending_found)
        stats["processed"] += pending_processed
        stats["found"] += pending_found

    return completed


# ═══════════════════════════════════════════════════════════════════════════
# 🚀 WORKER ENTRY POINTS
# ═══════════════════════════════════════════════════════════════════════════


def worker_process_range(
    worker_id: int,
    start: int,
    stop: int,
    space: SearchSpace,
    config: "SearchConfig",
    feasibility: FeasibilityConfig,
    store: ResultStore,
    counters: ProgressCounters,
    cancel_event: Optional[threading.Event] = None,
) -> Dict[str, Any]:
    """
    Evaluate one static contiguous range of combination indices.

    Args:
        worker_id: Index of this worker.
        start: First index (inclusive).
        stop: Last index (exclusive).
        space: Shared read-only SearchSpace.
        config: Search problem.
        feasibility: Solver settings.
        store: Shared ResultStore.
        counters: Shared ProgressCounters.
        cancel_event: Optional cooperative cancellation flag.

    Returns:
        Stats dict (worker_id, processed, found, batches, cancelled,
        duration_seconds).
    """
    log = _setup_worker_logging(worker_id)
    start_time = time.perf_counter()
    stats = _create_worker_stats(worker_id)

    completed = _evaluate_slice(
        start, stop, space, config, feasibility, store, counters, cancel_event, stats
    )
    stats["batches"] = 1
    stats["cancelled"] = not completed
    stats["duration_seconds"] = time.perf_counter() - start_time

    log.debug(
        f"range [{start}, {stop}) done: {stats['processed']} processed, "
        f"{stats['found']} found in {stats['duration_seconds']:.2f}s"
    )
    return stats


def worker_claim_loop(
    worker_id: int,
    cursor: SharedCursor,
    space: SearchSpace,
    config: "SearchConfig",
    feasibility: FeasibilityConfig,
    store: ResultStore,
    counters: ProgressCounters,
    cancel_event: Optional[threading.Event] = None,
) -> Dict[str, Any]:
    """
    Claim batches from the shared cursor until it is exhausted.

    The worker decides on its own when to stop: cursor.claim() returns None
    once every index has been handed out.

    Returns:
        Stats dict (same shape as worker_process_range()).
    """
    log = _setup_worker_logging(worker_id)
    start_time = time.perf_counter()
    stats = _create_worker_stats(worker_id)

    while True:
        if cancel_event is not None and cancel_event.is_set():
            stats["cancelled"] = True
            break
        claimed = cursor.claim()
        if claimed is None:
            break
        start, stop = claimed
        stats["batches"] += 1
        if not _evaluate_slice(
            start, stop, space, config, feasibility, store, counters, cancel_event, stats
        ):
            stats["cancelled"] = True
            break

    stats["duration_seconds"] = time.perf_counter() - start_time
    log.debug(
        f"cursor loop done: {stats['batches']} batches, {stats['processed']} processed, "
        f"{stats['found']} found in {stats['duration_seconds']:.2f}s"
    )
    return stats
