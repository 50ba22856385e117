"""
Shared run state for the worker pool.

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: The only mutable objects workers share during a run.

- ResultStore: append-only list of Solutions behind one lock
- ProgressCounters: processed/found counters; locked increments, plain reads
- SharedCursor: hands out contiguous index batches, each exactly once

All three are created per run by the orchestrator and dropped when the run
returns, so nothing persists between runs. The SearchSpace itself is never
mutated and needs no lock.

For Navigation: Use VS Code outline (Ctrl+Shift+O)
"""

import threading
from typing import Iterable, List, Optional, Tuple

from Amp_Gain_Search.models.data_models import Solution, sort_solutions
from Amp_Gain_Search.models.search_stats import ProgressSnapshot


# ═══════════════════════════════════════════════════════════════════════════
# 📦 RESULT STORE
# ═══════════════════════════════════════════════════════════════════════════


class ResultStore:
    """
    Append-only collection of accepted Solutions.

    append()/extend() are the only mutations and hold the lock only for the
    list operation. Read with solutions() after every worker has joined;
    storage order follows thread interleaving and is not deterministic.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._solutions: List[Solution] = []

    def append(self, solution: Solution) -> None:
        with self._lock:
            self._solutions.append(solution)

    def extend(self, solutions: Iterable[Solution]) -> int:
        """Append several solutions in one critical section. Returns the count."""
        batch = list(solutions)
        if not batch:
            return 0
        with self._lock:
            self._solutions.extend(batch)
        return len(batch)

    def __len__(self) -> int:
        return len(self._solutions)

    def solutions(self) -> Tuple[Solution, ...]:
        """Immutable snapshot in storage order."""
        with self._lock:
            return tuple(self._solutions)

    def sorted_solutions(self) -> List[Solution]:
        """Snapshot ordered by Solution.sort_key."""
        return sort_solutions(list(self.solutions()))


# ═══════════════════════════════════════════════════════════════════════════
# 📊 PROGRESS COUNTERS
# ═══════════════════════════════════════════════════════════════════════════


class ProgressCounters:
    """
    Processed / found counters shared by workers and the progress monitor.

    Increments take a private lock; processed and found are plain int
    attributes, so observers read them without locking.

    Attributes:
        total: Precomputed number of combinations in the run.
        processed: Combinations evaluated so far (one per combination).
        found: Solutions appended so far.
    """

    def __init__(self, total: int) -> None:
        if total < 0:
            raise ValueError(f"total must be >= 0, got {total}")
        self.total = total
        self.processed = 0
        self.found = 0
        self._lock = threading.Lock()

    def add(self, processed: int = 0, found: int = 0) -> None:
        with self._lock:
            self.processed += processed
            self.found += found

    def snapshot(self) -> ProgressSnapshot:
        return ProgressSnapshot(
            processed=self.processed,
            total=self.total,
            found=self.found,
        )

    @property
    def is_complete(self) -> bool:
        return self.processed >= self.total


# ═══════════════════════════════════════════════════════════════════════════
# 🎯 SHARED CURSOR
# ═══════════════════════════════════════════════════════════════════════════


class SharedCursor:
    """
    Atomically-claimed cursor over [0, total).

    Each claim() returns the next (start, stop) batch or None once the range
    is exhausted, so every worker can stop on its own without coordinating.
    """

    def __init__(self, total: int, batch_size: int) -> None:
        if batch_size <= 0:
            raise ValueError(f"batch_size must be > 0, got {batch_size}")
        self.total = total
        self.batch_size = batch_size
        self._next = 0
        self._lock = threading.Lock()

    def claim(self) -> Optional[Tuple[int, int]]:
        with self._lock:
            start = self._next
            if start >= self.total:
                return None
            stop = min(start + self.batch_size, self.total)
            self._next = stop
        return start, stop

    @property
    def position(self) -> int:
        return self._next
