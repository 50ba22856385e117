"""
Typed dataclasses for search progress and run results.

Architectural Overview:
=======================
This module provides the two values the engine hands to its callers: a
ProgressSnapshot that can be sampled at any time during a run, and the
SearchResult returned once every worker has joined.

Key Interactions:
-----------------
- Input: parallel/result_store.py builds snapshots from ProgressCounters,
  parallel/search_orchestrator.py builds the SearchResult
- Output: main.py, exporters.py and the progress renderer read them
- Navigation: Use VS Code outline (Ctrl+Shift+O) for quick navigation

MODIFICATION POINT: Add new run-level statistics to SearchResult.to_dict()
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

from .data_models import Solution, sort_solutions


# ═══════════════════════════════════════════════════════════════════════════
# 📊 PROGRESS SNAPSHOT
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class ProgressSnapshot:
    """Point-in-time view of (processed, total, found)."""

    processed: int = 0
    total: int = 0
    found: int = 0

    @property
    def fraction(self) -> float:
        """Completed fraction in [0, 1]. An empty search counts as complete."""
        if self.total <= 0:
            return 1.0
        return min(1.0, self.processed / self.total)

    @property
    def percent(self) -> float:
        return self.fraction * 100.0

    @property
    def is_complete(self) -> bool:
        return self.processed >= self.total

    def to_dict(self) -> Dict[str, Any]:
        return {
            "processed": self.processed,
            "total": self.total,
            "found": self.found,
            "percent": round(self.percent, 2),
        }


# ═══════════════════════════════════════════════════════════════════════════
# 📦 SEARCH RESULT
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class SearchResult:
    """Everything one run produced.

    Key Fields:
    -----------
    solutions: Solutions in storage order. Storage order depends on thread
               interleaving; use sorted_solutions() for stable output.
    snapshot: Final progress counters.
    cancelled: True when the run was stopped before the space was exhausted.
    from_cache: True when the solutions were loaded from the result cache.
    """

    solutions: Tuple[Solution, ...]
    snapshot: ProgressSnapshot
    n_workers: int = 1
    duration_seconds: float = 0.0
    cancelled: bool = False
    from_cache: bool = False
    stats: Dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def solution_count(self) -> int:
        return len(self.solutions)

    def sorted_solutions(self) -> List[Solution]:
        return sort_solutions(list(self.solutions))

    def to_dict(self) -> Dict[str, Any]:
        """Summary without the solutions themselves (for logs / JSON)."""
        return {
            "solution_count": self.solution_count,
            "progress": self.snapshot.to_dict(),
            "n_workers": self.n_workers,
            "duration_seconds": round(self.duration_seconds, 3),
            "cancelled": self.cancelled,
            "from_cache": self.from_cache,
            **self.stats,
        }
