"""Data models package for typed gain-search data structures."""

from .data_models import (
    Stage,
    GainRange,
    Combination,
    ZoneSpan,
    Solution,
    # Batch conversion utilities
    solutions_to_dicts,
    sort_solutions,
)

from .search_stats import (
    ProgressSnapshot,
    SearchResult,
)

__all__ = [
    # Search models
    "Stage",
    "GainRange",
    "Combination",
    "ZoneSpan",
    "Solution",
    # Batch conversion utilities
    "solutions_to_dicts",
    "sort_solutions",
    # Run-level models
    "ProgressSnapshot",
    "SearchResult",
]
