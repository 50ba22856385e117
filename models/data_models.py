"""
Typed data models for the two-stage gain search.

Architectural Overview:
=======================
This module contains the immutable dataclasses that flow through the search:
stage gain ranges, the combinations built from them, and the solutions the
feasibility solver accepts.

Key Interactions:
-----------------
- Input: gain_grid.py creates GainRange instances, combinations.py pairs them
- Output: feasibility.py creates ZoneSpan/Solution instances
- Consumers: exporters.py and visualization/ read Solutions via as_dict()
- Navigation: Use VS Code outline (Ctrl+Shift+O) for quick navigation

Data Flow:
----------
1. GainValueGenerator creates GainRange(stage, min_gain, max_gain)
2. CombinationEnumerator pairs a FIRST and a SECOND stage range
3. FeasibilitySolver orders the four composite gains into zones and, when
   feasible, creates one Solution per passing ordering
4. Solutions are appended once to the ResultStore and never mutated

MODIFICATION POINT: Add new per-solution fields to Solution.as_dict() so the
exporters pick them up.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Tuple


# ═══════════════════════════════════════════════════════════════════════════
# 🏷️ ENUMS SECTION
# ═══════════════════════════════════════════════════════════════════════════


class Stage(Enum):
    """Which amplifier stage a gain range belongs to."""

    FIRST = 1
    SECOND = 2

    @classmethod
    def from_value(cls, value: Any) -> "Stage":
        """Convert 1/2 (or an existing Stage) to Stage.

        Raises:
            ValueError: If value is not a known stage id.
        """
        if isinstance(value, Stage):
            return value
        for member in cls:
            if member.value == value:
                return member
        raise ValueError(f"Unknown stage id: {value!r}")


# ═══════════════════════════════════════════════════════════════════════════
# 📐 GAIN RANGE / COMBINATION SECTION
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class GainRange:
    """Switchable gain extremes of one stage.

    Both values lie on the quantized grid, and min_gain < max_gain.
    """

    stage: Stage
    min_gain: float
    max_gain: float

    def __post_init__(self) -> None:
        if not self.min_gain < self.max_gain:
            raise ValueError(
                f"GainRange requires min < max, got [{self.min_gain}, {self.max_gain}]"
            )

    @property
    def extremes(self) -> Tuple[float, float]:
        return (self.min_gain, self.max_gain)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "stage": self.stage.value,
            "min": self.min_gain,
            "max": self.max_gain,
        }


@dataclass(frozen=True)
class Combination:
    """One (stage1, stage2) candidate pair under evaluation."""

    stage1: GainRange
    stage2: GainRange

    @property
    def composite_gains(self) -> Tuple[float, float, float, float]:
        """The four composite gains {s1.min, s1.max} x {s2.min, s2.max}.

        Order: (min*min, min*max, max*min, max*max).
        """
        a, b = self.stage1.extremes
        c, d = self.stage2.extremes
        return (a * c, a * d, b * c, b * d)

    @property
    def key(self) -> Tuple[float, float, float, float]:
        """Sortable identity: (stage1.min, stage1.max, stage2.min, stage2.max)."""
        return (
            self.stage1.min_gain,
            self.stage1.max_gain,
            self.stage2.min_gain,
            self.stage2.max_gain,
        )


# ═══════════════════════════════════════════════════════════════════════════
# 🏗️ SOLUTION SECTION
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class ZoneSpan:
    """One contiguous input zone served by a single composite gain."""

    index: int
    gain: float
    lower: float
    upper: float

    @property
    def output_lower(self) -> float:
        return self.lower * self.gain

    @property
    def output_upper(self) -> float:
        return self.upper * self.gain

    @property
    def width(self) -> float:
        return self.upper - self.lower


@dataclass(frozen=True)
class Solution:
    """Immutable feasible configuration.

    Created only by the feasibility solver after every zone check passed.

    Attributes:
        combination: The stage gain ranges.
        gains: The four composite gains in zone order (the Assignment).
        breakpoints: The three interior zone boundaries.
        zones: The four ZoneSpans, left to right across [x1, x2].
    """

    combination: Combination
    gains: Tuple[float, float, float, float]
    breakpoints: Tuple[float, float, float]
    zones: Tuple[ZoneSpan, ZoneSpan, ZoneSpan, ZoneSpan]

    @property
    def stage1(self) -> GainRange:
        return self.combination.stage1

    @property
    def stage2(self) -> GainRange:
        return self.combination.stage2

    @property
    def output_ranges(self) -> Tuple[Tuple[float, float], ...]:
        """Per-zone achieved output sub-range [lower*gain, upper*gain]."""
        return tuple((z.output_lower, z.output_upper) for z in self.zones)

    @property
    def input_ranges(self) -> Tuple[Tuple[float, float], ...]:
        return tuple((z.lower, z.upper) for z in self.zones)

    @property
    def sort_key(self) -> Tuple[Any, ...]:
        """Stable ordering key: stage ranges first, then the assignment."""
        return self.combination.key + tuple(self.gains)

    def as_dict(self) -> Dict[str, Any]:
        """Flatten to a dict for exports (one key per scalar)."""
        row: Dict[str, Any] = {
            "stage1_min": self.stage1.min_gain,
            "stage1_max": self.stage1.max_gain,
            "stage2_min": self.stage2.min_gain,
            "stage2_max": self.stage2.max_gain,
        }
        for i, gain in enumerate(self.gains):
            row[f"gain_{i}"] = gain
        for i, bp in enumerate(self.breakpoints):
            row[f"breakpoint_{i}"] = bp
        for zone in self.zones:
            row[f"zone_{zone.index}_out_min"] = zone.output_lower
            row[f"zone_{zone.index}_out_max"] = zone.output_upper
        return row


def solutions_to_dicts(solutions: List[Solution]) -> List[Dict[str, Any]]:
    """Convert a list of Solutions to a list of flat dicts."""
    return [s.as_dict() for s in solutions]


def sort_solutions(solutions: List[Solution]) -> List[Solution]:
    """Return solutions in deterministic order (see Solution.sort_key)."""
    return sorted(solutions, key=lambda s: s.sort_key)
