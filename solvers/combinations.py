"""
Combination space for the two-stage search.

Architectural Overview:
    Responsibility: Expose the cross product stage1 x stage2 of gain ranges as
        a fixed-size, index-addressable sequence, and bundle it with the grid
        it came from into the read-only SearchSpace shared by all workers.
    Key Interactions:
        - gain_grid.py supplies the per-stage GainRange tuples
        - parallel/search_orchestrator.py splits the index range or hands it
          to a shared cursor
        - parallel/search_worker.py reads combinations by index
    Navigation Guide:
        1. COMBINATION ENUMERATOR
        2. SEARCH SPACE
    For Navigation: Use Ctrl+Shift+O → CombinationEnumerator

Index layout: index i maps to (stage1[i // n2], stage2[i % n2]), so a
contiguous index range walks stage2 fastest.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Iterator, List, Tuple, TYPE_CHECKING

import numpy as np

from Amp_Gain_Search.models.data_models import Combination, GainRange, Stage
from Amp_Gain_Search.solvers.gain_grid import (
    generate_gain_magnitudes,
    generate_gain_ranges,
)

if TYPE_CHECKING:
    from Amp_Gain_Search.config_types import SearchConfig

logger = logging.getLogger("AmpSearch.Solvers.Combinations")


# ═══════════════════════════════════════════════════════════════════════════
# 🧮 COMBINATION ENUMERATOR
# ═══════════════════════════════════════════════════════════════════════════


class CombinationEnumerator(Sequence):
    """
    Index-addressable cross product of stage1 and stage2 gain ranges.

    Supports len(), indexing (including negative indices), sequential
    iteration and contiguous slices via iter_range(). Holds only the two
    input tuples; combinations are built on access.

    Usage:
        enumerator = CombinationEnumerator(stage1_ranges, stage2_ranges)
        total = len(enumerator)
        for index, combo in enumerator.iter_range(0, 100):
            ...
    """

    def __init__(
        self,
        stage1_ranges: Tuple[GainRange, ...],
        stage2_ranges: Tuple[GainRange, ...],
    ) -> None:
        self._stage1 = tuple(stage1_ranges)
        self._stage2 = tuple(stage2_ranges)
        self._n2 = len(self._stage2)
        self._total = len(self._stage1) * self._n2

    @property
    def stage1_ranges(self) -> Tuple[GainRange, ...]:
        return self._stage1

    @property
    def stage2_ranges(self) -> Tuple[GainRange, ...]:
        return self._stage2

    def __len__(self) -> int:
        return self._total

    def __getitem__(self, index):
        if isinstance(index, slice):
            return [self._build(i) for i in range(*index.indices(self._total))]
        if index < 0:
            index += self._total
        if not 0 <= index < self._total:
            raise IndexError(
                f"combination index {index} out of range for {self._total} combinations"
            )
        return self._build(index)

    def __iter__(self) -> Iterator[Combination]:
        for s1 in self._stage1:
            for s2 in self._stage2:
                yield Combination(stage1=s1, stage2=s2)

    def _build(self, index: int) -> Combination:
        i1, i2 = divmod(index, self._n2)
        return Combination(stage1=self._stage1[i1], stage2=self._stage2[i2])

    def iter_range(self, start: int, stop: int) -> Iterator[Tuple[int, Combination]]:
        """
        Yield (index, Combination) for a contiguous index range.

        Args:
            start: First index (inclusive), clamped to [0, total].
            stop: Last index (exclusive), clamped to [0, total].
        """
        start = max(0, start)
        stop = min(stop, self._total)
        for index in range(start, stop):
            yield index, self._build(index)

    def split_ranges(self, n_chunks: int) -> List[Tuple[int, int]]:
        """
        Split [0, total) into at most n_chunks contiguous, non-empty ranges.

        Ranges cover every index exactly once; sizes differ by at most one.

        Args:
            n_chunks: Desired number of ranges (>= 1).

        Returns:
            List of (start, stop) tuples in ascending order.
        """
        if n_chunks < 1:
            raise ValueError(f"n_chunks must be >= 1, got {n_chunks}")
        if self._total == 0:
            return []
        n_chunks = min(n_chunks, self._total)
        base, extra = divmod(self._total, n_chunks)
        ranges = []
        start = 0
        for i in range(n_chunks):
            stop = start + base + (1 if i < extra else 0)
            ranges.append((start, stop))
            start = stop
        return ranges


# ═══════════════════════════════════════════════════════════════════════════
# 🗺️ SEARCH SPACE
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class SearchSpace:
    """
    Read-only search space shared by reference with every worker.

    Attributes:
        magnitudes: Quantized gain magnitudes used for both stages.
        step: Grid quantum the magnitudes were built from.
        combinations: Index-addressable stage1 x stage2 cross product.
    """

    magnitudes: Tuple[float, ...]
    step: float
    combinations: CombinationEnumerator

    @property
    def total(self) -> int:
        return len(self.combinations)

    @property
    def n_ranges_per_stage(self) -> int:
        return len(self.combinations.stage1_ranges)


def build_search_space(config: "SearchConfig", epsilon: float = 1e-6) -> SearchSpace:
    """
    Derive the SearchSpace for one run.

    Both stages draw from the same magnitude grid, bounded by
    [step, config.gain_ceiling].

    Args:
        config: Validated SearchConfig.
        epsilon: Absolute tolerance for the grid ceiling.

    Returns:
        SearchSpace with total = (n*(n-1)/2)**2 combinations for n magnitudes.
    """
    magnitudes: np.ndarray = generate_gain_magnitudes(
        x_bound=config.x1,
        v_max=config.v_max,
        step=config.step,
        max_gain=config.max_gain,
        epsilon=epsilon,
    )
    stage1 = generate_gain_ranges(Stage.FIRST, magnitudes)
    stage2 = generate_gain_ranges(Stage.SECOND, magnitudes)
    space = SearchSpace(
        magnitudes=tuple(float(m) for m in magnitudes),
        step=config.step,
        combinations=CombinationEnumerator(stage1, stage2),
    )

    if len(magnitudes):
        logger.info(
            f"📊 Gain grid: {len(magnitudes)} magnitudes "
            f"({magnitudes[0]:g} to {magnitudes[-1]:g}, step {config.step:g})"
        )
    else:
        logger.info(f"📊 Gain grid: empty (ceiling {config.gain_ceiling:g} < step)")
    logger.info(
        f"   Ranges per stage: {space.n_ranges_per_stage}, "
        f"combinations: {space.total:,}"
    )
    return space
