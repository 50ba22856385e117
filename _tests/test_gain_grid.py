"""
Unit tests for the gain grid.

Tests:
1. Magnitudes are k*step up to v_max / x1 (inclusive within epsilon)
2. Floating point steps land on clean grid values
3. Halving the step refines the grid (coarse grid is a subset)
4. max_gain caps the grid
5. Empty grids (ceiling below step, non-positive input bound)
6. Stage gain ranges are every (low, high) pair with low < high

Run with: python -m pytest _tests/test_gain_grid.py -v
"""

import numpy as np
import pytest

from Amp_Gain_Search.models.data_models import GainRange, Stage
from Amp_Gain_Search.solvers.gain_grid import (
    count_gain_ranges,
    generate_gain_magnitudes,
    generate_gain_ranges,
)


class TestGainMagnitudes:
    """Test generate_gain_magnitudes()."""

    def test_integer_step(self):
        """Grid runs from step to v_max / x1 inclusive."""
        mags = generate_gain_magnitudes(1.0, 4.0, 1.0)
        assert mags.tolist() == [1.0, 2.0, 3.0, 4.0]

    def test_ceiling_not_multiple_of_step(self):
        """The last magnitude is the largest multiple below the ceiling."""
        mags = generate_gain_magnitudes(2.0, 9.0, 1.0)  # ceiling 4.5
        assert mags.tolist() == [1.0, 2.0, 3.0, 4.0]

    def test_fractional_step_is_clean(self):
        """0.1 steps produce 0.1, 0.2, 0.3 and include the ceiling."""
        mags = generate_gain_magnitudes(1.0, 0.3, 0.1)
        assert len(mags) == 3
        assert mags[-1] == pytest.approx(0.3)
        assert 0.3 in mags.tolist()

    def test_ascending_and_positive(self):
        mags = generate_gain_magnitudes(0.03, 1.9, 0.5)
        assert np.all(np.diff(mags) > 0)
        assert mags[0] == pytest.approx(0.5)
        assert mags[-1] <= 1.9 / 0.03 + 1e-6

    def test_halving_step_refines_grid(self):
        """Every coarse magnitude appears exactly in the fine grid."""
        coarse = set(generate_gain_magnitudes(0.03, 1.9, 1.0).tolist())
        fine = set(generate_gain_magnitudes(0.03, 1.9, 0.5).tolist())
        assert coarse <= fine
        assert len(fine) > len(coarse)

    def test_max_gain_caps_grid(self):
        mags = generate_gain_magnitudes(1.0, 8.0, 1.0, max_gain=5.0)
        assert mags.tolist() == [1.0, 2.0, 3.0, 4.0, 5.0]

    def test_max_gain_above_ceiling_has_no_effect(self):
        mags = generate_gain_magnitudes(1.0, 4.0, 1.0, max_gain=100.0)
        assert mags.tolist() == [1.0, 2.0, 3.0, 4.0]


class TestEmptyGrids:
    """Edge cases where no magnitude fits."""

    def test_ceiling_below_step(self):
        mags = generate_gain_magnitudes(1.0, 0.5, 1.0)
        assert mags.size == 0

    def test_non_positive_bound_without_cap(self):
        """x1 <= 0 gives no ceiling; without max_gain the grid is empty."""
        mags = generate_gain_magnitudes(0.0, 4.0, 1.0)
        assert mags.size == 0

    def test_non_positive_bound_with_cap(self):
        mags = generate_gain_magnitudes(-1.0, 4.0, 1.0, max_gain=3.0)
        assert mags.tolist() == [1.0, 2.0, 3.0]

    def test_step_must_exceed_epsilon(self):
        with pytest.raises(ValueError, match="step"):
            generate_gain_magnitudes(1.0, 4.0, 0.0)


class TestGainRanges:
    """Test generate_gain_ranges() and count_gain_ranges()."""

    @pytest.mark.parametrize("n, expected", [(0, 0), (1, 0), (2, 1), (4, 6), (8, 28)])
    def test_count(self, n, expected):
        assert count_gain_ranges(n) == expected

    def test_pairs_are_ordered(self):
        ranges = generate_gain_ranges(Stage.FIRST, np.array([1.0, 2.0, 3.0]))
        assert [r.extremes for r in ranges] == [(1.0, 2.0), (1.0, 3.0), (2.0, 3.0)]
        assert all(r.stage is Stage.FIRST for r in ranges)

    def test_count_matches_generation(self):
        mags = generate_gain_magnitudes(1.0, 8.0, 1.0)
        ranges = generate_gain_ranges(Stage.SECOND, mags)
        assert len(ranges) == count_gain_ranges(len(mags))
        assert all(r.min_gain < r.max_gain for r in ranges)

    def test_single_magnitude_gives_no_ranges(self):
        assert generate_gain_ranges(Stage.FIRST, np.array([1.0])) == ()

    def test_gain_range_rejects_inverted_pair(self):
        with pytest.raises(ValueError):
            GainRange(stage=Stage.FIRST, min_gain=2.0, max_gain=2.0)
