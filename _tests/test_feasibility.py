"""
Unit tests for the feasibility solver.

Tests:
1. Reference scenario: gains {8, 6, 4, 2} on [1, 4] -> [2, 8]
2. Rejection when the smallest gain overshoots Vmax at x2
3. Ties and degenerate gains prune the whole set
4. Exhaustive vs monotone assignment, report all vs first
5. Breakpoint sweep edge cases (gaps between zones, inverted zones)
6. evaluate_combination() builds valid Solutions
7. verify_solution() flags broken solutions

Run with: python -m pytest _tests/test_feasibility.py -v
"""

import dataclasses

import pytest

from Amp_Gain_Search.config_types import SearchConfig
from Amp_Gain_Search.models.data_models import Combination, GainRange, Stage
from Amp_Gain_Search.solvers.feasibility import (
    candidate_assignments,
    compute_breakpoints,
    evaluate_combination,
    evaluate_gain_set,
    has_degenerate_gain,
    has_gain_ties,
    verify_solution,
)
from Amp_Gain_Search.solvers.solver_config import FeasibilityConfig


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def reference_config():
    """Input [1, 4], output [2, 8]."""
    return SearchConfig(x1=1.0, x2=4.0, v_min=2.0, v_max=8.0, step=1.0, workers=1)


@pytest.fixture
def feasible_combination():
    """Stage 1 [1, 2] x stage 2 [2, 3] -> composite gains {2, 3, 4, 6}."""
    return Combination(
        stage1=GainRange(Stage.FIRST, 1.0, 2.0),
        stage2=GainRange(Stage.SECOND, 2.0, 3.0),
    )


# ============================================================================
# REFERENCE SCENARIO
# ============================================================================


class TestReferenceScenario:
    """Gains {8, 6, 4, 2} over input [1, 4] and output [2, 8]."""

    def test_exactly_one_assignment(self, reference_config):
        layouts = evaluate_gain_set([8.0, 6.0, 4.0, 2.0], reference_config)
        assert len(layouts) == 1

    def test_descending_assignment_and_breakpoints(self, reference_config):
        assignment, breakpoints, _ = evaluate_gain_set(
            [2.0, 4.0, 6.0, 8.0], reference_config
        )[0]
        assert assignment == (8.0, 6.0, 4.0, 2.0)
        assert breakpoints == pytest.approx((1.0, 4.0 / 3.0, 2.0))

    def test_zone_outputs(self, reference_config):
        _, _, zones = evaluate_gain_set([8.0, 6.0, 4.0, 2.0], reference_config)[0]
        outputs = [(z.output_lower, z.output_upper) for z in zones]
        assert outputs == pytest.approx(
            [(8.0, 8.0), (6.0, 8.0), (16.0 / 3.0, 8.0), (4.0, 8.0)]
        )

    def test_zones_partition_input(self, reference_config):
        _, _, zones = evaluate_gain_set([8.0, 6.0, 4.0, 2.0], reference_config)[0]
        assert zones[0].lower == reference_config.x1
        assert zones[-1].upper == reference_config.x2
        for left, right in zip(zones, zones[1:]):
            assert left.upper == right.lower

    def test_smallest_gain_too_large_rejected(self, reference_config):
        """3 * 4 = 12 > 8: no zone can serve x2."""
        assert evaluate_gain_set([8.0, 6.0, 4.0, 3.0], reference_config) == []

    def test_wrong_gain_count(self, reference_config):
        with pytest.raises(ValueError, match="4 gains"):
            evaluate_gain_set([8.0, 6.0, 4.0], reference_config)


# ============================================================================
# PRUNING CHECKS
# ============================================================================


class TestPruning:
    """Whole-set rejections."""

    def test_ties_detected(self):
        assert has_gain_ties([2.0, 4.0, 4.0, 8.0])
        assert has_gain_ties([2.0, 4.0, 4.0 + 1e-9, 8.0])
        assert not has_gain_ties([2.0, 3.0, 4.0, 6.0])

    def test_tied_gains_rejected(self, reference_config):
        assert evaluate_gain_set([8.0, 4.0, 4.0, 2.0], reference_config) == []

    def test_degenerate_gain(self):
        assert has_degenerate_gain([0.0, 1.0, 2.0, 3.0])
        assert not has_degenerate_gain([0.5, 1.0, 2.0, 3.0])

    def test_tied_combination_rejected(self, reference_config):
        """[1, 2] x [2, 4] gives 1*4 == 2*2."""
        combo = Combination(
            stage1=GainRange(Stage.FIRST, 1.0, 2.0),
            stage2=GainRange(Stage.SECOND, 2.0, 4.0),
        )
        assert evaluate_combination(combo, reference_config) == []

    def test_largest_gain_too_small_rejected(self):
        """No gain lifts x1 up to Vmin."""
        config = SearchConfig(x1=1.0, x2=2.0, v_min=10.0, v_max=20.0, workers=1)
        assert evaluate_gain_set([2.0, 3.0, 4.0, 6.0], config) == []


# ============================================================================
# ASSIGNMENT MODES
# ============================================================================


class TestAssignmentModes:
    """Exhaustive vs monotone, all vs first."""

    def test_exhaustive_has_24_orderings(self):
        assert len(candidate_assignments([1.0, 2.0, 3.0, 4.0], "exhaustive")) == 24

    def test_monotone_is_descending(self):
        assert candidate_assignments([2.0, 8.0, 4.0, 6.0], "monotone") == [
            (8.0, 6.0, 4.0, 2.0)
        ]

    def test_unknown_mode(self):
        with pytest.raises(ValueError):
            candidate_assignments([1.0, 2.0, 3.0, 4.0], "random")

    def test_monotone_finds_reference_solution(self, reference_config):
        fast = FeasibilityConfig(assignment_mode="monotone")
        layouts = evaluate_gain_set([2.0, 4.0, 6.0, 8.0], reference_config, fast)
        assert [a for a, _, _ in layouts] == [(8.0, 6.0, 4.0, 2.0)]

    def test_report_first_keeps_one(self, reference_config):
        gains = [2.0, 3.0, 4.0, 6.0]
        all_layouts = evaluate_gain_set(gains, reference_config)
        first = evaluate_gain_set(
            gains, reference_config, FeasibilityConfig(report_mode="first")
        )
        assert len(first) == 1
        assert first[0][0] == all_layouts[0][0]

    def test_only_non_increasing_orderings_survive(self, reference_config):
        """Each breakpoint is Vmax / gain, so gains must not rise left to right."""
        layouts = evaluate_gain_set([2.0, 3.0, 4.0, 6.0], reference_config)
        assert [a for a, _, _ in layouts] == [(6.0, 4.0, 3.0, 2.0)]

    def test_incomplete_flag(self):
        assert FeasibilityConfig().is_complete
        assert not FeasibilityConfig(assignment_mode="monotone").is_complete
        assert not FeasibilityConfig(report_mode="first").is_complete


# ============================================================================
# BREAKPOINT SWEEP
# ============================================================================


class TestBreakpointSweep:
    """compute_breakpoints() edge cases."""

    def test_increasing_gain_after_breakpoint_rejected(self, reference_config):
        """Zone 1 would have to start above where its gain exceeds Vmax."""
        assert compute_breakpoints((6.0, 8.0, 4.0, 2.0), reference_config) is None

    def test_gap_between_zones_rejected(self):
        """Gain drops so far that the next zone starts below Vmin."""
        config = SearchConfig(x1=1.0, x2=10.0, v_min=5.0, v_max=6.0, workers=1)
        # zone 0 ends at 6/6 = 1; gain 0.6 at input 1 gives 0.6 < 5
        assert compute_breakpoints((6.0, 0.6, 0.55, 0.5), config) is None

    def test_last_zone_must_reach_x2(self):
        """Final zone cannot start past x2."""
        config = SearchConfig(x1=1.0, x2=1.5, v_min=1.0, v_max=8.0, workers=1)
        # breakpoints 1, 2, 4: the last zone would start at 4 > x2
        assert compute_breakpoints((8.0, 4.0, 2.0, 1.0), config) is None

    def test_boundary_within_epsilon_accepted(self, reference_config):
        """2 * 4 == Vmax exactly is allowed."""
        assert compute_breakpoints((8.0, 6.0, 4.0, 2.0), reference_config) is not None

    def test_breakpoints_ordered(self, reference_config):
        bps = compute_breakpoints((8.0, 6.0, 4.0, 2.0), reference_config)
        assert reference_config.x1 <= bps[0] <= bps[1] <= bps[2] <= reference_config.x2


# ============================================================================
# SOLUTIONS
# ============================================================================


class TestEvaluateCombination:
    """evaluate_combination() and verify_solution()."""

    def test_feasible_combination(self, reference_config, feasible_combination):
        solutions = evaluate_combination(feasible_combination, reference_config)
        assert solutions
        for solution in solutions:
            assert solution.combination == feasible_combination
            assert sorted(solution.gains) == [2.0, 3.0, 4.0, 6.0]
            assert verify_solution(solution, reference_config) == []

    def test_outputs_inside_limits(self, reference_config, feasible_combination):
        eps = 1e-6
        for solution in evaluate_combination(feasible_combination, reference_config):
            for lo, hi in solution.output_ranges:
                assert lo >= reference_config.v_min - eps
                assert hi <= reference_config.v_max + eps

    def test_verify_flags_tampered_solution(self, reference_config, feasible_combination):
        solution = evaluate_combination(feasible_combination, reference_config)[0]
        bad_zone = dataclasses.replace(solution.zones[3], gain=10.0)
        tampered = dataclasses.replace(
            solution, zones=solution.zones[:3] + (bad_zone,)
        )
        violations = verify_solution(tampered, reference_config)
        assert any("Vmax" in v for v in violations)

    def test_verify_flags_foreign_gains(self, reference_config, feasible_combination):
        solution = evaluate_combination(feasible_combination, reference_config)[0]
        tampered = dataclasses.replace(solution, gains=(9.0, 3.0, 4.0, 2.0))
        violations = verify_solution(tampered, reference_config)
        assert any("composite" in v for v in violations)
