#!/usr/bin/env python3
"""
Two-Stage Gain Feasibility Solver

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Decide, for one combination of stage gain ranges, every way
its four composite gains can be laid out over four contiguous input zones so
that the output never leaves [v_min, v_max]. No orchestration logic.

Key Functions:
- composite_gains: The four products {s1.min, s1.max} x {s2.min, s2.max}
- has_gain_ties: Reject ambiguous gain sets (two gains equal within epsilon)
- candidate_assignments: Exhaustive (24 orderings) or monotone (1 ordering)
- compute_breakpoints: Left-to-right sweep placing the 3 interior boundaries
- evaluate_gain_set: All feasible layouts for any 4 gains
- evaluate_combination: Solutions for one Combination (worker entry point)
- verify_solution: Independent re-check of a Solution's invariants

BREAKPOINT SWEEP:
For an assignment (g0, g1, g2, g3) in zone order:
    previous_upper = x1
    lower_i = max(previous_upper, v_min / g_i)
    upper_i = v_max / g_i          (i < 3)
    upper_3 = x2
Zone i spans [previous_upper, upper_i]. The assignment is rejected if a zone
is inverted (lower_i > upper_i), if the zone leaves a gap after the previous
one (g_i * previous_upper < v_min), if the last zone starts past x2, or if
the boundary checks g0 * x1 >= v_min and g3 * x2 <= v_max fail.

CONFIGURATION ARCHITECTURE:
- No CONFIG access - all functions accept explicit parameters
- One absolute tolerance (epsilon) for every comparison, no relative tolerance
- Infeasibility is the normal outcome and returns None / [], never raises

For Navigation: Use VS Code outline (Ctrl+Shift+O) to jump between sections.
"""

import logging
from itertools import permutations
from typing import List, Optional, Sequence, Tuple, TYPE_CHECKING

from Amp_Gain_Search.models.data_models import Combination, Solution, ZoneSpan
from Amp_Gain_Search.solvers.solver_config import DEFAULT_EPSILON, FeasibilityConfig

if TYPE_CHECKING:
    from Amp_Gain_Search.config_types import SearchConfig

logger = logging.getLogger("AmpSearch.Solvers.Feasibility")

N_ZONES = 4

Gains = Tuple[float, float, float, float]
Breakpoints = Tuple[float, float, float]


# ===========================================================================
# 🔢 GAIN SET CHECKS
# ===========================================================================


def composite_gains(combination: Combination) -> Gains:
    """Return the four composite gains of a combination."""
    return combination.composite_gains


def has_gain_ties(gains: Sequence[float], epsilon: float = DEFAULT_EPSILON) -> bool:
    """
    Check whether any two gains are equal within epsilon.

    Tied gains make the boundary between their zones ambiguous, so the whole
    combination is pruned.
    """
    ordered = sorted(gains)
    return any(b - a <= epsilon for a, b in zip(ordered, ordered[1:]))


def has_degenerate_gain(gains: Sequence[float], epsilon: float = DEFAULT_EPSILON) -> bool:
    """Check for gains too small to divide by (v / g would blow up)."""
    return any(g <= epsilon for g in gains)


def _passes_envelope(
    gains: Sequence[float],
    config: "SearchConfig",
    epsilon: float,
) -> bool:
    """
    Necessary condition shared by every ordering.

    Some gain must be able to serve x1 (largest gain reaches v_min at x1) and
    some gain must be able to serve x2 (smallest gain stays under v_max at x2).
    Failing either rules out all 24 orderings at once.
    """
    if max(gains) * config.x1 < config.v_min - epsilon:
        return False
    if min(gains) * config.x2 > config.v_max + epsilon:
        return False
    return True


# ===========================================================================
# 🔀 ASSIGNMENT ENUMERATION
# ===========================================================================


def candidate_assignments(gains: Sequence[float], mode: str = "exhaustive") -> List[Gains]:
    """
    Enumerate gain-to-zone orderings to try.

    Args:
        gains: Four distinct composite gains.
        mode: "exhaustive" returns all distinct permutations (24 for distinct
            gains). "monotone" returns only the descending ordering, largest
            gain in the lowest-input zone.

    Returns:
        List of 4-tuples in zone order.
    """
    if mode == "monotone":
        return [tuple(sorted(gains, reverse=True))]
    if mode == "exhaustive":
        # dict.fromkeys keeps first-seen order and drops repeated orderings
        return list(dict.fromkeys(permutations(gains)))
    raise ValueError(f"Unknown assignment mode: {mode!r}")


# ===========================================================================
# 📐 BREAKPOINT SWEEP
# ===========================================================================


def compute_breakpoints(
    assignment: Sequence[float],
    config: "SearchConfig",
    epsilon: float = DEFAULT_EPSILON,
) -> Optional[Breakpoints]:
    """
    Place the three interior breakpoints for one assignment.

    Args:
        assignment: Four gains in zone order (left to right).
        config: Search problem (x1, x2, v_min, v_max).
        epsilon: Absolute tolerance.

    Returns:
        (b0, b1, b2) with x1 <= b0 <= b1 <= b2 <= x2 (within epsilon), or
        None when the assignment is infeasible.
    """
    x1, x2 = config.x1, config.x2
    v_min, v_max = config.v_min, config.v_max
    last = N_ZONES - 1

    # Boundary checks: the zone covering x1 and the zone covering x2
    if assignment[0] * x1 < v_min - epsilon:
        return None
    if assignment[last] * x2 > v_max + epsilon:
        return None

    previous_upper = x1
    breakpoints: List[float] = []

    for i, gain in enumerate(assignment):
        if gain <= epsilon:
            return None

        # Zone starts where the previous one ended; it must already be in range
        if gain * previous_upper < v_min - epsilon:
            return None
        lower = max(previous_upper, v_min / gain)

        if i < last:
            upper = v_max / gain
            if lower > upper + epsilon:
                return None
            breakpoints.append(upper)
            previous_upper = upper
        else:
            if lower > x2 + epsilon:
                return None

    return (breakpoints[0], breakpoints[1], breakpoints[2])


def build_zone_spans(
    assignment: Sequence[float],
    breakpoints: Breakpoints,
    config: "SearchConfig",
) -> Tuple[ZoneSpan, ZoneSpan, ZoneSpan, ZoneSpan]:
    """Build the four ZoneSpans partitioning [x1, x2] at the breakpoints."""
    edges = (config.x1,) + tuple(breakpoints) + (config.x2,)
    return tuple(
        ZoneSpan(index=i, gain=gain, lower=edges[i], upper=edges[i + 1])
        for i, gain in enumerate(assignment)
    )


def evaluate_assignment(
    assignment: Sequence[float],
    config: "SearchConfig",
    epsilon: float = DEFAULT_EPSILON,
) -> Optional[Tuple[Breakpoints, Tuple[ZoneSpan, ...]]]:
    """
    Evaluate one ordering.

    Returns:
        (breakpoints, zones) when feasible, otherwise None.
    """
    breakpoints = compute_breakpoints(assignment, config, epsilon)
    if breakpoints is None:
        return None
    return breakpoints, build_zone_spans(assignment, breakpoints, config)


# ===========================================================================
# 🎯 SOLVER ENTRY POINTS
# ===========================================================================


def evaluate_gain_set(
    gains: Sequence[float],
    config: "SearchConfig",
    feasibility: Optional[FeasibilityConfig] = None,
) -> List[Tuple[Gains, Breakpoints, Tuple[ZoneSpan, ...]]]:
    """
    Find every feasible zone layout for four gains.

    Works on any four gains, whether or not they factor into two stage
    ranges. Ties, degenerate gains and envelope failures prune the whole set.

    Args:
        gains: Four composite gains (any order).
        config: Search problem.
        feasibility: Tolerance and modes. Defaults to exhaustive / report all.

    Returns:
        List of (assignment, breakpoints, zones). Empty when infeasible.
    """
    feasibility = feasibility or FeasibilityConfig()
    epsilon = feasibility.epsilon

    if len(gains) != N_ZONES:
        raise ValueError(f"expected {N_ZONES} gains, got {len(gains)}")
    if has_degenerate_gain(gains, epsilon) or has_gain_ties(gains, epsilon):
        return []
    if not _passes_envelope(gains, config, epsilon):
        return []

    feasible = []
    for assignment in candidate_assignments(gains, feasibility.assignment_mode):
        outcome = evaluate_assignment(assignment, config, epsilon)
        if outcome is None:
            continue
        breakpoints, zones = outcome
        feasible.append((tuple(assignment), breakpoints, zones))
        if feasibility.report_mode == "first":
            break
    return feasible


def evaluate_combination(
    combination: Combination,
    config: "SearchConfig",
    feasibility: Optional[FeasibilityConfig] = None,
) -> List[Solution]:
    """
    Evaluate one combination and build a Solution per feasible assignment.

    Args:
        combination: Stage1/stage2 gain ranges.
        config: Search problem.
        feasibility: Tolerance and modes.

    Returns:
        List of Solutions (usually empty).
    """
    layouts = evaluate_gain_set(composite_gains(combination), config, feasibility)
    return [
        Solution(
            combination=combination,
            gains=assignment,
            breakpoints=breakpoints,
            zones=zones,
        )
        for assignment, breakpoints, zones in layouts
    ]


# ===========================================================================
# ✅ VERIFICATION
# ===========================================================================


def verify_solution(
    solution: Solution,
    config: "SearchConfig",
    epsilon: float = DEFAULT_EPSILON,
) -> List[str]:
    """
    Re-check a Solution against the zone invariants.

    Checks output bounds per zone, the exact partition of [x1, x2], breakpoint
    ordering, gain distinctness and that the gains are the combination's
    composite gains.

    Returns:
        List of human-readable violations. Empty when the solution is valid.
    """
    violations = []
    zones = solution.zones

    if len(zones) != N_ZONES:
        return [f"expected {N_ZONES} zones, got {len(zones)}"]

    for zone in zones:
        if zone.output_lower < config.v_min - epsilon:
            violations.append(
                f"zone {zone.index}: output {zone.output_lower:.6g} < Vmin {config.v_min:g}"
            )
        if zone.output_upper > config.v_max + epsilon:
            violations.append(
                f"zone {zone.index}: output {zone.output_upper:.6g} > Vmax {config.v_max:g}"
            )
        if zone.lower > zone.upper + epsilon:
            violations.append(f"zone {zone.index}: inverted [{zone.lower}, {zone.upper}]")

    if abs(zones[0].lower - config.x1) > epsilon:
        violations.append(f"zone 0 starts at {zones[0].lower}, not x1={config.x1}")
    if abs(zones[-1].upper - config.x2) > epsilon:
        violations.append(f"zone 3 ends at {zones[-1].upper}, not x2={config.x2}")
    for left, right in zip(zones, zones[1:]):
        if abs(left.upper - right.lower) > epsilon:
            violations.append(
                f"gap/overlap between zone {left.index} and {right.index}: "
                f"{left.upper} vs {right.lower}"
            )

    bps = solution.breakpoints
    if not (
        config.x1 - epsilon <= bps[0] <= bps[1] + epsilon
        and bps[1] <= bps[2] + epsilon
        and bps[2] <= config.x2 + epsilon
    ):
        violations.append(f"breakpoints out of order: {bps}")

    if has_gain_ties(solution.gains, epsilon):
        violations.append(f"tied gains: {solution.gains}")

    if sorted(solution.gains) != sorted(solution.combination.composite_gains):
        violations.append("gains are not the combination's composite gains")

    return violations
