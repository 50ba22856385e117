"""
═══════════════════════════════════════════════════════════════════════════════
📦 SOLVERS PACKAGE
═══════════════════════════════════════════════════════════════════════════════

This package contains the gain search components:

Modules:
- solver_config: FeasibilityConfig dataclass and factory functions
- gain_grid: Gain magnitude grid and per-stage gain ranges
- combinations: Index-addressable cross product of stage ranges
- feasibility: Composite gains, zone assignment and breakpoint sweep

Public API:
- build_search_space: Grid + combinations for one SearchConfig
- evaluate_combination: Solutions for one (stage1, stage2) pair
- evaluate_gain_set: Feasible zone assignments for four raw gains
- FeasibilityConfig, create_default_config, etc.: Solver settings

Usage:
    from Amp_Gain_Search.solvers import build_search_space, evaluate_combination

    space = build_search_space(search_config)
    for combination in space.combinations:
        solutions = evaluate_combination(combination, search_config)

═══════════════════════════════════════════════════════════════════════════════
"""

# Configuration dataclass and factories
from Amp_Gain_Search.solvers.solver_config import (
    ASSIGNMENT_MODES,
    DEFAULT_EPSILON,
    REPORT_MODES,
    FeasibilityConfig,
    create_default_config,
    create_fast_config,
    create_strict_config,
)

# Gain grid
from Amp_Gain_Search.solvers.gain_grid import (
    count_gain_ranges,
    generate_gain_magnitudes,
    generate_gain_ranges,
)

# Combination space
from Amp_Gain_Search.solvers.combinations import (
    CombinationEnumerator,
    SearchSpace,
    build_search_space,
)

# Feasibility
from Amp_Gain_Search.solvers.feasibility import (
    candidate_assignments,
    composite_gains,
    compute_breakpoints,
    evaluate_combination,
    evaluate_gain_set,
    has_gain_ties,
    verify_solution,
)

__all__ = [
    # Config
    "ASSIGNMENT_MODES",
    "DEFAULT_EPSILON",
    "REPORT_MODES",
    "FeasibilityConfig",
    "create_default_config",
    "create_fast_config",
    "create_strict_config",
    # Grid
    "count_gain_ranges",
    "generate_gain_magnitudes",
    "generate_gain_ranges",
    # Combinations
    "CombinationEnumerator",
    "SearchSpace",
    "build_search_space",
    # Feasibility
    "candidate_assignments",
    "composite_gains",
    "compute_breakpoints",
    "evaluate_combination",
    "evaluate_gain_set",
    "has_gain_ties",
    "verify_solution",
]
