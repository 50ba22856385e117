"""
═══════════════════════════════════════════════════════════════════════════════
📋 SOLVER CONFIGURATION MODULE
═══════════════════════════════════════════════════════════════════════════════

ARCHITECTURAL OVERVIEW
----------------------
Purpose: Configuration dataclass for the feasibility solver. Holds the
         numeric tolerance and the two solver switches (how assignments are
         enumerated, and whether every passing assignment is reported).

Key Interactions:
- feasibility.py: Reads epsilon, assignment_mode and report_mode
- config_types.py: AppConfig.feasibility is a FeasibilityConfig
- parallel/result_cache.py: Fingerprints the result-affecting fields

Design Philosophy:
- Immutable configs (frozen=True) prevent accidental modification
- Defaults are the complete behavior (exhaustive, report all)
- Incomplete shortcuts are opt-in and logged

NAVIGATION GUIDE
----------------
# ═════ 1. CONSTANTS
# ═════ 2. FEASIBILITY CONFIGURATION
# ═════ 3. FACTORY FUNCTIONS

═══════════════════════════════════════════════════════════════════════════════
"""

from dataclasses import dataclass
from typing import Any, Dict


# ═══════════════════════════════════════════════════════════════════════════════
# 🔢 1. CONSTANTS
# ═══════════════════════════════════════════════════════════════════════════════

DEFAULT_EPSILON = 1e-6

ASSIGNMENT_MODES = ("exhaustive", "monotone")
REPORT_MODES = ("all", "first")


# ═══════════════════════════════════════════════════════════════════════════════
# ⚙️ 2. FEASIBILITY CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class FeasibilityConfig:
    """
    Configuration for per-combination feasibility evaluation.

    Attributes:
        epsilon: Absolute tolerance for every numeric comparison. Absorbs
            floating error from the quantized grid. No relative tolerance.
        assignment_mode: "exhaustive" tries all 24 gain-to-zone orderings.
            "monotone" tries only the descending ordering (largest gain in the
            lowest-input zone). Monotone is a fast path for distinct gains.
        report_mode: "all" records every feasible assignment of a combination.
            "first" stops at the first one; this is an incomplete shortcut.
        verify_solutions: Re-check every accepted solution against the
            zone invariants after the run (slow, for debugging).
    """

    epsilon: float = DEFAULT_EPSILON
    assignment_mode: str = "exhaustive"
    report_mode: str = "all"
    verify_solutions: bool = False

    def __post_init__(self) -> None:
        """Validate modes and tolerance."""
        if self.assignment_mode not in ASSIGNMENT_MODES:
            raise ValueError(
                f"assignment_mode must be one of {ASSIGNMENT_MODES}, "
                f"got '{self.assignment_mode}'"
            )
        if self.report_mode not in REPORT_MODES:
            raise ValueError(
                f"report_mode must be one of {REPORT_MODES}, got '{self.report_mode}'"
            )
        if not self.epsilon > 0:
            raise ValueError(f"epsilon must be > 0, got {self.epsilon}")

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "FeasibilityConfig":
        """Create FeasibilityConfig from CONFIG['feasibility'] dictionary."""
        return cls(
            epsilon=d.get("epsilon", DEFAULT_EPSILON),
            assignment_mode=d.get("assignment_mode", "exhaustive"),
            report_mode=d.get("report_mode", "all"),
            verify_solutions=d.get("verify_solutions", False),
        )

    @property
    def is_complete(self) -> bool:
        """True when the configuration cannot miss a feasible assignment."""
        return self.assignment_mode == "exhaustive" and self.report_mode == "all"

    def as_dict(self) -> Dict[str, Any]:
        return {
            "epsilon": self.epsilon,
            "assignment_mode": self.assignment_mode,
            "report_mode": self.report_mode,
            "verify_solutions": self.verify_solutions,
        }


# ═══════════════════════════════════════════════════════════════════════════════
# 🏭 3. FACTORY FUNCTIONS
# ═══════════════════════════════════════════════════════════════════════════════


def create_default_config() -> FeasibilityConfig:
    """
    Create the default configuration: exhaustive assignments, report all.

    Returns:
        FeasibilityConfig that enumerates every feasible solution.
    """
    return FeasibilityConfig()


def create_fast_config() -> FeasibilityConfig:
    """
    Create fast configuration for quick results.

    Uses the monotone ordering only and stops at the first feasible
    assignment per combination. May report fewer solutions than the default.

    Returns:
        FeasibilityConfig optimized for speed (incomplete).
    """
    return FeasibilityConfig(assignment_mode="monotone", report_mode="first")


def create_strict_config(epsilon: float = 1e-9) -> FeasibilityConfig:
    """
    Create a configuration with a tighter tolerance and post-run verification.

    Args:
        epsilon: Absolute tolerance. Default 1e-9.

    Returns:
        FeasibilityConfig with verify_solutions enabled.
    """
    return FeasibilityConfig(epsilon=epsilon, verify_solutions=True)
