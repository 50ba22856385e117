"""
Gain grid generation for one amplifier stage.

Architectural Overview:
    Responsibility: Produce the quantized gain magnitudes {step, 2*step, ...}
        up to the gain ceiling, and every (low, high) switchable pair drawn
        from them.
    Key Interactions:
        - Called by combinations.build_search_space() once per run
        - Ceiling comes from SearchConfig.gain_ceiling (v_max / x1, capped by
          the optional max_gain)
        - Output GainRange objects are shared read-only by every worker
    Navigation Guide:
        1. MAGNITUDES
        2. STAGE RANGES
    For Navigation: Use Ctrl+Shift+O → generate_gain_magnitudes

This is the only part of the search that does not depend on v_min.
"""

import logging
import math
from typing import Optional, Tuple

import numpy as np

from Amp_Gain_Search.models.data_models import GainRange, Stage
from Amp_Gain_Search.solvers.solver_config import DEFAULT_EPSILON

logger = logging.getLogger("AmpSearch.Solvers.Grid")

# Grid values are rounded to this many decimals so k*step lands on the same
# float regardless of how the step was produced (0.1 vs 0.2/2).
GRID_DECIMALS = 12


# ═══════════════════════════════════════════════════════════════════════════
# 📏 MAGNITUDES
# ═══════════════════════════════════════════════════════════════════════════


def generate_gain_magnitudes(
    x_bound: float,
    v_max: float,
    step: float,
    max_gain: Optional[float] = None,
    epsilon: float = DEFAULT_EPSILON,
) -> np.ndarray:
    """
    Generate the ordered quantized gain magnitudes for one stage.

    Magnitudes are k*step for k = 1, 2, ... while k*step <= v_max / x_bound
    (within epsilon) and, when given, k*step <= max_gain. Multiplying rather
    than accumulating keeps a halved step an exact refinement of the coarser
    grid.

    Args:
        x_bound: Representative input scale (the lower input bound x1).
        v_max: Output ceiling.
        step: Grid quantum, > epsilon.
        max_gain: Optional absolute cap on a single magnitude.
        epsilon: Absolute tolerance applied to the ceiling.

    Returns:
        1-D float array, ascending. Empty when no multiple of step fits.

    Example:
        >>> generate_gain_magnitudes(1.0, 4.0, 1.0).tolist()
        [1.0, 2.0, 3.0, 4.0]
    """
    if step <= epsilon:
        raise ValueError(f"step must be > {epsilon}, got {step}")

    if x_bound > 0:
        ceiling = v_max / x_bound
    elif max_gain is not None:
        ceiling = max_gain
    else:
        logger.warning(
            f"⚠️ Input bound {x_bound} gives no gain ceiling and no max_gain is set; "
            f"gain grid is empty"
        )
        return np.empty(0, dtype=float)

    if max_gain is not None:
        ceiling = min(ceiling, max_gain)

    if ceiling < step - epsilon:
        return np.empty(0, dtype=float)

    n_steps = int(math.floor((ceiling + epsilon) / step))
    magnitudes = np.round(np.arange(1, n_steps + 1, dtype=float) * step, GRID_DECIMALS)

    # floor() can overshoot by one on values like 0.3/0.1; trim against ceiling
    return magnitudes[magnitudes <= ceiling + epsilon]


# ═══════════════════════════════════════════════════════════════════════════
# 🔀 STAGE RANGES
# ═══════════════════════════════════════════════════════════════════════════


def count_gain_ranges(n_magnitudes: int) -> int:
    """Number of (low, high) pairs with low < high: n*(n-1)/2."""
    if n_magnitudes < 2:
        return 0
    return n_magnitudes * (n_magnitudes - 1) // 2


def generate_gain_ranges(
    stage: Stage,
    magnitudes: np.ndarray,
) -> Tuple[GainRange, ...]:
    """
    Build every switchable (low, high) pair for one stage.

    Args:
        stage: Stage the ranges belong to.
        magnitudes: Ascending gain magnitudes from generate_gain_magnitudes().

    Returns:
        Tuple of GainRange ordered by (low, high). Length n*(n-1)/2.
    """
    values = [float(v) for v in magnitudes]
    ranges = tuple(
        GainRange(stage=stage, min_gain=low, max_gain=high)
        for i, low in enumerate(values)
        for high in values[i + 1:]
    )
    logger.debug(
        f"Stage {stage.value}: {len(values)} magnitudes -> {len(ranges)} gain ranges"
    )
    return ranges
