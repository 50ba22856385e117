#!/usr/bin/env python3
"""
Visualization Package

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Provide plotly visualization of search results.

Modules:
- color_utils: Color conversions
- plotly_traces: Zone and limit trace builders
- html_builder: Standalone HTML report with one row per solution

Usage:
    from Amp_Gain_Search.visualization import generate_solution_html

    generate_solution_html(result.sorted_solutions(), config, "Output/solutions.html")
"""

from Amp_Gain_Search.visualization.color_utils import (
    hex_to_rgb,
    hex_to_rgba,
    zone_color,
)

from Amp_Gain_Search.visualization.plotly_traces import (
    build_limit_traces,
    build_transfer_curve_traces,
    build_zone_trace,
)

from Amp_Gain_Search.visualization.html_builder import (
    build_solution_figure,
    generate_solution_html,
)

__all__ = [
    # HTML Builder (main entry point)
    "generate_solution_html",
    "build_solution_figure",
    # Trace builders
    "build_zone_trace",
    "build_limit_traces",
    "build_transfer_curve_traces",
    # Colors
    "hex_to_rgb",
    "hex_to_rgba",
    "zone_color",
]
