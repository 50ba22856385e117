#!/usr/bin/env python3
"""
Plotly Trace Builder Functions

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Build Plotly trace objects for transfer-curve plots.
Each function creates a single trace or list of traces.

Key Patterns:
- Functions return go.Scatter trace objects
- One line segment per zone: output = gain * input over [lower, upper]
- Output limits drawn as dashed horizontal lines across [x1, x2]
- Styling controlled via VisualizationConfig

Dependencies:
- plotly.graph_objects

Navigation Guide:
- Use VS Code outline (Ctrl+Shift+O) to jump between functions
"""

from typing import Any, Dict, List, Optional, Union

import plotly.graph_objects as go

from Amp_Gain_Search.config_types import SearchConfig, VisualizationConfig
from Amp_Gain_Search.models.data_models import Solution, ZoneSpan
from Amp_Gain_Search.visualization.color_utils import zone_color


# ===========================================================================
# CONFIGURATION HELPERS
# ===========================================================================


def _normalize_visualization_config(
    config: Union[Dict[str, Any], VisualizationConfig, None],
) -> VisualizationConfig:
    """
    Normalize visualization config to typed VisualizationConfig.

    Args:
        config: Dict from CONFIG["visualization"], a VisualizationConfig, or None

    Returns:
        VisualizationConfig instance
    """
    if config is None:
        return VisualizationConfig()
    if isinstance(config, VisualizationConfig):
        return config
    return VisualizationConfig.from_dict(config)


# ===========================================================================
# ZONE TRACES
# ===========================================================================


def build_zone_trace(
    zone: ZoneSpan,
    color: str,
    line_width: float = 3,
    legend_group: Optional[str] = None,
    show_legend: bool = True,
) -> go.Scatter:
    """
    Build the output-vs-input line for one zone.

    Args:
        zone: The zone span (input bounds and gain)
        color: Line color
        line_width: Line width in px
        legend_group: Group for legend toggling
        show_legend: Whether to show in legend

    Returns:
        Plotly Scatter trace from (lower, lower*gain) to (upper, upper*gain)
    """
    hover = (
        f"Zone {zone.index}<br>gain {zone.gain:g}<br>"
        f"in [{zone.lower:.4g}, {zone.upper:.4g}]<br>"
        f"out [{zone.output_lower:.4g}, {zone.output_upper:.4g}]"
    )
    return go.Scatter(
        x=[zone.lower, zone.upper],
        y=[zone.output_lower, zone.output_upper],
        mode="lines+markers",
        line=dict(color=color, width=line_width),
        marker=dict(size=6, color=color),
        name=f"Zone {zone.index} (×{zone.gain:g})",
        hovertext=[hover, hover],
        hoverinfo="text",
        legendgroup=legend_group,
        showlegend=show_legend,
    )


def build_limit_traces(
    config: SearchConfig,
    color: str = "rgba(120, 120, 120, 0.8)",
    show_legend: bool = True,
) -> List[go.Scatter]:
    """Dashed v_min / v_max lines spanning the input interval."""
    traces = []
    for label, level in (("Vmin", config.v_min), ("Vmax", config.v_max)):
        traces.append(
            go.Scatter(
                x=[config.x1, config.x2],
                y=[level, level],
                mode="lines",
                line=dict(color=color, width=1, dash="dash"),
                name=f"{label} = {level:g}",
                hoverinfo="name",
                legendgroup="limits",
                showlegend=show_legend,
            )
        )
    return traces


def build_transfer_curve_traces(
    solution: Solution,
    config: SearchConfig,
    visualization_config: Union[Dict[str, Any], VisualizationConfig, None] = None,
    show_legend: bool = True,
) -> List[go.Scatter]:
    """
    Build all traces for one solution: four zone lines and two limit lines.

    Args:
        solution: Solution to draw
        config: Search config (limits and input interval)
        visualization_config: Styling (defaults to VisualizationConfig())
        show_legend: Whether the traces appear in the legend

    Returns:
        List of 6 Scatter traces (zones first, then Vmin, Vmax)
    """
    viz = _normalize_visualization_config(visualization_config)
    traces = [
        build_zone_trace(
            zone,
            zone_color(viz.zone_colors, zone.index),
            line_width=viz.line_width,
            legend_group=f"zone{zone.index}",
            show_legend=show_legend,
        )
        for zone in solution.zones
    ]
    traces.extend(build_limit_traces(config, viz.limit_color, show_legend))
    return traces
