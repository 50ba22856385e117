#!/usr/bin/env python3
"""
HTML Builder for Gain Search Results

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Generate a standalone interactive HTML page with one
transfer-curve subplot per solution.

Key Features:
1. One row per solution: output vs input for the four zones
2. Shaded band for the allowed output interval [Vmin, Vmax]
3. Subplot titles carry the stage ranges and zone gains

Navigation Guide:
- Use VS Code outline (Ctrl+Shift+O) to jump between functions
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Union

import plotly.graph_objects as go
from plotly.subplots import make_subplots

from Amp_Gain_Search.config_types import SearchConfig, VisualizationConfig
from Amp_Gain_Search.models.data_models import Solution
from Amp_Gain_Search.visualization.color_utils import hex_to_rgba, zone_color
from Amp_Gain_Search.visualization.plotly_traces import (
    _normalize_visualization_config,
    build_transfer_curve_traces,
)

logger = logging.getLogger("AmpSearch.Visualization")


def _subplot_title(number: int, solution: Solution) -> str:
    gains = ", ".join(f"{g:g}" for g in solution.gains)
    return (
        f"#{number}  Stage 1 [{solution.stage1.min_gain:g} ~ {solution.stage1.max_gain:g}]"
        f"  Stage 2 [{solution.stage2.min_gain:g} ~ {solution.stage2.max_gain:g}]"
        f"  gains ({gains})"
    )


def build_solution_figure(
    solutions: Sequence[Solution],
    config: SearchConfig,
    visualization_config: Union[Dict[str, Any], VisualizationConfig, None] = None,
    max_solutions: Optional[int] = None,
) -> go.Figure:
    """
    Build the multi-row figure without writing it.

    Args:
        solutions: Solutions in display order
        config: Search config (limits and input interval)
        visualization_config: Styling
        max_solutions: Row cap (defaults to visualization_config.max_solutions)

    Returns:
        Plotly Figure (an annotated empty figure when there are no solutions)
    """
    viz = _normalize_visualization_config(visualization_config)
    limit = viz.max_solutions if max_solutions is None else max_solutions
    shown = list(solutions[:limit])

    if not shown:
        fig = go.Figure()
        fig.add_annotation(
            text="No valid configurations found",
            x=0.5,
            y=0.5,
            xref="paper",
            yref="paper",
            showarrow=False,
            font=dict(size=18),
        )
        fig.update_layout(height=viz.row_height_px, plot_bgcolor="white")
        return fig

    fig = make_subplots(
        rows=len(shown),
        cols=1,
        subplot_titles=[_subplot_title(i, s) for i, s in enumerate(shown, start=1)],
        vertical_spacing=min(0.08, 0.3 / len(shown)),
    )

    band_color = hex_to_rgba(zone_color(viz.zone_colors, 2), 0.08) if viz.zone_colors else None
    for row, solution in enumerate(shown, start=1):
        for trace in build_transfer_curve_traces(
            solution, config, viz, show_legend=(row == 1)
        ):
            fig.add_trace(trace, row=row, col=1)
        if band_color:
            fig.add_hrect(
                y0=config.v_min,
                y1=config.v_max,
                fillcolor=band_color,
                line_width=0,
                row=row,
                col=1,
            )
        fig.update_xaxes(title_text="Input", range=[config.x1, config.x2], row=row, col=1)
        fig.update_yaxes(title_text="Output", row=row, col=1)

    fig.update_layout(
        title=dict(
            text=(
                f"Two-Stage Gain Configurations<br><sup>"
                f"input [{config.x1:g}, {config.x2:g}] → output "
                f"[{config.v_min:g}, {config.v_max:g}] | "
                f"showing {len(shown)} of {len(solutions)}</sup>"
            ),
            x=0.5,
            font=dict(size=18),
        ),
        height=viz.row_height_px * len(shown) + 120,
        hovermode="closest",
        plot_bgcolor="white",
        legend=dict(
            yanchor="top",
            y=1.0,
            xanchor="left",
            x=1.01,
            bgcolor="rgba(255, 255, 255, 0.9)",
        ),
    )
    return fig


def generate_solution_html(
    solutions: Sequence[Solution],
    config: SearchConfig,
    output_path: Union[str, Path],
    max_solutions: Optional[int] = None,
    visualization_config: Union[Dict[str, Any], VisualizationConfig, None] = None,
) -> go.Figure:
    """
    Generate interactive HTML with one transfer-curve row per solution.

    Returns:
        The Plotly Figure that was written.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    logger.info(f"🎨 Generating HTML for {len(solutions):,} solutions...")

    fig = build_solution_figure(solutions, config, visualization_config, max_solutions)
    fig.write_html(
        str(output_path),
        include_plotlyjs=True,
        full_html=True,
        config={"displayModeBar": True, "scrollZoom": True},
    )

    logger.info(f"   ✅ HTML saved: {output_path}")
    return fig
