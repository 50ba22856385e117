"""
Visualization Tests: color helpers, plotly traces and the HTML report

Tests:
1. hex_to_rgb() / hex_to_rgba() / zone_color()
2. build_transfer_curve_traces() returns 4 zone lines + 2 limit lines
3. build_solution_figure() row cap and empty-result annotation
4. generate_solution_html() writes a standalone file

Run with: python -m pytest _tests/test_visualization.py -v
"""

import plotly.graph_objects as go
import pytest

from Amp_Gain_Search.config_types import SearchConfig, VisualizationConfig
from Amp_Gain_Search.models.data_models import Combination, GainRange, Stage
from Amp_Gain_Search.solvers.feasibility import evaluate_combination
from Amp_Gain_Search.visualization import (
    build_solution_figure,
    build_transfer_curve_traces,
    build_zone_trace,
    generate_solution_html,
    hex_to_rgb,
    hex_to_rgba,
    zone_color,
)


@pytest.fixture
def config():
    return SearchConfig(x1=1.0, x2=4.0, v_min=2.0, v_max=8.0, step=1.0, workers=1)


@pytest.fixture
def solution(config):
    combination = Combination(
        stage1=GainRange(Stage.FIRST, 1.0, 2.0),
        stage2=GainRange(Stage.SECOND, 2.0, 3.0),
    )
    return evaluate_combination(combination, config)[0]


# ============================================================================
# COLORS
# ============================================================================


class TestColors:
    """Color conversions."""

    def test_hex_to_rgb(self):
        assert hex_to_rgb("#ff7f0e") == (255, 127, 14)
        assert hex_to_rgb("1F77B4") == (31, 119, 180)

    def test_hex_to_rgb_invalid(self):
        with pytest.raises(ValueError):
            hex_to_rgb("#fff")

    def test_hex_to_rgba(self):
        assert hex_to_rgba("#000000", 0.5) == "rgba(0, 0, 0, 0.5)"

    def test_zone_color_cycles(self):
        assert zone_color(["#111111", "#222222"], 3) == "#222222"
        with pytest.raises(ValueError):
            zone_color([], 0)


# ============================================================================
# TRACES
# ============================================================================


class TestTraces:
    """Trace builders."""

    def test_zone_trace_endpoints(self, solution):
        zone = solution.zones[1]
        trace = build_zone_trace(zone, "#1f77b4")
        assert tuple(trace.x) == (zone.lower, zone.upper)
        assert tuple(trace.y) == (zone.output_lower, zone.output_upper)
        assert trace.name == "Zone 1 (×4)"

    def test_transfer_curve_traces(self, solution, config):
        traces = build_transfer_curve_traces(solution, config)
        assert len(traces) == 6
        assert all(isinstance(t, go.Scatter) for t in traces)
        assert traces[4].name == "Vmin = 2"
        assert traces[5].name == "Vmax = 8"

    def test_custom_colors(self, solution, config):
        viz = VisualizationConfig(zone_colors=("#000000",))
        traces = build_transfer_curve_traces(solution, config, viz)
        assert {t.line.color for t in traces[:4]} == {"#000000"}

    def test_dict_visualization_config(self, solution, config):
        traces = build_transfer_curve_traces(solution, config, {"line_width": 5})
        assert traces[0].line.width == 5


# ============================================================================
# FIGURE / HTML
# ============================================================================


class TestFigure:
    """Figure assembly and HTML export."""

    def test_one_row_per_solution(self, solution, config):
        fig = build_solution_figure([solution] * 3, config)
        assert len(fig.data) == 18

    def test_row_cap(self, solution, config):
        fig = build_solution_figure([solution] * 5, config, max_solutions=2)
        assert len(fig.data) == 12

    def test_empty_annotated(self, config):
        fig = build_solution_figure([], config)
        assert len(fig.data) == 0
        assert fig.layout.annotations[0].text == "No valid configurations found"

    def test_html_written(self, solution, config, tmp_path):
        path = tmp_path / "out" / "solutions.html"
        generate_solution_html([solution], config, path)
        assert path.exists()
        assert "<html" in path.read_text(encoding="utf-8").lower()

    def test_html_written_without_solutions(self, config, tmp_path):
        path = tmp_path / "empty.html"
        generate_solution_html([], config, path)
        assert path.exists()
