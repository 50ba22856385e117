#!/usr/bin/env python3
"""
Color Utilities

Small color conversions shared by the trace builders.

Navigation Guide:
- Use VS Code outline (Ctrl+Shift+O) to jump between functions
"""

from typing import Sequence, Tuple


def hex_to_rgb(hex_color: str) -> Tuple[int, int, int]:
    """
    Convert hex color string to RGB tuple.

    Args:
        hex_color: Color string like "#FF5733" or "FF5733"

    Returns:
        Tuple of (R, G, B) integers 0-255
    """
    hex_color = hex_color.lstrip("#")
    if len(hex_color) != 6:
        raise ValueError(f"Expected a 6-digit hex color, got {hex_color!r}")
    return tuple(int(hex_color[i : i + 2], 16) for i in (0, 2, 4))


def hex_to_rgba(hex_color: str, opacity: float) -> str:
    """Convert "#RRGGBB" to a plotly "rgba(r, g, b, a)" string."""
    r, g, b = hex_to_rgb(hex_color)
    return f"rgba({r}, {g}, {b}, {opacity})"


def zone_color(colors: Sequence[str], zone_index: int) -> str:
    """Color for a zone, cycling if there are fewer colors than zones."""
    if not colors:
        raise ValueError("At least one zone color is required")
    return colors[zone_index % len(colors)]
