"""Pillow-backed track map used as the export renderer."""

from .projection import Viewport, mercator
from .render_context import RenderContext
from .renderer import ControlsOverlay, TrackRenderer

__all__ = [
    "ControlsOverlay",
    "RenderContext",
    "TrackRenderer",
    "Viewport",
    "mercator",
]
