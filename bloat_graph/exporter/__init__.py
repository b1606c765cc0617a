"""Exporter layer."""

from bloat_graph.exporter.dot_emitter import emit_dot, highlight_classes, render_attributes
from bloat_graph.exporter.svg_renderer import inject_highlight_style, render_svg, write_svg

__all__ = [
    "emit_dot",
    "highlight_classes",
    "inject_highlight_style",
    "render_attributes",
    "render_svg",
    "write_svg",
]
