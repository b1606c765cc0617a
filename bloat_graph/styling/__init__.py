"""Gradients and the style engine."""

from bloat_graph.styling.gradients import DEFAULT_GRADIENT, NAMED_GRADIENTS, parse_gradient
from bloat_graph.styling.style import EdgeStyle, NodeStyle, StyleEngine

__all__ = [
    "DEFAULT_GRADIENT",
    "NAMED_GRADIENTS",
    "EdgeStyle",
    "NodeStyle",
    "StyleEngine",
    "parse_gradient",
]
