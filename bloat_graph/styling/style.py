"""Style engine: map scheme values to node diameters and fill colors."""

from __future__ import annotations

import colorsys
import math
from dataclasses import dataclass

from matplotlib.colors import Colormap, to_hex

from bloat_graph.analysis.graph_models import DependencyGraph
from bloat_graph.analysis.metrics import GraphMetrics
from bloat_graph.models import ColoringScheme
from bloat_graph.styling.gradients import parse_gradient


@dataclass
class NodeStyle:
    width: float
    fillcolor: str


@dataclass
class EdgeStyle:
    color: str | None = None  # None: the global edge color applies


class StyleEngine:
    """Colors and sizes for a filtered graph.

    Scheme values are min-max normalized over the surviving nodes (and,
    separately, the surviving edges), raised to ``gamma``, optionally
    inverted, then sampled from the gradient.
    """

    def __init__(
        self,
        gradient: str | Colormap = "reds",
        gamma: float = 1.0,
        invert: bool = False,
        dark_mode: bool = False,
        scale_factor: float = 1.0,
    ) -> None:
        self.colormap = parse_gradient(gradient) if isinstance(gradient, str) else gradient
        self.gamma = gamma
        self.invert = invert
        self.dark_mode = dark_mode
        self.scale_factor = scale_factor

    def normalize(self, values: dict) -> dict:
        """Map each value to a gradient position in [0, 1].

        When every value is the same there is no range to spread over and
        every key lands on the first stop.
        """
        if not values:
            return {}
        low = min(values.values())
        high = max(values.values())
        if high == low:
            return {key: 0.0 for key in values}

        positions = {}
        for key, value in values.items():
            t = ((value - low) / (high - low)) ** self.gamma
            positions[key] = 1.0 - t if self.invert else t
        return positions

    def color_at(self, position: float) -> str:
        r, g, b, _ = self.colormap(min(max(position, 0.0), 1.0))
        if self.dark_mode:
            h, l, s = colorsys.rgb_to_hls(r, g, b)
            r, g, b = colorsys.hls_to_rgb(h, 1.0 - l, s)
        return to_hex((r, g, b))

    def node_width(self, cumulative_size: int) -> float:
        """Diameter in inches, logarithmic in the cumulative size."""
        return round(self.scale_factor * math.log10(cumulative_size / 4096 + 1), 4)

    def node_styles(
        self,
        graph: DependencyGraph,
        metrics: GraphMetrics,
        scheme: ColoringScheme,
    ) -> dict[str, NodeStyle]:
        positions = self.normalize({key: metrics.value(key, scheme) for key in graph.nodes})
        fills = {key: self.color_at(t) for key, t in positions.items()}
        return {
            key: NodeStyle(
                width=self.node_width(metrics.cumulative_size.get(key, 0)),
                fillcolor=fills[key],
            )
            for key in graph.nodes
        }

    def edge_styles(
        self,
        graph: DependencyGraph,
        metrics: GraphMetrics,
        scheme: ColoringScheme,
    ) -> dict[tuple[str, str], EdgeStyle]:
        if scheme is ColoringScheme.NONE:
            return {pair: EdgeStyle() for pair in graph.edges}

        positions = self.normalize({
            pair: metrics.edge_value(edge, scheme) for pair, edge in graph.edges.items()
        })
        return {pair: EdgeStyle(color=self.color_at(t)) for pair, t in positions.items()}
