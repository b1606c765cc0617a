"""Tests for gradients and the style engine."""

import math

import pytest
from matplotlib.colors import to_hex

from bloat_graph.analysis.graph_models import CrateNode, DependencyGraph
from bloat_graph.analysis.metrics import compute_metrics
from bloat_graph.errors import ConfigurationError
from bloat_graph.models import ColoringScheme
from bloat_graph.styling import NAMED_GRADIENTS, StyleEngine, parse_gradient


def _make_graph(edges, sizes=None):
    graph = DependencyGraph()
    for parent, child in edges:
        for name in (parent, child):
            if name not in graph.nodes:
                graph.add_node(CrateNode(
                    index=len(graph.nodes), short=name, size=(sizes or {}).get(name, 0),
                ))
        graph.add_edge(parent, child)
    return graph


# ── Gradients ─────────────────────────────────────────────────

class TestGradients:
    @pytest.mark.parametrize("name", list(NAMED_GRADIENTS))
    def test_named(self, name):
        cmap = parse_gradient(name)
        assert len(cmap(0.5)) == 4

    def test_named_is_case_insensitive(self):
        assert parse_gradient("Viridis").name == "viridis"

    def test_custom_endpoints(self):
        cmap = parse_gradient("white, red")
        assert to_hex(cmap(0.0)) == "#ffffff"
        assert to_hex(cmap(1.0)) == "#ff0000"

    def test_custom_positions(self):
        cmap = parse_gradient("#000000 0%, #ffffff 50%, #ffffff")
        assert to_hex(cmap(0.75)) == "#ffffff"
        assert to_hex(cmap(0.0)) == "#000000"

    def test_custom_padding(self):
        cmap = parse_gradient("blue 20%, red 80%")
        assert to_hex(cmap(0.0)) == "#0000ff"
        assert to_hex(cmap(1.0)) == "#ff0000"

    @pytest.mark.parametrize("spec", [
        "",
        "reds,",
        "not-a-color, red",
        "red 80%, blue 20%",
        "red 150%",
    ])
    def test_invalid(self, spec):
        with pytest.raises(ConfigurationError):
            parse_gradient(spec)


# ── Normalization ─────────────────────────────────────────────

class TestNormalize:
    def test_min_max(self):
        engine = StyleEngine(gradient="reds", gamma=1.0)
        assert engine.normalize({"a": 10, "b": 20, "c": 30}) == {"a": 0.0, "b": 0.5, "c": 1.0}

    def test_gamma(self):
        engine = StyleEngine(gradient="reds", gamma=0.5)
        positions = engine.normalize({"a": 0, "b": 25, "c": 100})
        assert positions["b"] == pytest.approx(0.5)

    def test_invert(self):
        engine = StyleEngine(gradient="reds", gamma=1.0, invert=True)
        assert engine.normalize({"a": 0, "b": 100}) == {"a": 1.0, "b": 0.0}

    def test_degenerate_maps_to_first_stop(self):
        engine = StyleEngine(gradient="white, red", gamma=0.25, invert=True)
        positions = engine.normalize({"a": 7, "b": 7, "c": 7})
        assert positions == {"a": 0.0, "b": 0.0, "c": 0.0}
        assert engine.color_at(positions["a"]) == "#ffffff"

    def test_empty(self):
        assert StyleEngine().normalize({}) == {}


# ── Style engine ──────────────────────────────────────────────

class TestStyleEngine:
    def test_node_width_is_logarithmic(self):
        engine = StyleEngine()
        assert engine.node_width(0) == 0.0
        small = engine.node_width(4096)
        large = engine.node_width(409600)
        assert small == pytest.approx(math.log10(2), abs=1e-4)
        assert large / small < 10

    def test_scale_factor(self):
        assert StyleEngine(scale_factor=2.0).node_width(4096) == pytest.approx(
            2 * StyleEngine().node_width(4096), abs=1e-3,
        )

    def test_dark_mode_flips_lightness(self):
        light = StyleEngine(gradient="white, white")
        dark = StyleEngine(gradient="white, white", dark_mode=True)
        assert light.color_at(0.3) == "#ffffff"
        assert dark.color_at(0.3) == "#000000"

    def test_node_styles_constant_values(self):
        graph = _make_graph([("a", "b"), ("a", "c")])
        metrics = compute_metrics(graph)
        engine = StyleEngine(gradient="white, red")
        styles = engine.node_styles(graph, metrics, ColoringScheme.NONE)
        assert {s.fillcolor for s in styles.values()} == {"#ffffff"}

    def test_node_styles_by_cumulative_size(self):
        graph = _make_graph([("a", "b"), ("a", "c")], sizes={"a": 0, "b": 0, "c": 100})
        metrics = compute_metrics(graph)
        engine = StyleEngine(gradient="white, red", gamma=1.0)
        styles = engine.node_styles(graph, metrics, ColoringScheme.CUM_SUM)
        assert styles["a"].fillcolor == "#ff0000"
        assert styles["b"].fillcolor == "#ffffff"
        assert styles["c"].fillcolor == "#ff0000"
        assert styles["a"].width == engine.node_width(100)

    def test_edge_styles(self):
        graph = _make_graph([("a", "b"), ("a", "c"), ("b", "d")])
        metrics = compute_metrics(graph)
        engine = StyleEngine(gradient="white, red", gamma=1.0)
        styles = engine.edge_styles(graph, metrics, ColoringScheme.CUM_SUM)
        assert styles[("a", "b")].color == "#ff0000"
        assert styles[("a", "c")].color == "#ffffff"

    def test_edge_styles_uncolored_without_scheme(self):
        graph = _make_graph([("a", "b")])
        metrics = compute_metrics(graph)
        styles = StyleEngine().edge_styles(graph, metrics, ColoringScheme.NONE)
        assert styles[("a", "b")].color is None
