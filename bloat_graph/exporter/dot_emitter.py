"""Emit the styled dependency graph as a graphviz ``Digraph``."""

from __future__ import annotations

import logging
import math

import graphviz

from bloat_graph.analysis.graph_models import DependencyGraph
from bloat_graph.analysis.metrics import GraphMetrics
from bloat_graph.models import ColoringScheme, Highlight, RenderOptions
from bloat_graph.styling.style import EdgeStyle, NodeStyle
from bloat_graph.template import TemplateSet

logger = logging.getLogger(__name__)


def _num(value: float) -> str:
    return f"{value:g}"


def _text(value: str) -> str:
    # Line breaks use the DOT "\n" escape, so literal backslashes are doubled first
    return graphviz.nohtml(value.replace("\\", "\\\\").replace("\n", "\\n"))


def render_attributes(node_count: int, options: RenderOptions) -> dict[str, dict[str, str]]:
    """Graph, node and edge defaults, scaled with the number of nodes."""
    count_factor = math.floor(node_count / 32)
    node_font_size = (count_factor * 3 + 15) * options.scale_factor
    edge_font_size = node_font_size * 0.75
    arrow_size = (count_factor * 0.2 + 0.6) * options.scale_factor
    edge_width = arrow_size * 2
    node_border_width = edge_width * 0.75
    node_sep = 0.35 * options.separation_factor
    rank_sep = node_sep * 2

    graph_attr = {
        "pad": _num(options.padding),
        "nodesep": _num(node_sep),
        "ranksep": _num(rank_sep),
    }
    node_attr = {
        "shape": "circle",
        "style": "filled",
        "fixedsize": "shape",
        "fontname": "monospace",
        "fontsize": _num(node_font_size),
        "penwidth": _num(node_border_width),
    }
    edge_attr = {
        "fontname": "monospace",
        "fontsize": _num(edge_font_size),
        "arrowsize": _num(arrow_size),
        "arrowhead": "onormal",
        "penwidth": _num(edge_width),
    }

    if options.dark_mode:
        graph_attr["bgcolor"] = "#000000"
        node_attr.update(color="#FFFFFF", fontcolor="#FFFFFF")
        edge_attr.update(color="#FFFFFF9F", fontcolor="#FFFFFFFF")
    else:
        node_attr.update(color="#000000", fontcolor="#000000")
        edge_attr.update(color="#0000009F", fontcolor="#000000")

    return {"graph_attr": graph_attr, "node_attr": node_attr, "edge_attr": edge_attr}


def highlight_classes(graph: DependencyGraph, highlight: Highlight) -> dict[str, list[int]]:
    """Node indices whose hover should keep each node visible.

    With ``Highlight.DEP`` a node carries the index of every node it is
    reachable from, so hovering a crate keeps its dependencies lit.
    ``Highlight.REV_DEP`` propagates the other way.
    """
    order = graph.topological_order()
    rank = {key: i for i, key in enumerate(order)}
    classes: dict[str, list[int]] = {key: [] for key in order}

    if highlight is Highlight.DEP:
        for key in order:
            classes[key].append(graph.nodes[key].index)
            for child in graph.children(key):
                if rank.get(child, -1) > rank[key]:
                    classes[child].extend(i for i in classes[key] if i not in classes[child])
    else:
        for key in reversed(order):
            classes[key].append(graph.nodes[key].index)
            for child in graph.children(key):
                if rank.get(child, -1) > rank[key]:
                    classes[key].extend(i for i in classes[child] if i not in classes[key])
    return classes


def _class_attr(indices: list[int]) -> str:
    return " ".join(f"node{i}" for i in indices)


def emit_dot(
    graph: DependencyGraph,
    metrics: GraphMetrics,
    node_styles: dict[str, NodeStyle],
    edge_styles: dict[tuple[str, str], EdgeStyle],
    templates: TemplateSet,
    scheme: ColoringScheme,
    options: RenderOptions | None = None,
) -> graphviz.Digraph:
    """Build the graph description.

    Node ids are the crate indices assigned while parsing the tree report,
    so the same crate keeps its id across runs with different filters.
    """
    options = options or RenderOptions()
    digraph = graphviz.Digraph(
        "dependencies",
        format="svg",
        **render_attributes(len(graph.nodes), options),
    )

    classes = highlight_classes(graph, options.highlight) if options.highlight else None

    for key, node in graph.nodes.items():
        label, tooltip = templates.node(node, metrics, scheme)
        style = node_styles[key]
        attrs = {
            "label": _text(label),
            "tooltip": _text(tooltip),
            "width": _num(style.width),
            "fillcolor": style.fillcolor,
        }
        if classes is not None:
            attrs["class"] = _class_attr(classes.get(key, []))
        digraph.node(str(node.index), **attrs)

    for pair, edge in graph.edges.items():
        label, tooltip = templates.edge(edge, graph)
        attrs = {
            "label": _text(label),
            "edgetooltip": _text(tooltip),
            "labeltooltip": _text(tooltip),
        }
        style = edge_styles.get(pair)
        if style is not None and style.color is not None:
            attrs["color"] = style.color
        if classes is not None:
            owner = edge.source if options.highlight is Highlight.DEP else edge.target
            attrs["class"] = _class_attr(classes.get(owner, []))
        digraph.edge(
            str(graph.nodes[edge.source].index),
            str(graph.nodes[edge.target].index),
            **attrs,
        )

    logger.debug("Emitted %d node(s) and %d edge(s)", len(graph.nodes), len(graph.edges))
    return digraph
