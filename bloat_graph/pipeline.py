"""Pipeline orchestrator: parse -> build -> measure -> filter -> style -> emit."""

from __future__ import annotations

import logging
from typing import Callable

from bloat_graph.analysis.filters import apply_filters
from bloat_graph.analysis.graph_builder import GraphBuilder
from bloat_graph.analysis.graph_models import DependencyGraph
from bloat_graph.analysis.metrics import compute_metrics
from bloat_graph.errors import ConfigurationError
from bloat_graph.exporter.dot_emitter import emit_dot
from bloat_graph.models import ColoringScheme, PipelineConfig, PipelineResult
from bloat_graph.reports import SizeReport, parse_size_report, parse_tree_report
from bloat_graph.styling.gradients import parse_gradient
from bloat_graph.styling.style import StyleEngine
from bloat_graph.template import TemplateSet
from bloat_graph.units import parse_threshold

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, int, int], None]


def validate_config(config: PipelineConfig) -> None:
    """Reject invalid options before any report is read."""
    if not isinstance(config.scheme, ColoringScheme):
        raise ConfigurationError(f"Invalid coloring scheme: {config.scheme!r}")
    gamma = config.effective_gamma
    if not 0.0 <= gamma <= 1.0:
        raise ConfigurationError(f"Gamma must be between 0 and 1, got {gamma}")

    # Both raise ConfigurationError themselves
    parse_gradient(config.gradient)
    TemplateSet.from_options(config.templates)

    if config.threshold is not None:
        try:
            parse_threshold(config.threshold)
        except ValueError as exc:
            raise ConfigurationError(f"Invalid threshold: {exc}") from exc
    if config.max_depth is not None and config.max_depth < 0:
        raise ConfigurationError(f"Max depth must not be negative, got {config.max_depth}")

    if config.root is not None and not config.root.strip():
        raise ConfigurationError("Root selector must not be empty")
    for pattern in config.excludes:
        if not pattern.strip():
            raise ConfigurationError("Exclusion patterns must not be empty")

    render = config.render
    if not 0.0 <= render.highlight_amount <= 1.0:
        raise ConfigurationError(
            f"Highlight amount must be between 0 and 1, got {render.highlight_amount}"
        )
    if render.scale_factor <= 0 or render.separation_factor <= 0:
        raise ConfigurationError("Scale and separation factors must be positive")
    if render.padding < 0:
        raise ConfigurationError(f"Padding must not be negative, got {render.padding}")


def build_graph(
    config: PipelineConfig,
    tree_output: str,
    sizes: SizeReport,
) -> DependencyGraph:
    """Merge the reports and apply root, std and exclusion options."""
    builder = GraphBuilder()
    graph = builder.build(parse_tree_report(tree_output), sizes, bin_name=config.bin)
    if config.root:
        graph = builder.change_root(graph, config.root)
    if config.std:
        graph = builder.add_std_node(graph, sizes.std_size)
    if config.excludes:
        graph = builder.exclude(graph, config.excludes)
    return graph


def run_pipeline(
    config: PipelineConfig,
    tree_output: str,
    size_output: str,
    progress: ProgressCallback | None = None,
) -> PipelineResult:
    """Run the full graph pipeline on already captured report texts."""
    validate_config(config)
    templates = TemplateSet.from_options(config.templates)
    threshold = parse_threshold(config.threshold) if config.threshold is not None else None

    # Stage 1: Parse
    if progress:
        progress("Parsing", 0, 1)
    sizes = parse_size_report(size_output)
    if progress:
        progress("Parsing", 1, 1)

    # Stage 2: Build
    if progress:
        progress("Building", 0, 1)
    graph = build_graph(config, tree_output, sizes)
    if progress:
        progress("Building", 1, 1)

    # Stage 3: Measure
    if progress:
        progress("Measuring", 0, 1)
    metrics = compute_metrics(graph)
    if progress:
        progress("Measuring", 1, 1)

    # Stage 4: Filter
    if progress:
        progress("Filtering", 0, 1)
    # Metrics stay those of the unfiltered graph
    if threshold is not None or config.max_depth is not None:
        graph = apply_filters(graph, metrics, threshold=threshold, max_depth=config.max_depth)
    if progress:
        progress("Filtering", 1, 1)

    # Stage 5: Style
    if progress:
        progress("Styling", 0, 1)
    engine = StyleEngine(
        gradient=config.gradient,
        gamma=config.effective_gamma,
        invert=config.inverse_gradient,
        dark_mode=config.render.dark_mode,
        scale_factor=config.render.scale_factor,
    )
    node_styles = engine.node_styles(graph, metrics, config.scheme)
    edge_styles = engine.edge_styles(graph, metrics, config.scheme)
    if progress:
        progress("Styling", 1, 1)

    # Stage 6: Emit
    if progress:
        progress("Emitting", 0, 1)
    digraph = emit_dot(
        graph, metrics, node_styles, edge_styles, templates, config.scheme, config.render,
    )
    if progress:
        progress("Emitting", 1, 1)

    logger.info("Graph has %d crate(s) and %d edge(s)", len(graph.nodes), len(graph.edges))
    return PipelineResult(
        graph=graph,
        metrics=metrics,
        digraph=digraph,
        warnings=list(graph.warnings),
    )
