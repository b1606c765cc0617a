"""Filter engine: prune crates by cumulative size and depth."""

from __future__ import annotations

import logging

from bloat_graph.analysis.graph_models import DependencyGraph
from bloat_graph.analysis.metrics import GraphMetrics

logger = logging.getLogger(__name__)


def below_threshold(graph: DependencyGraph, metrics: GraphMetrics, threshold: int) -> set[str]:
    """Nodes whose cumulative size is strictly below ``threshold`` bytes."""
    return {
        key for key in graph.nodes
        if metrics.cumulative_size.get(key, 0) < threshold
    }


def beyond_depth(graph: DependencyGraph, metrics: GraphMetrics, max_depth: int) -> set[str]:
    """Nodes deeper than ``max_depth`` from the root."""
    return {
        key for key in graph.nodes
        if metrics.depth.get(key, max_depth + 1) > max_depth
    }


def apply_filters(
    graph: DependencyGraph,
    metrics: GraphMetrics,
    threshold: int | None = None,
    max_depth: int | None = None,
) -> DependencyGraph:
    """Remove filtered nodes and everything only they reached. The root always stays."""
    remove: set[str] = set()
    if threshold is not None:
        remove |= below_threshold(graph, metrics, threshold)
    if max_depth is not None:
        remove |= beyond_depth(graph, metrics, max_depth)
    remove.discard(graph.root)

    result = graph.without(remove)
    if remove:
        logger.info(
            "Filtered %d of %d crate(s) (threshold=%s, max_depth=%s)",
            len(graph.nodes) - len(result.nodes), len(graph.nodes), threshold, max_depth,
        )
    return result
