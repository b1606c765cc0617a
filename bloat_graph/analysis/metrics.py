"""Metrics engine: cumulative sizes, dependency counts, path counts, depths."""

from __future__ import annotations

from dataclasses import dataclass, field

from bloat_graph.analysis.graph_models import DependencyEdge, DependencyGraph
from bloat_graph.models import ColoringScheme


@dataclass
class GraphMetrics:
    self_size: dict[str, int] = field(default_factory=dict)
    cumulative_size: dict[str, int] = field(default_factory=dict)
    dependency_count: dict[str, int] = field(default_factory=dict)
    reverse_dependency_count: dict[str, int] = field(default_factory=dict)
    depth: dict[str, int] = field(default_factory=dict)

    def value(self, key: str, scheme: ColoringScheme) -> int:
        """Scheme value of a node."""
        if scheme is ColoringScheme.CUM_SUM:
            return self.cumulative_size[key]
        if scheme is ColoringScheme.DEP_COUNT:
            return self.dependency_count[key]
        if scheme is ColoringScheme.REV_DEP_COUNT:
            return self.reverse_dependency_count[key]
        return 1

    def edge_value(self, edge: DependencyEdge, scheme: ColoringScheme) -> int:
        """Scheme value of an edge: the dependency count of its target."""
        if scheme is ColoringScheme.NONE:
            return 1
        return self.dependency_count[edge.target]


def compute_metrics(graph: DependencyGraph) -> GraphMetrics:
    """Compute every metric for the nodes reachable from the root."""
    order = graph.topological_order()
    rank = {key: i for i, key in enumerate(order)}

    def forward_children(key: str) -> list[str]:
        # Drops edges that would close a cycle
        return [c for c in graph.children(key) if c in rank and rank[c] > rank[key]]

    metrics = GraphMetrics(depth=graph.depths())

    # Post-order: dependencies before dependents
    reachable: dict[str, set[str]] = {}
    for key in reversed(order):
        children = forward_children(key)
        size = graph.nodes[key].size
        metrics.self_size[key] = size
        # Shared dependencies count once per dependent
        metrics.cumulative_size[key] = size + sum(metrics.cumulative_size[c] for c in children)

        deps: set[str] = set()
        for child in children:
            deps.add(child)
            deps |= reachable[child]
        reachable[key] = deps
        metrics.dependency_count[key] = len(deps)

    # Pre-order: number of distinct paths from the root
    paths = {key: 0 for key in order}
    if order:
        paths[order[0]] = 1
    for key in order:
        for child in forward_children(key):
            paths[child] += paths[key]
    metrics.reverse_dependency_count = paths

    return metrics
