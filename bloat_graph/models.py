"""Data models for the bloat-graph pipeline."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from bloat_graph.errors import UnmatchedSizeEntry

if TYPE_CHECKING:
    import graphviz

    from bloat_graph.analysis.graph_models import DependencyGraph
    from bloat_graph.analysis.metrics import GraphMetrics


class ColoringScheme(enum.Enum):
    CUM_SUM = "cum-sum"
    DEP_COUNT = "dep-count"
    REV_DEP_COUNT = "rev-dep-count"
    NONE = "none"

    @property
    def label(self) -> str:
        return {
            "cum-sum": "cumulative sum",
            "dep-count": "dependency count",
            "rev-dep-count": "reverse dependency count",
            "none": "none",
        }[self.value]

    @property
    def default_gamma(self) -> float:
        return {
            "cum-sum": 0.25,
            "dep-count": 0.25,
            "rev-dep-count": 0.5,
            "none": 1.0,
        }[self.value]

    @property
    def measures_bytes(self) -> bool:
        return self is ColoringScheme.CUM_SUM


class Highlight(enum.Enum):
    DEP = "dep"          # hovering a node highlights its dependencies
    REV_DEP = "rev-dep"  # hovering a node highlights its dependents


DEFAULT_NODE_LABEL = "{short}"
DEFAULT_NODE_TOOLTIP = "{full}\n{size_binary}\n{features}"
DEFAULT_EDGE_LABEL = "{features}"
DEFAULT_EDGE_TOOLTIP = "{source} -> {target}"


@dataclass
class TemplateOptions:
    node_label: str = DEFAULT_NODE_LABEL
    node_tooltip: str = DEFAULT_NODE_TOOLTIP
    edge_label: str = DEFAULT_EDGE_LABEL
    edge_tooltip: str = DEFAULT_EDGE_TOOLTIP


@dataclass
class RenderOptions:
    """Options that only affect how the graph description looks."""
    dark_mode: bool = False
    highlight: Highlight | None = None
    highlight_amount: float = 0.5
    scale_factor: float = 1.0
    separation_factor: float = 1.0
    padding: float = 1.0


@dataclass
class PipelineConfig:
    """Configuration for the graph pipeline."""
    root: str | None = None
    excludes: list[str] = field(default_factory=list)
    std: bool = False
    bin: str | None = None
    scheme: ColoringScheme = ColoringScheme.CUM_SUM
    gradient: str = "reds"
    gamma: float | None = None  # None: scheme default
    inverse_gradient: bool = False
    threshold: int | str | None = None
    max_depth: int | None = None
    templates: TemplateOptions = field(default_factory=TemplateOptions)
    render: RenderOptions = field(default_factory=RenderOptions)

    @property
    def effective_gamma(self) -> float:
        return self.scheme.default_gamma if self.gamma is None else self.gamma


@dataclass
class PipelineResult:
    """Result of a pipeline run."""
    graph: DependencyGraph
    metrics: GraphMetrics
    digraph: graphviz.Digraph
    warnings: list[UnmatchedSizeEntry] = field(default_factory=list)

    @property
    def dot_source(self) -> str:
        return self.digraph.source
