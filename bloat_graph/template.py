"""Label and tooltip templates.

A template is plain text with ``{placeholder}`` tokens. It is parsed once,
so an unknown placeholder fails before anything is rendered. ``\\n``,
``\\t``, ``\\{``, ``\\}`` and ``\\\\`` are escapes.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from bloat_graph.analysis.graph_models import CrateNode, DependencyEdge, DependencyGraph
from bloat_graph.analysis.metrics import GraphMetrics
from bloat_graph.errors import ConfigurationError
from bloat_graph.models import ColoringScheme, TemplateOptions
from bloat_graph.units import format_size

NODE_PLACEHOLDERS = frozenset({
    "short", "extra", "full",
    "size", "size_binary", "size_decimal",
    "value", "value_binary", "value_decimal",
    "scheme", "features",
})
EDGE_PLACEHOLDERS = frozenset({"source", "target", "features"})

_ESCAPES = {"n": "\n", "t": "\t", "{": "{", "}": "}", "\\": "\\"}


@dataclass
class Template:
    """A parsed template: literal strings alternating with placeholder names."""
    source: str
    segments: list[tuple[bool, str]] = field(default_factory=list)  # (is_placeholder, text)

    @classmethod
    def parse(cls, text: str, vocabulary: frozenset[str]) -> Template:
        segments: list[tuple[bool, str]] = []
        literal: list[str] = []
        i = 0
        while i < len(text):
            ch = text[i]
            if ch == "\\" and i + 1 < len(text) and text[i + 1] in _ESCAPES:
                literal.append(_ESCAPES[text[i + 1]])
                i += 2
                continue
            if ch == "{":
                end = text.find("}", i + 1)
                if end == -1:
                    raise ConfigurationError(f"Unclosed '{{' in template {text!r}")
                name = text[i + 1:end].strip()
                if name not in vocabulary:
                    raise ConfigurationError(
                        f"Unknown placeholder {{{name}}} in template {text!r}; "
                        f"expected one of: {', '.join(sorted(vocabulary))}"
                    )
                if literal:
                    segments.append((False, "".join(literal)))
                    literal = []
                segments.append((True, name))
                i = end + 1
                continue
            if ch == "}":
                raise ConfigurationError(f"Unmatched '}}' in template {text!r}")
            literal.append(ch)
            i += 1
        if literal:
            segments.append((False, "".join(literal)))
        return cls(source=text, segments=segments)

    @property
    def placeholders(self) -> list[str]:
        return [text for is_placeholder, text in self.segments if is_placeholder]

    def render(self, context: dict[str, str]) -> str:
        return "".join(
            context[text] if is_placeholder else text
            for is_placeholder, text in self.segments
        )


def format_features(features: dict) -> str:
    """``{"default": ["std"], "std": []}`` -> ``"default(std),\\nstd"``.

    An entry under ``""`` (enabled directly, not through a feature) lists
    its values without a prefix.
    """
    parts = []
    for name in sorted(features):
        enabled = features[name]
        values = sorted(enabled) if isinstance(enabled, set) else list(enabled)
        if not name:
            if values:
                parts.append(",".join(values))
        elif values:
            parts.append(f"{name}({','.join(values)})")
        else:
            parts.append(name)
    return ",\n".join(parts)


class TemplateSet:
    """The four templates used for every node and edge."""

    def __init__(
        self,
        node_label: Template,
        node_tooltip: Template,
        edge_label: Template,
        edge_tooltip: Template,
    ):
        self.node_label = node_label
        self.node_tooltip = node_tooltip
        self.edge_label = edge_label
        self.edge_tooltip = edge_tooltip

    @classmethod
    def from_options(cls, options: TemplateOptions) -> TemplateSet:
        return cls(
            node_label=Template.parse(options.node_label, NODE_PLACEHOLDERS),
            node_tooltip=Template.parse(options.node_tooltip, NODE_PLACEHOLDERS),
            edge_label=Template.parse(options.edge_label, EDGE_PLACEHOLDERS),
            edge_tooltip=Template.parse(options.edge_tooltip, EDGE_PLACEHOLDERS),
        )

    def node(
        self,
        node: CrateNode,
        metrics: GraphMetrics,
        scheme: ColoringScheme,
    ) -> tuple[str, str]:
        """Label and tooltip of a node."""
        context = node_context(node, metrics, scheme)
        return self.node_label.render(context), self.node_tooltip.render(context)

    def edge(self, edge: DependencyEdge, graph: DependencyGraph) -> tuple[str, str]:
        """Label and tooltip of an edge."""
        context = {
            "source": graph.nodes[edge.source].short,
            "target": graph.nodes[edge.target].short,
            "features": format_features(edge.features),
        }
        return self.edge_label.render(context), self.edge_tooltip.render(context)


def node_context(node: CrateNode, metrics: GraphMetrics, scheme: ColoringScheme) -> dict[str, str]:
    size = node.size
    context = {
        "short": node.short,
        "extra": node.extra,
        "full": node.full,
        "size": str(size),
        "size_binary": format_size(size, binary=True),
        "size_decimal": format_size(size, binary=False),
        "scheme": scheme.value,
        "features": format_features(node.features),
    }

    if scheme is ColoringScheme.NONE:
        context.update(value="", value_binary="", value_decimal="")
    else:
        value = metrics.value(node.key, scheme)
        if scheme.measures_bytes:
            context.update(
                value=str(value),
                value_binary=format_size(value, binary=True),
                value_decimal=format_size(value, binary=False),
            )
        else:
            # Counts have no byte unit
            context.update(value=str(value), value_binary=str(value), value_decimal=str(value))
    return context
