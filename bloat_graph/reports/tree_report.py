"""Parser for ``cargo tree --edges=...,features`` output.

Both prefix styles are understood::

    0demo v0.1.0 (/work/demo)          demo v0.1.0 (/work/demo)
    1clap feature "default"            ├── clap feature "default"
    2clap v4.5.4                       │   └── clap v4.5.4

A ``feature`` line is merged with the package line below it: the package
node records the feature, and the edge from the parent records which of
the parent's features (if any) enabled it. Lines ending in ``(*)`` are
repeated occurrences and resolve to the node seen first.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from bloat_graph.analysis.graph_models import CrateNode, DependencyGraph
from bloat_graph.errors import ReportParseError

_REPEAT_MARK = " (*)"
_FEATURE_RE = re.compile(r'^(\S+) feature "([^"]*)"$')
_INDENT_GLYPHS = set("│├└─|`-  ")
_INDENT_WIDTH = 4


@dataclass
class _Frame:
    node: str
    feature: str | None = None


@dataclass
class _ParseState:
    graph: DependencyGraph = field(default_factory=DependencyGraph)
    stack: list[_Frame] = field(default_factory=list)
    last: _Frame | None = None
    pending_feature: bool = False  # a feature line awaits its package line
    # (raw short name, feature) -> node key
    feature_nodes: dict[tuple[str, str], str] = field(default_factory=dict)


def parse_tree_report(text: str) -> DependencyGraph:
    """Parse a cargo tree report into a dependency graph rooted at its first line."""
    lines = text.rstrip().splitlines()
    if not lines or not text.strip():
        raise ReportParseError("Empty tree report")

    state = _ParseState()
    for number, line in enumerate(lines, start=1):
        if not line.strip():
            raise ReportParseError(
                "One and only one package must be specified", line, number,
            )
        depth, entry = _split_depth(line, number)
        if entry.startswith("[") and entry.endswith("]"):
            # Section headers such as "[build-dependencies]"
            continue
        _parse_line(state, depth, entry, line, number)

    if state.pending_feature:
        raise ReportParseError(
            "Feature line is not followed by its package", lines[-1], len(lines),
        )
    return state.graph


def _split_depth(line: str, number: int) -> tuple[int, str]:
    if line[:1].isdigit():
        m = re.match(r'(\d+)(.*)$', line)
        depth, entry = int(m.group(1)), m.group(2)
    else:
        prefix_len = 0
        while prefix_len < len(line) and line[prefix_len] in _INDENT_GLYPHS:
            prefix_len += 1
        if prefix_len % _INDENT_WIDTH:
            raise ReportParseError("Malformed indentation", line, number)
        depth, entry = prefix_len // _INDENT_WIDTH, line[prefix_len:]

    entry = entry.strip()
    if not entry:
        raise ReportParseError("Missing package name", line, number)
    return depth, entry


def _parse_line(state: _ParseState, depth: int, entry: str, line: str, number: int) -> None:
    graph = state.graph
    stack = state.stack

    if depth == 0 and graph.nodes:
        raise ReportParseError(
            "One and only one package must be specified", line, number,
        )
    if state.pending_feature and depth != len(stack) + 1:
        raise ReportParseError(
            "Feature line is not followed by its package", line, number,
        )
    if depth > len(stack) + 1 or (depth == len(stack) + 1 and state.last is None):
        raise ReportParseError("Malformed indentation: depth skips a level", line, number)

    if depth < len(stack):
        del stack[depth:]
    elif depth == len(stack) + 1 and not state.pending_feature:
        stack.append(_Frame(state.last.node, state.last.feature))

    is_repeat = entry.endswith(_REPEAT_MARK.strip())
    lib = entry[: -len(_REPEAT_MARK)] if entry.endswith(_REPEAT_MARK) else entry

    m = _FEATURE_RE.match(lib)
    if m:
        short, feature = m.groups()
        if state.last is None:
            state.last = _Frame(node="", feature=feature)
        else:
            state.last.feature = feature
        if is_repeat:
            key = state.feature_nodes.get((short, feature))
            if key is None:
                raise ReportParseError(
                    f"Repeated feature {feature!r} of {short!r} was never expanded",
                    line, number,
                )
            _link(state, key, feature)
        else:
            state.pending_feature = True
        return

    if " " not in lib:
        raise ReportParseError("Expected '<name> <version>'", line, number)

    raw_short, extra = lib.split(" ", 1)
    node = CrateNode(
        index=len(graph.nodes),
        short=raw_short.replace("-", "_"),
        extra=extra.strip(),
    )
    key = graph.add_node(node).key

    feature = state.last.feature if state.last is not None else None
    if state.pending_feature:
        state.feature_nodes[(raw_short, feature)] = key
        graph.nodes[key].features.setdefault(feature, [])
        # "A feature i" -> "A" -> "A feature j": feature i enables j
        if stack and stack[-1].node == key and stack[-1].feature is not None:
            enabled = graph.nodes[key].features.setdefault(stack[-1].feature, [])
            if feature not in enabled:
                enabled.append(feature)
    else:
        feature = None

    _link(state, key, feature)

    state.last = _Frame(key, feature)
    if state.pending_feature:
        stack.append(_Frame(key, feature))
        state.last = _Frame(key, None)
    state.pending_feature = False


def _link(state: _ParseState, key: str, feature: str | None) -> None:
    """Connect the top of the stack to ``key``."""
    if not state.stack:
        return
    parent = state.stack[-1]
    if parent.node == key:
        return
    via = parent.feature or ""
    enabled = {feature} if feature is not None else set()
    state.graph.add_edge(parent.node, key, {via: enabled})
