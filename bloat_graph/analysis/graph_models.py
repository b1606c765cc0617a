"""Data models for the crate dependency graph."""

from __future__ import annotations

import copy
from collections import deque
from dataclasses import dataclass, field

from bloat_graph.errors import UnmatchedSizeEntry


@dataclass
class CrateNode:
    """A compiled crate, or the synthetic standard-library node.

    ``short`` is the crate name in code form (``regex_syntax``), ``extra``
    the rest of the cargo tree entry (``v0.8.3`` or ``v0.1.0 (/path)``).
    """
    index: int
    short: str
    extra: str = ""
    features: dict[str, list[str]] = field(default_factory=dict)  # feature -> sub-features it enables
    size: int = 0

    @property
    def full(self) -> str:
        return f"{self.short} {self.extra}" if self.extra else self.short

    @property
    def key(self) -> str:
        return self.full

    @property
    def version(self) -> str:
        return self.extra.split(" ", 1)[0] if self.extra else ""


@dataclass
class DependencyEdge:
    """A dependency of ``source`` on ``target``.

    ``features`` maps a feature of the source crate ("" when the dependency
    is declared directly) to the features of the target crate it enables.
    """
    source: str
    target: str
    features: dict[str, set[str]] = field(default_factory=dict)

    @property
    def activated(self) -> set[str]:
        result: set[str] = set()
        for enabled in self.features.values():
            result |= enabled
        return result

    def merge(self, features: dict[str, set[str]]) -> None:
        for via, enabled in features.items():
            self.features.setdefault(via, set()).update(enabled)


@dataclass
class DependencyGraph:
    nodes: dict[str, CrateNode] = field(default_factory=dict)  # key -> node, insertion ordered
    edges: dict[tuple[str, str], DependencyEdge] = field(default_factory=dict)
    forward: dict[str, list[str]] = field(default_factory=dict)  # source -> [targets]
    reverse: dict[str, list[str]] = field(default_factory=dict)  # target -> [sources]
    root: str | None = None
    std: str | None = None
    warnings: list[UnmatchedSizeEntry] = field(default_factory=list)

    def add_node(self, node: CrateNode) -> CrateNode:
        existing = self.nodes.get(node.key)
        if existing is not None:
            return existing
        self.nodes[node.key] = node
        self.forward[node.key] = []
        self.reverse[node.key] = []
        if self.root is None:
            self.root = node.key
        return node

    def add_edge(
        self,
        source: str,
        target: str,
        features: dict[str, set[str]] | None = None,
    ) -> DependencyEdge:
        """Add ``source -> target``, merging features into an existing edge."""
        edge = self.edges.get((source, target))
        if edge is None:
            edge = DependencyEdge(source=source, target=target)
            self.edges[(source, target)] = edge
            self.forward[source].append(target)
            self.reverse[target].append(source)
        if features:
            edge.merge(features)
        return edge

    def children(self, key: str) -> list[str]:
        return self.forward.get(key, [])

    def parents(self, key: str) -> list[str]:
        return self.reverse.get(key, [])

    def next_index(self) -> int:
        return max((n.index for n in self.nodes.values()), default=-1) + 1

    def reachable(self, start: str | None = None) -> list[str]:
        """BFS order of every node reachable from ``start`` (default: root)."""
        start = self.root if start is None else start
        if start is None or start not in self.nodes:
            return []
        seen = {start}
        order = [start]
        queue = deque([start])
        while queue:
            current = queue.popleft()
            for child in self.forward.get(current, []):
                if child not in seen:
                    seen.add(child)
                    order.append(child)
                    queue.append(child)
        return order

    def depths(self) -> dict[str, int]:
        """Shortest distance from the root for every reachable node."""
        if self.root is None:
            return {}
        depth = {self.root: 0}
        queue = deque([self.root])
        while queue:
            current = queue.popleft()
            for child in self.forward.get(current, []):
                if child not in depth:
                    depth[child] = depth[current] + 1
                    queue.append(child)
        return depth

    def topological_order(self) -> list[str]:
        """Reachable nodes, every node before its dependencies.

        Edges closing a cycle are ignored; cargo never produces one.
        """
        if self.root is None:
            return []
        postorder: list[str] = []
        visited = {self.root}
        stack = [(self.root, iter(self.forward.get(self.root, [])))]
        while stack:
            node, children = stack[-1]
            for child in children:
                if child not in visited:
                    visited.add(child)
                    stack.append((child, iter(self.forward.get(child, []))))
                    break
            else:
                stack.pop()
                postorder.append(node)
        postorder.reverse()
        return postorder

    def subgraph(self, keep: set[str], root: str | None = None) -> DependencyGraph:
        """New graph with the nodes in ``keep`` reachable from ``root``."""
        root = self.root if root is None else root
        result = DependencyGraph(warnings=list(self.warnings))
        if root is None or root not in keep:
            return result

        reachable: set[str] = {root}
        queue = deque([root])
        while queue:
            current = queue.popleft()
            for child in self.forward.get(current, []):
                if child in keep and child not in reachable:
                    reachable.add(child)
                    queue.append(child)

        # Preserve original insertion order
        for key, node in self.nodes.items():
            if key in reachable:
                result.add_node(copy.deepcopy(node))
        result.root = root
        for (source, target), edge in self.edges.items():
            if source in reachable and target in reachable:
                result.add_edge(source, target, copy.deepcopy(edge.features))
        if self.std in reachable:
            result.std = self.std
        return result

    def without(self, remove: set[str]) -> DependencyGraph:
        """New graph minus ``remove`` and anything left unreachable."""
        return self.subgraph(set(self.nodes) - remove)
