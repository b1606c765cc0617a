"""Graph builder: merges the tree and size reports, re-roots, and excludes crates."""

from __future__ import annotations

import fnmatch
import logging

from bloat_graph.analysis.graph_models import CrateNode, DependencyGraph
from bloat_graph.errors import RootResolutionError, UnmatchedSizeEntry
from bloat_graph.reports.size_report import SizeReport

logger = logging.getLogger(__name__)

STD_NODE = "std"
_GLOB_CHARS = "*?["


class GraphBuilder:
    """Turn parsed reports into the graph the metrics engine works on.

    Every method returns a new graph and leaves its input untouched.
    """

    def build(
        self,
        tree: DependencyGraph,
        sizes: SizeReport,
        bin_name: str | None = None,
    ) -> DependencyGraph:
        graph = tree.subgraph(set(tree.nodes))
        if graph.root is None:
            return graph

        # Step 1: Features activated on inbound edges are active on the node
        for edge in graph.edges.values():
            features = graph.nodes[edge.target].features
            for feature in sorted(edge.activated):
                features.setdefault(feature, [])

        # Step 2: Fold the binary's own entry into the root crate
        remaining = dict(sizes.sizes)
        root = graph.nodes[graph.root]
        if bin_name:
            bin_key = bin_name.replace("-", "_")
            if bin_key != root.short and bin_key in remaining:
                root.size += remaining.pop(bin_key)

        # Step 3: Attach sizes, version-qualified first
        by_full: dict[str, str] = {}
        by_version: dict[tuple[str, str], str] = {}
        by_short: dict[str, list[str]] = {}
        for key, node in graph.nodes.items():
            by_full[node.full] = key
            by_version[(node.short, node.version)] = key
            by_short.setdefault(node.short, []).append(key)

        for name, size in remaining.items():
            short, _, extra = name.partition(" ")
            if extra:
                key = by_full.get(name) or by_version.get((short, extra.split(" ", 1)[0]))
                targets = [key] if key else []
            else:
                targets = by_short.get(short, [])

            if not targets:
                entry = UnmatchedSizeEntry(name=name, size=size)
                graph.warnings.append(entry)
                logger.warning("Skipping %s", entry)
                continue

            # Several versions of one crate share its name-only entry
            share, rest = divmod(size, len(targets))
            for i, key in enumerate(targets):
                graph.nodes[key].size += share + (rest if i == 0 else 0)

        return graph

    def add_std_node(self, graph: DependencyGraph, std_size: int | None) -> DependencyGraph:
        """Add the standard library as a single child of the root."""
        result = graph.subgraph(set(graph.nodes))
        if result.root is None or result.std is not None:
            return result
        node = result.add_node(CrateNode(
            index=graph.next_index(),
            short=STD_NODE,
            size=std_size or 0,
        ))
        result.std = node.key
        result.add_edge(result.root, node.key)
        return result

    def resolve_root(self, graph: DependencyGraph, selector: str) -> str:
        """Find the unique node matching a name, name prefix, or glob pattern."""
        name, sep, rest = selector.partition(" ")
        normalized = name.replace("-", "_") + sep + rest
        nodes = list(graph.nodes.values())

        exact = [n.key for n in nodes if normalized in (n.short, n.full) or selector == n.full]
        if len(exact) == 1:
            return exact[0]
        if len(exact) > 1:
            raise RootResolutionError(selector, exact)

        prefixed = [n.key for n in nodes if n.short.startswith(normalized)]
        if len(prefixed) == 1:
            return prefixed[0]

        globbed = [n.key for n in nodes if _matches(n, selector)]
        if len(globbed) == 1:
            return globbed[0]

        candidates = prefixed if len(prefixed) > 1 else globbed
        raise RootResolutionError(selector, candidates)

    def change_root(self, graph: DependencyGraph, selector: str) -> DependencyGraph:
        """Extract the subgraph below the node matching ``selector``."""
        key = self.resolve_root(graph, selector)
        logger.info("Re-rooting graph at %s", key)
        return graph.subgraph(set(graph.nodes), root=key)

    def exclude(self, graph: DependencyGraph, patterns: list[str]) -> DependencyGraph:
        """Remove crates matching any pattern, and whatever only they reached.

        A pattern without glob characters matches as a name prefix, so
        ``windows`` also drops ``windows_sys``.
        """
        if not patterns:
            return graph.subgraph(set(graph.nodes))

        matched = {
            key for key, node in graph.nodes.items()
            if any(_excluded(node, pattern) for pattern in patterns)
        }
        if graph.root in matched:
            logger.warning("Exclusion patterns match the root %s; keeping it", graph.root)
            matched.discard(graph.root)

        result = graph.without(matched)
        logger.info(
            "Excluded %d crate(s) by pattern, %d more became unreachable",
            len(matched), len(graph.nodes) - len(result.nodes) - len(matched),
        )
        return result


def _matches(node: CrateNode, pattern: str) -> bool:
    normalized = pattern.replace("-", "_")
    return (
        fnmatch.fnmatch(node.short, normalized)
        or fnmatch.fnmatch(node.full, pattern)
        or fnmatch.fnmatch(node.full, normalized)
    )


def _excluded(node: CrateNode, pattern: str) -> bool:
    if any(ch in pattern for ch in _GLOB_CHARS):
        return _matches(node, pattern)
    return node.short.startswith(pattern.replace("-", "_")) or node.full.startswith(pattern)
