"""Tests for the cargo tree report parser."""

from pathlib import Path

import pytest

from bloat_graph.errors import ReportParseError
from bloat_graph.reports import parse_tree_report

FIXTURES = Path(__file__).parent / "fixtures"


def _load(name):
    return parse_tree_report((FIXTURES / name).read_text(encoding="utf-8"))


def _edges(graph):
    return {(graph.nodes[s].short, graph.nodes[t].short) for s, t in graph.edges}


# ── Depth prefix ──────────────────────────────────────────────

class TestDepthPrefix:
    def test_nodes_in_order(self):
        graph = _load("cargo_tree.txt")
        shorts = [n.short for n in graph.nodes.values()]
        assert shorts == [
            "demo", "clap", "clap_builder", "anstyle", "serde",
            "regex", "regex_syntax", "aho_corasick", "memchr",
        ]
        assert [n.index for n in graph.nodes.values()] == list(range(9))

    def test_root_is_first_package(self):
        graph = _load("cargo_tree.txt")
        assert graph.root == "demo v0.1.0 (/work/demo)"
        assert graph.nodes[graph.root].version == "v0.1.0"

    def test_edges(self):
        graph = _load("cargo_tree.txt")
        assert _edges(graph) == {
            ("demo", "clap"),
            ("clap", "clap_builder"),
            ("clap_builder", "anstyle"),
            ("demo", "serde"),
            ("demo", "regex"),
            ("regex", "regex_syntax"),
            ("regex", "aho_corasick"),
            ("aho_corasick", "memchr"),
            ("regex", "memchr"),
        }

    def test_repeated_package_is_shared(self):
        graph = _load("cargo_tree.txt")
        memchr = [k for k, n in graph.nodes.items() if n.short == "memchr"]
        assert len(memchr) == 1
        assert sorted(graph.nodes[p].short for p in graph.parents(memchr[0])) == [
            "aho_corasick", "regex",
        ]

    def test_hyphens_normalized(self):
        graph = _load("cargo_tree.txt")
        assert "regex_syntax v0.8.3" in graph.nodes
        assert "aho_corasick v1.1.3" in graph.nodes

    def test_node_features(self):
        graph = _load("cargo_tree.txt")
        clap = graph.nodes["clap v4.5.4"]
        assert clap.features == {"default": ["std"], "std": []}
        builder = graph.nodes["clap_builder v4.5.2"]
        assert set(builder.features) == {"color", "std"}

    def test_edge_features(self):
        graph = _load("cargo_tree.txt")
        edge = graph.edges[("clap v4.5.4", "clap_builder v4.5.2")]
        assert edge.features == {"": {"color", "std"}, "std": {"std"}}
        assert edge.activated == {"color", "std"}

    def test_no_self_edges(self):
        graph = _load("cargo_tree.txt")
        assert all(s != t for s, t in graph.edges)


# ── Indent prefix ─────────────────────────────────────────────

class TestIndentPrefix:
    def test_same_graph_as_depth_prefix(self):
        depth = _load("cargo_tree.txt")
        indent = _load("cargo_tree_indent.txt")
        assert list(indent.nodes) == list(depth.nodes)
        assert set(indent.edges) == set(depth.edges)
        assert indent.nodes["clap v4.5.4"].features == {"default": ["std"], "std": []}

    def test_ascii_charset(self):
        text = "\n".join([
            "app v1.0.0",
            "|-- log v0.4.21",
            "`-- libc v0.2.153",
        ])
        graph = parse_tree_report(text)
        assert _edges(graph) == {("app", "log"), ("app", "libc")}

    def test_section_headers_skipped(self):
        text = "\n".join([
            "app v1.0.0",
            "├── log v0.4.21",
            "[build-dependencies]",
            "└── cc v1.0.90",
        ])
        graph = parse_tree_report(text)
        assert {n.short for n in graph.nodes.values()} == {"app", "log", "cc"}

    def test_malformed_indentation(self):
        with pytest.raises(ReportParseError, match="Malformed indentation"):
            parse_tree_report("app v1.0.0\n├─ log v0.4.21")


# ── Errors ────────────────────────────────────────────────────

class TestErrors:
    def test_empty(self):
        with pytest.raises(ReportParseError, match="Empty"):
            parse_tree_report("")
        with pytest.raises(ReportParseError):
            parse_tree_report("  \n\n")

    def test_two_packages_separated_by_blank_line(self):
        with pytest.raises(ReportParseError, match="One and only one package") as exc:
            parse_tree_report("0a v1.0.0\n\n0b v1.0.0\n")
        assert exc.value.line_number == 2

    def test_second_root(self):
        with pytest.raises(ReportParseError, match="One and only one package"):
            parse_tree_report("0a v1.0.0\n1c v1.0.0\n0b v1.0.0")

    def test_depth_skip(self):
        with pytest.raises(ReportParseError, match="skips a level") as exc:
            parse_tree_report("0a v1.0.0\n2b v1.0.0")
        assert exc.value.line == "2b v1.0.0"
        assert "line 2" in str(exc.value)

    def test_missing_version(self):
        with pytest.raises(ReportParseError, match="name> <version"):
            parse_tree_report("0a v1.0.0\n1b")

    def test_feature_without_package(self):
        with pytest.raises(ReportParseError, match="not followed by its package"):
            parse_tree_report('0a v1.0.0\n1b feature "default"')

    def test_feature_followed_by_sibling(self):
        with pytest.raises(ReportParseError, match="not followed by its package"):
            parse_tree_report('0a v1.0.0\n1b feature "default"\n1c v1.0.0')

    def test_repeated_feature_never_expanded(self):
        with pytest.raises(ReportParseError, match="never expanded"):
            parse_tree_report('0a v1.0.0\n1b feature "std" (*)')
