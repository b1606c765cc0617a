"""Parsers for the cargo tree and size reports."""

from bloat_graph.reports.size_report import STD_CRATES, SizeReport, parse_size_report
from bloat_graph.reports.tree_report import parse_tree_report

__all__ = ["STD_CRATES", "SizeReport", "parse_size_report", "parse_tree_report"]
