"""Parser for per-crate size reports.

Three encodings are accepted:

- plain ``<size> <crate>`` lines, e.g. ``85.9KiB clap_builder``;
- the ``cargo bloat --crates`` table, with percentage columns;
- ``cargo bloat --crates --message-format=json``.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field

from bloat_graph.errors import ReportParseError
from bloat_graph.units import parse_size

logger = logging.getLogger(__name__)

# cargo-bloat merges these into "std" unless --split-std is given
STD_CRATES = frozenset({
    "std", "core", "alloc", "proc_macro", "compiler_builtins",
    "panic_unwind", "panic_abort", "std_detect", "unwind",
})

_LINE_RE = re.compile(
    r'^(?:\d+(?:\.\d+)?%\s+)*'
    r'(?P<size>\d+(?:\.\d+)?(?:\s?(?:[kKmMgG][iI]?[bB]|[bB])(?=\s))?)\s+'
    r'(?P<name>\S.*?)\s*$'
)
_HEADER_RE = re.compile(r'^File\s+\.text\s+Size\s+Crate\b')
_SUMMARY_MARK = ".text section size"


@dataclass
class SizeReport:
    sizes: dict[str, int] = field(default_factory=dict)  # crate name -> bytes
    std_size: int | None = None


def parse_size_report(text: str) -> SizeReport:
    """Parse a size report into per-crate byte counts."""
    if text.lstrip().startswith("{"):
        return _parse_json(text)
    return _parse_lines(text)


def _parse_lines(text: str) -> SizeReport:
    report = SizeReport()
    for number, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line or _HEADER_RE.match(line) or _SUMMARY_MARK in line:
            continue

        m = _LINE_RE.match(line)
        if not m:
            raise ReportParseError("Malformed size report line", raw, number)
        try:
            size = parse_size(m.group("size"))
        except ValueError as e:
            raise ReportParseError(f"Malformed size report: {e}", raw, number) from e
        _add_entry(report, m.group("name"), size)
    return report


def _parse_json(text: str) -> SizeReport:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ReportParseError(f"Malformed size report JSON: {e}") from e

    crates = data.get("crates") if isinstance(data, dict) else None
    if not isinstance(crates, list):
        raise ReportParseError("Malformed size report JSON: missing 'crates' list")

    report = SizeReport()
    for i, entry in enumerate(crates):
        name = entry.get("name") if isinstance(entry, dict) else None
        size = entry.get("size") if isinstance(entry, dict) else None
        if not isinstance(name, str) or isinstance(size, bool) or not isinstance(size, int):
            raise ReportParseError(f"Malformed size report JSON: bad crate entry #{i}: {entry!r}")
        _add_entry(report, name, size)
    return report


def _add_entry(report: SizeReport, name: str, size: int) -> None:
    short, _, extra = name.partition(" ")
    short = short.replace("-", "_")
    if short in STD_CRATES and not extra:
        report.std_size = (report.std_size or 0) + size
        return
    key = f"{short} {extra}" if extra else short
    if key in report.sizes:
        logger.debug("Duplicate size entry for %s, summing", key)
    report.sizes[key] = report.sizes.get(key, 0) + size
