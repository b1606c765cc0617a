"""Render a graph description to SVG with graphviz's ``dot``."""

from __future__ import annotations

import logging
from pathlib import Path

import graphviz

from bloat_graph.errors import CommandError

logger = logging.getLogger(__name__)

_GRAPH_START = '<g id="graph0"'


def render_svg(digraph: graphviz.Digraph) -> str:
    """Lay out and render ``digraph``; needs the ``dot`` executable on PATH."""
    try:
        return digraph.pipe(format="svg", encoding="utf-8")
    except graphviz.ExecutableNotFound as exc:
        raise CommandError(
            "graphviz 'dot' executable not found; install graphviz or use --dot-only"
        ) from exc
    except graphviz.CalledProcessError as exc:
        stderr = exc.stderr.decode(errors="replace") if isinstance(exc.stderr, bytes) else exc.stderr
        raise CommandError(f"dot failed: {(stderr or '').strip()}") from exc


def inject_highlight_style(svg: str, indices: list[int], amount: float = 0.5) -> str:
    """Dim everything unrelated to the hovered node.

    ``amount`` is how much to dim, from 0 (not at all) to 1 (hidden).
    """
    start = svg.find(_GRAPH_START)
    if start == -1:
        raise CommandError("Rendered SVG has no graph element to highlight")

    opacity = f"{1.0 - min(max(amount, 0.0), 1.0):g}"
    rules = "\n".join(
        f".graph:has(.node{i}:hover) > g:not(.node{i}) {{ opacity: {opacity} }}"
        for i in indices
    )
    return f"{svg[:start]}<style>\n{rules}\n</style>\n{svg[start:]}"


def write_svg(svg: str, output: Path) -> Path:
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(svg, encoding="utf-8")
    logger.info("Wrote %s (%d bytes)", output, len(svg))
    return output
