"""Named and custom color gradients, backed by matplotlib colormaps."""

from __future__ import annotations

import re
from types import MappingProxyType

import matplotlib
from matplotlib.colors import Colormap, LinearSegmentedColormap, to_rgb

from bloat_graph.errors import ConfigurationError

DEFAULT_GRADIENT = "reds"

# Read-only: gradient option value -> matplotlib colormap name
NAMED_GRADIENTS = MappingProxyType({
    "reds": "Reds",
    "oranges": "Oranges",
    "purples": "Purples",
    "greens": "Greens",
    "blues": "Blues",
    "bu-pu": "BuPu",
    "or-rd": "OrRd",
    "pu-rd": "PuRd",
    "rd-pu": "RdPu",
    "viridis": "viridis",
    "cividis": "cividis",
    "plasma": "plasma",
})

_STOP_RE = re.compile(r'^(?P<color>.+?)(?:\s+(?P<pos>-?\d+(?:\.\d+)?)%)?$')


def parse_gradient(spec: str) -> Colormap:
    """Resolve a gradient option.

    Either a name from ``NAMED_GRADIENTS`` or a comma separated list of CSS
    style stops, e.g. ``"#fff, orange 30%, darkred"``. Stops without a
    position are spread evenly between their neighbours.
    """
    name = spec.strip().lower()
    if name in NAMED_GRADIENTS:
        return matplotlib.colormaps[NAMED_GRADIENTS[name]]
    return _custom_gradient(spec)


def _custom_gradient(spec: str) -> Colormap:
    parts = [p.strip() for p in spec.split(",")]
    if not spec.strip() or any(not p for p in parts):
        raise ConfigurationError(
            f"Invalid gradient {spec!r}: expected one of "
            f"{', '.join(NAMED_GRADIENTS)} or a comma separated list of colors"
        )

    colors: list[tuple[float, float, float]] = []
    positions: list[float | None] = []
    for part in parts:
        m = _STOP_RE.match(part)
        try:
            colors.append(to_rgb(m.group("color").strip()))
        except ValueError:
            raise ConfigurationError(
                f"Invalid gradient {spec!r}: unknown color {m.group('color')!r}"
            ) from None
        pos = m.group("pos")
        positions.append(float(pos) / 100 if pos is not None else None)

    resolved = _resolve_positions(positions, spec)

    stops = list(zip(resolved, colors))
    if stops[0][0] > 0.0:
        stops.insert(0, (0.0, stops[0][1]))
    if stops[-1][0] < 1.0:
        stops.append((1.0, stops[-1][1]))
    return LinearSegmentedColormap.from_list("custom", stops)


def _resolve_positions(positions: list[float | None], spec: str) -> list[float]:
    resolved = list(positions)
    if resolved[0] is None:
        resolved[0] = 0.0
    if resolved[-1] is None:
        resolved[-1] = 1.0 if len(resolved) > 1 else resolved[0]

    # Interpolate runs of missing positions between known neighbours
    i = 0
    while i < len(resolved):
        if resolved[i] is None:
            start = i - 1
            end = i
            while resolved[end] is None:
                end += 1
            step = (resolved[end] - resolved[start]) / (end - start)
            for j in range(i, end):
                resolved[j] = resolved[start] + step * (j - start)
            i = end
        i += 1

    for prev, cur in zip(resolved, resolved[1:]):
        if cur < prev:
            raise ConfigurationError(f"Invalid gradient {spec!r}: stop positions must not decrease")
    if resolved[0] < 0.0 or resolved[-1] > 1.0:
        raise ConfigurationError(f"Invalid gradient {spec!r}: stop positions must be within 0%-100%")
    return resolved
