"""Human-readable byte sizes: "21KiB", "69 KB", "1.5MiB"."""

from __future__ import annotations

import re

_UNITS: dict[str, int] = {
    "": 1,
    "b": 1,
    "kb": 1000,
    "mb": 1000 ** 2,
    "gb": 1000 ** 3,
    "kib": 1024,
    "mib": 1024 ** 2,
    "gib": 1024 ** 3,
}

_BINARY_SUFFIXES = ("B", "KiB", "MiB", "GiB")
_DECIMAL_SUFFIXES = ("B", "KB", "MB", "GB")

_SIZE_RE = re.compile(r'^\s*(\d+(?:\.\d*)?|\.\d+)\s?([a-zA-Z]*)\s*$')

NON_ZERO = "non-zero"


def parse_size(text: str) -> int:
    """Parse a human-readable size into bytes, rounding to the nearest byte."""
    m = _SIZE_RE.match(text)
    if not m:
        raise ValueError(f"Invalid size: {text!r}")
    number, unit = m.groups()
    factor = _UNITS.get(unit.lower())
    if factor is None:
        raise ValueError(f"Invalid size unit {unit!r} in {text!r}")
    return int(round(float(number) * factor))


def parse_threshold(value: int | str) -> int:
    """Parse a ``--threshold`` value. ``"non-zero"`` means 1 byte."""
    if isinstance(value, bool):
        raise ValueError(f"Invalid threshold: {value!r}")
    if isinstance(value, int):
        if value < 0:
            raise ValueError(f"Threshold must not be negative: {value}")
        return value
    if value.strip().lower() == NON_ZERO:
        return 1
    return parse_size(value)


def format_size(num_bytes: int, binary: bool = True) -> str:
    """Format bytes with the largest fitting unit, e.g. ``1536 -> "1.5KiB"``."""
    base = 1024 if binary else 1000
    suffixes = _BINARY_SUFFIXES if binary else _DECIMAL_SUFFIXES

    value = float(num_bytes)
    idx = 0
    while abs(value) >= base and idx < len(suffixes) - 1:
        value /= base
        idx += 1

    if idx == 0:
        return f"{int(num_bytes)}{suffixes[0]}"
    # 1048575 rounds to 1024.00KiB, which is 1MiB
    if round(abs(value), 2) >= base and idx < len(suffixes) - 1:
        value /= base
        idx += 1
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text}{suffixes[idx]}"
