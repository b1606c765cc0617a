"""Persistent defaults for the ``graph`` command.

A JSON object at ``~/.bloat-graph/config.json`` (or ``--config PATH``)
whose keys are option names, in kebab-case or snake_case::

    {"scheme": "dep-count", "gradient": "viridis", "exclude": ["windows*"]}

Options given on the command line win over the file.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from bloat_graph.errors import ConfigurationError
from bloat_graph.models import ColoringScheme, Highlight
from bloat_graph.units import parse_threshold

logger = logging.getLogger(__name__)

_CONFIG_DIR = Path.home() / ".bloat-graph"
_CONFIG_FILE = _CONFIG_DIR / "config.json"


def _kebab(name: str) -> str:
    return name.replace("_", "-")


class ConfigFile(BaseModel):
    model_config = ConfigDict(extra="forbid", alias_generator=_kebab, populate_by_name=True)

    # Cargo selection
    package: str | None = None
    bin: str | None = None
    features: str | None = None
    all_features: bool | None = None
    no_default_features: bool | None = None
    release: bool | None = None

    # Graph
    root: str | None = None
    exclude: list[str] | None = None
    std: bool | None = None
    threshold: int | str | None = None
    max_depth: int | None = Field(default=None, ge=0)

    # Coloring
    scheme: ColoringScheme | None = None
    gradient: str | None = None
    gamma: float | None = Field(default=None, ge=0.0, le=1.0)
    inverse_gradient: bool | None = None

    # Templates
    node_label: str | None = None
    node_tooltip: str | None = None
    edge_label: str | None = None
    edge_tooltip: str | None = None

    # Rendering
    dark_mode: bool | None = None
    highlight: Highlight | None = None
    highlight_amount: float | None = Field(default=None, ge=0.0, le=1.0)
    scale_factor: float | None = Field(default=None, gt=0.0)
    separation_factor: float | None = Field(default=None, gt=0.0)
    padding: float | None = Field(default=None, ge=0.0)

    @field_validator("threshold")
    @classmethod
    def _check_threshold(cls, value: int | str | None) -> int | str | None:
        if value is not None:
            parse_threshold(value)
        return value

    def values(self) -> dict[str, Any]:
        """Options the file actually sets, keyed by snake_case name."""
        return self.model_dump(exclude_none=True)


def load_config_file(path: Path | None = None) -> ConfigFile:
    """Load and validate a config file.

    Without ``path`` the default location is used when it exists; a missing
    default file is the same as an empty one.
    """
    explicit = path is not None
    path = path if explicit else _CONFIG_FILE
    if not path.exists():
        if explicit:
            raise ConfigurationError(f"Config file not found: {path}")
        return ConfigFile()

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a JSON object")

    try:
        config = ConfigFile.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid config file {path}:\n{exc}") from exc

    logger.info("Loaded %d option(s) from %s", len(config.values()), path)
    return config
