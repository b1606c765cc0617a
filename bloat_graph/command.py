"""Run ``cargo tree`` and ``cargo bloat`` to produce the two reports."""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path

from bloat_graph.errors import CommandError

logger = logging.getLogger(__name__)

TREE_EDGES = "no-build,no-proc-macro,no-dev,features"


@dataclass
class CargoOptions:
    """Package and feature selection shared by both cargo invocations."""
    package: str | None = None
    bin: str | None = None
    features: str | None = None
    all_features: bool = False
    no_default_features: bool = False
    release: bool = False
    manifest_path: Path | None = None


def _selection_args(options: CargoOptions) -> list[str]:
    args = []
    if options.manifest_path:
        args.append(f"--manifest-path={options.manifest_path}")
    if options.package:
        args.append(f"--package={options.package}")
    if options.features:
        args.append(f"--features={options.features}")
    if options.all_features:
        args.append("--all-features")
    if options.no_default_features:
        args.append("--no-default-features")
    return args


def tree_command(options: CargoOptions) -> list[str]:
    return [
        "cargo", "tree",
        f"--edges={TREE_EDGES}",
        "--prefix=depth",
        "--color=never",
        *_selection_args(options),
    ]


def bloat_command(options: CargoOptions) -> list[str]:
    cmd = ["cargo", "bloat", "-n0", "--message-format=json", "--crates", *_selection_args(options)]
    if options.bin:
        cmd.append(f"--bin={options.bin}")
    if options.release:
        cmd.append("--release")
    return cmd


def _run(cmd: list[str]) -> str:
    logger.info("Running %s", " ".join(cmd))
    try:
        proc = subprocess.run(cmd, capture_output=True, text=True)
    except FileNotFoundError as exc:
        raise CommandError(f"{cmd[0]!r} not found on PATH") from exc
    if proc.returncode != 0:
        raise CommandError(
            f"{' '.join(cmd[:2])} exited with status {proc.returncode}: {proc.stderr.strip()}"
        )
    return proc.stdout


def cargo_tree_output(options: CargoOptions) -> str:
    return _run(tree_command(options))


def cargo_bloat_output(options: CargoOptions) -> str:
    """Needs the ``cargo-bloat`` subcommand to be installed."""
    return _run(bloat_command(options))
