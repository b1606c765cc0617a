"""Click CLI with graph and sizes subcommands."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import click
from click.core import ParameterSource

from bloat_graph import __version__
from bloat_graph.analysis.metrics import compute_metrics
from bloat_graph.command import CargoOptions, cargo_bloat_output, cargo_tree_output
from bloat_graph.config import load_config_file
from bloat_graph.errors import BloatGraphError
from bloat_graph.exporter.svg_renderer import inject_highlight_style, render_svg, write_svg
from bloat_graph.models import (
    DEFAULT_EDGE_LABEL,
    DEFAULT_EDGE_TOOLTIP,
    DEFAULT_NODE_LABEL,
    DEFAULT_NODE_TOOLTIP,
    ColoringScheme,
    Highlight,
    PipelineConfig,
    RenderOptions,
    TemplateOptions,
)
from bloat_graph.pipeline import build_graph, run_pipeline, validate_config
from bloat_graph.reports import parse_size_report
from bloat_graph.styling.gradients import DEFAULT_GRADIENT
from bloat_graph.units import format_size

_SCHEME_CHOICES = [s.value for s in ColoringScheme]
_HIGHLIGHT_CHOICES = [h.value for h in Highlight]
_DEFAULT_OUTPUT = Path("bloat-graph.svg")


def _cargo_options(func):
    """Options selecting what cargo builds, plus pre-captured reports."""
    options = [
        click.option("--tree-report", type=click.Path(exists=True, dir_okay=False, path_type=Path),
                     help="Read `cargo tree` output from a file instead of running cargo"),
        click.option("--size-report", type=click.Path(exists=True, dir_okay=False, path_type=Path),
                     help="Read `cargo bloat` output from a file instead of running cargo"),
        click.option("--manifest-path", type=click.Path(path_type=Path), help="Path to Cargo.toml"),
        click.option("--package", "-p", help="Package to inspect"),
        click.option("--bin", help="Binary to inspect"),
        click.option("--features", "-F", help="Space or comma separated features to activate"),
        click.option("--all-features", is_flag=True, help="Activate all available features"),
        click.option("--no-default-features", is_flag=True, help="Do not activate the default feature"),
        click.option("--release", is_flag=True, help="Measure the release profile"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _configure_logging(verbose: int) -> None:
    level = logging.WARNING
    if verbose == 1:
        level = logging.INFO
    elif verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _read_reports(params: dict[str, Any]) -> tuple[str, str]:
    cargo = CargoOptions(
        package=params["package"],
        bin=params["bin"],
        features=params["features"],
        all_features=params["all_features"],
        no_default_features=params["no_default_features"],
        release=params["release"],
        manifest_path=params["manifest_path"],
    )
    tree_path: Path | None = params["tree_report"]
    size_path: Path | None = params["size_report"]
    tree_output = tree_path.read_text(encoding="utf-8") if tree_path else cargo_tree_output(cargo)
    size_output = size_path.read_text(encoding="utf-8") if size_path else cargo_bloat_output(cargo)
    return tree_output, size_output


def _merge_config_file(ctx: click.Context, config_path: Path | None) -> dict[str, Any]:
    """Command parameters, with config file values filling unset options."""
    params = dict(ctx.params)
    for name, value in load_config_file(config_path).values().items():
        if name in params and ctx.get_parameter_source(name) is ParameterSource.DEFAULT:
            params[name] = value
    return params


def _pipeline_config(params: dict[str, Any]) -> PipelineConfig:
    threshold = params["threshold"]
    if isinstance(threshold, str) and threshold.strip().isdigit():
        threshold = int(threshold)
    highlight = params["highlight"]
    return PipelineConfig(
        root=params["root"],
        excludes=list(params["exclude"]),
        std=params["std"],
        bin=params["bin"],
        scheme=ColoringScheme(params["scheme"]),
        gradient=params["gradient"],
        gamma=params["gamma"],
        inverse_gradient=params["inverse_gradient"],
        threshold=threshold,
        max_depth=params["max_depth"],
        templates=TemplateOptions(
            node_label=params["node_label"],
            node_tooltip=params["node_tooltip"],
            edge_label=params["edge_label"],
            edge_tooltip=params["edge_tooltip"],
        ),
        render=RenderOptions(
            dark_mode=params["dark_mode"],
            highlight=Highlight(highlight) if highlight is not None else None,
            highlight_amount=params["highlight_amount"],
            scale_factor=params["scale_factor"],
            separation_factor=params["separation_factor"],
            padding=params["padding"],
        ),
    )


@click.group()
@click.version_option(version=__version__)
def cli():
    """bloat-graph: See which crates make your Rust binary big."""


@cli.command()
@_cargo_options
@click.option("--root", "-r", help="Crate to use as the root (name, prefix or glob)")
@click.option("--exclude", "-e", multiple=True, help="Name prefix or glob of crates to drop, with everything only they use")
@click.option("--std", is_flag=True, help="Add the standard library as a child of the root")
@click.option("--threshold", "-t", help='Drop crates whose cumulative size is below this, e.g. "4KiB" or "non-zero"')
@click.option("--max-depth", "-d", type=click.IntRange(min=0), help="Drop crates deeper than this")
@click.option("--scheme", "-c", type=click.Choice(_SCHEME_CHOICES), default="cum-sum", show_default=True,
              help="Value that colors the nodes")
@click.option("--gradient", "-g", default=DEFAULT_GRADIENT, show_default=True,
              help='Named gradient, or CSS-like stops such as "white, orange 40%, darkred"')
@click.option("--gamma", type=float, help="Gamma applied to normalized values, 0 to 1 (default depends on scheme)")
@click.option("--inverse-gradient", is_flag=True, help="Sample the gradient from the other end")
@click.option("--node-label", default=DEFAULT_NODE_LABEL, help="Node label template")
@click.option("--node-tooltip", default=DEFAULT_NODE_TOOLTIP, help="Node tooltip template")
@click.option("--edge-label", default=DEFAULT_EDGE_LABEL, help="Edge label template")
@click.option("--edge-tooltip", default=DEFAULT_EDGE_TOOLTIP, help="Edge tooltip template")
@click.option("--dark-mode", is_flag=True, help="Dark background")
@click.option("--highlight", type=click.Choice(_HIGHLIGHT_CHOICES),
              help="On hover, highlight dependencies (dep) or dependents (rev-dep)")
@click.option("--highlight-amount", type=float, default=0.5, show_default=True,
              help="How much to dim the rest of the graph on hover, 0 to 1")
@click.option("--scale-factor", type=float, default=1.0, show_default=True, help="Node and font scale")
@click.option("--separation-factor", type=float, default=1.0, show_default=True, help="Node spacing scale")
@click.option("--padding", type=float, default=1.0, show_default=True, help="Padding around the graph, in inches")
@click.option("--dot-only", is_flag=True, help="Write the DOT description instead of rendering SVG")
@click.option("-o", "--output", type=click.Path(dir_okay=False, path_type=Path),
              help=f"Output file (default: {_DEFAULT_OUTPUT}, or stdout with --dot-only)")
@click.option("--no-open", is_flag=True, help="Do not open the SVG after rendering")
@click.option("--config", "config_path", type=click.Path(dir_okay=False, path_type=Path),
              help="JSON config file (default: ~/.bloat-graph/config.json)")
@click.option("--verbose", "-v", count=True, help="Log more (repeat for debug output)")
@click.pass_context
def graph(ctx: click.Context, **_: Any):
    """Render the dependency graph of a crate, sized and colored by binary size."""
    params = ctx.params
    _configure_logging(params["verbose"])

    try:
        params = _merge_config_file(ctx, params["config_path"])
        config = _pipeline_config(params)
        validate_config(config)
        tree_output, size_output = _read_reports(params)

        def progress(stage: str, current: int, total: int):
            if params["verbose"]:
                click.echo(f"  {stage}: {current}/{total}", err=True)

        result = run_pipeline(config, tree_output, size_output, progress=progress)

        for warning in result.warnings:
            click.echo(click.style(f"warning: {warning}", fg="yellow"), err=True)

        output: Path | None = params["output"]
        if params["dot_only"]:
            if output is None:
                click.echo(result.dot_source, nl=False)
            else:
                output.write_text(result.dot_source, encoding="utf-8")
                click.echo(f"Wrote {output}", err=True)
            return

        svg = render_svg(result.digraph)
        if config.render.highlight is not None:
            indices = [node.index for node in result.graph.nodes.values()]
            svg = inject_highlight_style(svg, indices, config.render.highlight_amount)
        output = write_svg(svg, output or _DEFAULT_OUTPUT)
    except BloatGraphError as e:
        raise click.ClickException(str(e))

    click.echo(
        f"Done! {len(result.graph.nodes)} crate(s), {len(result.graph.edges)} edge(s) -> {output}"
    )
    if not params["no_open"]:
        click.launch(str(output))


@cli.command()
@_cargo_options
@click.option("--root", "-r", help="Crate to use as the root (name, prefix or glob)")
@click.option("--exclude", "-e", multiple=True, help="Name prefix or glob of crates to drop")
@click.option("--std", is_flag=True, help="Include the standard library")
@click.option("--limit", "-n", type=click.IntRange(min=1), default=20, show_default=True,
              help="Number of crates to list")
@click.option("--decimal", is_flag=True, help="Use KB/MB instead of KiB/MiB")
@click.option("--config", "config_path", type=click.Path(dir_okay=False, path_type=Path),
              help="JSON config file (default: ~/.bloat-graph/config.json)")
@click.pass_context
def sizes(ctx: click.Context, limit: int, decimal: bool, **_: Any):
    """List the crates with the largest cumulative size."""
    try:
        params = _merge_config_file(ctx, ctx.params["config_path"])
        config = PipelineConfig(
            root=params["root"],
            excludes=list(params["exclude"]),
            std=params["std"],
            bin=params["bin"],
        )
        validate_config(config)
        tree_output, size_output = _read_reports(params)
        graph = build_graph(config, tree_output, parse_size_report(size_output))
    except BloatGraphError as e:
        raise click.ClickException(str(e))

    for warning in graph.warnings:
        click.echo(click.style(f"warning: {warning}", fg="yellow"), err=True)

    metrics = compute_metrics(graph)
    ranked = sorted(
        graph.nodes.values(),
        key=lambda n: (-metrics.cumulative_size[n.key], n.full),
    )[:limit]

    binary = not decimal
    width = max((len(n.full) for n in ranked), default=5)
    click.echo(f"{'Crate':<{width}}  {'Self':>10}  {'Cumulative':>10}  {'Deps':>5}")
    for node in ranked:
        click.echo(
            f"{click.style(node.full.ljust(width), fg='cyan')}  "
            f"{format_size(node.size, binary):>10}  "
            f"{format_size(metrics.cumulative_size[node.key], binary):>10}  "
            f"{metrics.dependency_count[node.key]:>5}"
        )


if __name__ == "__main__":
    cli()
