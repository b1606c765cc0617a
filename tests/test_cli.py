"""Tests for the click CLI."""

import json
from pathlib import Path
from unittest.mock import patch

from click.testing import CliRunner

from bloat_graph import __version__
from bloat_graph.cli import cli

FIXTURES = Path(__file__).parent / "fixtures"
REPORTS = [
    "--tree-report", str(FIXTURES / "cargo_tree.txt"),
    "--size-report", str(FIXTURES / "cargo_bloat.json"),
]


def _invoke(*args):
    runner = CliRunner()
    # An empty default config keeps the user's own file out of the tests
    with patch("bloat_graph.config._CONFIG_FILE", FIXTURES / "missing.json"):
        return runner.invoke(cli, list(args))


def _table_rows(output):
    """First column of the `sizes` table, without the header and warnings."""
    lines = [line for line in output.splitlines() if not line.startswith("warning")]
    return [line.split()[0] for line in lines[1:]]


def test_version():
    result = _invoke("--version")
    assert result.exit_code == 0
    assert __version__ in result.output


class TestGraphCommand:
    def test_dot_only(self):
        result = _invoke("graph", *REPORTS, "--dot-only")
        assert result.exit_code == 0, result.output
        assert "digraph dependencies {" in result.output
        assert "[Unknown]" in result.output

    def test_dot_only_to_file(self, tmp_path):
        out = tmp_path / "graph.dot"
        result = _invoke("graph", *REPORTS, "--dot-only", "-o", str(out))
        assert result.exit_code == 0, result.output
        assert out.read_text().startswith("digraph dependencies {")

    def test_text_size_report(self):
        result = _invoke(
            "graph", "--tree-report", str(FIXTURES / "cargo_tree_indent.txt"),
            "--size-report", str(FIXTURES / "cargo_bloat.txt"), "--dot-only",
        )
        assert result.exit_code == 0, result.output
        assert "label=regex_syntax" in result.output

    def test_options_reach_pipeline(self):
        result = _invoke(
            "graph", *REPORTS, "--dot-only", "--root", "regex", "--std",
            "--node-label", "{short} {value}", "--scheme", "dep-count",
        )
        assert result.exit_code == 0, result.output
        assert 'label="regex 4"' in result.output
        assert "label=clap" not in result.output

    def test_invalid_gamma(self):
        result = _invoke("graph", *REPORTS, "--dot-only", "--gamma", "1.5")
        assert result.exit_code == 1
        assert "Gamma" in result.output

    def test_unknown_root(self):
        result = _invoke("graph", *REPORTS, "--dot-only", "--root", "tokio")
        assert result.exit_code == 1
        assert "Root not found" in result.output

    def test_config_file_fills_defaults(self, tmp_path):
        config = tmp_path / "config.json"
        config.write_text(json.dumps({"root": "regex", "max-depth": 0}))
        result = _invoke("graph", *REPORTS, "--dot-only", "--config", str(config))
        assert result.exit_code == 0, result.output
        assert "label=regex" in result.output
        assert "label=memchr" not in result.output

    def test_command_line_wins_over_config(self, tmp_path):
        config = tmp_path / "config.json"
        config.write_text(json.dumps({"root": "regex"}))
        result = _invoke("graph", *REPORTS, "--dot-only", "--config", str(config), "--root", "clap")
        assert result.exit_code == 0, result.output
        assert "label=clap_builder" in result.output
        assert "label=memchr" not in result.output

    def test_bad_config_file(self, tmp_path):
        config = tmp_path / "config.json"
        config.write_text(json.dumps({"colour": "red"}))
        result = _invoke("graph", *REPORTS, "--dot-only", "--config", str(config))
        assert result.exit_code == 1

    def test_svg_output(self, tmp_path):
        out = tmp_path / "graph.svg"
        svg = '<svg><g id="graph0" class="graph"></g></svg>'
        with patch("bloat_graph.cli.render_svg", return_value=svg), \
                patch("bloat_graph.cli.click.launch") as launch:
            result = _invoke("graph", *REPORTS, "-o", str(out), "--no-open", "--highlight", "dep")
        assert result.exit_code == 0, result.output
        assert "Done! 9 crate(s), 9 edge(s)" in result.output
        assert ".node0:hover" in out.read_text()
        launch.assert_not_called()

    def test_svg_opened(self, tmp_path):
        out = tmp_path / "graph.svg"
        with patch("bloat_graph.cli.render_svg", return_value="<svg/>"), \
                patch("bloat_graph.cli.click.launch") as launch:
            result = _invoke("graph", *REPORTS, "-o", str(out))
        assert result.exit_code == 0, result.output
        launch.assert_called_once_with(str(out))

    def test_runs_cargo_without_reports(self):
        tree = (FIXTURES / "cargo_tree.txt").read_text()
        bloat = (FIXTURES / "cargo_bloat.json").read_text()
        with patch("bloat_graph.cli.cargo_tree_output", return_value=tree) as run_tree, \
                patch("bloat_graph.cli.cargo_bloat_output", return_value=bloat) as run_bloat:
            result = _invoke("graph", "--dot-only", "--package", "demo", "--release")
        assert result.exit_code == 0, result.output
        options = run_tree.call_args.args[0]
        assert options.package == "demo"
        assert options.release is True
        run_bloat.assert_called_once_with(options)


class TestSizesCommand:
    def test_table(self):
        result = _invoke("sizes", *REPORTS, "--limit", "3")
        assert result.exit_code == 0, result.output
        header = next(line for line in result.output.splitlines() if line.startswith("Crate"))
        assert header.split() == ["Crate", "Self", "Cumulative", "Deps"]
        assert _table_rows(result.output) == ["demo", "clap", "regex"]

    def test_decimal_units(self):
        result = _invoke("sizes", *REPORTS, "--root", "memchr", "--decimal")
        assert result.exit_code == 0, result.output
        assert "4.1KB" in result.output

    def test_config_file_applies(self, tmp_path):
        config = tmp_path / "config.json"
        config.write_text(json.dumps({"root": "regex", "exclude": ["aho"]}))
        result = _invoke("sizes", *REPORTS, "--config", str(config))
        assert result.exit_code == 0, result.output
        rows = _table_rows(result.output)
        assert rows == ["regex", "regex_syntax", "memchr"]

    def test_command_line_wins_over_config(self, tmp_path):
        config = tmp_path / "config.json"
        config.write_text(json.dumps({"root": "regex"}))
        result = _invoke("sizes", *REPORTS, "--config", str(config), "--root", "clap")
        assert result.exit_code == 0, result.output
        rows = _table_rows(result.output)
        assert rows == ["clap", "clap_builder", "anstyle"]
