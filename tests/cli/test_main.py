"""Tests for CLI main module."""

import json as _json
import os as _os
import pathlib as _pathlib

import click.testing as _click_testing
import pytest as _pytest

import covertrace.cli as cli
import covertrace.logging as ct_logging


@_pytest.fixture
def runner(user_config_dir: _pathlib.Path) -> _click_testing.CliRunner:
    """CliRunner with COVERTRACE_* settings removed from the environment."""
    env: dict[str, str | None] = {k: None for k in _os.environ if k.startswith("COVERTRACE_")}
    env["COVERTRACE_CONFIG_DIR"] = str(user_config_dir)
    return _click_testing.CliRunner(env=env)


@_pytest.fixture
def document_file(tmp_path: _pathlib.Path) -> _pathlib.Path:
    path = tmp_path / "input.json"
    path.write_text(_json.dumps({"a": [1, 2], "b": "x"}))
    return path


def _write_covered(tmp_path: _pathlib.Path, covered: object) -> _pathlib.Path:
    path = tmp_path / "covered.json"
    path.write_text(_json.dumps(covered))
    return path


class TestCLIBasics:
    """Test basic CLI functionality."""

    def test_help_lists_commands(self, runner: _click_testing.CliRunner) -> None:
        """Help output lists every command."""
        result = runner.invoke(cli.cli, ["--help"])
        assert result.exit_code == 0
        for cmd in ["decorate", "report", "config"]:
            assert cmd in result.output, f"Command '{cmd}' missing from help"

    def test_version(self, runner: _click_testing.CliRunner) -> None:
        """Version flag shows the package version."""
        result = runner.invoke(cli.cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_broken_config_is_reported(
        self, runner: _click_testing.CliRunner, user_config_dir: _pathlib.Path
    ) -> None:
        """A malformed config file fails with a clear message."""
        (user_config_dir / "config.yaml").write_text("coverage: [\n")
        result = runner.invoke(cli.cli, ["config"])
        assert result.exit_code != 0
        assert "invalid YAML" in result.output


class TestDecorate:
    """Tests for the decorate command."""

    def test_json_lines(
        self, runner: _click_testing.CliRunner, document_file: _pathlib.Path
    ) -> None:
        """Every node is listed with its path and origin tag."""
        result = runner.invoke(cli.cli, ["decorate", str(document_file), "--json"])
        assert result.exit_code == 0
        rows = [_json.loads(line) for line in result.stdout.splitlines()]
        assert [row["path"] for row in rows] == [[], ["a"], ["a", 0], ["a", 1], ["b"]]
        assert rows[2]["origin"] == 'path:["a",0]'
        assert rows[4]["value"] == '"x"'

    def test_table(self, runner: _click_testing.CliRunner, document_file: _pathlib.Path) -> None:
        """The table shows readable paths."""
        result = runner.invoke(cli.cli, ["decorate", str(document_file)])
        assert result.exit_code == 0
        assert "a[0]" in result.output
        assert "Origin tag" in result.output

    def test_yaml_document(
        self, runner: _click_testing.CliRunner, tmp_path: _pathlib.Path
    ) -> None:
        """YAML documents are accepted by suffix."""
        path = tmp_path / "input.yaml"
        path.write_text("servers:\n  - host: a\n")
        result = runner.invoke(cli.cli, ["decorate", str(path), "--json"])
        assert result.exit_code == 0
        paths = [_json.loads(line)["path"] for line in result.stdout.splitlines()]
        assert ["servers", 0, "host"] in paths

    def test_invalid_json(self, runner: _click_testing.CliRunner, tmp_path: _pathlib.Path) -> None:
        """Unparseable documents fail cleanly."""
        path = tmp_path / "input.json"
        path.write_text("{not json")
        result = runner.invoke(cli.cli, ["decorate", str(path)])
        assert result.exit_code != 0
        assert "cannot parse" in result.output

    def test_trace_file_from_config(
        self,
        runner: _click_testing.CliRunner,
        document_file: _pathlib.Path,
        user_config_dir: _pathlib.Path,
        tmp_path: _pathlib.Path,
    ) -> None:
        """logging.trace_file receives one record per tagged node."""
        trace_file = tmp_path / "trace.jsonl"
        (user_config_dir / "config.yaml").write_text(f"logging:\n  trace_file: {trace_file}\n")
        result = runner.invoke(cli.cli, ["decorate", str(document_file), "--json"])
        assert result.exit_code == 0
        records = ct_logging.read_trace_log(trace_file)
        assert [r["record_type"] for r in records].count("decorated") == 5


class TestReport:
    """Tests for the report command."""

    def test_plain_output(
        self,
        runner: _click_testing.CliRunner,
        document_file: _pathlib.Path,
        tmp_path: _pathlib.Path,
    ) -> None:
        """Percentage and uncovered leaves are shown."""
        covered = _write_covered(tmp_path, [["a", 1], ["b"]])
        result = runner.invoke(cli.cli, ["report", str(document_file), "--covered", str(covered)])
        assert result.exit_code == 0
        assert "Coverage: 66.7% (2/3 leaves)" in result.output
        assert "a[0]" in result.output

    def test_json_output(
        self,
        runner: _click_testing.CliRunner,
        document_file: _pathlib.Path,
        tmp_path: _pathlib.Path,
    ) -> None:
        """--json emits the report dict."""
        covered = _write_covered(tmp_path, [["a"]])
        result = runner.invoke(
            cli.cli, ["report", str(document_file), "--covered", str(covered), "--json"]
        )
        assert result.exit_code == 0
        data = _json.loads(result.stdout)
        assert data["covered"] == [["a", 0], ["a", 1]]
        assert data["uncovered"] == [["b"]]

    def test_min_coverage_failure(
        self,
        runner: _click_testing.CliRunner,
        document_file: _pathlib.Path,
        tmp_path: _pathlib.Path,
    ) -> None:
        """Coverage below the minimum exits 1."""
        covered = _write_covered(tmp_path, [[]])
        result = runner.invoke(
            cli.cli,
            ["report", str(document_file), "--covered", str(covered), "--min-coverage", "50"],
        )
        assert result.exit_code == 1
        assert "Coverage: 0.0%" in result.output

    def test_min_coverage_pass(
        self,
        runner: _click_testing.CliRunner,
        document_file: _pathlib.Path,
        tmp_path: _pathlib.Path,
    ) -> None:
        """Coverage at the minimum passes."""
        covered = _write_covered(tmp_path, [["a"], ["b"]])
        result = runner.invoke(
            cli.cli,
            ["report", str(document_file), "--covered", str(covered), "--min-coverage", "100"],
        )
        assert result.exit_code == 0

    def test_show_covered(
        self,
        runner: _click_testing.CliRunner,
        document_file: _pathlib.Path,
        tmp_path: _pathlib.Path,
    ) -> None:
        """--show-covered lists covered leaves too."""
        covered = _write_covered(tmp_path, [["b"]])
        result = runner.invoke(
            cli.cli,
            ["report", str(document_file), "--covered", str(covered), "--show-covered"],
        )
        assert result.exit_code == 0
        assert "Covered:" in result.output

    def test_bad_covered_file(
        self,
        runner: _click_testing.CliRunner,
        document_file: _pathlib.Path,
        tmp_path: _pathlib.Path,
    ) -> None:
        """The covered file must be an array of arrays."""
        covered = _write_covered(tmp_path, {"a": 1})
        result = runner.invoke(cli.cli, ["report", str(document_file), "--covered", str(covered)])
        assert result.exit_code != 0
        assert "array of arrays" in result.output


class TestConfig:
    """Tests for the config command."""

    def test_yaml_output(self, runner: _click_testing.CliRunner) -> None:
        """Config prints every section."""
        result = runner.invoke(cli.cli, ["config"])
        assert result.exit_code == 0
        assert "coverage:" in result.output
        assert "logging:" in result.output

    def test_plain_yaml_when_not_a_tty(self, runner: _click_testing.CliRunner) -> None:
        """Captured output gets plain YAML without terminal styling."""
        result = runner.invoke(cli.cli, ["config"])
        assert result.exit_code == 0
        assert result.stdout.startswith("version: 1\n")
        assert "\x1b[" not in result.stdout

    def test_json_output(self, runner: _click_testing.CliRunner) -> None:
        """--json prints the effective config."""
        result = runner.invoke(cli.cli, ["config", "--json"])
        assert result.exit_code == 0
        data = _json.loads(result.stdout)
        assert data["coverage"]["report"] == "recorded"
        assert data["logging"]["level"] == "warning"

    def test_env_override(self, runner: _click_testing.CliRunner) -> None:
        """Environment variables show up in the effective config."""
        result = runner.invoke(
            cli.cli,
            ["config", "--json"],
            env={"COVERTRACE_COVERAGE__REPORT": "leaves"},
        )
        assert result.exit_code == 0
        assert _json.loads(result.stdout)["coverage"]["report"] == "leaves"

    def test_unknown_keys_warned(
        self, runner: _click_testing.CliRunner, user_config_dir: _pathlib.Path
    ) -> None:
        """Unknown keys produce a warning on stderr."""
        (user_config_dir / "config.yaml").write_text("coverage:\n  reprot: leaves\n")
        result = runner.invoke(cli.cli, ["config", "--json"])
        assert result.exit_code == 0
        assert "coverage.reprot" in result.stderr
