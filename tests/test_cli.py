"""Tests for the command line interface."""

import json
import tempfile
from pathlib import Path

import click
import pytest
from click.testing import CliRunner

from vscode_bridge.cli.main import cli, parse_arguments


@pytest.fixture
def temp_dir():
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def allowed(temp_dir):
    root = temp_dir / "Code"
    root.mkdir()
    (root / "notes.md").write_text("# TODO list\n- buy milk\n")
    return root


@pytest.fixture
def runner():
    return CliRunner()


class TestParseArguments:
    """Tests for --arg/--json parsing."""

    def test_values_decoded_as_json(self):
        arguments = parse_arguments(("path=~/Code", "recursive=true", "limit=3"), None)
        assert arguments == {"path": "~/Code", "recursive": True, "limit": 3}

    def test_pairs_override_json(self):
        arguments = parse_arguments(("path=/b",), json.dumps({"path": "/a", "x": 1}))
        assert arguments == {"path": "/b", "x": 1}

    def test_malformed_pair(self):
        with pytest.raises(click.BadParameter):
            parse_arguments(("novalue",), None)


class TestCommands:
    """Tests for CLI commands."""

    def test_config(self, runner, allowed):
        result = runner.invoke(cli, ["-d", str(allowed), "config"])
        assert result.exit_code == 0
        assert "allowed_directories" in result.output

    def test_tools(self, runner, allowed):
        result = runner.invoke(cli, ["-d", str(allowed), "tools"])
        assert result.exit_code == 0
        assert "read_file" in result.output

    def test_ls(self, runner, allowed):
        result = runner.invoke(cli, ["-d", str(allowed), "ls", str(allowed)])
        assert result.exit_code == 0
        assert "notes.md" in result.output

    def test_grep(self, runner, allowed):
        result = runner.invoke(cli, ["-d", str(allowed), "grep", "todo", str(allowed)])
        assert result.exit_code == 0
        assert "notes.md:1 - # TODO list" in result.output

    def test_call_raw(self, runner, allowed):
        result = runner.invoke(
            cli,
            ["-d", str(allowed), "call", "read_file", "-a", f"path={allowed / 'notes.md'}", "--raw"],
        )
        assert result.exit_code == 0
        assert "buy milk" in result.output

    def test_call_denied(self, runner, allowed):
        result = runner.invoke(
            cli, ["-d", str(allowed), "call", "read_file", "-a", "path=/etc/hostname"]
        )
        assert result.exit_code == 1
        assert "FileAccessDeniedError" in result.output

    def test_call_unknown_tool(self, runner, allowed):
        result = runner.invoke(cli, ["-d", str(allowed), "call", "format_disk"])
        assert result.exit_code == 2
