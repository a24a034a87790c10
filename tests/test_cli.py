"""Tests for the root serdemap CLI."""

from __future__ import annotations

import json
import logging
from collections.abc import Generator
from pathlib import Path

import pytest
from click.testing import CliRunner

from serdemap import __version__
from serdemap.cli import cli
from tests.conftest import write_json

pytestmark = pytest.mark.usefixtures("_isolated_cwd")


@pytest.fixture
def _restore_logging() -> Generator[None]:
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    pkg_level = logging.getLogger("serdemap").level
    yield
    root.handlers = handlers
    root.setLevel(level)
    logging.getLogger("serdemap").setLevel(pkg_level)


def test_cli_help(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "serdemap" in result.output
    for command in ("inspect", "cql", "typesense"):
        assert command in result.output


def test_cli_version(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_cli_no_args(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, [])
    assert result.exit_code == 0
    assert "Usage" in result.output


def test_unknown_key_strategy(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["-k", "hex", "inspect", "-"], input="{}")
    assert result.exit_code == 2
    assert "hex" in result.output


def test_missing_config_file(cli_runner: CliRunner, tmp_path: Path) -> None:
    result = cli_runner.invoke(cli, ["-c", str(tmp_path / "none.toml"), "inspect", "-"])
    assert result.exit_code == 1
    assert "Config file not found" in result.output


def test_json_from_env(
    cli_runner: CliRunner, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("SERDEMAP_JSON_OUTPUT", "true")
    path = write_json(tmp_path / "doc.json", "{}")
    result = cli_runner.invoke(cli, ["inspect", str(path)])
    assert json.loads(result.stdout)["data"]["count"] == 0


@pytest.mark.usefixtures("_restore_logging")
def test_verbose_logs_to_stderr(cli_runner: CliRunner, tmp_path: Path) -> None:
    path = write_json(tmp_path / "doc.json", '{"a": 1}')
    result = cli_runner.invoke(cli, ["-v", "--log-json", "--json", "inspect", str(path)])
    assert result.exit_code == 0
    events = [json.loads(line)["event"] for line in result.stderr.splitlines() if line]
    assert "Decoded map with 1 entries" in events
    assert json.loads(result.stdout)["ok"] is True
