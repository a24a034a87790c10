"""Tests for the typesense command group."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from serdemap.cli import cli


@pytest.mark.usefixtures("_isolated_cwd")
class TestTypesenseField:
    def test_field_json(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "typesense", "field", "attributes", "--facet"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)["data"]
        assert data == {
            "name": "attributes",
            "type": "object",
            "optional": False,
            "facet": True,
            "index": True,
        }

    def test_field_text(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["typesense", "field", "attributes"])
        assert result.exit_code == 0
        lines = result.stdout.splitlines()
        assert lines[0] == "OK: typesense_field"
        assert "  type: object" in lines

    def test_collection(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(
            cli, ["--json", "typesense", "field", "attrs", "--optional", "--collection", "docs"]
        )
        schema = json.loads(result.stdout)["data"]["schema"]
        assert schema["name"] == "docs"
        assert schema["enable_nested_fields"] is True
        assert schema["fields"][0]["optional"] is True
