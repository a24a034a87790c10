"""Tests for SerdeMapSettings: CLI flags, env vars and TOML in one object."""

from pathlib import Path

import click
import pytest

from serdemap.config.settings import SerdeMapSettings

pytestmark = pytest.mark.usefixtures("_isolated_cwd")


@pytest.fixture
def walk_up(_isolated_cwd: None, monkeypatch: pytest.MonkeyPatch) -> None:
    """Let discovery walk up instead of using the SERDEMAP_CONFIG pin."""
    monkeypatch.delenv("SERDEMAP_CONFIG")


class TestDefaults:
    def test_all_defaults(self, tmp_path: Path) -> None:
        settings = SerdeMapSettings.from_cli(cwd=tmp_path)
        assert settings.config_path is None
        assert settings.json_output is False
        assert settings.verbose is False
        assert settings.keys.strategy == "linear"
        assert settings.encoding.indent is None

    def test_frozen(self, tmp_path: Path) -> None:
        settings = SerdeMapSettings.from_cli(cwd=tmp_path)
        with pytest.raises(Exception):
            settings.verbose = True  # type: ignore[misc]


@pytest.mark.usefixtures("walk_up")
class TestTomlSource:
    def test_loads_from_toml(self, tmp_path: Path) -> None:
        toml = tmp_path / "serdemap.toml"
        toml.write_text('[keys]\nstrategy = "int"\n[encoding]\nindent = 4\n')
        settings = SerdeMapSettings.from_cli(cwd=tmp_path)
        assert settings.config_path == toml
        assert settings.keys.strategy == "int"
        assert settings.encoding.indent == 4
        assert settings.encoding.ensure_ascii is True

    def test_top_level_flag_from_toml(self, tmp_path: Path) -> None:
        (tmp_path / "serdemap.toml").write_text("json_output = true\n")
        assert SerdeMapSettings.from_cli(cwd=tmp_path).json_output is True

    def test_invalid_toml(self, tmp_path: Path) -> None:
        (tmp_path / "serdemap.toml").write_text("[keys\n")
        with pytest.raises(click.ClickException, match="Invalid TOML"):
            SerdeMapSettings.from_cli(cwd=tmp_path)

    def test_invalid_section(self, tmp_path: Path) -> None:
        (tmp_path / "serdemap.toml").write_text('[keys]\nstrategy = "hex"\n')
        with pytest.raises(click.ClickException, match="Invalid config"):
            SerdeMapSettings.from_cli(cwd=tmp_path)

    def test_explicit_config_path(self, tmp_path: Path) -> None:
        custom = tmp_path / "custom" / "my.toml"
        custom.parent.mkdir()
        custom.write_text("[cql]\nmax_cell_size = 64\n")
        settings = SerdeMapSettings.from_cli(config_path=str(custom), cwd=tmp_path)
        assert settings.cql.max_cell_size == 64
        assert settings.config_path == custom

    def test_missing_explicit_config(self, tmp_path: Path) -> None:
        with pytest.raises(click.ClickException, match="Config file not found"):
            SerdeMapSettings.from_cli(config_path=str(tmp_path / "missing.toml"))


@pytest.mark.usefixtures("walk_up")
class TestPriority:
    def test_env_over_toml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "serdemap.toml").write_text("[encoding]\nindent = 4\n")
        monkeypatch.setenv("SERDEMAP_ENCODING__INDENT", "2")
        assert SerdeMapSettings.from_cli(cwd=tmp_path).encoding.indent == 2

    def test_cli_flags_over_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SERDEMAP_VERBOSE", "false")
        settings = SerdeMapSettings.from_cli(cwd=tmp_path, verbose=True, json_output=True)
        assert settings.verbose is True
        assert settings.json_output is True

    def test_unset_flags_fall_through(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("SERDEMAP_LOG_JSON", "true")
        settings = SerdeMapSettings.from_cli(cwd=tmp_path, log_json=False, verbose=None)
        assert settings.log_json is True
        assert settings.verbose is False
