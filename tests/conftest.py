"""Shared pytest fixtures and test helpers for serdemap tests."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from serdemap.domain.container import SerdeMap
from serdemap.domain.strategy import IntFromStr


class IdMap[V](SerdeMap[int, V]):
    """Map with string wire keys stored as integers."""

    key_strategy = IntFromStr()


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def _isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Run in an empty temp directory with no SERDEMAP_* environment.

    Keeps config walk-up discovery from picking up a serdemap.toml that
    happens to live above the test checkout.
    """
    import os

    for name in list(os.environ):
        if name.startswith("SERDEMAP_"):
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("SERDEMAP_CONFIG", str(tmp_path / "absent.toml"))


def write_json(path: Path, text: str) -> Path:
    """Write *text* to *path* and return it."""
    path.write_text(text, encoding="utf-8")
    return path


def pairs(container: SerdeMap[Any, Any]) -> list[tuple[Any, Any]]:
    return list(container)
