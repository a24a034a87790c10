"""Tests for structlog configuration."""

from __future__ import annotations

import json
import logging
from collections.abc import Generator
from io import StringIO

import pytest
import structlog

from serdemap.config.logging import configure_logging
from serdemap.config.settings import SerdeMapSettings
from serdemap.cql.mapping import encode_cell
from serdemap.cql.types import parse_column_type
from serdemap.domain.container import SerdeMap
from serdemap.serialization import json_codec


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None]:
    """Restore root logger state after each test."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    pkg = logging.getLogger("serdemap")
    pkg_level = pkg.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    pkg.setLevel(pkg_level)


def _json_lines(err: str) -> list[dict[str, object]]:
    return [json.loads(line) for line in err.splitlines() if line.strip()]


class TestConfigureLogging:
    def test_verbose_enables_debug(self) -> None:
        configure_logging(SerdeMapSettings(verbose=True, log_json=False))
        assert logging.getLogger("serdemap").level == logging.DEBUG
        assert logging.getLogger().level == logging.WARNING

    def test_non_verbose_sets_warning(self) -> None:
        configure_logging(SerdeMapSettings(verbose=False, log_json=False))
        assert logging.getLogger("serdemap").level == logging.WARNING

    def test_json_mode_output(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(SerdeMapSettings(verbose=True, log_json=True))
        structlog.get_logger("serdemap.test").warning("json test", answer=42)
        parsed = _json_lines(capfd.readouterr().err)[0]
        assert parsed["event"] == "json test"
        assert parsed["answer"] == 42
        assert parsed["level"] == "warning"
        assert parsed["logger"] == "serdemap.test"
        assert "timestamp" in parsed

    def test_codec_debug_records(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(SerdeMapSettings(verbose=True, log_json=True))
        json_codec.loads('{"a": 1, "a": 2}')
        events = {line["event"]: line for line in _json_lines(capfd.readouterr().err)}
        assert "Parsed JSON object with 2 entries" in events
        decoded = events["Decoded map with 2 entries"]
        assert decoded["logger"] == "serdemap.serialization.protocol"
        assert decoded["level"] == "debug"

    def test_cql_debug_records(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(SerdeMapSettings(verbose=True, log_json=True))
        encode_cell(SerdeMap([("a", 1)]), parse_column_type("map<text, int>"))
        events = [line["event"] for line in _json_lines(capfd.readouterr().err)]
        assert "Serialized 1 map entries into 17 bytes" in events

    def test_quiet_by_default(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(SerdeMapSettings(verbose=False, log_json=True))
        json_codec.loads('{"a": 1}')
        assert capfd.readouterr().err == ""

    def test_third_party_debug_is_suppressed(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(SerdeMapSettings(verbose=True, log_json=True))
        logging.getLogger("pydantic").debug("validator noise")
        assert capfd.readouterr().err == ""

    def test_custom_stream(self, capfd: pytest.CaptureFixture[str]) -> None:
        buf = StringIO()
        configure_logging(SerdeMapSettings(log_json=True), stream=buf)
        logging.getLogger("serdemap.test").warning("to buffer")
        assert json.loads(buf.getvalue())["event"] == "to buffer"
        assert capfd.readouterr().err == ""

    def test_idempotent_calls(self) -> None:
        """Multiple configure_logging calls don't stack handlers."""
        configure_logging(SerdeMapSettings(verbose=True, log_json=False))
        configure_logging(SerdeMapSettings(verbose=True, log_json=True))
        assert len(logging.getLogger().handlers) == 1
