"""Route serdemap's stdlib log records through structlog.

Library modules only call ``logging.getLogger(__name__)`` and never
configure anything; the CLI calls :func:`configure_logging` once per
invocation with the resolved settings. Records are rendered to stderr as
console lines, or as JSON lines with ``--log-json``.
"""

from __future__ import annotations

import logging
import sys
from typing import IO, TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from serdemap.config.settings import SerdeMapSettings

_PACKAGE_LOGGER = "serdemap"

_SHARED: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.UnicodeDecoder(),
]


def _renderer(log_json: bool, stream: IO[str]) -> structlog.types.Processor:
    if log_json:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=stream.isatty())


def configure_logging(settings: SerdeMapSettings, *, stream: IO[str] | None = None) -> None:
    """Install one stderr handler and set the package level from *settings*.

    ``settings.verbose`` lowers the ``serdemap`` logger to DEBUG; other
    libraries stay at WARNING either way. Calling this again replaces the
    previous handler.
    """
    out = stream if stream is not None else sys.stderr

    structlog.configure(
        processors=[*_SHARED, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(out)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_SHARED,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(settings.log_json, out),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(logging.WARNING)
    logging.getLogger(_PACKAGE_LOGGER).setLevel(
        logging.DEBUG if settings.verbose else logging.WARNING
    )
