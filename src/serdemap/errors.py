"""Exception hierarchy shared by the container, codecs and adapters.

Every error is raised to the caller; nothing is silently truncated.
Backend adapters (e.g. :mod:`serdemap.cql.errors`) derive from
:class:`SerdeMapError` so callers can catch the whole family at once.
"""

from __future__ import annotations

from typing import Any


class SerdeMapError(Exception):
    """Base class for all serdemap errors."""


class KeyDecodeError(SerdeMapError, ValueError):
    """A wire key could not be converted to its domain representation."""


class KeyEncodeError(SerdeMapError, TypeError):
    """A sink cannot represent a projected key."""


class MapShapeError(SerdeMapError, TypeError):
    """The serialized source is not map-shaped."""

    def __init__(self, got: Any) -> None:
        self.got = type(got).__name__
        super().__init__(f"invalid type: {self.got}, expected a map")


class UnknownStrategyError(SerdeMapError, KeyError):
    """No key strategy is registered under the requested name."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class ConfigError(SerdeMapError):
    """A ``serdemap.toml`` file is not valid TOML or has invalid sections."""
