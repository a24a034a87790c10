"""serdemap: ordered key/value container with pluggable key codecs."""

from __future__ import annotations

from serdemap.domain.container import Entry, SerdeMap
from serdemap.domain.strategy import (
    FunctionStrategy,
    IntFromStr,
    KeyStrategy,
    Linear,
    get_strategy,
)
from serdemap.errors import (
    KeyDecodeError,
    KeyEncodeError,
    MapShapeError,
    SerdeMapError,
    UnknownStrategyError,
)

__version__ = "0.3.0"

__all__ = [
    "Entry",
    "FunctionStrategy",
    "IntFromStr",
    "KeyDecodeError",
    "KeyEncodeError",
    "KeyStrategy",
    "Linear",
    "MapShapeError",
    "SerdeMap",
    "SerdeMapError",
    "UnknownStrategyError",
    "__version__",
    "get_strategy",
]
