"""Key strategies: conversions between wire keys and domain keys.

A strategy is selected per map *type* (``SerdeMap.key_strategy``), never
per instance. ``project`` runs only while serializing and must not fail;
``lift`` runs only while deserializing and reports malformed input through
the ``error`` constructor supplied by the calling context, so a pydantic
validator, the JSON codec and the protocol layer each get their own
exception type.

Example::

    class IdMap[V](SerdeMap[int, V]):
        key_strategy = IntFromStr()

    # wire keys are "1", "2", ...; the container stores 1, 2, ...
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any, ClassVar

from serdemap.errors import KeyDecodeError, UnknownStrategyError

type ErrorFactory = Callable[[str], Exception]

_INT_PATTERN = re.compile(r"[+-]?[0-9]+")


class KeyStrategy[W, D](ABC):
    """Conversion pair between a wire key type ``W`` and a domain key type ``D``."""

    # External key type; None means "same as the domain type".
    wire_type: ClassVar[Any] = None

    @abstractmethod
    def project(self, domain: D) -> W:
        """Return the wire form of an in-memory key."""

    @abstractmethod
    def lift(self, wire: W, error: ErrorFactory = KeyDecodeError) -> D:
        """Return the domain form of a wire key.

        Raises:
            Exception: ``error(message)`` when *wire* is malformed.
        """

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, KeyStrategy):
            return NotImplemented
        return type(self) is type(other) and vars(self) == vars(other)

    def __hash__(self) -> int:
        return hash(type(self))

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class Linear[T](KeyStrategy[T, T]):
    """One-to-one strategy: keys are stored exactly as they arrive."""

    def project(self, domain: T) -> T:
        return domain

    def lift(self, wire: T, error: ErrorFactory = KeyDecodeError) -> T:
        return wire


class IntFromStr(KeyStrategy[str, int]):
    """String wire keys holding integers, stored as ``int``.

    Only an optional sign followed by ASCII digits is accepted:

        >>> IntFromStr().lift("-42")
        -42
        >>> IntFromStr().project(42)
        '42'
    """

    wire_type: ClassVar[Any] = str

    def project(self, domain: int) -> str:
        return str(domain)

    def lift(self, wire: str, error: ErrorFactory = KeyDecodeError) -> int:
        if not isinstance(wire, str):
            raise error(f"invalid type: {type(wire).__name__}, expected a string key")
        if _INT_PATTERN.fullmatch(wire) is None:
            raise error(f"invalid digit found in key {wire!r}")
        return int(wire)


class FunctionStrategy[W, D](KeyStrategy[W, D]):
    """Strategy built from two plain callables.

    *lift* signals malformed input by raising ``ValueError`` or
    ``TypeError``; the message is re-raised through the context's
    error constructor.
    """

    def __init__(
        self,
        project: Callable[[D], W],
        lift: Callable[[W], D],
        *,
        wire_type: Any = None,
    ) -> None:
        self._project = project
        self._lift = lift
        self.wire_type = wire_type

    def project(self, domain: D) -> W:
        return self._project(domain)

    def lift(self, wire: W, error: ErrorFactory = KeyDecodeError) -> D:
        try:
            return self._lift(wire)
        except (TypeError, ValueError) as exc:
            raise error(str(exc)) from exc

    def __repr__(self) -> str:
        return f"FunctionStrategy({self._project!r}, {self._lift!r})"


LINEAR: Linear[Any] = Linear()

_REGISTRY: dict[str, KeyStrategy[Any, Any]] = {
    "linear": LINEAR,
    "int": IntFromStr(),
}


def strategy_names() -> list[str]:
    """Names accepted by :func:`get_strategy`, sorted."""
    return sorted(_REGISTRY)


def get_strategy(name: str) -> KeyStrategy[Any, Any]:
    """Look up a registered strategy by name.

    Raises:
        UnknownStrategyError: If *name* is not registered.
    """
    try:
        return _REGISTRY[name]
    except KeyError:
        msg = f"Unknown key strategy: {name!r}. Expected one of {strategy_names()}"
        raise UnknownStrategyError(msg) from None
