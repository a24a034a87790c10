"""Helpers shared by command modules."""

from __future__ import annotations

import json
from collections import Counter
from typing import Any

from pydantic_core import to_jsonable_python

from serdemap.domain.container import SerdeMap


def jsonable(value: Any) -> Any:
    """Convert a decoded value into JSON-compatible data for a CommandResult.

    Nested maps become dicts keyed by their projected keys, so nested
    duplicates collapse here; top-level entries are listed separately.
    """
    if isinstance(value, SerdeMap):
        strategy = value.key_strategy
        return {str(strategy.project(k)): jsonable(v) for k, v in value}
    if isinstance(value, dict):
        return {str(k): jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [jsonable(item) for item in value]
    return to_jsonable_python(value, bytes_mode="base64")


def entry_rows(container: SerdeMap[Any, Any]) -> list[dict[str, Any]]:
    """One ``{"key", "value"}`` row per entry, in insertion order."""
    return [{"key": jsonable(key), "value": jsonable(value)} for key, value in container]


def duplicate_keys(container: SerdeMap[Any, Any]) -> list[Any]:
    """Keys occurring more than once, in order of first occurrence."""
    plain_keys = [jsonable(key) for key in container.iter_keys()]
    fingerprints = [json.dumps(key, sort_keys=True) for key in plain_keys]
    counts = Counter(fingerprints)
    result: list[Any] = []
    reported: set[str] = set()
    for key, fingerprint in zip(plain_keys, fingerprints, strict=True):
        if counts[fingerprint] > 1 and fingerprint not in reported:
            reported.add(fingerprint)
            result.append(key)
    return result
