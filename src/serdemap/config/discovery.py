"""Locating and reading serdemap.toml.

The nearest serdemap.toml at or above the working directory wins, unless
the SERDEMAP_CONFIG env var pins a file. Sections are validated through
:class:`~serdemap.config.models.SerdeMapConfig` before the settings layer
merges them with env vars and CLI flags.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from serdemap.config.models import SerdeMapConfig
from serdemap.errors import ConfigError

CONFIG_FILENAME = "serdemap.toml"
CONFIG_ENV_VAR = "SERDEMAP_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Return the config file for *start* (default: cwd), or None.

    A set SERDEMAP_CONFIG always decides: its file if it exists, else None.
    """
    pinned = os.environ.get(CONFIG_ENV_VAR)
    if pinned:
        path = Path(pinned)
        return path if path.is_file() else None

    here = (start or Path.cwd()).resolve()
    for directory in (here, *here.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def read_config(path: Path) -> dict[str, Any]:
    """Parse *path* and validate its sections against :class:`SerdeMapConfig`.

    Returns the raw top-level keys with every section replaced by the
    validated values it sets, so unset fields stay unset for lower
    priority sources to fill.

    Raises:
        ConfigError: If the file is not TOML or a section is invalid.
    """
    try:
        data: dict[str, Any] = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        msg = f"Invalid TOML in {path}: {exc}"
        raise ConfigError(msg) from exc
    try:
        sections = SerdeMapConfig.model_validate(data)
    except ValidationError as exc:
        msg = f"Invalid config in {path}: {exc}"
        raise ConfigError(msg) from exc
    return {**data, **sections.model_dump(exclude_unset=True)}
