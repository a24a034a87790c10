"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, serdemap.toml only contains
overrides. An empty file (or no file) is a valid configuration.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from serdemap.cql.writers import CELL_MAX_SIZE
from serdemap.domain.strategy import strategy_names

# --- serdemap.toml sections ---


class KeysConfig(BaseModel):
    """[keys] section."""

    model_config = {"frozen": True}

    strategy: str = "linear"

    @field_validator("strategy")
    @classmethod
    def _known_strategy(cls, value: str) -> str:
        if value not in strategy_names():
            msg = f"unknown key strategy {value!r}, expected one of {strategy_names()}"
            raise ValueError(msg)
        return value


class EncodingConfig(BaseModel):
    """[encoding] section: JSON output formatting."""

    model_config = {"frozen": True}

    indent: int | None = None
    ensure_ascii: bool = True


class CqlConfig(BaseModel):
    """[cql] section."""

    model_config = {"frozen": True}

    max_cell_size: int = Field(default=CELL_MAX_SIZE, gt=0, le=CELL_MAX_SIZE)


class SerdeMapConfig(BaseModel):
    """Root configuration composing all sections."""

    model_config = {"frozen": True}

    keys: KeysConfig = Field(default_factory=KeysConfig)
    encoding: EncodingConfig = Field(default_factory=EncodingConfig)
    cql: CqlConfig = Field(default_factory=CqlConfig)
