"""CommandResult and CommandError: what every CLI command produces.

INVARIANT: commands never print directly; they build a CommandResult
and hand it to ``AppContext.emit``.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class CommandError(BaseModel):
    """Structured error payload within a CommandResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class CommandResult(BaseModel):
    """Return type of every CLI operation.

    Attributes:
        ok: Whether the operation succeeded.
        op: Name of the operation (e.g. ``"cql_encode"``).
        data: Operation-specific payload on success.
        warnings: Non-fatal issues encountered during the operation.
        error: Structured error if ``ok`` is False.
    """

    model_config = {"frozen": True, "ser_json_bytes": "base64"}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: CommandError | None = None

    @classmethod
    def failure(cls, op: str, code: str, message: str, **detail: Any) -> CommandResult:
        return cls(ok=False, op=op, error=CommandError(code=code, message=message, detail=detail))
