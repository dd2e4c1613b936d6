"""
Receipt model — the result contract for every external command.

Adapters run commands and hand back Receipts. They NEVER raise:
failures are captured here and the service layer decides whether a
failed receipt becomes a typed error, a retry, or a warning.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class Receipt(BaseModel):
    """Result of one external command (package manager, systemctl, gpg...)."""

    command: list[str] = Field(default_factory=list)
    status: Literal["ok", "failed"] = "ok"

    started_at: str = Field(default_factory=_now_iso)
    ended_at: str = Field(default_factory=_now_iso)
    duration_ms: int = 0

    output: str = ""
    error: str | None = None
    return_code: int | None = None

    # False when repeating the command cannot help (binary missing, bad args)
    retriable: bool = True
    attempts: int = 1

    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """Whether the command succeeded."""
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        """Whether the command failed."""
        return self.status == "failed"

    @property
    def label(self) -> str:
        """The command as a single printable string."""
        return " ".join(self.command)

    @classmethod
    def success(
        cls,
        command: list[str] | None = None,
        output: str = "",
        **kwargs: Any,
    ) -> Receipt:
        """Create a success receipt."""
        return cls(
            command=list(command or []),
            status="ok",
            output=output,
            return_code=kwargs.pop("return_code", 0),
            **kwargs,
        )

    @classmethod
    def failure(
        cls,
        command: list[str] | None = None,
        error: str = "",
        **kwargs: Any,
    ) -> Receipt:
        """Create a failure receipt."""
        return cls(
            command=list(command or []),
            status="failed",
            error=error,
            **kwargs,
        )
