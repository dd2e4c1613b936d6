"""
Run outcome models — engine probe results and the terminal run summary.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class EngineStatus(BaseModel):
    """What ``docker --version`` / ``docker compose version`` report."""

    installed: bool = False
    version: str = ""
    major: int | None = None
    compose_version: str = ""

    @property
    def compose_available(self) -> bool:
        return bool(self.compose_version)

    def at_least(self, floor: int) -> bool:
        """Whether the engine is present at or above a major version."""
        return self.installed and self.major is not None and self.major >= floor


class VersionVerdict(BaseModel):
    """Result of the minimum-version policy check."""

    accepted: bool
    distribution: str
    version: str
    major: int | None = None
    minimum: int | None = None
    reason: str = ""


class InstallationOutcome(BaseModel):
    """Terminal result of one run."""

    success: bool = False
    installed_version: str = ""
    compose_version: str = ""
    distribution: str = ""
    final_state: str = ""
    states: list[str] = Field(default_factory=list)
    mutations: list[str] = Field(default_factory=list)
    error: str | None = None
    failed_step: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")
