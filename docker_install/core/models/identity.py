"""
User identity — who is running the installer, and on whose behalf.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class UserIdentity(BaseModel):
    """Process identity plus the human behind a delegated invocation.

    ``invoking_user`` is ``SUDO_USER`` under sudo, otherwise the
    current login; it is the account that gets the service group.
    """

    euid: int
    user: str = ""
    invoking_user: str = ""
    groups: list[str] = Field(default_factory=list)

    @property
    def is_root(self) -> bool:
        return self.euid == 0

    def in_any_group(self, names: list[str]) -> bool:
        return any(name in self.groups for name in names)
