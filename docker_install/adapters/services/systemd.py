"""
Systemd service adapter — is-active / is-enabled / enable / start.
"""

from __future__ import annotations

from pathlib import Path

from docker_install.adapters.base import ServiceManager
from docker_install.adapters.shell.command import ShellCommandAdapter
from docker_install.core.models.receipt import Receipt

_SYSTEMD_RUNTIME = "/run/systemd/system"


class SystemdServiceManager(ServiceManager):
    """Manage units through ``systemctl``."""

    def __init__(self, shell: ShellCommandAdapter):
        self._shell = shell

    @property
    def name(self) -> str:
        return "systemd"

    def is_available(self) -> bool:
        return Path(_SYSTEMD_RUNTIME).exists() and self._shell.which("systemctl") is not None

    def is_active(self, service: str) -> bool:
        return self._shell.run(["systemctl", "is-active", "--quiet", service], timeout=30).ok

    def is_enabled(self, service: str) -> bool:
        return self._shell.run(["systemctl", "is-enabled", "--quiet", service], timeout=30).ok

    def enable(self, service: str) -> Receipt:
        return self._shell.run(
            ["systemctl", "enable", service], timeout=60, privileged=True, mutating=True,
        )

    def start(self, service: str) -> Receipt:
        return self._shell.run(
            ["systemctl", "start", service], timeout=120, privileged=True, mutating=True,
        )
