"""
Host registry — the bundle of adapters a run talks to.

The orchestrator never constructs adapters itself: it receives a Host
and picks the package manager for the detected family through it.
Tests hand in a Host built from the mocks instead.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from docker_install.adapters.base import (
    AccountManager,
    EngineProbe,
    KeyManager,
    PackageManager,
    ServiceManager,
)
from docker_install.adapters.containers.docker import DockerEngineProbe
from docker_install.adapters.packages.native import AptPackageManager, DnfPackageManager
from docker_install.adapters.services.systemd import SystemdServiceManager
from docker_install.adapters.shell.accounts import SystemAccountManager
from docker_install.adapters.shell.command import ShellCommandAdapter
from docker_install.adapters.shell.filesystem import FilesystemAdapter
from docker_install.adapters.shell.gpg import GpgKeyManager
from docker_install.core.models.distribution import Family

logger = logging.getLogger(__name__)


@dataclass
class Host:
    """Every external collaborator of a run."""

    shell: ShellCommandAdapter
    files: FilesystemAdapter
    services: ServiceManager
    keys: KeyManager
    accounts: AccountManager
    engine: EngineProbe
    package_managers: dict[Family, PackageManager] = field(default_factory=dict)
    # Mock hosts never escalate, whatever identity they report
    allow_sudo: bool = True

    @property
    def journal(self) -> list[str]:
        """Mutating operations performed so far."""
        return self.shell.journal

    def package_manager(self, family: Family) -> PackageManager | None:
        return self.package_managers.get(family)

    def enable_sudo(self) -> None:
        """Route privileged commands through sudo (delegated invocation)."""
        if self.allow_sudo and not self.shell.use_sudo:
            logger.debug("Privileged commands will run through sudo")
            self.shell.use_sudo = True

    def adapter_status(self) -> dict[str, dict[str, Any]]:
        """Availability of every adapter, for --debug diagnostics."""
        adapters = [self.services, self.keys, self.accounts, self.engine,
                    *self.package_managers.values()]
        status = {}
        for adapter in adapters:
            try:
                available = adapter.is_available()
            except Exception:
                available = False
            status[adapter.name] = {
                "name": adapter.name,
                "available": available,
                "type": adapter.__class__.__name__,
            }
        return status


def build_host(use_sudo: bool = False) -> Host:
    """Wire the real adapters around one shared shell."""
    shell = ShellCommandAdapter(use_sudo=use_sudo)
    return Host(
        shell=shell,
        files=FilesystemAdapter(shell),
        services=SystemdServiceManager(shell),
        keys=GpgKeyManager(shell),
        accounts=SystemAccountManager(shell),
        engine=DockerEngineProbe(shell),
        package_managers={
            Family.DEBIAN: AptPackageManager(shell),
            Family.RPM: DnfPackageManager(shell),
        },
    )
