"""
Native package managers — apt/dpkg and dnf/rpm.

Presence checks use the low-level database tools (``dpkg-query``,
``rpm -q``) because they are fast and never take the package lock.
Mutations go through the high-level front ends with ``-y``.
"""

from __future__ import annotations

import logging

from docker_install.adapters.base import DEFAULT_TIMEOUT, PackageManager
from docker_install.adapters.shell.command import ShellCommandAdapter
from docker_install.core.models.distribution import Family
from docker_install.core.models.receipt import Receipt

logger = logging.getLogger(__name__)

_QUERY_TIMEOUT = 10


class _ShellPackageManager(PackageManager):
    """Shared plumbing: every mutation is privileged and journaled."""

    frontend = ""
    env: dict[str, str] = {}

    def __init__(self, shell: ShellCommandAdapter):
        self._shell = shell

    def is_available(self) -> bool:
        return self._shell.which(self.frontend) is not None

    def _mutate(self, cmd: list[str], timeout: float) -> Receipt:
        return self._shell.run(
            cmd,
            timeout=timeout,
            privileged=True,
            mutating=True,
            env_overrides=self.env or None,
        )


class AptPackageManager(_ShellPackageManager):
    """Debian/Ubuntu: dpkg database, apt-get front end."""

    family = Family.DEBIAN
    frontend = "apt-get"
    env = {"DEBIAN_FRONTEND": "noninteractive"}

    @property
    def name(self) -> str:
        return "apt"

    def is_installed(self, package: str) -> bool:
        r = self._shell.run(
            ["dpkg-query", "-W", "-f=${Status}", package], timeout=_QUERY_TIMEOUT,
        )
        return r.ok and "install ok installed" in r.output

    def install(self, packages: list[str], *, timeout: float = DEFAULT_TIMEOUT) -> Receipt:
        return self._mutate(["apt-get", "install", "-y", *packages], timeout)

    def upgrade(self, packages: list[str], *, timeout: float = DEFAULT_TIMEOUT) -> Receipt:
        return self._mutate(["apt-get", "install", "-y", "--only-upgrade", *packages], timeout)

    def remove(self, packages: list[str], *, timeout: float = DEFAULT_TIMEOUT) -> Receipt:
        return self._mutate(["apt-get", "remove", "-y", *packages], timeout)

    def refresh(self, *, timeout: float = DEFAULT_TIMEOUT) -> Receipt:
        # Index refresh rewrites /var/lib/apt/lists but not installed state
        return self._shell.run(
            ["apt-get", "update"], timeout=timeout, privileged=True, env_overrides=self.env,
        )

    def clean(self, *, timeout: float = DEFAULT_TIMEOUT) -> Receipt:
        return self._shell.run(["apt-get", "clean"], timeout=timeout, privileged=True)

    def architecture(self) -> str:
        r = self._shell.run(["dpkg", "--print-architecture"], timeout=_QUERY_TIMEOUT)
        return r.output.strip() if r.ok else ""

    def add_repository(self, url: str, *, timeout: float = DEFAULT_TIMEOUT) -> Receipt:
        return Receipt.failure(
            command=["apt", "add-repository", url],
            error="apt repositories are configured by writing a sources list entry",
            retriable=False,
        )


class DnfPackageManager(_ShellPackageManager):
    """Fedora/RHEL/CentOS: rpm database, dnf front end."""

    family = Family.RPM
    frontend = "dnf"

    @property
    def name(self) -> str:
        return "dnf"

    def is_installed(self, package: str) -> bool:
        return self._shell.run(["rpm", "-q", package], timeout=_QUERY_TIMEOUT).ok

    def install(self, packages: list[str], *, timeout: float = DEFAULT_TIMEOUT) -> Receipt:
        return self._mutate(["dnf", "-y", "install", *packages], timeout)

    def upgrade(self, packages: list[str], *, timeout: float = DEFAULT_TIMEOUT) -> Receipt:
        return self._mutate(["dnf", "-y", "upgrade", *packages], timeout)

    def remove(self, packages: list[str], *, timeout: float = DEFAULT_TIMEOUT) -> Receipt:
        return self._mutate(["dnf", "-y", "remove", *packages], timeout)

    def refresh(self, *, timeout: float = DEFAULT_TIMEOUT) -> Receipt:
        return self._shell.run(["dnf", "makecache"], timeout=timeout, privileged=True)

    def clean(self, *, timeout: float = DEFAULT_TIMEOUT) -> Receipt:
        return self._shell.run(["dnf", "clean", "all"], timeout=timeout, privileged=True)

    def architecture(self) -> str:
        r = self._shell.run(["rpm", "--eval", "%{_arch}"], timeout=_QUERY_TIMEOUT)
        return r.output.strip() if r.ok else ""

    def add_repository(self, url: str, *, timeout: float = DEFAULT_TIMEOUT) -> Receipt:
        return self._mutate(["dnf", "config-manager", "--add-repo", url], timeout)
