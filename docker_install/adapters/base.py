"""
Adapter base — the protocol contracts between services and the host.

Services never shell out directly: they talk to these interfaces,
which keeps every decision testable against the in-memory doubles in
``docker_install.adapters.mock``.

Query methods return typed values. Mutating methods return a Receipt
and NEVER raise — failures are captured in the Receipt and the
calling service decides what they mean.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from docker_install.core.models.distribution import Family
from docker_install.core.models.identity import UserIdentity
from docker_install.core.models.outcome import EngineStatus
from docker_install.core.models.receipt import Receipt

DEFAULT_TIMEOUT = 600.0


class Adapter(ABC):
    """Common surface of every host adapter."""

    @property
    @abstractmethod
    def name(self) -> str:
        """The adapter identifier (e.g., 'apt', 'systemd', 'gpg')."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check if this adapter's underlying tool is available.

        Should be fast and never raise.
        """

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"


class PackageManager(Adapter):
    """Native package database and installer (apt/dpkg, dnf/rpm)."""

    family: Family = Family.UNKNOWN

    @abstractmethod
    def is_installed(self, package: str) -> bool:
        """Query the package database. Never mutates, never raises."""

    @abstractmethod
    def install(self, packages: list[str], *, timeout: float = DEFAULT_TIMEOUT) -> Receipt:
        """Install (or bring up to date) every package in one batch."""

    @abstractmethod
    def upgrade(self, packages: list[str], *, timeout: float = DEFAULT_TIMEOUT) -> Receipt:
        """Upgrade already-installed packages to the newest candidate."""

    @abstractmethod
    def remove(self, packages: list[str], *, timeout: float = DEFAULT_TIMEOUT) -> Receipt:
        """Remove every package in one batch."""

    @abstractmethod
    def refresh(self, *, timeout: float = DEFAULT_TIMEOUT) -> Receipt:
        """Refresh the package index."""

    @abstractmethod
    def clean(self, *, timeout: float = DEFAULT_TIMEOUT) -> Receipt:
        """Drop cached package archives."""

    @abstractmethod
    def architecture(self) -> str:
        """Native architecture name (``amd64``, ``x86_64``...), or ''."""

    @abstractmethod
    def add_repository(self, url: str, *, timeout: float = DEFAULT_TIMEOUT) -> Receipt:
        """Register a remote repository definition file."""


class ServiceManager(Adapter):
    """System service manager (systemd)."""

    @abstractmethod
    def is_active(self, service: str) -> bool:
        """Whether the service is currently running."""

    @abstractmethod
    def is_enabled(self, service: str) -> bool:
        """Whether the service starts at boot."""

    @abstractmethod
    def enable(self, service: str) -> Receipt:
        """Enable the service at boot."""

    @abstractmethod
    def start(self, service: str) -> Receipt:
        """Start the service now."""


class KeyManager(Adapter):
    """Trust-key import (download + dearmor into a keyring file)."""

    @abstractmethod
    def import_key(
        self,
        url: str,
        dest: str,
        *,
        scratch: str,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> Receipt:
        """Fetch the armored key at ``url`` into ``scratch``, dearmor to ``dest``."""


class AccountManager(Adapter):
    """Users and groups."""

    @abstractmethod
    def current_identity(self) -> UserIdentity:
        """Identity of the running process and its invoking user."""

    @abstractmethod
    def is_member(self, user: str, group: str) -> bool:
        """Whether ``user`` belongs to ``group`` (primary or supplementary)."""

    @abstractmethod
    def add_to_group(self, user: str, group: str) -> Receipt:
        """Append ``group`` to the user's supplementary groups."""


class EngineProbe(Adapter):
    """Reports the installed container engine and compose plugin."""

    @abstractmethod
    def status(self) -> EngineStatus:
        """Probe the engine binary. Never raises."""
