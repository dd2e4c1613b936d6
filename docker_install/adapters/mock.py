"""
Mock adapters — in-memory host for testing.

Simulates a package database, systemd, key import, accounts and the
docker CLI without touching the machine. Mutations land in the same
journal real adapters use, so tests can assert exactly what a run
changed. Files still go through a real FilesystemAdapter, pointed at
a scratch directory by the test's HostPaths.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from docker_install.adapters.base import (
    DEFAULT_TIMEOUT,
    AccountManager,
    EngineProbe,
    KeyManager,
    PackageManager,
    ServiceManager,
)
from docker_install.adapters.registry import Host
from docker_install.adapters.shell.command import ShellCommandAdapter
from docker_install.adapters.shell.filesystem import FilesystemAdapter
from docker_install.core.models.distribution import Family
from docker_install.core.models.identity import UserIdentity
from docker_install.core.models.outcome import EngineStatus
from docker_install.core.models.receipt import Receipt

# Version a freshly "installed" package reports unless told otherwise
DEFAULT_PACKAGE_VERSION = "27.3.1"

ENGINE_PACKAGES = ("docker-ce", "docker.io", "docker", "moby-engine")
COMPOSE_PACKAGES = ("docker-compose-plugin", "docker-compose-v2")


class _Recorder:
    """Call log, journal, and scripted failures shared by all mocks."""

    def __init__(self, journal: list[str] | None = None):
        self.journal: list[str] = journal if journal is not None else []
        self._call_log: list[tuple[str, tuple]] = []
        self._failures: dict[str, int] = {}

    @property
    def call_log(self) -> list[tuple[str, tuple]]:
        """Every (operation, args) this mock has received."""
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    def calls(self, op: str) -> list[tuple]:
        return [args for name, args in self._call_log if name == op]

    def set_failure(self, op: str, times: int = -1) -> None:
        """Make ``op`` fail the next ``times`` calls (-1 = forever)."""
        self._failures[op] = times

    def reset(self) -> None:
        self._call_log.clear()
        self._failures.clear()

    def _call(self, op: str, *args: object, mutating: bool = False) -> Receipt | None:
        """Log the call; return a failure receipt if one is scripted."""
        self._call_log.append((op, args))
        if mutating:
            self.journal.append(" ".join([op, *map(str, args)]))
        remaining = self._failures.get(op, 0)
        if remaining == 0:
            return None
        if remaining > 0:
            self._failures[op] = remaining - 1
        return Receipt.failure(command=[op, *map(str, args)], error=f"[mock] {op} failed")


class MockPackageManager(_Recorder, PackageManager):
    """Package database as a ``{name: version}`` dict."""

    def __init__(
        self,
        family: Family = Family.DEBIAN,
        installed: dict[str, str] | None = None,
        versions: dict[str, str] | None = None,
        journal: list[str] | None = None,
        arch: str = "amd64",
        on_add_repository: Callable[[str], None] | None = None,
    ):
        super().__init__(journal)
        self.family = family
        self.installed: dict[str, str] = dict(installed or {})
        self.versions: dict[str, str] = dict(versions or {})
        self._arch = arch
        self._on_add_repository = on_add_repository
        # stderr texts returned by successive refresh() calls
        self.refresh_errors: list[str] = []

    @property
    def name(self) -> str:
        return "mock-apt" if self.family == Family.DEBIAN else "mock-dnf"

    def is_available(self) -> bool:
        return True

    def is_installed(self, package: str) -> bool:
        self._call_log.append(("query", (package,)))
        return package in self.installed

    def install(self, packages: list[str], *, timeout: float = DEFAULT_TIMEOUT) -> Receipt:
        failed = self._call("install", *packages, mutating=True)
        if failed:
            return failed
        for pkg in packages:
            self.installed[pkg] = self.versions.get(pkg, DEFAULT_PACKAGE_VERSION)
        return Receipt.success(command=["install", *packages])

    def upgrade(self, packages: list[str], *, timeout: float = DEFAULT_TIMEOUT) -> Receipt:
        failed = self._call("upgrade", *packages, mutating=True)
        if failed:
            return failed
        for pkg in packages:
            if pkg in self.installed:
                self.installed[pkg] = self.versions.get(pkg, DEFAULT_PACKAGE_VERSION)
        return Receipt.success(command=["upgrade", *packages])

    def remove(self, packages: list[str], *, timeout: float = DEFAULT_TIMEOUT) -> Receipt:
        failed = self._call("remove", *packages, mutating=True)
        if failed:
            return failed
        for pkg in packages:
            self.installed.pop(pkg, None)
        return Receipt.success(command=["remove", *packages])

    def refresh(self, *, timeout: float = DEFAULT_TIMEOUT) -> Receipt:
        failed = self._call("refresh")
        if failed:
            return failed
        if self.refresh_errors:
            return Receipt.failure(
                command=["refresh"], error=self.refresh_errors.pop(0), return_code=100,
            )
        return Receipt.success(command=["refresh"])

    def clean(self, *, timeout: float = DEFAULT_TIMEOUT) -> Receipt:
        return self._call("clean") or Receipt.success(command=["clean"])

    def architecture(self) -> str:
        return self._arch

    def add_repository(self, url: str, *, timeout: float = DEFAULT_TIMEOUT) -> Receipt:
        failed = self._call("add_repository", url, mutating=True)
        if failed:
            return failed
        if self._on_add_repository:
            self._on_add_repository(url)
        return Receipt.success(command=["add_repository", url])


class MockServiceManager(_Recorder, ServiceManager):
    """Service states as two sets of names."""

    def __init__(
        self,
        active: set[str] | None = None,
        enabled: set[str] | None = None,
        journal: list[str] | None = None,
    ):
        super().__init__(journal)
        self.active: set[str] = set(active or ())
        self.enabled: set[str] = set(enabled or ())

    @property
    def name(self) -> str:
        return "mock-systemd"

    def is_available(self) -> bool:
        return True

    def is_active(self, service: str) -> bool:
        return service in self.active

    def is_enabled(self, service: str) -> bool:
        return service in self.enabled

    def enable(self, service: str) -> Receipt:
        failed = self._call("enable", service, mutating=True)
        if failed:
            return failed
        self.enabled.add(service)
        return Receipt.success(command=["enable", service])

    def start(self, service: str) -> Receipt:
        failed = self._call("start", service, mutating=True)
        if failed:
            return failed
        self.active.add(service)
        return Receipt.success(command=["start", service])


class MockKeyManager(_Recorder, KeyManager):
    """Writes a fake dearmored key to the destination path."""

    def __init__(self, journal: list[str] | None = None, key_bytes: bytes = b"\x99\x01\x0dmock-key"):
        super().__init__(journal)
        self.key_bytes = key_bytes

    @property
    def name(self) -> str:
        return "mock-gpg"

    def is_available(self) -> bool:
        return True

    def import_key(
        self,
        url: str,
        dest: str,
        *,
        scratch: str,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> Receipt:
        failed = self._call("import_key", url, dest, mutating=True)
        if failed:
            return failed
        Path(scratch).write_text("-----BEGIN PGP PUBLIC KEY BLOCK-----\n")
        Path(dest).parent.mkdir(parents=True, exist_ok=True)
        Path(dest).write_bytes(self.key_bytes)
        return Receipt.success(command=["import_key", url, dest])


class MockAccountManager(_Recorder, AccountManager):
    """Fixed identity and an in-memory group table."""

    def __init__(
        self,
        identity: UserIdentity | None = None,
        members: dict[str, set[str]] | None = None,
        journal: list[str] | None = None,
    ):
        super().__init__(journal)
        self.identity = identity or UserIdentity(euid=0, user="root", invoking_user="root")
        self.members: dict[str, set[str]] = {k: set(v) for k, v in (members or {}).items()}

    @property
    def name(self) -> str:
        return "mock-accounts"

    def is_available(self) -> bool:
        return True

    def current_identity(self) -> UserIdentity:
        return self.identity

    def is_member(self, user: str, group: str) -> bool:
        return user in self.members.get(group, set())

    def add_to_group(self, user: str, group: str) -> Receipt:
        failed = self._call("add_to_group", user, group, mutating=True)
        if failed:
            return failed
        self.members.setdefault(group, set()).add(user)
        return Receipt.success(command=["usermod", "-aG", group, user])


class MockEngineProbe(EngineProbe):
    """Derives ``docker --version`` from the mock package database."""

    def __init__(self, packages: MockPackageManager, broken: bool = False):
        self._packages = packages
        self.broken = broken

    @property
    def name(self) -> str:
        return "mock-docker"

    def is_available(self) -> bool:
        return self.status().installed

    def status(self) -> EngineStatus:
        if self.broken:
            return EngineStatus()
        installed = self._packages.installed
        engine = next((installed[p] for p in ENGINE_PACKAGES if p in installed), None)
        if engine is None:
            return EngineStatus()
        compose = next((installed[p] for p in COMPOSE_PACKAGES if p in installed), "")
        major = int(engine.split(".", 1)[0]) if engine[:1].isdigit() else None
        return EngineStatus(installed=True, version=engine, major=major, compose_version=compose)


def mock_host(
    family: Family = Family.DEBIAN,
    *,
    installed: dict[str, str] | None = None,
    versions: dict[str, str] | None = None,
    identity: UserIdentity | None = None,
    members: dict[str, set[str]] | None = None,
    active: set[str] | None = None,
    enabled: set[str] | None = None,
    repo_file: str | None = None,
) -> Host:
    """Assemble a Host whose every collaborator is in-memory.

    ``repo_file`` is where ``add_repository`` drops a dnf-style repo
    definition pointing at the URL it was given.
    """
    shell = ShellCommandAdapter(use_sudo=False)
    journal = shell.journal
    files = FilesystemAdapter(shell)

    def _write_repo(url: str) -> None:
        if repo_file:
            base = url.rsplit("/", 1)[0]
            Path(repo_file).parent.mkdir(parents=True, exist_ok=True)
            Path(repo_file).write_text(
                "[docker-ce-stable]\n"
                f"baseurl={base}/$releasever/$basearch/stable\n"
                "enabled=1\n"
                f"gpgkey={base}/gpg\n"
            )

    packages = MockPackageManager(
        family=family,
        installed=installed,
        versions=versions,
        journal=journal,
        arch="amd64" if family == Family.DEBIAN else "x86_64",
        on_add_repository=_write_repo,
    )
    return Host(
        shell=shell,
        files=files,
        services=MockServiceManager(active=active, enabled=enabled, journal=journal),
        keys=MockKeyManager(journal=journal),
        accounts=MockAccountManager(identity=identity, members=members, journal=journal),
        engine=MockEngineProbe(packages),
        package_managers={Family.DEBIAN: packages, Family.RPM: packages},
        allow_sudo=False,
    )
