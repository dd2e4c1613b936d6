"""
Shared test fixtures and configuration.
"""

import logging
from collections.abc import Callable
from pathlib import Path

import pytest

from docker_install.adapters.mock import mock_host
from docker_install.adapters.registry import Host
from docker_install.core.context import RunContext
from docker_install.core.models.config import HostPaths, InstallerConfig, RetrySettings
from docker_install.core.models.distribution import DistributionIdentity, Family


@pytest.fixture
def host_paths(tmp_path: Path) -> HostPaths:
    """Every host path redirected into a scratch tree."""
    etc = tmp_path / "etc"
    (etc / "apt" / "sources.list.d").mkdir(parents=True)
    (etc / "yum.repos.d").mkdir(parents=True)
    lists = tmp_path / "var" / "lib" / "apt" / "lists"
    lists.mkdir(parents=True)
    return HostPaths(
        os_release=str(etc / "os-release"),
        debian_version=str(etc / "debian_version"),
        fedora_release=str(etc / "fedora-release"),
        redhat_release=str(etc / "redhat-release"),
        apt_sources_list=str(etc / "apt" / "sources.list"),
        apt_sources_dir=str(etc / "apt" / "sources.list.d"),
        apt_lists_dir=str(lists),
        apt_backup_root=str(etc / "apt"),
        apt_keyrings_dir=str(etc / "apt" / "keyrings"),
        docker_apt_key=str(etc / "apt" / "keyrings" / "docker.gpg"),
        docker_apt_list=str(etc / "apt" / "sources.list.d" / "docker.list"),
        yum_repo_file=str(etc / "yum.repos.d" / "docker-ce.repo"),
    )


@pytest.fixture
def config(host_paths: HostPaths) -> InstallerConfig:
    """Installer config with scratch paths and a retry budget that never sleeps long."""
    return InstallerConfig(
        paths=host_paths,
        retry=RetrySettings(timeout=5, delay=0, max_attempts=3),
    )


@pytest.fixture
def write_os_release(host_paths: HostPaths) -> Callable[[str], None]:
    """Write the scratch /etc/os-release."""

    def _write(content: str) -> None:
        Path(host_paths.os_release).write_text(content)

    return _write


@pytest.fixture
def deb_host() -> Host:
    """Debian-family mock host with nothing installed."""
    return mock_host(Family.DEBIAN)


@pytest.fixture
def make_ctx(config: InstallerConfig) -> Callable[..., RunContext]:
    """Build a RunContext with the distribution already detected."""

    def _make(host: Host, identity: DistributionIdentity) -> RunContext:
        ctx = RunContext(config=config, host=host)
        ctx.distribution = identity
        return ctx

    return _make


@pytest.fixture
def ubuntu() -> DistributionIdentity:
    return DistributionIdentity(id="ubuntu", version="22.04", codename="jammy")


@pytest.fixture(autouse=True)
def _restore_root_logger():
    """Undo handlers installed by setup_logging (the CLI calls it)."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        if type(handler) in (logging.StreamHandler, logging.FileHandler):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
