"""
Installer configuration model — validated shape of docker-install.yml.

Every field has a default, so an absent config file means "install
Docker the standard way". Host paths are configurable mainly so the
whole pipeline can run against a scratch directory.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from docker_install.core.reliability.retry import RetryPolicy


class RetrySettings(BaseModel):
    """Retry budget for network / lock-contended operations."""

    timeout: float = Field(default=600.0, gt=0)      # 10 minutes
    delay: float = Field(default=10.0, ge=0)
    backoff: float = Field(default=1.0, ge=1.0)
    max_delay: float = Field(default=60.0, ge=0)
    max_attempts: int | None = Field(default=None, ge=1)

    def policy(self) -> RetryPolicy:
        return RetryPolicy(
            timeout=self.timeout,
            delay=self.delay,
            backoff=self.backoff,
            max_delay=self.max_delay,
            max_attempts=self.max_attempts,
        )


class HostPaths(BaseModel):
    """Filesystem locations the installer reads and writes."""

    os_release: str = "/etc/os-release"
    debian_version: str = "/etc/debian_version"
    fedora_release: str = "/etc/fedora-release"
    redhat_release: str = "/etc/redhat-release"

    apt_sources_list: str = "/etc/apt/sources.list"
    apt_sources_dir: str = "/etc/apt/sources.list.d"
    apt_lists_dir: str = "/var/lib/apt/lists"
    apt_backup_root: str = "/etc/apt"
    apt_keyrings_dir: str = "/etc/apt/keyrings"
    docker_apt_key: str = "/etc/apt/keyrings/docker.gpg"
    docker_apt_list: str = "/etc/apt/sources.list.d/docker.list"

    yum_repo_file: str = "/etc/yum.repos.d/docker-ce.repo"


class InstallerConfig(BaseModel):
    """Root configuration object."""

    download_base: str = "https://download.docker.com/linux"
    minimum_engine_major: int = 23

    service_name: str = "docker"
    service_group: str = "docker"
    admin_groups: list[str] = Field(default_factory=lambda: ["sudo", "admin", "wheel"])

    repair_apt_sources: bool = True

    retry: RetrySettings = Field(default_factory=RetrySettings)
    paths: HostPaths = Field(default_factory=HostPaths)
