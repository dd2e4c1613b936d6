"""
Install recipes — static package lists and repository definitions.

Each recipe describes, per distribution, which packages conflict with
the vendor engine, which prerequisites repository setup needs, and
which packages make up the engine itself.

Schema::

    {
        "label":          str,         human-readable name
        "conflicts":      [str],       removed in one batch if any is present
        "prerequisites":  [str],       installed before repository setup
        "engine":         [str],       the target package set
    }
"""

from __future__ import annotations

from docker_install.core.models.config import InstallerConfig
from docker_install.core.models.distribution import DistributionIdentity, Family
from docker_install.core.models.repository import RepositoryConfig

ENGINE_PACKAGES: list[str] = [
    "docker-ce",
    "docker-ce-cli",
    "containerd.io",
    "docker-buildx-plugin",
    "docker-compose-plugin",
]

_DEBIAN_LIKE = {
    "label": "Ubuntu/Debian",
    "conflicts": [
        "docker.io",
        "docker-engine",
        "docker",
        "docker-doc",
        "docker-compose",
        "docker-compose-v2",
        "podman-docker",
        "containerd",
        "runc",
    ],
    "prerequisites": [
        "ca-certificates",
        "curl",
        "gnupg",
        "apt-transport-https",
        "software-properties-common",
    ],
    "engine": ENGINE_PACKAGES,
}

_FEDORA = {
    "label": "Fedora",
    "conflicts": [
        "docker",
        "docker-client",
        "docker-client-latest",
        "docker-common",
        "docker-latest",
        "docker-latest-logrotate",
        "docker-logrotate",
        "docker-selinux",
        "docker-engine-selinux",
        "docker-engine",
        "podman",
    ],
    "prerequisites": ["dnf-plugins-core"],
    "engine": ENGINE_PACKAGES,
}

_RHEL = {
    "label": "RHEL/CentOS",
    "conflicts": [
        "docker",
        "docker-client",
        "docker-client-latest",
        "docker-common",
        "docker-latest",
        "docker-latest-logrotate",
        "docker-logrotate",
        "docker-engine",
        "podman",
        "runc",
    ],
    "prerequisites": ["dnf-plugins-core"],
    "engine": ENGINE_PACKAGES,
}

INSTALL_RECIPES: dict[str, dict] = {
    "ubuntu": _DEBIAN_LIKE,
    "debian": _DEBIAN_LIKE,
    "fedora": _FEDORA,
    "centos": _RHEL,
    "rhel": _RHEL,
}

# Base mirrors written when broken apt sources are repaired
DEBIAN_BASE_SOURCES = """\
deb http://deb.debian.org/debian {codename} main contrib non-free
deb http://deb.debian.org/debian-security/ {codename}-security main contrib non-free
deb http://deb.debian.org/debian {codename}-updates main contrib non-free
"""

UBUNTU_BASE_SOURCES = """\
deb http://archive.ubuntu.com/ubuntu/ {codename} main restricted universe multiverse
deb http://archive.ubuntu.com/ubuntu/ {codename}-updates main restricted universe multiverse
deb http://archive.ubuntu.com/ubuntu/ {codename}-backports main restricted universe multiverse
deb http://security.ubuntu.com/ubuntu/ {codename}-security main restricted universe multiverse
"""

FEDORA_REPO_TEMPLATE = """\
[docker-ce-stable]
name=Docker CE Stable - $basearch
baseurl={url}/$releasever/$basearch/stable
enabled=1
gpgcheck=1
gpgkey={url}/gpg
"""


def get_recipe(distribution_id: str) -> dict | None:
    return INSTALL_RECIPES.get(distribution_id)


def repository_for(identity: DistributionIdentity, config: InstallerConfig) -> RepositoryConfig:
    """Desired vendor repository for a supported distribution."""
    url = f"{config.download_base.rstrip('/')}/{identity.flavor}"
    if identity.family == Family.DEBIAN:
        return RepositoryConfig(
            family=Family.DEBIAN,
            flavor=identity.flavor,
            url=url,
            path=config.paths.docker_apt_list,
            key_location=config.paths.docker_apt_key,
        )
    return RepositoryConfig(
        family=Family.RPM,
        flavor=identity.flavor,
        url=url,
        path=config.paths.yum_repo_file,
        key_location=f"{url}/gpg",
    )


def apt_source_line(repo: RepositoryConfig, arch: str, codename: str) -> str:
    """The one-line apt definition for the vendor repository."""
    return (
        f"deb [arch={arch} signed-by={repo.key_location}] "
        f"{repo.url} {codename} stable\n"
    )
