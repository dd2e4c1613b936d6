"""
Repository configuration — the desired on-disk state of the vendor repo.
"""

from __future__ import annotations

from pydantic import BaseModel

from docker_install.core.models.distribution import Family


class RepositoryConfig(BaseModel):
    """Where the package manager should fetch the engine from.

    The real state lives on disk (list/repo file + trust key); this
    model only describes what that state should look like.
    """

    family: Family
    flavor: str                     # ubuntu, debian, fedora, centos
    url: str                        # https://download.docker.com/linux/<flavor>
    path: str                       # docker.list or docker-ce.repo
    key_location: str = ""          # local keyring (debian-like) or remote gpgkey
    enabled: bool = True

    @property
    def marker(self) -> str:
        """Substring a correctly configured definition must contain."""
        return self.url.split("://", 1)[-1]
