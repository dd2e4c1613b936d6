"""
Docker engine probe — installed version and compose plugin.

Uses the docker CLI only; never the Docker API. Version parsing
happens here so services get typed values, not CLI text.
"""

from __future__ import annotations

import logging
import re

from docker_install.adapters.base import EngineProbe
from docker_install.adapters.shell.command import ShellCommandAdapter
from docker_install.core.models.outcome import EngineStatus

logger = logging.getLogger(__name__)

# "Docker version 24.0.7, build afdd53b" / "Docker version 20.10.24+dfsg1, build 297e128"
_ENGINE_RE = re.compile(r"version\s+v?(\d+(?:\.\d+)*)")
# "Docker Compose version v2.29.7"
_COMPOSE_RE = re.compile(r"v?(\d+\.\d+(?:\.\d+)?)")


def parse_engine_version(text: str) -> tuple[str, int | None]:
    """Extract ``(version, major)`` from ``docker --version`` output."""
    match = _ENGINE_RE.search(text)
    if not match:
        return "", None
    version = match.group(1)
    return version, int(version.split(".", 1)[0])


def parse_compose_version(text: str) -> str:
    match = _COMPOSE_RE.search(text)
    return match.group(1) if match else ""


class DockerEngineProbe(EngineProbe):
    """Probe ``docker --version`` and ``docker compose version``."""

    def __init__(self, shell: ShellCommandAdapter, binary: str = "docker"):
        self._shell = shell
        self._binary = binary

    @property
    def name(self) -> str:
        return "docker"

    def is_available(self) -> bool:
        return self._shell.which(self._binary) is not None

    def status(self) -> EngineStatus:
        if not self.is_available():
            return EngineStatus()

        r = self._shell.run([self._binary, "--version"], timeout=15)
        if not r.ok:
            logger.debug("%s --version failed: %s", self._binary, r.error)
            return EngineStatus()

        version, major = parse_engine_version(r.output)
        compose = self._shell.run([self._binary, "compose", "version"], timeout=15)
        compose_version = parse_compose_version(compose.output) if compose.ok else ""

        return EngineStatus(
            installed=True,
            version=version,
            major=major,
            compose_version=compose_version,
        )
