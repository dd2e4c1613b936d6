"""
Distribution detection — read-only probe of OS identification files.

Sources in priority order:
    /etc/os-release       ID, VERSION_ID, VERSION_CODENAME (or UBUNTU_CODENAME)
    /etc/debian_version   → debian, version = file content
    /etc/fedora-release   → fedora, version = first integer
    /etc/redhat-release   → centos if it says "CentOS", else rhel

Never raises: when nothing matches, the ``unknown`` sentinel is
returned and the orchestrator decides what that means.
"""

from __future__ import annotations

import logging
import re
import shlex
from pathlib import Path

from docker_install.core.models.config import HostPaths
from docker_install.core.models.distribution import UNKNOWN, DistributionIdentity

logger = logging.getLogger(__name__)

_FIRST_INT = re.compile(r"\d+")
_MAJOR_MINOR = re.compile(r"(\d+)\.\d+")


def _read(path: str) -> str | None:
    try:
        return Path(path).read_text(encoding="utf-8", errors="replace")
    except OSError:
        return None


def parse_os_release(text: str) -> dict[str, str]:
    """Parse os-release ``KEY=value`` lines, honouring shell quoting."""
    data: dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, raw = line.partition("=")
        try:
            parts = shlex.split(raw)
        except ValueError:
            parts = [raw.strip().strip("\"'")]
        data[key.strip()] = parts[0] if parts else ""
    return data


def _from_os_release(text: str, source: str) -> DistributionIdentity | None:
    fields = parse_os_release(text)
    distro_id = fields.get("ID", "").strip().lower()
    if not distro_id:
        return None
    return DistributionIdentity(
        id=distro_id,
        version=fields.get("VERSION_ID", ""),
        codename=fields.get("VERSION_CODENAME") or fields.get("UBUNTU_CODENAME", ""),
        source=source,
    )


def _from_redhat_release(text: str, source: str) -> DistributionIdentity:
    distro_id = "centos" if "CentOS" in text else "rhel"
    match = _MAJOR_MINOR.search(text)
    if match:
        version = match.group(1)
    else:
        first = _FIRST_INT.search(text)
        version = first.group(0) if first else ""
    return DistributionIdentity(id=distro_id, version=version, source=source)


def detect_distribution(paths: HostPaths | None = None) -> DistributionIdentity:
    """Identify the running distribution.

    Args:
        paths: Where to look for identification files (defaults to /etc).

    Returns:
        The first matching identity, or ``DistributionIdentity(id="unknown")``.
    """
    paths = paths or HostPaths()

    text = _read(paths.os_release)
    if text is not None:
        identity = _from_os_release(text, paths.os_release)
        if identity is not None:
            logger.debug("Distribution from %s: %s", paths.os_release, identity)
            return identity
        logger.debug("%s has no ID field, trying marker files", paths.os_release)

    text = _read(paths.debian_version)
    if text is not None:
        return DistributionIdentity(
            id="debian", version=text.strip(), source=paths.debian_version,
        )

    text = _read(paths.fedora_release)
    if text is not None:
        match = _FIRST_INT.search(text)
        return DistributionIdentity(
            id="fedora", version=match.group(0) if match else "", source=paths.fedora_release,
        )

    text = _read(paths.redhat_release)
    if text is not None:
        return _from_redhat_release(text, paths.redhat_release)

    logger.debug("No OS identification source matched")
    return DistributionIdentity(id=UNKNOWN)
