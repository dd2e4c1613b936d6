"""
Version gate — minimum supported release per distribution.

Policy, not a transient condition: a rejection is final and is never
retried. Versions compare by their leading major integer, so
``"20.04"`` is 20 and ``"12.5"`` is 12.
"""

from __future__ import annotations

import logging
import re

from docker_install.core.errors import UnsupportedVersionError
from docker_install.core.models.distribution import DistributionIdentity
from docker_install.core.models.outcome import VersionVerdict

logger = logging.getLogger(__name__)

MINIMUM_VERSIONS: dict[str, int] = {
    "ubuntu": 20,
    "debian": 10,
    "fedora": 35,
    "centos": 7,
    "rhel": 7,
}

# How each minimum reads in messages
_DISPLAY_MINIMUM: dict[str, str] = {
    "ubuntu": "20.04",
}

_LEADING_INT = re.compile(r"^\s*(\d+)")


def major_version(version: str) -> int | None:
    """Leading integer of a version string, or None if there is none."""
    match = _LEADING_INT.match(version or "")
    return int(match.group(1)) if match else None


def check_version(identity: DistributionIdentity) -> VersionVerdict:
    """Apply the minimum-version table. Pure; never raises.

    Distributions without a rule are accepted here; the installer
    dispatch rejects them later by name.
    """
    minimum = MINIMUM_VERSIONS.get(identity.id)
    major = major_version(identity.version)

    if minimum is None:
        return VersionVerdict(
            accepted=True,
            distribution=identity.id,
            version=identity.version,
            major=major,
            reason="no minimum version defined",
        )

    display = _DISPLAY_MINIMUM.get(identity.id, str(minimum))
    if major is None:
        return VersionVerdict(
            accepted=False,
            distribution=identity.id,
            version=identity.version,
            minimum=minimum,
            reason=(
                f"Cannot determine {identity.id} version from '{identity.version}'. "
                f"Minimum required version is {display}"
            ),
        )

    if major < minimum:
        return VersionVerdict(
            accepted=False,
            distribution=identity.id,
            version=identity.version,
            major=major,
            minimum=minimum,
            reason=(
                f"{identity.id} version {identity.version} is not supported. "
                f"Minimum required version is {display}"
            ),
        )

    return VersionVerdict(
        accepted=True,
        distribution=identity.id,
        version=identity.version,
        major=major,
        minimum=minimum,
    )


def enforce_version_gate(identity: DistributionIdentity) -> VersionVerdict:
    """Raise UnsupportedVersionError unless the distribution qualifies."""
    verdict = check_version(identity)
    if not verdict.accepted:
        raise UnsupportedVersionError(verdict.reason)
    logger.debug("Version gate passed: %s (minimum %s)", identity, verdict.minimum)
    return verdict
