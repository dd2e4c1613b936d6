"""
Package state inspection — which packages are present.

Read-only probes against the native package database. This is the
idempotence mechanism: every mutating step asks here first and skips
itself when the desired state already holds.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from docker_install.adapters.base import PackageManager

logger = logging.getLogger(__name__)


@dataclass
class PackageReport:
    """Presence split of a package list, in input order."""

    installed: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)

    @property
    def any_installed(self) -> bool:
        return bool(self.installed)

    @property
    def any_missing(self) -> bool:
        return bool(self.missing)

    def to_dict(self) -> dict[str, list[str]]:
        return {"installed": list(self.installed), "missing": list(self.missing)}


def is_package_installed(packages: PackageManager, name: str) -> bool:
    """Whether a single package is present."""
    return packages.is_installed(name)


def check_packages(packages: PackageManager, names: list[str]) -> PackageReport:
    """Check which of ``names`` are installed.

    Args:
        packages: Package manager for the active family.
        names: Package names in the distribution's naming convention.

    Returns:
        PackageReport with ``installed`` and ``missing`` lists.
    """
    report = PackageReport()
    for name in names:
        if packages.is_installed(name):
            report.installed.append(name)
        else:
            report.missing.append(name)
    logger.debug(
        "%s: %d installed, %d missing", packages.name,
        len(report.installed), len(report.missing),
    )
    return report
