"""
Error taxonomy — every way a run can fail.

Services raise these; only the orchestrator catches them. The step a
run stopped in is the orchestrator state that was active when the
error surfaced, so the errors themselves carry only a message.
"""

from __future__ import annotations


class InstallError(Exception):
    """Base class for all fatal installer errors."""


class PrivilegeError(InstallError):
    """Not root and not in an administrative group."""


class DetectionError(InstallError):
    """Distribution could not be identified or is not supported."""


class UnsupportedVersionError(InstallError):
    """Distribution version is below the supported minimum."""


class RepositoryConfigurationError(InstallError):
    """Vendor repository or signing key could not be configured."""


class PackageOperationError(InstallError):
    """A package install/remove/refresh did not succeed within its budget."""


class ServiceConfigurationError(InstallError):
    """The service manager refused to enable or start the service."""


class VerificationError(InstallError):
    """The engine is not usable after installation."""
