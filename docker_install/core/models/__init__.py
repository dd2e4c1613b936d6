"""
Domain models — Pydantic types for the installer.

All models are re-exported here for convenient access:

    from docker_install.core.models import DistributionIdentity, Receipt
"""

from docker_install.core.models.distribution import (
    SUPPORTED_DISTRIBUTIONS,
    UNKNOWN,
    DistributionIdentity,
    Family,
)
from docker_install.core.models.outcome import (
    EngineStatus,
    InstallationOutcome,
    VersionVerdict,
)
from docker_install.core.models.receipt import Receipt
from docker_install.core.models.repository import RepositoryConfig

__all__ = [
    # distribution.py
    "DistributionIdentity",
    # outcome.py
    "EngineStatus",
    "Family",
    "InstallationOutcome",
    # receipt.py
    "Receipt",
    # repository.py
    "RepositoryConfig",
    "SUPPORTED_DISTRIBUTIONS",
    "UNKNOWN",
    "VersionVerdict",
]
