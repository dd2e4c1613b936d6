"""Adapters — bindings to the host's package, service and account tools.

Public re-exports for convenient access.
"""

from docker_install.adapters.base import (
    AccountManager,
    Adapter,
    EngineProbe,
    KeyManager,
    PackageManager,
    ServiceManager,
)
from docker_install.adapters.registry import Host, build_host

__all__ = [
    "AccountManager",
    "Adapter",
    "EngineProbe",
    "Host",
    "KeyManager",
    "PackageManager",
    "ServiceManager",
    "build_host",
]
