"""
Service reconciliation — the engine service is enabled and running.
"""

from __future__ import annotations

import logging

from docker_install.core.context import RunContext
from docker_install.core.errors import ServiceConfigurationError

logger = logging.getLogger(__name__)


def reconcile_service(ctx: RunContext) -> bool:
    """Enable and start the service unless both already hold.

    Not retried: a service manager that refuses once will refuse again.

    Returns:
        True if enable/start ran.
    """
    services = ctx.host.services
    name = ctx.config.service_name

    if services.is_active(name) and services.is_enabled(name):
        logger.info("Docker service is already running and enabled")
        return False

    logger.info("Starting and enabling Docker service...")
    for action in (services.enable, services.start):
        r = action(name)
        if not r.ok:
            raise ServiceConfigurationError(
                f"Failed to {action.__name__} {name} service: {r.error}"
            )
    return True
