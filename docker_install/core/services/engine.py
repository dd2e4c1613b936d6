"""
Engine checks — is the target already satisfied, and did installing work.
"""

from __future__ import annotations

import logging

from docker_install.core.context import RunContext
from docker_install.core.errors import VerificationError
from docker_install.core.models.outcome import EngineStatus

logger = logging.getLogger(__name__)


def is_satisfied(ctx: RunContext) -> tuple[bool, EngineStatus]:
    """Engine invocable, compose plugin available, major at or above the floor."""
    status = ctx.host.engine.status()
    floor = ctx.config.minimum_engine_major
    if not status.installed:
        logger.info("Docker is not installed")
        return False, status
    if not status.compose_available:
        logger.info("Docker %s is installed but Docker Compose is missing", status.version)
        return False, status
    if not status.at_least(floor):
        logger.info("Docker %s is older than the supported %d.x", status.version, floor)
        return False, status
    return True, status


def verify_engine(ctx: RunContext) -> EngineStatus:
    """Confirm the engine works after installation.

    Raises:
        VerificationError: ``docker`` is not invocable or is too old.
    """
    status = ctx.host.engine.status()
    floor = ctx.config.minimum_engine_major
    if not status.installed:
        raise VerificationError("Docker installation failed: docker command is not available")
    if not status.at_least(floor):
        raise VerificationError(
            f"Docker installation failed: version {status.version or 'unknown'} "
            f"is below the supported {floor}.x"
        )

    logger.info("Docker installed successfully")
    logger.info("Docker version: %s", status.version)
    if status.compose_available:
        logger.info("Docker Compose version: %s", status.compose_version)
    else:
        logger.warning("Docker Compose plugin is not available")
    return status
