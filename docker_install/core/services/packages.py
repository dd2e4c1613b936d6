"""
Package operations — prerequisites, conflict removal, engine install.

Every step checks state first and is a no-op when the desired state
already holds; otherwise it acts on the full package list in one
batch through the bounded retry combinator. An exhausted budget
raises PackageOperationError.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from docker_install.core.context import RunContext
from docker_install.core.data.recipes import get_recipe
from docker_install.core.errors import DetectionError, PackageOperationError
from docker_install.core.models.distribution import Family
from docker_install.core.models.receipt import Receipt
from docker_install.core.reliability.retry import retry_until_ok
from docker_install.core.services.package_state import check_packages

logger = logging.getLogger(__name__)


def recipe_for(ctx: RunContext) -> dict:
    """Install recipe for the detected distribution, or DetectionError."""
    identity = ctx.distribution
    recipe = get_recipe(identity.id)
    if recipe is None:
        raise DetectionError(f"Unsupported distribution: {identity.id}")
    return recipe


def _retried(ctx: RunContext, label: str, operation: Callable[[float], Receipt]) -> Receipt:
    r = retry_until_ok(operation, ctx.retry_policy, label=label)
    if not r.ok:
        raise PackageOperationError(
            f"{label} failed after {r.attempts} attempt(s): {r.error}"
        )
    return r


def refresh_index(ctx: RunContext) -> None:
    """Refresh the package index with retry (apt only; dnf refreshes itself)."""
    if ctx.distribution.family != Family.DEBIAN:
        return
    logger.info("Updating package lists...")
    pm = ctx.packages
    _retried(ctx, "apt-get update", lambda remaining: pm.refresh(timeout=remaining))


def missing_prerequisites(ctx: RunContext) -> list[str]:
    return check_packages(ctx.packages, recipe_for(ctx)["prerequisites"]).missing


def ensure_prerequisites(ctx: RunContext) -> bool:
    """Install repository-setup prerequisites if any is missing."""
    prerequisites = recipe_for(ctx)["prerequisites"]
    report = check_packages(ctx.packages, prerequisites)
    if not report.any_missing:
        logger.info("All prerequisites are already installed")
        return False

    logger.info("Installing prerequisites: %s", " ".join(report.missing))
    refresh_index(ctx)
    pm = ctx.packages
    _retried(
        ctx, "Prerequisite installation",
        lambda remaining: pm.install(prerequisites, timeout=remaining),
    )
    return True


def remove_conflicts(ctx: RunContext) -> bool:
    """Remove the conflict denylist in one batch if any member is present.

    Returns:
        True if a removal ran.
    """
    conflicts = recipe_for(ctx)["conflicts"]
    report = check_packages(ctx.packages, conflicts)
    if not report.any_installed:
        logger.info("No conflicting packages found")
        return False

    for pkg in report.installed:
        logger.info("Found conflicting package: %s", pkg)
    logger.info("Removing conflicting packages...")
    pm = ctx.packages
    _retried(
        ctx, "Conflicting package removal",
        lambda remaining: pm.remove(conflicts, timeout=remaining),
    )
    return True


def install_engine(ctx: RunContext) -> str:
    """Install the engine package set, or upgrade it when outdated.

    Returns:
        ``"installed"``, ``"upgraded"`` or ``"present"``.
    """
    engine = recipe_for(ctx)["engine"]
    pm = ctx.packages
    report = check_packages(pm, engine)

    if report.any_missing:
        logger.info("Installing Docker packages: %s", " ".join(engine))
        refresh_index(ctx)
        _retried(
            ctx, "Docker installation",
            lambda remaining: pm.install(engine, timeout=remaining),
        )
        return "installed"

    status = ctx.host.engine.status()
    floor = ctx.config.minimum_engine_major
    if status.installed and not status.at_least(floor):
        logger.info(
            "Docker %s is older than the supported %d.x, upgrading...",
            status.version or "unknown", floor,
        )
        refresh_index(ctx)
        _retried(
            ctx, "Docker upgrade",
            lambda remaining: pm.upgrade(engine, timeout=remaining),
        )
        return "upgraded"

    logger.info("All Docker packages are already installed")
    return "present"
