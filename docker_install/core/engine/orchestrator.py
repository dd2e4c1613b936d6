"""
Install orchestrator — the state machine behind one run.

Flow:
    START → PRIVILEGE_CHECK → DETECT → VERSION_GATE
          → ALREADY_SATISFIED → DONE
          | INSTALL_PATH → SERVICE_RECONCILE → POST_INSTALL_ADJUST → VERIFY → DONE
    any state → FAILED

Services raise InstallError subclasses; this is the only place they
are caught. Whatever happens, cleanup runs before the outcome is
returned.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import StrEnum

from docker_install.adapters.registry import Host
from docker_install.core.context import RunContext
from docker_install.core.data.recipes import repository_for
from docker_install.core.errors import DetectionError, InstallError
from docker_install.core.models.config import HostPaths, InstallerConfig
from docker_install.core.models.distribution import DistributionIdentity, Family
from docker_install.core.models.outcome import InstallationOutcome
from docker_install.core.services.detection import detect_distribution
from docker_install.core.services.engine import is_satisfied, verify_engine
from docker_install.core.services.packages import (
    ensure_prerequisites,
    install_engine,
    missing_prerequisites,
    recipe_for,
    remove_conflicts,
)
from docker_install.core.services.privilege import check_privilege, grant_service_group
from docker_install.core.services.repository import (
    check_repository,
    configure_repository,
    ensure_repository,
)
from docker_install.core.services.service import reconcile_service
from docker_install.core.services.source_repair import repair_apt_sources
from docker_install.core.services.version_gate import enforce_version_gate

logger = logging.getLogger(__name__)

Detector = Callable[[HostPaths], DistributionIdentity]


class RunState(StrEnum):
    START = "START"
    PRIVILEGE_CHECK = "PRIVILEGE_CHECK"
    DETECT = "DETECT"
    VERSION_GATE = "VERSION_GATE"
    ALREADY_SATISFIED = "ALREADY_SATISFIED"
    INSTALL_PATH = "INSTALL_PATH"
    SERVICE_RECONCILE = "SERVICE_RECONCILE"
    POST_INSTALL_ADJUST = "POST_INSTALL_ADJUST"
    VERIFY = "VERIFY"
    DONE = "DONE"
    FAILED = "FAILED"


# ── Install paths ───────────────────────────────────────────────


def _install_debian_like(ctx: RunContext) -> None:
    repo = repository_for(ctx.distribution, ctx.config)
    needs_prerequisites = bool(missing_prerequisites(ctx))
    repo_ready = check_repository(ctx, repo)

    if ctx.config.repair_apt_sources and (needs_prerequisites or not repo_ready):
        repair_apt_sources(ctx)

    ensure_prerequisites(ctx)
    if not repo_ready:
        configure_repository(ctx, repo)
    remove_conflicts(ctx)
    install_engine(ctx)


def _install_rpm_like(ctx: RunContext) -> None:
    ensure_prerequisites(ctx)
    ensure_repository(ctx)
    remove_conflicts(ctx)
    install_engine(ctx)


def run_install_path(ctx: RunContext) -> None:
    """Dispatch to exactly one distribution procedure.

    Raises:
        DetectionError: No procedure exists for the distribution.
    """
    identity = ctx.distribution
    recipe = recipe_for(ctx)
    if ctx.host.package_manager(identity.family) is None:
        raise DetectionError(f"No package manager available for {identity.id}")

    logger.info("Installing Docker for %s %s...", recipe["label"], identity.version)
    if identity.family == Family.DEBIAN:
        _install_debian_like(ctx)
    else:
        _install_rpm_like(ctx)


# ── State machine ───────────────────────────────────────────────


def run_install(
    config: InstallerConfig,
    host: Host,
    *,
    detector: Detector = detect_distribution,
) -> InstallationOutcome:
    """Drive one installation run to DONE or FAILED.

    Args:
        config: Validated installer configuration.
        host: Adapters to act through (real or mock).
        detector: Distribution probe; receives ``config.paths``.

    Returns:
        InstallationOutcome. Never raises InstallError; KeyboardInterrupt
        propagates after cleanup.
    """
    ctx = RunContext(config=config, host=host)
    outcome = InstallationOutcome()
    state = RunState.START

    def enter(next_state: RunState) -> None:
        nonlocal state
        state = next_state
        ctx.states.append(str(next_state))
        logger.debug("State: %s", next_state)

    journal_start = len(host.journal)
    enter(RunState.START)
    logger.info("Starting Docker installation...")

    try:
        enter(RunState.PRIVILEGE_CHECK)
        check_privilege(ctx)

        enter(RunState.DETECT)
        identity = detector(config.paths)
        if not identity.known:
            raise DetectionError("Unable to detect distribution")
        ctx.distribution = identity
        outcome.distribution = str(identity)
        logger.info("Detected distribution: %s %s", identity.id, identity.version)

        enter(RunState.VERSION_GATE)
        enforce_version_gate(identity)

        satisfied, status = is_satisfied(ctx)
        if satisfied:
            enter(RunState.ALREADY_SATISFIED)
            logger.info(
                "Docker %s and Docker Compose %s are already installed",
                status.version, status.compose_version,
            )
        else:
            enter(RunState.INSTALL_PATH)
            run_install_path(ctx)

            enter(RunState.SERVICE_RECONCILE)
            reconcile_service(ctx)

            enter(RunState.POST_INSTALL_ADJUST)
            grant_service_group(ctx)

            enter(RunState.VERIFY)
            status = verify_engine(ctx)

        outcome.installed_version = status.version
        outcome.compose_version = status.compose_version
        enter(RunState.DONE)
        outcome.success = True
        logger.info("Docker installation completed")

    except InstallError as e:
        failed_step = str(state)
        logger.error("Error in step %s: %s", failed_step, e)
        outcome.error = str(e)
        outcome.failed_step = failed_step
        enter(RunState.FAILED)

    except KeyboardInterrupt:
        logger.error("Installation interrupted in step %s", state)
        raise

    finally:
        ctx.cleanup()
        outcome.states = list(ctx.states)
        outcome.final_state = ctx.states[-1]
        outcome.mutations = list(host.journal[journal_start:])

    return outcome
