"""
Install use case — from CLI intent to a finished run.

Loads configuration, applies command-line overrides, wires the host
adapters and hands everything to the orchestrator. Config problems are
reported on the result rather than raised, so the CLI has one place to
look.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from docker_install.adapters.registry import Host, build_host
from docker_install.core.config.loader import ConfigError, load_config
from docker_install.core.engine.orchestrator import Detector, run_install
from docker_install.core.models.config import InstallerConfig
from docker_install.core.models.outcome import InstallationOutcome
from docker_install.core.services.detection import detect_distribution

logger = logging.getLogger(__name__)


@dataclass
class InstallResult:
    """Result of an install invocation."""

    outcome: InstallationOutcome | None = None
    config: InstallerConfig | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.outcome is not None and self.outcome.success

    def to_dict(self) -> dict[str, Any]:
        if self.outcome is None:
            return {"success": False, "error": self.error}
        return self.outcome.to_dict()


def apply_overrides(
    config: InstallerConfig,
    *,
    timeout: float | None = None,
    retry_delay: float | None = None,
) -> InstallerConfig:
    """Return a copy of ``config`` with command-line retry overrides applied."""
    retry_updates: dict[str, float] = {}
    if timeout is not None:
        retry_updates["timeout"] = timeout
    if retry_delay is not None:
        retry_updates["delay"] = retry_delay
    if not retry_updates:
        return config
    retry = config.retry.model_copy(update=retry_updates)
    return config.model_copy(update={"retry": retry})


def install_docker(
    config_path: Path | None = None,
    *,
    timeout: float | None = None,
    retry_delay: float | None = None,
    host: Host | None = None,
    detector: Detector = detect_distribution,
) -> InstallResult:
    """Install or verify the Docker engine on this host.

    Args:
        config_path: Optional explicit path to docker-install.yml.
        timeout: Override for the total retry budget, in seconds.
        retry_delay: Override for the delay between retries, in seconds.
        host: Adapters to use (default: the real system).
        detector: Distribution probe (tests substitute a fixed identity).

    Returns:
        InstallResult with the run outcome, or an error if the
        configuration could not be loaded.
    """
    try:
        config = load_config(config_path)
    except ConfigError as e:
        logger.error("%s", e)
        return InstallResult(error=str(e))

    config = apply_overrides(config, timeout=timeout, retry_delay=retry_delay)

    if host is None:
        host = build_host()
    logger.debug("Adapters: %s", host.adapter_status())

    outcome = run_install(config, host, detector=detector)
    return InstallResult(outcome=outcome, config=config, error=outcome.error)
