"""
Run context — everything one invocation knows, passed explicitly.

One RunContext is created per run and threaded through every step:
config, the host adapters, the detected distribution, the run
timestamp used for backups, temp files awaiting cleanup, and the
states visited so far. Nothing about a run lives in module globals.
"""

from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass, field
from datetime import datetime

from docker_install.adapters.base import PackageManager
from docker_install.adapters.registry import Host
from docker_install.core.models.config import InstallerConfig
from docker_install.core.models.distribution import DistributionIdentity
from docker_install.core.models.identity import UserIdentity
from docker_install.core.reliability.retry import RetryPolicy

logger = logging.getLogger(__name__)


@dataclass
class RunContext:
    """Per-invocation state for the installer."""

    config: InstallerConfig
    host: Host
    started_at: datetime = field(default_factory=datetime.now)
    identity: UserIdentity | None = None
    states: list[str] = field(default_factory=list)
    temp_paths: list[str] = field(default_factory=list)
    backups: list[str] = field(default_factory=list)
    sources_backed_up: bool = False
    _distribution: DistributionIdentity | None = field(default=None, repr=False)

    # ── Distribution (set once) ─────────────────────────────────

    @property
    def distribution(self) -> DistributionIdentity:
        if self._distribution is None:
            raise RuntimeError("Distribution has not been detected yet")
        return self._distribution

    @distribution.setter
    def distribution(self, value: DistributionIdentity) -> None:
        if self._distribution is not None:
            raise RuntimeError("Distribution is already detected for this run")
        self._distribution = value

    @property
    def has_distribution(self) -> bool:
        return self._distribution is not None

    # ── Derived helpers ─────────────────────────────────────────

    @property
    def stamp(self) -> str:
        """Run timestamp shared by every backup this run creates."""
        return self.started_at.strftime("%Y%m%d-%H%M%S")

    @property
    def retry_policy(self) -> RetryPolicy:
        return self.config.retry.policy()

    @property
    def packages(self) -> PackageManager:
        """Package manager for the detected distribution family."""
        pm = self.host.package_manager(self.distribution.family)
        if pm is None:
            raise RuntimeError(f"No package manager for family {self.distribution.family}")
        return pm

    def make_temp(self, suffix: str = "") -> str:
        """Create a temp file that cleanup() will remove."""
        fd, path = tempfile.mkstemp(prefix="docker-install-", suffix=suffix)
        os.close(fd)
        self.temp_paths.append(path)
        return path

    def cleanup(self) -> None:
        """Release temporary resources. Runs on every exit path."""
        logger.info("Cleaning up temporary files...")
        while self.temp_paths:
            self.host.files.remove(self.temp_paths.pop())
