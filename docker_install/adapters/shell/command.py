"""
Shell command adapter — the SINGLE PLACE where subprocess.run is called.

Every other host adapter (package managers, systemd, gpg, usermod,
the docker CLI) is built on top of this one. Sudo handling, timeouts,
output capture and the mutation journal are all centralised here.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import time

from docker_install.core.models.receipt import Receipt

logger = logging.getLogger(__name__)

# Keep receipts small: package managers can print megabytes
_OUTPUT_TAIL = 4000


class ShellCommandAdapter:
    """Execute commands and capture output as Receipts.

    Args:
        use_sudo: Prefix privileged commands with ``sudo``. Set when the
            process is not root but its user may escalate.
        journal: Shared list that receives a label for every mutating
            command. Lets a run report exactly what it changed.
    """

    name = "shell"

    def __init__(self, use_sudo: bool = False, journal: list[str] | None = None):
        self.use_sudo = use_sudo
        self.journal: list[str] = journal if journal is not None else []

    def is_available(self) -> bool:
        return shutil.which("sh") is not None

    def which(self, binary: str) -> str | None:
        return shutil.which(binary)

    def record(self, label: str) -> None:
        """Note a host mutation in the journal."""
        self.journal.append(label)

    def run(
        self,
        cmd: list[str],
        *,
        timeout: float = 120,
        privileged: bool = False,
        mutating: bool = False,
        input_text: str | None = None,
        env_overrides: dict[str, str] | None = None,
    ) -> Receipt:
        """Run a command and return its receipt.

        Args:
            cmd: Command list for ``subprocess.run()``.
            timeout: Seconds before the command is killed.
            privileged: The command needs root; prefixed with sudo when
                ``use_sudo`` is set.
            mutating: Record the command in the journal.
            input_text: Data piped to stdin.
            env_overrides: Extra environment variables. Under sudo they
                are passed as ``K=V`` arguments, since sudo resets the
                environment it inherits.
        """
        argv = list(cmd)
        if privileged and self.use_sudo:
            assignments = [f"{k}={v}" for k, v in (env_overrides or {}).items()]
            argv = ["sudo", *assignments, *argv]

        env = None
        if env_overrides:
            env = os.environ.copy()
            env.update(env_overrides)

        if mutating:
            self.record(" ".join(cmd))

        logger.debug("Executing: %s (timeout=%.0fs)", " ".join(argv), timeout)
        start = time.monotonic()

        try:
            result = subprocess.run(
                argv,
                capture_output=True,
                text=True,
                timeout=timeout,
                input=input_text,
                env=env,
            )
        except FileNotFoundError:
            return Receipt.failure(
                command=argv,
                error=f"Command not found: {argv[0]}",
                retriable=False,
            )
        except subprocess.TimeoutExpired:
            return Receipt.failure(
                command=argv,
                error=f"Command timed out after {timeout:.0f}s",
                metadata={"timeout": timeout},
            )
        except OSError as e:
            logger.debug("Command execution error: %s", e)
            return Receipt.failure(
                command=argv,
                error=f"Command execution error: {e}",
                retriable=False,
            )

        elapsed_ms = int((time.monotonic() - start) * 1000)
        stdout = (result.stdout or "")[-_OUTPUT_TAIL:]
        stderr = (result.stderr or "")[-_OUTPUT_TAIL:]

        if result.returncode == 0:
            return Receipt.success(
                command=argv,
                output=stdout.strip(),
                duration_ms=elapsed_ms,
                metadata={"stderr": stderr.strip()},
            )

        return Receipt.failure(
            command=argv,
            error=stderr.strip() or f"Command exited with code {result.returncode}",
            output=stdout.strip(),
            return_code=result.returncode,
            duration_ms=elapsed_ms,
        )
