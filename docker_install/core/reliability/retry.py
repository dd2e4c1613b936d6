"""
Bounded retry — run an operation until it succeeds or the budget runs out.

Applied uniformly to every retriable external call (package-manager
install/remove/refresh, key download). Each attempt receives the
remaining time budget so a single hung command cannot outlive the
overall timeout.

Budget is bounded by total duration and, optionally, attempt count.
Delay is fixed by default; ``backoff > 1`` turns it exponential,
capped at ``max_delay``.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from docker_install.core.models.receipt import Receipt

logger = logging.getLogger(__name__)

# Smallest per-attempt timeout handed to a command near the deadline
_MIN_ATTEMPT_TIMEOUT = 1.0


@dataclass(frozen=True)
class RetryPolicy:
    """How long and how often to retry.

    Args:
        timeout: Total seconds the operation may take across attempts.
        delay: Seconds to sleep between attempts.
        backoff: Multiplier applied to the delay after each failure.
        max_delay: Upper bound for the delay.
        max_attempts: Optional hard cap on attempts (None = time-bounded only).
    """

    timeout: float = 600.0
    delay: float = 10.0
    backoff: float = 1.0
    max_delay: float = 60.0
    max_attempts: int | None = None

    def delay_for(self, attempt: int) -> float:
        """Delay to sleep after the given (1-based) failed attempt."""
        delay = self.delay * (self.backoff ** (attempt - 1))
        return min(delay, self.max_delay) if self.backoff > 1 else self.delay


def retry_until_ok(
    operation: Callable[[float], Receipt],
    policy: RetryPolicy,
    *,
    label: str = "",
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> Receipt:
    """Call ``operation(remaining_seconds)`` until it returns an ok receipt.

    Stops early when a receipt is marked non-retriable. Never raises;
    the last receipt is returned with ``attempts`` set, and callers
    turn a failed one into their own error type.
    """
    deadline = clock() + policy.timeout
    attempt = 0
    name = label or "operation"

    while True:
        attempt += 1
        remaining = max(deadline - clock(), _MIN_ATTEMPT_TIMEOUT)
        receipt = operation(remaining)
        receipt.attempts = attempt

        if receipt.ok:
            if attempt > 1:
                logger.info("%s succeeded after %d attempts", name, attempt)
            return receipt

        if not receipt.retriable:
            logger.warning("%s failed and is not retriable: %s", name, receipt.error)
            return receipt

        if policy.max_attempts is not None and attempt >= policy.max_attempts:
            logger.warning("%s failed after %d attempts: %s", name, attempt, receipt.error)
            return receipt

        wait = policy.delay_for(attempt)
        if clock() + wait >= deadline:
            logger.warning(
                "%s did not succeed within %.0fs (%d attempts): %s",
                name, policy.timeout, attempt, receipt.error,
            )
            receipt.metadata["timed_out"] = True
            return receipt

        logger.info("Command failed, retrying in %.0f seconds... (%s)", wait, name)
        sleep(wait)
