"""
GPG key adapter — download an armored key and dearmor it into a keyring.
"""

from __future__ import annotations

from docker_install.adapters.base import DEFAULT_TIMEOUT, KeyManager
from docker_install.adapters.shell.command import ShellCommandAdapter
from docker_install.core.models.receipt import Receipt


class GpgKeyManager(KeyManager):
    """``curl -fsSL URL | gpg --dearmor -o DEST`` without the pipe.

    The armored key lands in a caller-provided scratch file first so a
    failed download never truncates an existing keyring.
    """

    def __init__(self, shell: ShellCommandAdapter):
        self._shell = shell

    @property
    def name(self) -> str:
        return "gpg"

    def is_available(self) -> bool:
        return all(self._shell.which(b) for b in ("curl", "gpg"))

    def import_key(
        self,
        url: str,
        dest: str,
        *,
        scratch: str,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> Receipt:
        fetched = self._shell.run(
            ["curl", "-fsSL", "--max-time", str(int(max(timeout, 1))), "-o", scratch, url],
            timeout=timeout,
        )
        if not fetched.ok:
            return fetched

        return self._shell.run(
            ["gpg", "--batch", "--yes", "--dearmor", "-o", dest, scratch],
            timeout=60,
            privileged=True,
            mutating=True,
        )
