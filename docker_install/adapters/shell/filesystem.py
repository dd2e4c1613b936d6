"""
Filesystem adapter — reads and root-owned writes under /etc.

Reads are plain Python. Writes go through Python when the process is
root and through ``sudo`` helpers (tee, install, cp, mv) otherwise, so
the same call works for both native and delegated invocations. Writes
return Receipts and never raise.
"""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path

from docker_install.adapters.shell.command import ShellCommandAdapter
from docker_install.core.models.receipt import Receipt

logger = logging.getLogger(__name__)


class FilesystemAdapter:
    """File and directory operations with receipts."""

    name = "filesystem"

    def __init__(self, shell: ShellCommandAdapter):
        self._shell = shell

    @property
    def _sudo(self) -> bool:
        return self._shell.use_sudo

    def is_available(self) -> bool:
        return True  # filesystem is always available

    # ── Reads ───────────────────────────────────────────────────

    def exists(self, path: str) -> bool:
        return Path(path).exists()

    def is_nonempty(self, path: str) -> bool:
        p = Path(path)
        try:
            return p.is_file() and p.stat().st_size > 0
        except OSError:
            return False

    def read_text(self, path: str) -> str | None:
        """File content, or None when missing/unreadable."""
        try:
            return Path(path).read_text(encoding="utf-8", errors="replace")
        except (FileNotFoundError, IsADirectoryError, PermissionError):
            return None
        except OSError as e:
            logger.debug("Cannot read %s: %s", path, e)
            return None

    def list_files(self, directory: str, pattern: str = "*") -> list[str]:
        d = Path(directory)
        if not d.is_dir():
            return []
        return sorted(str(p) for p in d.glob(pattern) if p.is_file())

    # ── Writes ──────────────────────────────────────────────────

    def write(self, path: str, content: str, mode: int = 0o644) -> Receipt:
        """Create or replace a file with the given content."""
        if self._sudo:
            receipt = self._shell.run(
                ["tee", path], privileged=True, mutating=True, input_text=content,
            )
            if not receipt.ok:
                return receipt
            return self.chmod(path, mode)

        self._shell.record(f"write {path}")
        try:
            target = Path(path)
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
            os.chmod(target, mode)
        except OSError as e:
            return Receipt.failure(command=["write", path], error=f"Filesystem error: {e}")
        return Receipt.success(command=["write", path], output=f"Written {len(content)} bytes")

    def mkdir(self, path: str, mode: int = 0o755) -> Receipt:
        """Create a directory (and parents) with the given mode."""
        if Path(path).is_dir():
            return Receipt.success(command=["mkdir", path], output="exists")

        if self._sudo:
            return self._shell.run(
                ["install", "-m", f"{mode:04o}", "-d", path],
                privileged=True, mutating=True,
            )

        self._shell.record(f"mkdir {path}")
        try:
            Path(path).mkdir(parents=True, exist_ok=True)
            os.chmod(path, mode)
        except OSError as e:
            return Receipt.failure(command=["mkdir", path], error=f"Filesystem error: {e}")
        return Receipt.success(command=["mkdir", path])

    def chmod(self, path: str, mode: int) -> Receipt:
        if self._sudo:
            return self._shell.run(["chmod", f"{mode:04o}", path], privileged=True)
        try:
            os.chmod(path, mode)
        except OSError as e:
            return Receipt.failure(command=["chmod", path], error=f"Filesystem error: {e}")
        return Receipt.success(command=["chmod", f"{mode:04o}", path])

    def rename(self, src: str, dst: str) -> Receipt:
        if self._sudo:
            return self._shell.run(["mv", src, dst], privileged=True, mutating=True)

        self._shell.record(f"mv {src} {dst}")
        try:
            os.replace(src, dst)
        except OSError as e:
            return Receipt.failure(command=["mv", src, dst], error=f"Filesystem error: {e}")
        return Receipt.success(command=["mv", src, dst])

    def clear_directory(self, directory: str) -> Receipt:
        """Delete everything inside a directory, keeping the directory."""
        if self._sudo:
            return self._shell.run(
                ["find", directory, "-mindepth", "1", "-delete"],
                privileged=True, mutating=True,
            )

        self._shell.record(f"clear {directory}")
        d = Path(directory)
        try:
            for child in d.iterdir() if d.is_dir() else []:
                if child.is_dir() and not child.is_symlink():
                    shutil.rmtree(child)
                else:
                    child.unlink()
        except OSError as e:
            return Receipt.failure(command=["clear", directory], error=f"Filesystem error: {e}")
        return Receipt.success(command=["clear", directory])

    def copy(self, src: str, dest: str) -> Receipt:
        """Copy a file next to itself or elsewhere, preserving attributes."""
        if self._sudo:
            return self._shell.run(["cp", "-p", src, dest], privileged=True, mutating=True)

        self._shell.record(f"cp {src} {dest}")
        if not self._copy(src, dest):
            return Receipt.failure(command=["cp", src, dest], error=f"Cannot copy {src}")
        return Receipt.success(command=["cp", src, dest])

    def backup(self, paths: list[str], dest_dir: str) -> list[str]:
        """Copy each existing path into ``dest_dir``, preserving attributes.

        Missing paths are skipped. Failures are logged but do **not**
        abort — the caller decides whether to proceed.

        Returns:
            List of created backup paths (may be empty).
        """
        existing = [p for p in paths if Path(p).exists()]
        if not existing:
            return []

        if not self.mkdir(dest_dir, mode=0o755).ok:
            logger.warning("Cannot create backup directory %s", dest_dir)
            return []

        backed_up: list[str] = []
        for path_str in existing:
            dest = str(Path(dest_dir) / Path(path_str).name)
            if self._sudo:
                ok = self._shell.run(["cp", "-rp", path_str, dest], privileged=True).ok
            else:
                ok = self._copy(path_str, dest)
            if ok:
                backed_up.append(dest)
                logger.debug("Backed up %s → %s", path_str, dest)
            else:
                logger.warning("Backup failed for %s", path_str)

        return backed_up

    def remove(self, path: str) -> None:
        """Best-effort delete of a process-owned file."""
        try:
            Path(path).unlink(missing_ok=True)
        except OSError as e:
            logger.debug("Cannot remove %s: %s", path, e)

    @staticmethod
    def _copy(src: str, dest: str) -> bool:
        try:
            if Path(src).is_dir():
                shutil.copytree(src, dest, symlinks=True, dirs_exist_ok=True)
            else:
                shutil.copy2(src, dest)
        except OSError as e:
            logger.debug("Copy %s failed: %s", src, e)
            return False
        return True
