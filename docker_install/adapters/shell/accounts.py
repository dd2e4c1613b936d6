"""
Account adapter — process identity and group membership.

Reads use the ``pwd``/``grp`` databases directly; the only mutation
is ``usermod -aG``.
"""

from __future__ import annotations

import grp
import logging
import os
import pwd

from docker_install.adapters.base import AccountManager
from docker_install.adapters.shell.command import ShellCommandAdapter
from docker_install.core.models.identity import UserIdentity
from docker_install.core.models.receipt import Receipt

logger = logging.getLogger(__name__)


def _group_name(gid: int) -> str | None:
    try:
        return grp.getgrgid(gid).gr_name
    except KeyError:
        return None


def _user_name(uid: int) -> str:
    try:
        return pwd.getpwuid(uid).pw_name
    except KeyError:
        return str(uid)


class SystemAccountManager(AccountManager):
    """Local passwd/group database."""

    def __init__(self, shell: ShellCommandAdapter):
        self._shell = shell

    @property
    def name(self) -> str:
        return "accounts"

    def is_available(self) -> bool:
        return self._shell.which("usermod") is not None

    def current_identity(self) -> UserIdentity:
        euid = os.geteuid()
        user = _user_name(euid)
        gids = set(os.getgroups()) | {os.getegid()}
        groups = sorted(name for name in map(_group_name, gids) if name)
        invoking = os.environ.get("SUDO_USER") or os.environ.get("USER") or user
        return UserIdentity(euid=euid, user=user, invoking_user=invoking, groups=groups)

    def is_member(self, user: str, group: str) -> bool:
        try:
            entry = grp.getgrnam(group)
        except KeyError:
            return False
        if user in entry.gr_mem:
            return True
        try:
            return pwd.getpwnam(user).pw_gid == entry.gr_gid
        except KeyError:
            return False

    def add_to_group(self, user: str, group: str) -> Receipt:
        return self._shell.run(
            ["usermod", "-aG", group, user], timeout=30, privileged=True, mutating=True,
        )
