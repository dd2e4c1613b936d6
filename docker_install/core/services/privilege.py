"""
Privilege handling — who may run the installer, and group membership after.

    check_privilege     root, or a member of an admin group (sudo path)
    grant_service_group invoking user joins the service group (best-effort)
"""

from __future__ import annotations

import logging

from docker_install.core.context import RunContext
from docker_install.core.errors import PrivilegeError
from docker_install.core.models.identity import UserIdentity

logger = logging.getLogger(__name__)


def check_privilege(ctx: RunContext) -> UserIdentity:
    """Resolve the process identity and make sure it may administer the host.

    When not root, privileged commands are switched to ``sudo``.

    Raises:
        PrivilegeError: Neither root nor in any configured admin group.
    """
    identity = ctx.host.accounts.current_identity()
    ctx.identity = identity

    if identity.is_root:
        logger.debug("Running as root")
        return identity

    admin_groups = ctx.config.admin_groups
    if not identity.in_any_group(admin_groups):
        raise PrivilegeError(
            "This script must be run as root or with sudo privileges "
            f"(user {identity.user} is not in any of: {', '.join(admin_groups)})"
        )

    logger.info("Running as %s; privileged commands will use sudo", identity.user)
    ctx.host.enable_sudo()
    return identity


def grant_service_group(ctx: RunContext) -> bool:
    """Add the invoking user to the service group. Never raises.

    Returns:
        True if the user was added during this run.
    """
    identity = ctx.identity or ctx.host.accounts.current_identity()
    user = identity.invoking_user or identity.user
    group = ctx.config.service_group

    if not user or user == "root":
        logger.debug("No non-root invoking user; skipping %s group", group)
        return False

    accounts = ctx.host.accounts
    if accounts.is_member(user, group):
        logger.debug("%s is already in the %s group", user, group)
        return False

    logger.info("Adding user %s to %s group...", user, group)
    r = accounts.add_to_group(user, group)
    if not r.ok:
        logger.warning("Could not add %s to the %s group: %s", user, group, r.error)
        return False

    logger.info("Please log out and back in for the group changes to take effect")
    return True
