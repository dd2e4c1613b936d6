"""
Repository configuration — vendor repository definition and trust key.

Idempotent: ``check_repository`` compares on-disk state with the
desired RepositoryConfig and configuration only runs when it fails.
A configuration attempt that still fails the check afterwards is
fatal; rewriting the same files again would not change the result.

    debian-like   keyring + one-line sources entry + index refresh
    fedora        static docker-ce.repo
    rhel/centos   ``dnf config-manager --add-repo``
"""

from __future__ import annotations

import logging

from docker_install.core.context import RunContext
from docker_install.core.data.recipes import (
    FEDORA_REPO_TEMPLATE,
    apt_source_line,
    repository_for,
)
from docker_install.core.errors import RepositoryConfigurationError
from docker_install.core.models.distribution import Family
from docker_install.core.models.repository import RepositoryConfig
from docker_install.core.reliability.retry import retry_until_ok
from docker_install.core.services.source_repair import backup_apt_sources

logger = logging.getLogger(__name__)


# ── Verification ────────────────────────────────────────────────


def check_repository(ctx: RunContext, repo: RepositoryConfig) -> bool:
    """Whether the vendor repository is present, correct and enabled."""
    files = ctx.host.files

    if repo.family == Family.DEBIAN:
        if not (files.exists(repo.key_location) and files.exists(repo.path)):
            logger.info("Docker repository needs to be configured")
            return False
        logger.info("Docker repository files exist, checking configuration...")
        content = files.read_text(repo.path) or ""
        if repo.marker not in content:
            logger.info("Docker repository configuration appears incorrect")
            return False
        if not files.is_nonempty(repo.key_location):
            logger.info("Docker GPG key appears to be empty or corrupted")
            return False
        logger.info("Docker repository is properly configured")
        return True

    if not files.exists(repo.path):
        logger.info("Docker repository needs to be configured")
        return False
    logger.info("Docker repository file exists, checking configuration...")
    content = files.read_text(repo.path) or ""
    if repo.marker not in content:
        logger.info("Docker repository configuration appears incorrect")
        return False
    if not any(line.replace(" ", "") == "enabled=1" for line in content.splitlines()):
        logger.info("Docker repository is disabled")
        return False
    logger.info("Docker repository is properly configured")
    return True


# ── Configuration ───────────────────────────────────────────────


def _configure_debian(ctx: RunContext, repo: RepositoryConfig) -> None:
    files = ctx.host.files
    paths = ctx.config.paths
    identity = ctx.distribution
    policy = ctx.retry_policy

    codename = identity.codename
    if not codename:
        raise RepositoryConfigurationError(
            f"Cannot determine the {identity.id} release codename for the repository entry"
        )

    backup_apt_sources(ctx)

    r = files.mkdir(paths.apt_keyrings_dir, mode=0o755)
    if not r.ok:
        raise RepositoryConfigurationError(f"Cannot create {paths.apt_keyrings_dir}: {r.error}")

    scratch = ctx.make_temp(".asc")
    r = retry_until_ok(
        lambda remaining: ctx.host.keys.import_key(
            f"{repo.url}/gpg", repo.key_location, scratch=scratch, timeout=remaining,
        ),
        policy,
        label="Docker GPG key download",
    )
    if not r.ok:
        raise RepositoryConfigurationError(f"Failed to install Docker GPG key: {r.error}")
    files.chmod(repo.key_location, 0o644)

    arch = ctx.packages.architecture()
    if not arch:
        raise RepositoryConfigurationError("Cannot determine package architecture")

    r = files.write(repo.path, apt_source_line(repo, arch, codename))
    if not r.ok:
        raise RepositoryConfigurationError(f"Cannot write {repo.path}: {r.error}")

    r = retry_until_ok(
        lambda remaining: ctx.packages.refresh(timeout=remaining),
        policy,
        label="apt-get update",
    )
    if not r.ok:
        raise RepositoryConfigurationError(f"Package index refresh failed: {r.error}")


def _backup_repo_file(ctx: RunContext, repo: RepositoryConfig) -> None:
    if not ctx.host.files.exists(repo.path):
        return
    dest = f"{repo.path}.bak.{ctx.stamp}"
    r = ctx.host.files.copy(repo.path, dest)
    if r.ok:
        logger.info("Backed up %s to %s", repo.path, dest)
        ctx.backups.append(dest)
    else:
        logger.warning("Could not back up %s: %s", repo.path, r.error)


def _configure_fedora(ctx: RunContext, repo: RepositoryConfig) -> None:
    _backup_repo_file(ctx, repo)
    r = ctx.host.files.write(repo.path, FEDORA_REPO_TEMPLATE.format(url=repo.url))
    if not r.ok:
        raise RepositoryConfigurationError(f"Cannot write {repo.path}: {r.error}")


def _configure_rhel(ctx: RunContext, repo: RepositoryConfig) -> None:
    _backup_repo_file(ctx, repo)
    r = retry_until_ok(
        lambda remaining: ctx.packages.add_repository(
            f"{repo.url}/docker-ce.repo", timeout=remaining,
        ),
        ctx.retry_policy,
        label="dnf config-manager --add-repo",
    )
    if not r.ok:
        raise RepositoryConfigurationError(f"Failed to add Docker repository: {r.error}")


def configure_repository(ctx: RunContext, repo: RepositoryConfig) -> None:
    """Write the repository definition and verify it took effect."""
    identity = ctx.distribution
    logger.info("Configuring Docker repository for %s...", identity.id)

    if repo.family == Family.DEBIAN:
        _configure_debian(ctx, repo)
    elif identity.id == "fedora":
        _configure_fedora(ctx, repo)
    else:
        _configure_rhel(ctx, repo)

    if not check_repository(ctx, repo):
        raise RepositoryConfigurationError("Failed to configure Docker repository")


def ensure_repository(ctx: RunContext) -> bool:
    """Configure the vendor repository if needed.

    Returns:
        True if configuration work ran, False if it was already in place.
    """
    repo = repository_for(ctx.distribution, ctx.config)
    if check_repository(ctx, repo):
        return False
    configure_repository(ctx, repo)
    return True
