"""
Apt source repair — recover from third-party lists with no Release file.

A stale PPA or mirror in sources.list.d makes ``apt-get update`` fail
for the whole host. When that specific failure shows up, the offending
``.list`` files are renamed to ``.list.disabled``, the base
sources.list is rewritten to the distribution's official mirrors, the
index cache is cleared, and the refresh is retried.

Everything touched is copied to ``/etc/apt/sources.backup-<stamp>``
first, once per run.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from docker_install.core.context import RunContext
from docker_install.core.data.recipes import DEBIAN_BASE_SOURCES, UBUNTU_BASE_SOURCES
from docker_install.core.errors import PackageOperationError
from docker_install.core.models.receipt import Receipt
from docker_install.core.reliability.retry import retry_until_ok

logger = logging.getLogger(__name__)

MISSING_RELEASE_MARKER = "does not have a Release file"

_URL = re.compile(r"https?://[^\s'\"]+")


def backup_apt_sources(ctx: RunContext) -> list[str]:
    """Copy sources.list and sources.list.d into a timestamped directory."""
    if ctx.sources_backed_up:
        return []
    paths = ctx.config.paths
    dest_dir = str(Path(paths.apt_backup_root) / f"sources.backup-{ctx.stamp}")
    sources = [paths.apt_sources_list, *ctx.host.files.list_files(paths.apt_sources_dir)]
    created = ctx.host.files.backup(sources, dest_dir)
    ctx.sources_backed_up = True
    if created:
        logger.info("Backed up apt sources to %s", dest_dir)
        ctx.backups.extend(created)
    return created


def _refresh_text(receipt: Receipt) -> str:
    return "\n".join(
        part for part in (receipt.output, receipt.error, receipt.metadata.get("stderr", ""))
        if part
    )


def broken_source_urls(text: str) -> list[str]:
    """URLs apt reported as lacking a Release file, in order, de-duplicated."""
    urls: list[str] = []
    for line in text.splitlines():
        if MISSING_RELEASE_MARKER not in line:
            continue
        for url in _URL.findall(line):
            url = url.rstrip(".,")
            if url not in urls:
                urls.append(url)
    return urls


def _disable_lists(ctx: RunContext, urls: list[str]) -> list[str]:
    files = ctx.host.files
    disabled = []
    for list_file in files.list_files(ctx.config.paths.apt_sources_dir, "*.list"):
        content = files.read_text(list_file) or ""
        if not any(url in content for url in urls):
            continue
        logger.info("Disabling problematic repository: %s", list_file)
        if files.rename(list_file, f"{list_file}.disabled").ok:
            disabled.append(list_file)
        else:
            logger.warning("Could not disable %s", list_file)
    return disabled


def _write_base_sources(ctx: RunContext) -> None:
    identity = ctx.distribution
    if not identity.codename:
        logger.warning("No release codename known; leaving %s unchanged",
                       ctx.config.paths.apt_sources_list)
        return
    if identity.id == "debian":
        logger.info("Configuring Debian repositories")
        template = DEBIAN_BASE_SOURCES
    else:
        logger.info("Configuring Ubuntu repositories")
        template = UBUNTU_BASE_SOURCES
    r = ctx.host.files.write(
        ctx.config.paths.apt_sources_list, template.format(codename=identity.codename),
    )
    if not r.ok:
        raise PackageOperationError(f"Cannot rewrite apt sources: {r.error}")


def repair_apt_sources(ctx: RunContext) -> bool:
    """Refresh the apt index and repair sources if it reports missing Release files.

    Returns:
        True if a repair ran, False if the index was healthy or the
        failure was of another kind (left to the retrying refreshes
        later in the install path).

    Raises:
        PackageOperationError: The refresh still fails after repair.
    """
    logger.info("Checking and fixing repository issues...")
    backup_apt_sources(ctx)

    packages = ctx.packages
    first = packages.refresh(timeout=ctx.config.retry.timeout)
    text = _refresh_text(first)
    if first.ok and MISSING_RELEASE_MARKER not in text:
        return False
    if MISSING_RELEASE_MARKER not in text:
        logger.debug("apt-get update failed for another reason: %s", first.error)
        return False

    logger.info("Found repositories with missing Release files")
    _disable_lists(ctx, broken_source_urls(text))
    _write_base_sources(ctx)

    r = ctx.host.files.clear_directory(ctx.config.paths.apt_lists_dir)
    if not r.ok:
        logger.warning("Could not clear %s: %s", ctx.config.paths.apt_lists_dir, r.error)
    packages.clean()

    r = retry_until_ok(
        lambda remaining: packages.refresh(timeout=remaining),
        ctx.retry_policy,
        label="apt-get update",
    )
    if not r.ok:
        raise PackageOperationError(f"Package index refresh failed after repair: {r.error}")
    return True
