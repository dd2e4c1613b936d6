"""
docker-install — CLI entrypoint.

Usage:
    docker-install
    docker-install --config ./docker-install.yml --timeout 900
    python -m docker_install --json
"""

from __future__ import annotations

import json
import logging
import os
import sys
from pathlib import Path

import click

from docker_install import __version__
from docker_install.core.observability.logging_config import setup_logging

logger = logging.getLogger(__name__)


def _log_level(verbose: bool, quiet: bool, debug: bool, as_json: bool) -> str:
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "WARNING"
    if as_json:
        # stdout carries the JSON document
        return "CRITICAL"
    return os.environ.get("DOCKER_INSTALL_LOG_LEVEL", "INFO")


@click.command()
@click.version_option(version=__version__, prog_name="docker-install")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False, dir_okay=False),
    default=None,
    help="Path to docker-install.yml (default: auto-detect).",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Only show warnings and errors.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False),
    default=None,
    help="Also write a detailed log to this file.",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=1),
    default=None,
    help="Total seconds each retried operation may take (default: 600).",
)
@click.option(
    "--retry-delay",
    type=click.FloatRange(min=0),
    default=None,
    help="Seconds to wait between retries (default: 10).",
)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Print the outcome as JSON.")
def cli(
    config_path: str | None,
    verbose: bool,
    quiet: bool,
    debug: bool,
    log_file: str | None,
    timeout: float | None,
    retry_delay: float | None,
    as_json: bool,
) -> None:
    """Install Docker Engine and Docker Compose from the official repository.

    Supports Ubuntu, Debian, Fedora and RHEL/CentOS. Safe to re-run:
    steps whose result is already in place are skipped.
    """
    setup_logging(
        level=_log_level(verbose, quiet, debug, as_json),
        log_file=log_file or os.environ.get("DOCKER_INSTALL_LOG_FILE"),
        log_file_level=os.environ.get("DOCKER_INSTALL_LOG_FILE_LEVEL"),
        quiet_third_party=not debug,
    )

    from docker_install.core.use_cases.install import install_docker

    try:
        result = install_docker(
            config_path=Path(config_path) if config_path else None,
            timeout=timeout,
            retry_delay=retry_delay,
        )
    except KeyboardInterrupt:
        logger.error("Installation interrupted by user")
        if as_json:
            click.echo(json.dumps({"success": False, "error": "interrupted"}, indent=2))
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))

    sys.exit(0 if result.ok else 1)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
