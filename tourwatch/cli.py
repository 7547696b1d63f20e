"""
Tourwatch CLI - entry point used by action.yml.

Inputs come from the INPUT_* variables the Actions runner sets; the
options below override them for local runs:

    tourwatch --repo-token $GITHUB_TOKEN --tour-path .tours --silent
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

import click
from dotenv import load_dotenv

from . import __version__
from .action import run_action
from .config import ActionInputs, PullRequestContext, TourwatchConfig, input_key
from .errors import TourwatchError
from .github import GitHubClient

logger = logging.getLogger(__name__)


def _configure_logging(*, debug: bool, verbose: bool) -> None:
    """Configure global logging level based on CLI flags."""
    level = logging.WARNING
    if verbose:
        level = logging.INFO
    if debug:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", force=True)


def _read_inputs(
    repo_token: str | None,
    silent: bool | None,
    tour_path: str | None,
) -> ActionInputs:
    """Action inputs from the environment, with CLI options taking precedence."""
    environ = dict(os.environ)
    overrides = {
        "repo-token": repo_token,
        "tour-path": tour_path,
        "silent": None if silent is None else str(silent).lower(),
    }
    for name, value in overrides.items():
        if value is not None:
            environ[input_key(name)] = value
    return ActionInputs.from_env(environ)


@click.command()
@click.version_option(version=__version__)
@click.option("--repo-token", default=None, help="GitHub token (default: INPUT_REPO-TOKEN)")
@click.option("--tour-path", default=None, help="Directory to scan for tours (default: .tours)")
@click.option("--silent/--no-silent", default=None, help="Compute outputs without commenting")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to tourwatch.yml",
)
@click.option("--verbose", is_flag=True, help="Enable INFO logging")
@click.option("--debug", is_flag=True, help="Enable DEBUG logging")
def main(
    repo_token: str | None,
    tour_path: str | None,
    silent: bool | None,
    config_path: Path | None,
    verbose: bool,
    debug: bool,
):
    """Comment on pull requests that change files covered by tours."""
    load_dotenv()
    _configure_logging(debug=debug, verbose=verbose)

    try:
        inputs = _read_inputs(repo_token, silent, tour_path)
        config = TourwatchConfig.load(config_path).with_inputs(inputs)
        context = PullRequestContext.from_env()
        client = GitHubClient(inputs.repo_token, api_url=config.api_url, timeout=config.timeout)

        run_action(config, context, client, output_file=os.environ.get("GITHUB_OUTPUT"))
    except TourwatchError as e:
        logger.error("%s", e)
        click.echo(f"::error::{e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
