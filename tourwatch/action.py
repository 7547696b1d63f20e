"""
Single-pass Tourwatch run.

    FindExistingComment -> FetchChangedFiles -> LoadTours -> ComputeCoverage
    -> AnalyzeImpact -> PostOrSkipComment -> EmitOutputs

Configuration is resolved by the caller. Any exception aborts the run
before outputs are written.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import click

from .config import PullRequestContext, TourwatchConfig
from .github import GitHubClient
from .impact import ImpactResult, analyze_impact
from .report import find_existing_comment, plan_comment, publish_comment
from .tours import covered_files, load_tours

logger = logging.getLogger(__name__)


def run_action(
    config: TourwatchConfig,
    context: PullRequestContext,
    client: GitHubClient,
    output_file: str | Path | None = None,
) -> ImpactResult:
    """Analyze the pull request, comment on it and emit the outputs."""
    logger.info("Checking tours for %s#%d", context.repo, context.number)

    comments = client.list_issue_comments(context.repo, context.number)
    existing_id = find_existing_comment(comments)
    if existing_id is not None:
        logger.info("Found existing comment %s", existing_id)

    changed_files = client.get_pull_files(context.repo, context.number)

    tours = load_tours(config.tour_path, config.tour_suffix)
    covered = covered_files(tours)
    logger.info("%d tour(s) cover %d file(s)", len(tours), len(covered))

    result = analyze_impact(changed_files, covered, tours)
    logger.info(
        "Impacted: %d file(s), %d tour(s), %d missing update(s)",
        len(result.impacted_files),
        len(result.impacted_tours),
        len(result.missing_tour_updates),
    )

    if config.silent:
        logger.info("Silent mode, not commenting")
    elif not result.has_impact:
        logger.info("No tours impacted, not commenting")
    else:
        publish_comment(
            client, context.repo, context.number, plan_comment(result, existing_id)
        )

    emit_outputs(result.as_outputs(), output_file)
    return result


def emit_outputs(outputs: dict[str, list[str]], output_file: str | Path | None = None) -> None:
    """
    Write action outputs as ``name=<json>`` lines.

    Appends to the GITHUB_OUTPUT file when one is given, otherwise prints
    the lines to stdout.
    """
    lines = [f"{name}={json.dumps(values)}" for name, values in outputs.items()]

    if output_file:
        with open(output_file, "a", encoding="utf-8") as f:
            for line in lines:
                f.write(line + "\n")
        return

    for line in lines:
        click.echo(line)
