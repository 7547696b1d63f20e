"""
Pull request comment rendering for Tourwatch.

The comment is recognized on later runs by its fixed header prefix, so a
pull request carries at most one Tourwatch comment that is updated in
place as new commits arrive.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from .config import COMMENT_PREFIX
from .github import GitHubClient, IssueComment
from .impact import ImpactResult

logger = logging.getLogger(__name__)

WARNING_MARKER = ":warning:"
MISSING_MARKER = "**(missing from PR)**"
CLOSING_NOTE = (
    "Please review the tours listed above and update any steps that no longer "
    "match the code changed in this pull request."
)


@dataclass(frozen=True)
class CommentAction:
    """What to do with the pull request comment."""
    body: str
    comment_id: int | None = None

    @property
    def kind(self) -> str:
        return "update" if self.comment_id is not None else "create"


def render_comment(result: ImpactResult) -> str:
    """Render the impact analysis as a GitHub markdown comment."""
    missing = set(result.missing_tour_updates)

    header = COMMENT_PREFIX
    if missing:
        header = f"{header} {WARNING_MARKER}"

    lines = [
        header,
        "",
        "This pull request changes files that are referenced by tours.",
        "",
        "**Impacted files**",
    ]
    lines.extend(f"- `{path}`" for path in result.impacted_files)

    lines.append("")
    lines.append("**Impacted tours**")
    for tour in result.impacted_tours:
        line = f"- `{tour}`"
        if tour in missing:
            line = f"{line} {MISSING_MARKER}"
        lines.append(line)

    lines.append("")
    lines.append(CLOSING_NOTE)
    return "\n".join(lines)


def find_existing_comment(comments: Iterable[IssueComment]) -> int | None:
    """
    Find the most recent Tourwatch comment.

    Comments come from the API oldest first, so they are scanned in
    reverse and the first body starting with the prefix wins.
    """
    for comment in reversed(list(comments)):
        if comment.body.startswith(COMMENT_PREFIX):
            return comment.id
    return None


def plan_comment(result: ImpactResult, existing_comment_id: int | None = None) -> CommentAction:
    """Render the comment and target the existing one when there is one."""
    return CommentAction(body=render_comment(result), comment_id=existing_comment_id)


def publish_comment(
    client: GitHubClient,
    repo: str,
    number: int,
    action: CommentAction,
) -> IssueComment:
    """Apply a CommentAction with exactly one API call."""
    if action.kind == "update":
        comment = client.update_comment(repo, action.comment_id, action.body)
    else:
        comment = client.create_comment(repo, number, action.body)

    logger.info("Comment %sd on %s#%d: %s", action.kind, repo, number, comment.html_url or comment.id)
    return comment
