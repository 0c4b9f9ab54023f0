from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import requests

from gclaction.errors import GclActionError
from gclaction.github.client import GitHubClient
from gclaction.github.context import GitHubContext
from gclaction.lint.output import LintIssue

from .severity import count_by_level

log = logging.getLogger(__name__)

CHUNK_SIZE = 50
DEFAULT_TITLE = "GolangCI-Lint"
ANNOTATED_EVENTS = {"push", "pull_request", "pull_request_target"}


def _annotation_path(filename: str, workspace: Path | None) -> str:
    path = Path(filename)
    if workspace is not None and path.is_absolute():
        try:
            return path.relative_to(workspace).as_posix()
        except ValueError:
            return os.path.relpath(path, workspace).replace(os.sep, "/")
    return path.as_posix()


def _suggestion(issue: LintIssue) -> str | None:
    replacement = issue.replacement
    if replacement is None:
        return None
    text = ""
    if replacement.inline is not None and issue.source_lines:
        inline = replacement.inline
        source = issue.source_lines[0]
        text = source[: inline.start_col] + inline.new_string + source[inline.start_col + inline.length :]
    elif replacement.new_lines:
        text = "\n".join(replacement.new_lines)
    return f"```suggestion\n{text}\n```"


def to_check_run_annotation(issue: LintIssue, workspace: Path | None = None) -> dict[str, Any]:
    annotation: dict[str, Any] = {
        "path": _annotation_path(issue.filename, workspace),
        "start_line": issue.line,
        "end_line": issue.line,
        "title": issue.from_linter,
        "message": issue.text,
        "annotation_level": issue.severity,
    }
    if issue.line_range is not None:
        annotation["end_line"] = issue.line_range[1]
    elif issue.column:
        annotation["start_column"] = issue.column
        annotation["end_column"] = issue.column
    suggestion = _suggestion(issue)
    if suggestion is not None:
        annotation["raw_details"] = suggestion
    return annotation


def to_check_run_annotations(issues: list[LintIssue], workspace: Path | None = None) -> list[dict[str, Any]]:
    return [to_check_run_annotation(issue, workspace) for issue in issues]


def chunk_annotations(annotations: list[dict[str, Any]], size: int = CHUNK_SIZE) -> list[list[dict[str, Any]]]:
    size = max(1, size)
    return [annotations[i : i + size] for i in range(0, len(annotations), size)]


def check_run_summary(issues: list[LintIssue]) -> str:
    counts = count_by_level(issues)
    return (
        f"There are {counts['failure']} failures, {counts['warning']} warnings, "
        f"and {counts['notice']} notices."
    )


def publish_annotations(
    client: GitHubClient,
    context: GitHubContext,
    issues: list[LintIssue],
    chunk_size: int = CHUNK_SIZE,
) -> int:
    """Attach issues to the running check run; returns the number of batches sent.

    Failures are logged and never raised.
    """
    if not issues:
        return 0
    if context.event_name not in ANNOTATED_EVENTS:
        log.info("Not annotating issues for event %s", context.event_name)
        return 0

    ref = context.head_sha
    try:
        check_run = client.find_check_run(context.owner, context.repo, ref)
    except (GclActionError, requests.RequestException) as e:
        log.warning("Error getting Check Run Data: %s", e)
        return 0

    output = check_run.get("output") if isinstance(check_run.get("output"), dict) else {}
    title = str(output.get("title") or DEFAULT_TITLE)
    summary = check_run_summary(issues)
    sent = 0
    for batch in chunk_annotations(to_check_run_annotations(issues, context.workspace), chunk_size):
        try:
            client.update_check_run(
                context.owner,
                context.repo,
                int(check_run["id"]),
                {"title": title, "summary": summary, "annotations": batch},
            )
            sent += 1
        except (GclActionError, requests.RequestException) as e:
            log.warning("Error patching Check Run Data (annotations): %s", e)
    return sent
