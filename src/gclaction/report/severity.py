from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from gclaction.lint.output import LintIssue

log = logging.getLogger(__name__)

LEVELS = ["notice", "warning", "failure"]
DEFAULT_FAILURE_SEVERITY = "notice"

_SEVERITY_MAP = {
    "info": "notice",
    "notice": "notice",
    "minor": "warning",
    "warning": "warning",
    "error": "failure",
    "major": "failure",
    "critical": "failure",
    "blocker": "failure",
    "failure": "failure",
}


def map_severity(severity: str) -> str:
    """Map the linter's severity vocabulary onto annotation levels.

    Empty or unknown severities count as failures.
    """
    return _SEVERITY_MAP.get(severity.strip().lower(), "failure")


def severity_rank(level: str) -> int:
    try:
        return LEVELS.index(level)
    except ValueError:
        return len(LEVELS) - 1


def parse_failure_severity(value: str) -> str:
    level = value.strip().lower()
    if not level:
        return DEFAULT_FAILURE_SEVERITY
    if level not in LEVELS:
        log.warning(
            'failure-severity must be one of (%s). "%s" not supported, using default (%s)',
            " | ".join(LEVELS),
            value,
            DEFAULT_FAILURE_SEVERITY,
        )
        return DEFAULT_FAILURE_SEVERITY
    return level


def has_failing_issues(issues: Iterable[LintIssue], failure_severity: str) -> bool:
    threshold = severity_rank(parse_failure_severity(failure_severity))
    return any(severity_rank(issue.severity) >= threshold for issue in issues)


def workflow_command_level(level: str) -> str:
    if level == "failure":
        return "error"
    if level == "warning":
        return "warning"
    return "notice"


def count_by_level(issues: Iterable[LintIssue]) -> dict[str, int]:
    counts = {level: 0 for level in LEVELS}
    for issue in issues:
        counts[issue.severity] = counts.get(issue.severity, 0) + 1
    return counts
