from __future__ import annotations

from gclaction.lint.output import LintIssue, issue_position
from gclaction.util.logging import escape_command_data, escape_command_property

from .severity import workflow_command_level

_HEADERS = {"failure": "Lint Error:", "warning": "Lint Warning:", "notice": "Lint Notice:"}


def issue_summary(issue: LintIssue) -> str:
    header = _HEADERS.get(issue.severity, "Lint Error:")
    return f"{header} {issue_position(issue)} - {issue.text} ({issue.from_linter})"


def to_workflow_command(issue: LintIssue) -> str:
    level = workflow_command_level(issue.severity)
    props = [f"file={escape_command_property(issue.filename)}", f"line={issue.line}"]
    if issue.line_range is not None:
        props.append(f"endLine={issue.line_range[1]}")
    elif issue.column:
        props.append(f"col={issue.column}")
    props.append(f"title={escape_command_property(issue.from_linter)}")
    return f"::{level} {','.join(props)}::{escape_command_data(issue.text)}"


def to_workflow_commands(issues: list[LintIssue]) -> str:
    return "\n".join(to_workflow_command(issue) for issue in issues)
