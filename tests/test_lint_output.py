from __future__ import annotations

import json

import pytest

from gclaction.errors import LintOutputError
from gclaction.lint.output import issue_position, parse_output
from gclaction.report.severity import has_failing_issues, map_severity, parse_failure_severity


def _issue(severity: str, line: int = 3, **extra: object) -> dict:
    item = {
        "FromLinter": "govet",
        "Text": f"{severity or 'default'} thing",
        "Severity": severity,
        "Pos": {"Filename": "pkg/a.go", "Line": line, "Column": 7},
    }
    item.update(extra)
    return item


def test_parse_output_maps_severities() -> None:
    text = json.dumps(
        {
            "Issues": [_issue("info"), _issue("minor"), _issue(""), _issue("critical"), _issue("ignore")],
            "Report": {"Warnings": [{"Tag": "runner", "Text": "deprecated option"}]},
        }
    )
    output = parse_output(text)
    assert [i.severity for i in output.issues] == ["notice", "warning", "failure", "failure"]
    assert output.report.warnings == ["[runner] deprecated option"]
    assert output.report.error == ""


def test_parse_output_line_range_and_replacement() -> None:
    text = json.dumps(
        {
            "Issues": [
                _issue(
                    "warning",
                    LineRange={"From": 3, "To": 5},
                    SourceLines=["x := 1"],
                    Replacement={"Inline": {"StartCol": 0, "Length": 1, "NewString": "y"}},
                )
            ],
            "Report": {},
        }
    )
    issue = parse_output(text).issues[0]
    assert issue.line_range == (3, 5)
    assert issue.replacement is not None and issue.replacement.inline is not None
    assert issue_position(issue) == "pkg/a.go:3-5"


def test_parse_output_rejects_garbage() -> None:
    with pytest.raises(LintOutputError):
        parse_output("level=error msg=boom")
    with pytest.raises(LintOutputError):
        parse_output(json.dumps({"Issues": []}))


def test_map_severity() -> None:
    assert map_severity("INFO") == "notice"
    assert map_severity("warning") == "warning"
    assert map_severity("weird") == "failure"


def test_failure_severity_threshold() -> None:
    output = parse_output(json.dumps({"Issues": [_issue("warning")], "Report": {}}))
    assert has_failing_issues(output.issues, "")
    assert has_failing_issues(output.issues, "warning")
    assert not has_failing_issues(output.issues, "failure")
    assert parse_failure_severity("bogus") == "notice"
