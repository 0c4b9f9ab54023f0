from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from gclaction.errors import LintOutputError
from gclaction.report.severity import map_severity


@dataclass(frozen=True)
class InlineReplacement:
    start_col: int
    length: int
    new_string: str


@dataclass(frozen=True)
class Replacement:
    need_only_delete: bool = False
    new_lines: list[str] | None = None
    inline: InlineReplacement | None = None


@dataclass(frozen=True)
class LintIssue:
    text: str
    from_linter: str
    severity: str
    filename: str
    line: int
    column: int = 0
    line_range: tuple[int, int] | None = None
    source_lines: list[str] = field(default_factory=list)
    replacement: Replacement | None = None


@dataclass(frozen=True)
class LintReport:
    warnings: list[str] = field(default_factory=list)
    error: str = ""


@dataclass(frozen=True)
class LintOutput:
    issues: list[LintIssue]
    report: LintReport


def _replacement(raw: Any) -> Replacement | None:
    if not isinstance(raw, dict):
        return None
    inline_raw = raw.get("Inline")
    inline = None
    if isinstance(inline_raw, dict):
        inline = InlineReplacement(
            start_col=int(inline_raw.get("StartCol", 0)),
            length=int(inline_raw.get("Length", 0)),
            new_string=str(inline_raw.get("NewString", "")),
        )
    new_lines = raw.get("NewLines")
    return Replacement(
        need_only_delete=bool(raw.get("NeedOnlyDelete", False)),
        new_lines=[str(x) for x in new_lines] if isinstance(new_lines, list) else None,
        inline=inline,
    )


def _issue(raw: dict[str, Any]) -> LintIssue:
    pos = raw.get("Pos") if isinstance(raw.get("Pos"), dict) else {}
    line_range = None
    raw_range = raw.get("LineRange")
    if isinstance(raw_range, dict):
        line_range = (int(raw_range.get("From", 0)), int(raw_range.get("To", 0)))
    source_lines = raw.get("SourceLines")
    return LintIssue(
        text=str(raw.get("Text", "")),
        from_linter=str(raw.get("FromLinter", "")),
        severity=map_severity(str(raw.get("Severity") or "")),
        filename=str(pos.get("Filename", "")),
        line=int(pos.get("Line", 0)),
        column=int(pos.get("Column", 0)),
        line_range=line_range,
        source_lines=[str(x) for x in source_lines] if isinstance(source_lines, list) else [],
        replacement=_replacement(raw.get("Replacement")),
    )


def parse_output(text: str) -> LintOutput:
    """Parse the linter's JSON report; issues marked ``ignore`` are dropped."""
    try:
        raw = json.loads(text)
    except ValueError as e:
        raise LintOutputError(f"golangci-lint returned invalid json: {e}") from e
    if not isinstance(raw, dict) or not isinstance(raw.get("Report"), dict):
        raise LintOutputError("golangci-lint returned invalid json")

    raw_issues = raw.get("Issues") or []
    if not isinstance(raw_issues, list):
        raise LintOutputError("golangci-lint returned invalid json: Issues is not a list")
    issues = [
        _issue(item)
        for item in raw_issues
        if isinstance(item, dict) and str(item.get("Severity") or "").lower() != "ignore"
    ]

    report_raw = raw["Report"]
    warnings = []
    for w in report_raw.get("Warnings") or []:
        if isinstance(w, dict) and w.get("Text"):
            tag = w.get("Tag")
            warnings.append(f"[{tag}] {w['Text']}" if tag else str(w["Text"]))
    return LintOutput(issues=issues, report=LintReport(warnings=warnings, error=str(report_raw.get("Error") or "")))


def issue_position(issue: LintIssue) -> str:
    pos = f"{issue.filename}:{issue.line}"
    if issue.line_range is not None:
        pos += f"-{issue.line_range[1]}"
    elif issue.column:
        pos += f":{issue.column}"
    return pos
