from __future__ import annotations

import logging
import subprocess
import sys
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path

from gclaction.errors import LintOutputError
from gclaction.report.annotations import issue_summary, to_workflow_commands
from gclaction.report.severity import has_failing_issues
from gclaction.util.process import format_command, print_output, run_command

from .output import LintIssue, LintOutput, parse_output

log = logging.getLogger(__name__)

ISSUES_FOUND = "issues found"
NO_BLOCKING_ISSUES = "golangci-lint found no blocking issues"


@dataclass(frozen=True)
class LintOutcome:
    success: bool
    message: str
    exit_code: int = 0
    issues: list[LintIssue] = field(default_factory=list)


def evaluate_exit(exit_code: int, output: LintOutput | None, failure_severity: str) -> LintOutcome:
    """Translate the linter's exit status into the job outcome.

    1 means issues were reported; anything above 1 is a tool failure.
    """
    issues = output.issues if output is not None else []
    if exit_code == 0:
        return LintOutcome(True, NO_BLOCKING_ISSUES, exit_code, issues)
    if exit_code == 1:
        if output is None:
            return LintOutcome(
                False,
                "unexpected state, golangci-lint exited with 1, but provided no lint output",
                exit_code,
            )
        if has_failing_issues(output.issues, failure_severity):
            return LintOutcome(False, ISSUES_FOUND, exit_code, issues)
        return LintOutcome(True, NO_BLOCKING_ISSUES, exit_code, issues)
    return LintOutcome(False, f"golangci-lint exit with code {exit_code}", exit_code, issues)


def log_issues(issues: list[LintIssue]) -> None:
    for issue in issues:
        log.info("%s", issue_summary(issue))


def process_result(
    res: subprocess.CompletedProcess[str],
    failure_severity: str,
    publish: Callable[[list[LintIssue]], object] | None = None,
) -> LintOutcome:
    output: LintOutput | None = None
    if res.stdout and res.stdout.strip():
        try:
            output = parse_output(res.stdout)
        except LintOutputError as e:
            log.info("%s", res.stdout.rstrip("\n"))
            return LintOutcome(
                False, f"there was an error processing golangci-lint output: {e}", res.returncode
            )
        if output.report.error:
            log.error("golangci-lint reported an error: %s", output.report.error)
        for warning in output.report.warnings:
            log.warning("%s", warning)
        if output.issues:
            log_issues(output.issues)
            if publish is not None:
                publish(output.issues)

    if res.stderr:
        log.info("%s", res.stderr.rstrip("\n"))
    return evaluate_exit(res.returncode, output, failure_severity)


def print_workflow_annotations(issues: list[LintIssue]) -> None:
    sys.stdout.write(to_workflow_commands(issues) + "\n")
    sys.stdout.flush()


def run_lint(
    lint_path: Path,
    args: list[str],
    cwd: Path | None,
    env: Mapping[str, str],
    failure_severity: str = "",
    publish: Callable[[list[LintIssue]], object] | None = None,
    debug_cache: bool = False,
) -> LintOutcome:
    if debug_cache:
        print_output(run_command([str(lint_path), "cache", "status"], cwd=cwd, env=env))

    cmd = [str(lint_path), *args]
    log.info("Running [%s] in [%s] ...", format_command(cmd), cwd or "")
    started = time.monotonic()
    res = run_command(cmd, cwd=cwd, env=env)
    outcome = process_result(res, failure_severity, publish)
    log.info("Ran golangci-lint in %dms", int((time.monotonic() - started) * 1000))
    return outcome
