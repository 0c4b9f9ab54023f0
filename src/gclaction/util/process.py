from __future__ import annotations

import logging
import shlex
import subprocess
from collections.abc import Mapping, Sequence
from pathlib import Path

log = logging.getLogger(__name__)


def format_command(args: Sequence[str]) -> str:
    return shlex.join([str(a) for a in args])


def run_command(
    args: Sequence[str],
    cwd: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> subprocess.CompletedProcess[str]:
    log.debug("exec: %s (cwd=%s)", format_command(args), cwd or ".")
    return subprocess.run(
        [str(a) for a in args],
        cwd=str(cwd) if cwd is not None else None,
        env=dict(env) if env is not None else None,
        check=False,
        capture_output=True,
        text=True,
    )


def print_output(res: subprocess.CompletedProcess[str]) -> None:
    if res.stdout:
        log.info("%s", res.stdout.rstrip("\n"))
    if res.stderr:
        log.info("%s", res.stderr.rstrip("\n"))
