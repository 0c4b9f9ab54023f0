from __future__ import annotations

import os
import re
from pathlib import Path, PurePath

DIFF_HEADER = "diff --git"


def normalize_prefix(prefix: str) -> str:
    value = prefix.replace("\\", "/").strip().strip("/")
    while value.startswith("./"):
        value = value[2:]
    return "" if value == "." else value


def relative_prefix(working_directory: str, workspace: Path) -> str:
    """Working directory as seen from the repository root, in diff path form.

    Empty when no working directory is set, when it is the workspace itself or
    when it lies outside the workspace.
    """
    if not working_directory:
        return ""
    wd = Path(working_directory)
    if not wd.is_absolute():
        wd = workspace / wd
    rel = os.path.relpath(wd.resolve(), workspace.resolve())
    if rel == os.curdir or rel == os.pardir or rel.startswith(os.pardir + os.sep):
        return ""
    return normalize_prefix(PurePath(rel).as_posix())


def alter_diff_patch(patch: str, prefix: str) -> str:
    """Restrict a unified diff to ``prefix`` and make its paths prefix-relative.

    Sections whose ``diff --git`` header does not name a path under the prefix
    are dropped together with their hunks. Inside kept sections only the header
    and the ``---``/``+++`` path lines are rewritten; hunk bodies pass through.
    """
    prefix = normalize_prefix(prefix)
    if not prefix:
        return patch

    quoted = re.escape(prefix)
    header_marker = f" a/{prefix}/"
    header_re = re.compile(rf" ([ab])/{quoted}/")
    path_line_re = re.compile(rf"^(---|\+\+\+) ([ab])/{quoted}/")

    lines = patch.split("\n")
    # The newline ending the final line belongs to the document, not to the
    # last section, so it survives when that section is dropped.
    trailing_newline = patch.endswith("\n")
    if trailing_newline:
        lines.pop()

    out: list[str] = []
    dropping = False
    for line in lines:
        if line.startswith(DIFF_HEADER):
            if header_marker not in line:
                dropping = True
                continue
            dropping = False
            out.append(header_re.sub(r" \1/", line))
            continue
        if dropping:
            continue
        out.append(path_line_re.sub(r"\1 \2/", line, count=1))
    if not out:
        return ""
    return "\n".join(out) + ("\n" if trailing_newline else "")
