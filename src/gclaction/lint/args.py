from __future__ import annotations

import shlex

from gclaction.diff.patch import PatchScope
from gclaction.errors import IncompatibleArgsError, InvalidInputError
from gclaction.version.models import Era


def split_user_args(user_args: str) -> list[str]:
    try:
        return shlex.split(user_args)
    except ValueError as e:
        raise InvalidInputError(f"failed to parse args {user_args!r}: {e}") from e


def user_arg_names(args: list[str]) -> set[str]:
    """Flag names the user passed, without dashes or values."""
    names: set[str] = set()
    for arg in args:
        if not arg.startswith("-"):
            continue
        names.add(arg.split("=", 1)[0].lstrip("-"))
    return names


def build_lint_args(
    era: Era,
    user_args: list[str],
    scope: PatchScope,
    working_directory: str = "",
) -> list[str]:
    names = user_arg_names(user_args)

    if names & era.output_flag_names:
        raise IncompatibleArgsError(
            "please, don't change the output format of golangci-lint: it can be broken in a future"
        )
    added = list(era.output_flags)

    if scope.restricted:
        if names & era.new_issue_flag_names:
            raise IncompatibleArgsError(
                "please, don't specify manually --new* args when requesting only new issues"
            )
        if scope.patch_path:
            added.append(f"--new-from-patch={scope.patch_path}")
            # Override values coming from the project's config file.
            added.append("--new=false")
            added.append("--new-from-rev=")
        else:
            added.append(era.merge_group_flag.format(rev=scope.rev))

    if working_directory and era.path_flag_name not in names:
        added.append(era.path_flag.format(working_directory=working_directory))

    return ["run", *added, *user_args]
