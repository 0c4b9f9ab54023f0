from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import requests

from gclaction.errors import GclActionError
from gclaction.github.client import GitHubClient
from gclaction.github.context import GitHubContext

from .rewrite import alter_diff_patch

log = logging.getLogger(__name__)

PULL_REQUEST_EVENTS = {"pull_request", "pull_request_target"}


@dataclass(frozen=True)
class PatchScope:
    """What the linter should restrict itself to; empty means no restriction."""

    patch_path: str = ""
    rev: str = ""

    @property
    def restricted(self) -> bool:
        return bool(self.patch_path or self.rev)


def _write_patch(patch: str, dest_dir: Path, name: str) -> str:
    try:
        dest_dir.mkdir(parents=True, exist_ok=True)
        path = dest_dir / name
        log.info("Writing patch to %s", path)
        path.write_text(patch, encoding="utf-8")
        return str(path)
    except OSError as e:
        log.warning("failed to save patch: %s", e)
        return ""


def _pull_request_scope(
    context: GitHubContext, client: GitHubClient, prefix: str, dest_dir: Path
) -> PatchScope:
    pr = context.payload.get("pull_request")
    if not isinstance(pr, dict) or not pr.get("number"):
        log.warning("No pull request in context")
        return PatchScope()
    try:
        patch = client.get_pull_request_diff(context.owner, context.repo, int(pr["number"]))
    except (GclActionError, requests.RequestException) as e:
        log.warning("failed to fetch pull request patch: %s", e)
        return PatchScope()
    return PatchScope(patch_path=_write_patch(alter_diff_patch(patch, prefix), dest_dir, "pull.patch"))


def _push_scope(context: GitHubContext, client: GitHubClient, prefix: str, dest_dir: Path) -> PatchScope:
    before = str(context.payload.get("before") or "")
    after = str(context.payload.get("after") or "")
    if not before or not after or set(before) == {"0"}:
        log.info("Not fetching push patch: no base commit to compare with")
        return PatchScope()
    try:
        patch = client.compare_diff(context.owner, context.repo, before, after)
    except (GclActionError, requests.RequestException) as e:
        log.warning("failed to fetch push patch: %s", e)
        return PatchScope()
    return PatchScope(patch_path=_write_patch(alter_diff_patch(patch, prefix), dest_dir, "push.patch"))


def _merge_group_scope(context: GitHubContext) -> PatchScope:
    group = context.payload.get("merge_group")
    base_sha = group.get("base_sha") if isinstance(group, dict) else None
    if not base_sha:
        log.warning("No merge group base commit in context")
        return PatchScope()
    return PatchScope(rev=str(base_sha))


def fetch_patch(
    only_new_issues: bool,
    context: GitHubContext,
    client: GitHubClient,
    prefix: str,
    dest_dir: Path,
) -> PatchScope:
    """Work out the only-new-issues scope for the current event.

    Never raises for remote or filesystem problems: the run then proceeds
    without a restriction scope.
    """
    if not only_new_issues:
        return PatchScope()

    event = context.event_name
    if event in PULL_REQUEST_EVENTS:
        return _pull_request_scope(context, client, prefix, dest_dir)
    if event == "push":
        return _push_scope(context, client, prefix, dest_dir)
    if event == "merge_group":
        return _merge_group_scope(context)
    log.info(
        "Not fetching patch for showing only new issues because it's not a pull request context: event name is %s",
        event,
    )
    return PatchScope()
