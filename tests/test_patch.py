from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

from gclaction.diff.patch import fetch_patch
from gclaction.errors import RemoteFetchError
from gclaction.github.context import GitHubContext

PR_DIFF = (
    "diff --git a/sub/x.go b/sub/x.go\n--- a/sub/x.go\n+++ b/sub/x.go\n@@ -1 +1 @@\n-a\n+b\n"
    "diff --git a/docs/r.md b/docs/r.md\n--- a/docs/r.md\n+++ b/docs/r.md\n@@ -1 +1 @@\n-a\n+b\n"
)


def _context(event: str, payload: dict) -> GitHubContext:
    return GitHubContext(event_name=event, payload=payload, repository="octo/app")


def test_disabled_means_no_scope(tmp_path: Path) -> None:
    client = MagicMock()
    scope = fetch_patch(False, _context("pull_request", {"pull_request": {"number": 3}}), client, "", tmp_path)
    assert not scope.restricted
    client.get_pull_request_diff.assert_not_called()


def test_pull_request_patch_is_rewritten_and_saved(tmp_path: Path) -> None:
    client = MagicMock()
    client.get_pull_request_diff.return_value = PR_DIFF
    scope = fetch_patch(True, _context("pull_request", {"pull_request": {"number": 3}}), client, "sub", tmp_path)

    assert scope.patch_path == str(tmp_path / "pull.patch")
    saved = (tmp_path / "pull.patch").read_text(encoding="utf-8")
    assert saved.startswith("diff --git a/x.go b/x.go\n")
    assert "docs/r.md" not in saved
    client.get_pull_request_diff.assert_called_once_with("octo", "app", 3)


def test_push_compares_before_and_after(tmp_path: Path) -> None:
    client = MagicMock()
    client.compare_diff.return_value = PR_DIFF
    scope = fetch_patch(True, _context("push", {"before": "aaa", "after": "bbb"}), client, "", tmp_path)
    assert scope.patch_path == str(tmp_path / "push.patch")
    client.compare_diff.assert_called_once_with("octo", "app", "aaa", "bbb")


def test_new_branch_push_has_no_base(tmp_path: Path) -> None:
    client = MagicMock()
    scope = fetch_patch(True, _context("push", {"before": "0" * 40, "after": "bbb"}), client, "", tmp_path)
    assert not scope.restricted
    client.compare_diff.assert_not_called()


def test_merge_group_uses_base_sha(tmp_path: Path) -> None:
    scope = fetch_patch(True, _context("merge_group", {"merge_group": {"base_sha": "base1"}}), MagicMock(), "", tmp_path)
    assert scope.rev == "base1"
    assert scope.patch_path == ""


def test_fetch_failure_is_not_fatal(tmp_path: Path) -> None:
    client = MagicMock()
    client.get_pull_request_diff.side_effect = RemoteFetchError("fetch pull request patch", None)
    scope = fetch_patch(True, _context("pull_request", {"pull_request": {"number": 3}}), client, "", tmp_path)
    assert not scope.restricted


def test_other_events_are_unrestricted(tmp_path: Path) -> None:
    assert not fetch_patch(True, _context("schedule", {}), MagicMock(), "", tmp_path).restricted
