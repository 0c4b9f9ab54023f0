from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

log = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"


@dataclass(frozen=True)
class GitHubContext:
    event_name: str = ""
    payload: dict[str, Any] = field(default_factory=dict)
    repository: str = ""
    sha: str = ""
    ref: str = ""
    api_url: str = DEFAULT_API_URL
    workspace: Path = field(default_factory=Path.cwd)
    runner_os: str = ""
    runner_temp: str = ""
    tool_cache: str = ""
    home: str = ""

    @property
    def owner(self) -> str:
        return self.repository.split("/", 1)[0] if "/" in self.repository else ""

    @property
    def repo(self) -> str:
        return self.repository.split("/", 1)[1] if "/" in self.repository else ""

    @property
    def head_sha(self) -> str:
        """Commit the check run belongs to: ``after`` for pushes, else the job sha."""
        pr = self.payload.get("pull_request")
        if isinstance(pr, dict):
            head = pr.get("head")
            if isinstance(head, dict) and head.get("sha"):
                return str(head["sha"])
        return str(self.payload.get("after") or self.sha)


def _load_payload(path: str) -> dict[str, Any]:
    if not path:
        return {}
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        log.warning("Failed to read event payload %s (%s)", path, e)
        return {}
    return raw if isinstance(raw, dict) else {}


def load_context(environ: Mapping[str, str] | None = None) -> GitHubContext:
    env = os.environ if environ is None else environ
    workspace = env.get("GITHUB_WORKSPACE") or os.getcwd()
    return GitHubContext(
        event_name=env.get("GITHUB_EVENT_NAME", ""),
        payload=_load_payload(env.get("GITHUB_EVENT_PATH", "")),
        repository=env.get("GITHUB_REPOSITORY", ""),
        sha=env.get("GITHUB_SHA", ""),
        ref=env.get("GITHUB_REF", ""),
        api_url=(env.get("GITHUB_API_URL") or DEFAULT_API_URL).rstrip("/"),
        workspace=Path(workspace),
        runner_os=env.get("RUNNER_OS", ""),
        runner_temp=env.get("RUNNER_TEMP", ""),
        tool_cache=env.get("RUNNER_TOOL_CACHE", ""),
        home=env.get("HOME") or str(Path.home()),
    )
