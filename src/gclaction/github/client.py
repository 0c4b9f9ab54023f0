from __future__ import annotations

import logging
from typing import Any

import requests

from gclaction.errors import CheckRunNotFoundError, HttpStatusError, MalformedResponseError
from gclaction.util.http import REQUEST_TIMEOUT_SECONDS, get_json, get_text, new_session
from gclaction.util.retry import retry_call

from .context import DEFAULT_API_URL

log = logging.getLogger(__name__)

DIFF_MEDIA_TYPE = "application/vnd.github.v3.diff"
JSON_MEDIA_TYPE = "application/vnd.github+json"
API_VERSION = "2022-11-28"


class GitHubClient:
    """The handful of REST endpoints the action talks to."""

    def __init__(
        self,
        token: str,
        api_url: str = DEFAULT_API_URL,
        session: requests.Session | None = None,
        attempts: int = 3,
        backoff: float = 0.5,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.session = session if session is not None else new_session(token)
        self.attempts = attempts
        self.backoff = backoff

    def _headers(self, accept: str) -> dict[str, str]:
        return {"Accept": accept, "X-GitHub-Api-Version": API_VERSION}

    def _get_diff(self, path: str, operation: str) -> str:
        return get_text(
            self.session,
            f"{self.api_url}{path}",
            operation=operation,
            headers=self._headers(DIFF_MEDIA_TYPE),
            attempts=self.attempts,
            backoff=self.backoff,
        )

    def get_pull_request_diff(self, owner: str, repo: str, number: int) -> str:
        return self._get_diff(f"/repos/{owner}/{repo}/pulls/{number}", "fetch pull request patch")

    def compare_diff(self, owner: str, repo: str, base: str, head: str) -> str:
        return self._get_diff(f"/repos/{owner}/{repo}/compare/{base}...{head}", "fetch push patch")

    def list_check_runs(self, owner: str, repo: str, ref: str) -> list[dict[str, Any]]:
        url = f"{self.api_url}/repos/{owner}/{repo}/commits/{ref}/check-runs"
        try:
            data = get_json(
                self.session,
                url,
                operation="list check runs",
                headers=self._headers(JSON_MEDIA_TYPE),
                params={"status": "in_progress", "filter": "latest"},
                attempts=self.attempts,
                backoff=self.backoff,
            )
        except ValueError as e:
            raise MalformedResponseError(f"{url} returned invalid json: {e}") from e
        runs = data.get("check_runs") if isinstance(data, dict) else None
        return [r for r in runs or [] if isinstance(r, dict)]

    def find_check_run(self, owner: str, repo: str, ref: str, name_hint: str = "lint") -> dict[str, Any]:
        """Find the running check run for ``ref``; it may show up with a delay."""

        def once() -> dict[str, Any]:
            runs = self.list_check_runs(owner, repo, ref)
            if not runs:
                raise CheckRunNotFoundError(f"no in-progress check runs for {ref}")
            for run in runs:
                if name_hint.lower() in str(run.get("name", "")).lower() and run.get("id"):
                    return run
            raise CheckRunNotFoundError(f"could not find current check run for {ref}")

        return retry_call(
            once,
            operation="find check run",
            attempts=self.attempts,
            backoff=self.backoff,
        )

    def update_check_run(self, owner: str, repo: str, check_run_id: int, output: dict[str, Any]) -> None:
        url = f"{self.api_url}/repos/{owner}/{repo}/check-runs/{check_run_id}"

        def once() -> None:
            res = self.session.patch(
                url,
                json={"output": output},
                headers=self._headers(JSON_MEDIA_TYPE),
                timeout=REQUEST_TIMEOUT_SECONDS,
            )
            if res.status_code != 200:
                raise HttpStatusError(url, res.status_code)

        retry_call(once, operation="update check run", attempts=self.attempts, backoff=self.backoff)
