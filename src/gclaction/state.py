from __future__ import annotations

import os
import uuid
from collections.abc import Mapping
from pathlib import Path

CACHE_KEY = "CACHE_KEY"
CACHE_RESULT = "CACHE_RESULT"
LINT_PATH = "LINT_PATH"
PATCH_PATH = "PATCH_PATH"


class StateStore:
    """Values handed from the main step to the post step of the same job.

    Writes go to the runner's ``GITHUB_STATE`` file, which the runner turns
    into ``STATE_<name>`` variables for the post step.
    """

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self._environ = os.environ if environ is None else environ
        self._values: dict[str, str] = {}

    @property
    def state_file(self) -> Path | None:
        path = self._environ.get("GITHUB_STATE", "")
        return Path(path) if path else None

    def save(self, name: str, value: str) -> None:
        self._values[name] = value
        path = self.state_file
        if path is None:
            return
        delimiter = f"ghadelimiter_{uuid.uuid4()}"
        with path.open("a", encoding="utf-8") as fh:
            fh.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")

    def get(self, name: str) -> str:
        if name in self._values:
            return self._values[name]
        return self._environ.get(f"STATE_{name}", "")
