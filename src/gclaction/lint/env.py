from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path


def build_env(
    base: Mapping[str, str] | None = None,
    lint_cache_dir: Path | None = None,
    extra: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Environment for a spawned tool; the only place settings become env vars."""
    env = dict(os.environ if base is None else base)
    if lint_cache_dir is not None:
        env["GOLANGCI_LINT_CACHE"] = str(lint_cache_dir)
    if extra:
        env.update(extra)
    return env
