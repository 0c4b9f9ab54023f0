from __future__ import annotations

import logging
import os
import platform
import tempfile
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path

import requests

from gclaction.cache.keys import CacheKeys, build_cache_keys, lint_cache_dir
from gclaction.cache.service import restore_cache, save_cache
from gclaction.cache.store import LocalCacheStore
from gclaction.config.schema import ActionConfig
from gclaction.diff.patch import PatchScope, fetch_patch
from gclaction.diff.rewrite import relative_prefix
from gclaction.errors import WorkingDirectoryError
from gclaction.github.client import GitHubClient
from gclaction.github.context import GitHubContext
from gclaction.install import find_installed, install_binary, install_with_go
from gclaction.lint.args import build_lint_args, split_user_args
from gclaction.lint.env import build_env
from gclaction.lint.output import LintIssue
from gclaction.lint.runner import LintOutcome, print_workflow_annotations, run_lint
from gclaction.plugins import build_custom_binary
from gclaction.report.check_run import ANNOTATED_EVENTS, publish_annotations
from gclaction.state import CACHE_KEY, LINT_PATH, PATCH_PATH, StateStore
from gclaction.util.http import new_session
from gclaction.util.logging import log_group
from gclaction.version.models import Era, get_era
from gclaction.version.resolver import resolve_version

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class PreparedEnv:
    lint_path: Path
    scope: PatchScope
    cache_key: str = ""


def resolve_working_directory(config: ActionConfig, workspace: Path) -> Path | None:
    if not config.working_directory:
        return None
    wd = Path(config.working_directory)
    if not wd.is_absolute():
        wd = workspace / wd
    if not wd.is_dir():
        raise WorkingDirectoryError(f"working-directory ({config.working_directory}) was not a path")
    return wd.resolve()


def install_root(context: GitHubContext) -> Path:
    if context.tool_cache:
        return Path(context.tool_cache) / "golangci-lint"
    return Path(context.home) / ".local" / "share" / "gclaction"


def cache_root(config: ActionConfig, context: GitHubContext) -> Path:
    if config.cache_dir:
        return Path(config.cache_dir)
    if context.tool_cache:
        return Path(context.tool_cache) / "gclaction-cache"
    return Path(context.home) / ".cache" / "gclaction"


def cache_keys_for(config: ActionConfig, context: GitHubContext, root: Path) -> CacheKeys:
    return build_cache_keys(
        os_tag=context.runner_os or platform.system(),
        working_directory=config.working_directory,
        interval_days=config.cache_invalidation_interval,
        manifest_path=root / "go.mod",
    )


def prepare_lint(
    config: ActionConfig,
    era: Era,
    root: Path,
    context: GitHubContext,
    session: requests.Session,
) -> Path:
    target_version = ""
    if config.install_mode == "none":
        lint_path = find_installed()
    else:
        info = resolve_version(config, root, era, session)
        target_version = info.target_version
        target_dir = install_root(context) / info.target_version
        if config.install_mode == "goinstall":
            lint_path = install_with_go(info, era, target_dir)
        else:
            lint_path = install_binary(info, target_dir, session)
    custom = build_custom_binary(lint_path, root, target_version)
    return custom if custom is not None else lint_path


def prepare_env(
    config: ActionConfig,
    context: GitHubContext,
    state: StateStore,
    session: requests.Session,
    client: GitHubClient,
    root: Path,
) -> PreparedEnv:
    """Restore cache, install the linter and fetch the patch concurrently."""
    started = time.monotonic()
    era = get_era(config.era)
    prefix = relative_prefix(config.working_directory, context.workspace)
    patch_dir = Path(context.runner_temp or tempfile.gettempdir()) / f"gclaction-patch-{os.getpid()}"

    keys: CacheKeys | None = None
    with ThreadPoolExecutor(max_workers=3) as executor:
        cache_future: Future[str | None] | None = None
        if config.skip_cache:
            log.info("Skipping cache restoration")
        else:
            keys = cache_keys_for(config, context, root)
            store = LocalCacheStore(cache_root(config, context))
            cache_future = executor.submit(restore_cache, store, keys, Path(context.home), state)
        lint_future = executor.submit(prepare_lint, config, era, root, context, session)
        patch_future = executor.submit(
            fetch_patch, config.only_new_issues, context, client, prefix, patch_dir
        )

        lint_path = lint_future.result()
        if cache_future is not None:
            cache_future.result()
        scope = patch_future.result()

    log.info("Prepared env in %dms", int((time.monotonic() - started) * 1000))
    return PreparedEnv(lint_path=lint_path, scope=scope, cache_key=keys.primary if keys else "")


def _publisher(config: ActionConfig, context: GitHubContext, client: GitHubClient):
    if not config.annotations:
        return None
    if context.event_name in ANNOTATED_EVENTS and config.github_token:

        def publish(issues: list[LintIssue]) -> int:
            return publish_annotations(client, context, issues)

        return publish
    return print_workflow_annotations


def run(
    config: ActionConfig,
    context: GitHubContext,
    state: StateStore,
    session: requests.Session | None = None,
    client: GitHubClient | None = None,
) -> LintOutcome:
    """Main step: prepare everything, then run the linter once."""
    session = session if session is not None else new_session()
    client = client if client is not None else GitHubClient(config.github_token, context.api_url)
    era = get_era(config.era)
    wd = resolve_working_directory(config, context.workspace)
    root = wd if wd is not None else context.workspace
    user_args = split_user_args(config.args)

    with log_group("prepare environment"):
        prepared = prepare_env(config, context, state, session, client, root)
    state.save(LINT_PATH, str(prepared.lint_path))
    state.save(PATCH_PATH, prepared.scope.patch_path)

    args = build_lint_args(era, user_args, prepared.scope, config.working_directory)
    env = build_env(lint_cache_dir=lint_cache_dir(Path(context.home)))
    with log_group("run golangci-lint"):
        return run_lint(
            prepared.lint_path,
            args,
            cwd=wd,
            env=env,
            failure_severity=config.failure_severity,
            publish=_publisher(config, context, client),
            debug_cache=config.debug_enabled("cache"),
        )


def post_run(config: ActionConfig, context: GitHubContext, state: StateStore) -> bool:
    """Post step: persist the linter caches for later runs."""
    if config.skip_cache or config.skip_save_cache:
        log.info("Skipping cache saving")
        return False
    wd = resolve_working_directory(config, context.workspace)
    root = wd if wd is not None else context.workspace
    key = state.get(CACHE_KEY) or cache_keys_for(config, context, root).primary
    store = LocalCacheStore(cache_root(config, context))
    return save_cache(store, key, Path(context.home), state)
