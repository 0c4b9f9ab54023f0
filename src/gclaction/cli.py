from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from pathlib import Path

import yaml

from gclaction import __version__
from gclaction.config.loader import DEFAULT_CONFIG_NAME, load_config
from gclaction.config.schema import ActionConfig
from gclaction.config.validate import validate_config_paths
from gclaction.errors import ConfigurationError, GclActionError
from gclaction.github.context import GitHubContext, load_context
from gclaction.pipeline import post_run, resolve_working_directory, run
from gclaction.state import StateStore
from gclaction.util.http import new_session
from gclaction.util.logging import set_verbose, setup_logging
from gclaction.version.models import get_era, parse_version_request
from gclaction.version.resolver import VersionResolver, fetch_version_mapping, requested_version

log = logging.getLogger(__name__)


def _load(args: argparse.Namespace) -> tuple[ActionConfig, GitHubContext]:
    context = load_context()
    root = Path(args.path).resolve() if args.path else context.workspace
    config_paths = [Path(p) for p in args.config] if args.config else None
    cfg = load_config(root, config_paths)
    if cfg.debug_enabled("verbose"):
        set_verbose(True)
    if args.path:
        context = dataclasses.replace(context, workspace=root)
    return cfg, context


def cmd_run(args: argparse.Namespace) -> int:
    try:
        cfg, context = _load(args)
        outcome = run(cfg, context, StateStore())
    except GclActionError as e:
        log.error("Failed to run: %s", e)
        return 1
    if not outcome.success:
        log.error("%s", outcome.message)
        return 1
    log.info("%s", outcome.message)
    return 0


def cmd_post(args: argparse.Namespace) -> int:
    try:
        cfg, context = _load(args)
        post_run(cfg, context, StateStore())
    except GclActionError as e:
        log.error("Failed to post-run: %s", e)
        return 1
    return 0


def cmd_resolve_version(args: argparse.Namespace) -> int:
    try:
        cfg, context = _load(args)
        era = get_era(cfg.era)
        if args.version is not None:
            request = parse_version_request(args.version)
        else:
            wd = resolve_working_directory(cfg, context.workspace)
            request = requested_version(cfg, wd if wd is not None else context.workspace)
        session = new_session()
        info = VersionResolver(era, lambda: fetch_version_mapping(session, era.mapping_url)).resolve(request)
    except GclActionError as e:
        log.error("%s", e)
        return 1
    sys.stdout.write(f"{info.target_version}\n")
    return 0


def cmd_config_show(args: argparse.Namespace) -> int:
    try:
        cfg, _ = _load(args)
    except ConfigurationError as e:
        log.error("%s", e)
        return 1
    data = dataclasses.asdict(cfg)
    if data.get("github_token"):
        data["github_token"] = "***"
    text = yaml.safe_dump(data, sort_keys=True)
    if args.output:
        Path(args.output).write_text(text, encoding="utf-8")
    else:
        sys.stdout.write(text)
    return 0


def cmd_config_validate(args: argparse.Namespace) -> int:
    root = Path(args.path).resolve() if args.path else Path.cwd()
    if args.config:
        paths = [p if p.is_absolute() else root / p for p in (Path(c) for c in args.config)]
    else:
        paths = [root / DEFAULT_CONFIG_NAME]
    errors = validate_config_paths(paths)
    if errors:
        for err in errors:
            log.error("%s", err)
        return 1
    log.info("Config OK")
    return 0


def _add_common_args(a: argparse.ArgumentParser) -> None:
    a.add_argument(
        "path",
        nargs="?",
        default=None,
        help="Workspace root (default: $GITHUB_WORKSPACE or the current directory)",
    )
    a.add_argument(
        "--config",
        action="append",
        default=None,
        help=f"Config file path (repeatable, workspace-relative or absolute; default: {DEFAULT_CONFIG_NAME})",
    )


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="gclaction", description="Run golangci-lint in GitHub Actions jobs")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")

    sub = p.add_subparsers(dest="cmd", required=True)

    r = sub.add_parser("run", help="Main step: install golangci-lint and lint the workspace")
    _add_common_args(r)
    r.set_defaults(func=cmd_run)

    post = sub.add_parser("post", help="Post step: save the golangci-lint caches")
    _add_common_args(post)
    post.set_defaults(func=cmd_post)

    rv = sub.add_parser("resolve-version", help="Print the golangci-lint release that would be installed")
    _add_common_args(rv)
    rv.add_argument("--version", dest="version", default=None, help="Version to resolve (vX.Y, vX.Y.Z or latest)")
    rv.set_defaults(func=cmd_resolve_version)

    c = sub.add_parser("config", help="Config utilities")
    c_sub = c.add_subparsers(dest="config_cmd", required=True)
    c_show = c_sub.add_parser("show", help="Show merged config")
    _add_common_args(c_show)
    c_show.add_argument("--output", default=None, help="Write output to path instead of stdout")
    c_show.set_defaults(func=cmd_config_show)

    c_validate = c_sub.add_parser("validate", help="Validate config file(s)")
    _add_common_args(c_validate)
    c_validate.set_defaults(func=cmd_config_validate)

    return p


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(bool(args.verbose))
    return int(args.func(args))
