from __future__ import annotations

import dataclasses
import logging
import os
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import yaml

from gclaction.errors import InvalidInputError

from .schema import (
    DEBUG_FLAGS,
    ERAS,
    INSTALL_MODE_ALIASES,
    INSTALL_MODES,
    ActionConfig,
)

log = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = ".gclaction.yml"

_BOOL_FIELDS = {"only_new_issues", "skip_cache", "skip_save_cache", "annotations"}
_INT_FIELDS = {"cache_invalidation_interval"}
_LIST_FIELDS = {"debug"}
FIELD_NAMES = [f.name for f in dataclasses.fields(ActionConfig)]


def input_name(field_name: str) -> str:
    return field_name.replace("_", "-")


def _env_key(name: str) -> str:
    return f"INPUT_{name.replace(' ', '_').upper()}"


def _load_raw_config(path: Path) -> dict[str, Any]:
    try:
        return yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as e:
        log.warning("Failed to load %s (%s). Skipping.", path, e)
        return {}


def normalize_keys(raw: Mapping[str, Any]) -> dict[str, Any]:
    return {str(k).strip().replace("-", "_"): v for k, v in raw.items()}


def _to_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in {"true", "yes", "1", "on"}:
        return True
    if text in {"false", "no", "0", "off"}:
        return False
    raise InvalidInputError(f'invalid value of "{input_name(name)}": "{value}", expected "true" or "false"')


def _to_int(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise InvalidInputError(f'invalid value of "{input_name(name)}": "{value}", expected an integer')
    try:
        return int(str(value).strip())
    except ValueError:
        raise InvalidInputError(
            f'invalid value of "{input_name(name)}": "{value}", expected an integer'
        ) from None


def _to_list(value: Any) -> list[str]:
    if isinstance(value, list):
        items = [str(v) for v in value]
    else:
        items = str(value).split(",")
    return [item.strip().lower() for item in items if item.strip()]


def _coerce(name: str, value: Any) -> Any:
    if name in _BOOL_FIELDS:
        return _to_bool(name, value)
    if name in _INT_FIELDS:
        return _to_int(name, value)
    if name in _LIST_FIELDS:
        return _to_list(value)
    if value is None:
        return ""
    return str(value).strip() if name != "args" else str(value)


def _check_choices(cfg: ActionConfig) -> ActionConfig:
    mode = cfg.install_mode.strip().lower()
    mode = INSTALL_MODE_ALIASES.get(mode, mode)
    if mode not in INSTALL_MODES:
        raise InvalidInputError(
            f"invalid install-mode '{cfg.install_mode}', expected one of: {', '.join(sorted(INSTALL_MODES))}"
        )
    era = cfg.era.strip().lower()
    if era not in ERAS:
        raise InvalidInputError(f"invalid era '{cfg.era}', expected one of: {', '.join(sorted(ERAS))}")
    unknown_debug = [d for d in cfg.debug if d not in DEBUG_FLAGS]
    if unknown_debug:
        log.warning("Ignoring unknown debug flags: %s", ", ".join(unknown_debug))
    # Invalid failure-severity values are reported and defaulted at evaluation time.
    return dataclasses.replace(
        cfg,
        install_mode=mode,
        era=era,
        debug=[d for d in cfg.debug if d in DEBUG_FLAGS],
        failure_severity=cfg.failure_severity.strip().lower(),
    )


def _merge(base: ActionConfig, raw: Mapping[str, Any], source: str) -> ActionConfig:
    updates: dict[str, Any] = {}
    for key, value in raw.items():
        if key not in FIELD_NAMES:
            log.warning("Unknown option %r in %s; ignoring.", key, source)
            continue
        updates[key] = _coerce(key, value)
    return dataclasses.replace(base, **updates)


def inputs_from_env(environ: Mapping[str, str]) -> dict[str, str]:
    """Collect action inputs published by the runner as ``INPUT_*`` variables.

    Empty inputs are treated as unset so that file configuration still applies.
    """
    out: dict[str, str] = {}
    for name in FIELD_NAMES:
        for key in (_env_key(input_name(name)), _env_key(name)):
            value = environ.get(key)
            if value is not None and value.strip() != "":
                out[name] = value
                break
    return out


def _resolve_config_paths(root: Path, config_paths: Iterable[Path] | None) -> list[Path]:
    if config_paths is None:
        return [root / DEFAULT_CONFIG_NAME]
    resolved: list[Path] = []
    for path in config_paths:
        p = path
        if not p.is_absolute():
            p = root / p
        resolved.append(p)
    return resolved


def load_config(
    root: Path,
    config_paths: Iterable[Path] | None = None,
    environ: Mapping[str, str] | None = None,
) -> ActionConfig:
    env = os.environ if environ is None else environ
    paths = _resolve_config_paths(root, config_paths)

    cfg = ActionConfig()
    for path in paths:
        if not path.exists():
            if config_paths is not None:
                log.warning("Config %s not found; skipping.", path)
            continue
        raw = _load_raw_config(path)
        if not isinstance(raw, dict):
            log.warning("Config %s is not a mapping; skipping.", path)
            continue
        cfg = _merge(cfg, normalize_keys(raw), str(path))

    cfg = _merge(cfg, inputs_from_env(env), "action inputs")
    return _check_choices(cfg)
