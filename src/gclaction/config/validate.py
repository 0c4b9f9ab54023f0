from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import Any

import yaml

from .loader import FIELD_NAMES, normalize_keys
from .schema import DEBUG_FLAGS, ERAS, FAILURE_SEVERITIES, INSTALL_MODE_ALIASES, INSTALL_MODES

KNOWN_KEYS = set(FIELD_NAMES)

_BOOL_KEYS = {"only_new_issues", "skip_cache", "skip_save_cache", "annotations"}
_STR_KEYS = {"version", "version_file", "working_directory", "cache_dir", "args", "github_token"}


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _validate_choice(raw: dict[str, Any], key: str, choices: set[str], errors: list[str]) -> None:
    if key not in raw:
        return
    value = raw.get(key)
    if not isinstance(value, str):
        errors.append(f"{key} must be a string")
        return
    if value.strip().lower() not in choices:
        errors.append(f"{key} must be one of: {', '.join(sorted(choices))}")


def validate_raw_config(raw: dict[str, Any]) -> list[str]:
    errors: list[str] = []
    raw = normalize_keys(raw)
    for key in raw:
        if key not in KNOWN_KEYS:
            errors.append(f"Unknown key: {key}")

    for key in _BOOL_KEYS:
        if key in raw and not isinstance(raw.get(key), bool):
            errors.append(f"{key} must be a boolean")

    for key in _STR_KEYS:
        if key in raw and not isinstance(raw.get(key), str):
            errors.append(f"{key} must be a string")

    if "cache_invalidation_interval" in raw and not _is_int(raw.get("cache_invalidation_interval")):
        errors.append("cache_invalidation_interval must be an integer")

    _validate_choice(raw, "install_mode", INSTALL_MODES | set(INSTALL_MODE_ALIASES), errors)
    _validate_choice(raw, "era", ERAS, errors)
    if raw.get("failure_severity"):
        _validate_choice(raw, "failure_severity", FAILURE_SEVERITIES, errors)

    if "debug" in raw:
        value = raw.get("debug")
        items = value.split(",") if isinstance(value, str) else value
        if not isinstance(items, list):
            errors.append("debug must be a list or comma separated string")
        else:
            bad = [str(v).strip() for v in items if str(v).strip().lower() not in DEBUG_FLAGS]
            if bad:
                errors.append(f"debug has unsupported flags: {', '.join(bad)}")

    return errors


def validate_config_paths(paths: Iterable[Path]) -> list[str]:
    errors: list[str] = []
    for path in paths:
        if not path.exists():
            errors.append(f"{path}: not found")
            continue
        try:
            raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as e:
            errors.append(f"{path}: failed to parse YAML ({e})")
            continue
        if not isinstance(raw, dict):
            errors.append(f"{path}: config must be a mapping")
            continue
        for err in validate_raw_config(raw):
            errors.append(f"{path}: {err}")
    return errors
