from __future__ import annotations

import logging
import re
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any

import requests

from gclaction.config.schema import ActionConfig
from gclaction.errors import (
    BelowMinimumVersionError,
    MalformedMappingError,
    UnsupportedMajorVersionError,
    VersionNotFoundError,
    VersionUnavailableError,
)
from gclaction.util.http import get_json

from .models import (
    ERAS,
    LATEST_KEY,
    Era,
    VersionInfo,
    VersionMapping,
    VersionRequest,
    is_below_minimum,
    parse_version,
    parse_version_request,
)

log = logging.getLogger(__name__)

MAPPING_FIELD = "MinorVersionToConfig"
GO_MOD_RE = re.compile(
    r"^\s*(?:require\s+)?github\.com/golangci/golangci-lint(?:/v\d+)?\s+(v\d+\.\d+\.\d+)\b",
    re.MULTILINE,
)


def parse_mapping(raw: Any) -> VersionMapping:
    if not isinstance(raw, dict) or not isinstance(raw.get(MAPPING_FIELD), dict):
        raise MalformedMappingError(f"version mapping has no '{MAPPING_FIELD}' object")
    entries: dict[str, VersionInfo] = {}
    for key, value in raw[MAPPING_FIELD].items():
        if not isinstance(value, dict):
            raise MalformedMappingError(f"version mapping entry '{key}' is not an object")
        entries[str(key)] = VersionInfo(
            target_version=str(value.get("TargetVersion") or ""),
            error=str(value.get("Error") or ""),
            asset_url=str(value.get("AssetURL") or ""),
        )
    return VersionMapping(entries=entries)


def fetch_version_mapping(session: requests.Session, url: str, attempts: int = 3) -> VersionMapping:
    try:
        raw = get_json(session, url, operation="fetch version mapping", attempts=attempts)
    except ValueError as e:
        raise MalformedMappingError(f"version mapping at {url} is not valid JSON: {e}") from e
    return parse_mapping(raw)


def version_from_file(path: Path) -> str:
    """Read a recorded linter version from ``go.mod`` or a plain version file."""
    text = path.read_text(encoding="utf-8")
    if path.name == "go.mod":
        match = GO_MOD_RE.search(text)
        return match.group(1) if match else ""
    for line in text.splitlines():
        line = line.strip()
        if line and not line.startswith("#"):
            parts = line.split()
            if len(parts) == 1:
                value = parts[0]
            elif parts[0] == "golangci-lint":
                # .tool-versions style: "golangci-lint 1.64.8"
                value = parts[1]
            else:
                continue
            return value if value.startswith("v") else f"v{value}"
    return ""


def requested_version(config: ActionConfig, root: Path) -> VersionRequest | None:
    if config.version.strip():
        return parse_version_request(config.version)

    if config.version_file:
        path = Path(config.version_file)
        if not path.is_absolute():
            path = root / path
        if not path.exists():
            log.warning("version-file %s not found; using the latest version", path)
            return None
    else:
        path = root / "go.mod"
        if not path.exists():
            return None

    found = version_from_file(path)
    if not found:
        log.debug("No golangci-lint version recorded in %s", path)
        return None
    log.info("Using golangci-lint version %s from %s", found, path)
    return parse_version_request(found)


def check_request(request: VersionRequest, era: Era) -> None:
    if request.major != era.major:
        hint = (
            f"set era to 'v{request.major}'"
            if f"v{request.major}" in ERAS
            else f"request a v{era.major} release"
        )
        raise UnsupportedMajorVersionError(
            f"golangci-lint {request} is not supported by the '{era.name}' era "
            f"(only v{era.major}.x releases): {hint}"
        )
    if is_below_minimum(request, era):
        raise BelowMinimumVersionError(str(request), era.minimum_label)


class VersionResolver:
    """Turn a requested version into one concrete release of the linter."""

    def __init__(self, era: Era, fetch_mapping: Callable[[], VersionMapping]) -> None:
        self.era = era
        self._fetch_mapping = fetch_mapping

    def resolve(self, request: VersionRequest | None) -> VersionInfo:
        started = time.monotonic()
        if request is not None:
            check_request(request, self.era)
            if request.patch is not None:
                log.info("Requested golangci-lint version %s is fully specified", request)
                return VersionInfo(target_version=str(request))

        key = LATEST_KEY if request is None else request.minor_key
        mapping = self._fetch_mapping()
        info = mapping.get(key)
        if info is None:
            raise VersionNotFoundError(key)
        if info.error:
            raise VersionUnavailableError(key, info.error)
        if not info.target_version:
            raise VersionNotFoundError(key)

        target = parse_version(info.target_version)
        check_request(target, self.era)
        log.info(
            "Calculated needed golangci-lint version %s in %dms",
            info.target_version,
            int((time.monotonic() - started) * 1000),
        )
        return info


def resolve_version(
    config: ActionConfig,
    root: Path,
    era: Era,
    session: requests.Session,
) -> VersionInfo:
    log.info("Finding needed golangci-lint version...")
    resolver = VersionResolver(era, lambda: fetch_version_mapping(session, era.mapping_url))
    return resolver.resolve(requested_version(config, root))
