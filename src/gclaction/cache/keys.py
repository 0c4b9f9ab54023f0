from __future__ import annotations

import hashlib
import re
import time
from dataclasses import dataclass
from pathlib import Path

NAMESPACE = "golangci-lint.cache-"
NO_MANIFEST = "nogomod"
SECONDS_PER_DAY = 86400
SEPARATOR = "-"


@dataclass(frozen=True)
class CacheKeys:
    primary: str
    restore_keys: list[str]


def file_checksum(path: Path) -> str:
    digest = hashlib.sha256()
    with path.open("rb") as fh:
        for chunk in iter(lambda: fh.read(1 << 16), b""):
            digest.update(chunk)
    return digest.hexdigest()


def interval_tag(interval_days: int, now: float | None = None) -> str:
    """Time bucket for periodic invalidation; ``<= 0`` means a fresh key every run."""
    current = time.time() if now is None else now
    if interval_days <= 0:
        return str(int(current * 1000))
    return str(int(current // (interval_days * SECONDS_PER_DAY)))


def working_directory_tag(working_directory: str) -> str:
    value = working_directory.strip().replace("\\", "/").strip("/")
    return re.sub(r"[/,]+", "_", value)


def build_cache_keys(
    os_tag: str,
    working_directory: str,
    interval_days: int,
    manifest_path: Path,
    now: float | None = None,
) -> CacheKeys:
    """Primary key plus restore fallbacks, most specific first."""
    partials = [NAMESPACE]

    key = NAMESPACE + f"{os_tag or 'unknown'}{SEPARATOR}"
    wd_tag = working_directory_tag(working_directory)
    if wd_tag:
        key += f"{wd_tag}{SEPARATOR}"
    key += f"{interval_tag(interval_days, now)}{SEPARATOR}"
    partials.append(key)

    if manifest_path.is_file():
        key += file_checksum(manifest_path)
    else:
        key += NO_MANIFEST

    return CacheKeys(primary=key, restore_keys=list(reversed(partials)))


def cache_dirs(home: Path) -> list[Path]:
    # Missing directories are fine for both restore and save.
    return [lint_cache_dir(home), home / ".cache" / "go-build", home / "go" / "pkg"]


def lint_cache_dir(home: Path) -> Path:
    return home / ".cache" / "golangci-lint"
