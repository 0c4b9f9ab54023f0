from __future__ import annotations

import hashlib
import json
import logging
import os
import shutil
import tarfile
import tempfile
import time
from collections.abc import Sequence
from pathlib import Path
from typing import Any, Protocol

from gclaction.errors import CacheError, CacheReservationError, CacheValidationError

log = logging.getLogger(__name__)

MAX_KEY_LENGTH = 512
INDEX_NAME = "index.json"


class CacheStore(Protocol):
    def restore(self, paths: Sequence[Path], primary_key: str, restore_keys: Sequence[str]) -> str | None: ...

    def save(self, paths: Sequence[Path], key: str) -> None: ...


def validate_key(key: str) -> None:
    if not key:
        raise CacheValidationError("cache key must not be empty")
    if len(key) > MAX_KEY_LENGTH:
        raise CacheValidationError(f"key '{key}' is too long: {len(key)} > {MAX_KEY_LENGTH}")
    if "," in key:
        raise CacheValidationError(f"key '{key}' cannot contain commas")


def _valid_entry(entry: Any) -> bool:
    if not isinstance(entry, dict) or "key" not in entry or "archive" not in entry:
        return False
    created = entry.get("created", 0.0)
    # Entries without a usable timestamp cannot take part in prefix lookups.
    return isinstance(created, (int, float)) and not isinstance(created, bool)


def _validate_paths(paths: Sequence[Path]) -> None:
    if not paths:
        raise CacheValidationError("at least one path must be provided for caching")


class LocalCacheStore:
    """Immutable key -> tarball store with prefix fallback on restore.

    Each entry archives the given paths by position, so restore must be called
    with the same path list that was saved.
    """

    def __init__(self, root: Path) -> None:
        self.root = root

    @property
    def index_path(self) -> Path:
        return self.root / INDEX_NAME

    def _load_index(self) -> list[dict[str, Any]]:
        if not self.index_path.exists():
            return []
        try:
            raw = json.loads(self.index_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise CacheError(f"cache index {self.index_path} is unreadable: {e}") from e
        entries = raw.get("entries") if isinstance(raw, dict) else None
        return [e for e in entries or [] if _valid_entry(e)]

    def _write_index(self, entries: list[dict[str, Any]]) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        tmp = self.index_path.with_suffix(".tmp")
        tmp.write_text(json.dumps({"entries": entries}, indent=2), encoding="utf-8")
        os.replace(tmp, self.index_path)

    def lookup(self, primary_key: str, restore_keys: Sequence[str] = ()) -> dict[str, Any] | None:
        entries = self._load_index()
        for entry in entries:
            if entry["key"] == primary_key:
                return entry
        for prefix in restore_keys:
            matches = [e for e in entries if str(e["key"]).startswith(prefix)]
            if matches:
                # Later entries win ties.
                return max(reversed(matches), key=lambda e: float(e.get("created", 0.0)))
        return None

    def restore(self, paths: Sequence[Path], primary_key: str, restore_keys: Sequence[str] = ()) -> str | None:
        _validate_paths(paths)
        validate_key(primary_key)
        for key in restore_keys:
            validate_key(key)

        entry = self.lookup(primary_key, restore_keys)
        if entry is None:
            return None
        archive = self.root / str(entry["archive"])
        with tempfile.TemporaryDirectory(dir=self.root) as tmp:
            with tarfile.open(archive, "r:gz") as tar:
                tar.extractall(tmp, filter="data")
            for i, dest in enumerate(paths):
                src = Path(tmp) / str(i)
                if not src.exists():
                    continue
                if src.is_dir():
                    shutil.copytree(src, dest, dirs_exist_ok=True)
                else:
                    dest.parent.mkdir(parents=True, exist_ok=True)
                    shutil.copy2(src, dest)
        return str(entry["key"])

    def save(self, paths: Sequence[Path], key: str) -> None:
        _validate_paths(paths)
        validate_key(key)
        entries = self._load_index()
        if any(e["key"] == key for e in entries):
            raise CacheReservationError(
                f"Unable to reserve cache with key {key}, another job may be creating this cache."
            )

        self.root.mkdir(parents=True, exist_ok=True)
        name = hashlib.sha256(key.encode("utf-8")).hexdigest() + ".tar.gz"
        tmp = self.root / (name + ".tmp")
        with tarfile.open(tmp, "w:gz") as tar:
            for i, path in enumerate(paths):
                if path.exists():
                    tar.add(path, arcname=str(i))
        os.replace(tmp, self.root / name)

        entries.append({"key": key, "archive": name, "created": time.time()})
        self._write_index(entries)
