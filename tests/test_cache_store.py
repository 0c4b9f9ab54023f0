from __future__ import annotations

import json
from pathlib import Path

import pytest

from gclaction.cache.store import LocalCacheStore, validate_key
from gclaction.errors import CacheReservationError, CacheValidationError


def _populate(root: Path, content: str) -> list[Path]:
    a = root / "lint-cache"
    b = root / "go-build"
    a.mkdir(parents=True, exist_ok=True)
    (a / "entry.txt").write_text(content, encoding="utf-8")
    return [a, b]


def test_save_then_restore_exact_key(tmp_path: Path) -> None:
    store = LocalCacheStore(tmp_path / "store")
    paths = _populate(tmp_path / "src", "one")
    store.save(paths, "golangci-lint.cache-Linux-1-abc")

    dest = [tmp_path / "dest" / "lint-cache", tmp_path / "dest" / "go-build"]
    matched = store.restore(dest, "golangci-lint.cache-Linux-1-abc", ["golangci-lint.cache-Linux-1-"])

    assert matched == "golangci-lint.cache-Linux-1-abc"
    assert (dest[0] / "entry.txt").read_text(encoding="utf-8") == "one"
    assert not dest[1].exists()


def test_restore_falls_back_to_newest_prefix_match(tmp_path: Path) -> None:
    store = LocalCacheStore(tmp_path / "store")
    store.save(_populate(tmp_path / "old", "old"), "golangci-lint.cache-Linux-1-aaa")
    store.save(_populate(tmp_path / "new", "new"), "golangci-lint.cache-Linux-1-bbb")

    dest = [tmp_path / "dest" / "lint-cache", tmp_path / "dest" / "go-build"]
    matched = store.restore(
        dest, "golangci-lint.cache-Linux-1-ccc", ["golangci-lint.cache-Linux-1-", "golangci-lint.cache-"]
    )
    assert matched == "golangci-lint.cache-Linux-1-bbb"
    assert (dest[0] / "entry.txt").read_text(encoding="utf-8") == "new"


def test_restore_miss(tmp_path: Path) -> None:
    store = LocalCacheStore(tmp_path / "store")
    assert store.restore([tmp_path / "x"], "golangci-lint.cache-k", ["golangci-lint.cache-"]) is None


def test_keys_are_immutable(tmp_path: Path) -> None:
    store = LocalCacheStore(tmp_path / "store")
    paths = _populate(tmp_path / "src", "one")
    store.save(paths, "k1")
    with pytest.raises(CacheReservationError):
        store.save(paths, "k1")


def test_key_validation() -> None:
    with pytest.raises(CacheValidationError):
        validate_key("")
    with pytest.raises(CacheValidationError):
        validate_key("a,b")
    with pytest.raises(CacheValidationError):
        validate_key("k" * 513)
    validate_key("k" * 512)


def test_save_requires_paths(tmp_path: Path) -> None:
    with pytest.raises(CacheValidationError):
        LocalCacheStore(tmp_path).save([], "key")


def test_entries_with_bad_timestamps_are_ignored(tmp_path: Path) -> None:
    root = tmp_path / "store"
    root.mkdir()
    (root / "index.json").write_text(
        json.dumps(
            {
                "entries": [
                    {"key": "golangci-lint.cache-Linux-1-a", "archive": "a.tar.gz", "created": "x"},
                    {"key": "golangci-lint.cache-Linux-1-b", "archive": "b.tar.gz", "created": None},
                ]
            }
        ),
        encoding="utf-8",
    )
    store = LocalCacheStore(root)
    assert store.lookup("golangci-lint.cache-Linux-1-c", ["golangci-lint.cache-Linux-1-"]) is None

    paths = _populate(tmp_path / "src", "fresh")
    store.save(paths, "golangci-lint.cache-Linux-1-d")
    matched = store.restore([tmp_path / "dest"], "golangci-lint.cache-Linux-1-e", ["golangci-lint.cache-Linux-1-"])
    assert matched == "golangci-lint.cache-Linux-1-d"
