from __future__ import annotations

from pathlib import Path

import pytest

from gclaction.cache.keys import CacheKeys
from gclaction.cache.service import restore_cache, save_cache
from gclaction.errors import CacheError, CacheReservationError, CacheValidationError
from gclaction.state import CACHE_KEY, CACHE_RESULT, StateStore


class FakeStore:
    def __init__(self, match: str | None = None, error: Exception | None = None) -> None:
        self.match = match
        self.error = error
        self.saved: list[str] = []

    def restore(self, paths, primary_key, restore_keys):
        if self.error is not None:
            raise self.error
        return self.match

    def save(self, paths, key):
        if self.error is not None:
            raise self.error
        self.saved.append(key)


KEYS = CacheKeys(primary="ns-Linux-1-abc", restore_keys=["ns-Linux-1-", "ns-"])


def test_restore_records_key_and_hit(tmp_path: Path) -> None:
    state = StateStore({})
    assert restore_cache(FakeStore(match="ns-Linux-1-old"), KEYS, tmp_path, state) == "ns-Linux-1-old"
    assert state.get(CACHE_KEY) == "ns-Linux-1-abc"
    assert state.get(CACHE_RESULT) == "ns-Linux-1-old"


def test_restore_generic_errors_are_warnings(tmp_path: Path) -> None:
    state = StateStore({})
    assert restore_cache(FakeStore(error=CacheError("backend down")), KEYS, tmp_path, state) is None
    assert restore_cache(FakeStore(error=OSError("disk")), KEYS, tmp_path, state) is None
    assert state.get(CACHE_RESULT) == ""


def test_restore_validation_errors_are_fatal(tmp_path: Path) -> None:
    with pytest.raises(CacheValidationError):
        restore_cache(FakeStore(error=CacheValidationError("bad key")), KEYS, tmp_path, StateStore({}))


def test_save_skips_on_exact_hit(tmp_path: Path) -> None:
    state = StateStore({})
    state.save(CACHE_RESULT, KEYS.primary)
    store = FakeStore()
    assert save_cache(store, KEYS.primary, tmp_path, state) is False
    assert store.saved == []


def test_save_writes_primary_key(tmp_path: Path) -> None:
    store = FakeStore()
    assert save_cache(store, KEYS.primary, tmp_path, StateStore({})) is True
    assert store.saved == [KEYS.primary]


def test_save_swallows_reservation_conflicts(tmp_path: Path) -> None:
    store = FakeStore(error=CacheReservationError("taken"))
    assert save_cache(store, KEYS.primary, tmp_path, StateStore({})) is False


def test_save_validation_errors_are_fatal(tmp_path: Path) -> None:
    with pytest.raises(CacheValidationError):
        save_cache(FakeStore(error=CacheValidationError("bad")), KEYS.primary, tmp_path, StateStore({}))
