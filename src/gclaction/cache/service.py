from __future__ import annotations

import logging
import tarfile
import time
from pathlib import Path

from gclaction.errors import CacheError, CacheReservationError, CacheValidationError
from gclaction.state import CACHE_KEY, CACHE_RESULT, StateStore

from .keys import CacheKeys, cache_dirs
from .store import CacheStore

log = logging.getLogger(__name__)


def restore_cache(store: CacheStore, keys: CacheKeys, home: Path, state: StateStore) -> str | None:
    """Restore the linter caches; only validation errors escape."""
    started = time.monotonic()
    state.save(CACHE_KEY, keys.primary)
    try:
        matched = store.restore(cache_dirs(home), keys.primary, keys.restore_keys)
    except CacheValidationError:
        raise
    except (CacheError, OSError, tarfile.TarError) as e:
        log.warning("Failed to restore cache: %s", e)
        return None

    if matched is None:
        log.info("Cache not found for input keys: %s", ", ".join([keys.primary, *keys.restore_keys]))
        return None
    state.save(CACHE_RESULT, matched)
    log.info(
        "Restored cache for golangci-lint from key '%s' in %dms",
        matched,
        int((time.monotonic() - started) * 1000),
    )
    return matched


def save_cache(store: CacheStore, primary_key: str, home: Path, state: StateStore) -> bool:
    """Save the linter caches under ``primary_key``; returns whether anything was written."""
    if not primary_key:
        log.info("No cache key recorded by the main step; not saving cache")
        return False
    if state.get(CACHE_RESULT) == primary_key:
        log.info("Cache hit occurred on the primary key %s, not saving cache.", primary_key)
        return False

    started = time.monotonic()
    dirs = cache_dirs(home)
    try:
        store.save(dirs, primary_key)
    except CacheValidationError:
        raise
    except CacheReservationError as e:
        log.info("%s", e)
        return False
    except (CacheError, OSError, tarfile.TarError) as e:
        log.warning("Failed to save cache: %s", e)
        return False
    log.info(
        "Saved cache for golangci-lint from paths '%s' in %dms",
        ", ".join(str(d) for d in dirs),
        int((time.monotonic() - started) * 1000),
    )
    return True
