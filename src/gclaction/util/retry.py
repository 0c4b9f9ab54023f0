from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import TypeVar

import requests

from gclaction.errors import CheckRunNotFoundError, HttpStatusError, RemoteFetchError

log = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_ATTEMPTS = 3
DEFAULT_BACKOFF_SECONDS = 0.5


def is_transient(exc: BaseException) -> bool:
    """Network errors and non-success HTTP statuses are worth another attempt."""
    return isinstance(exc, (requests.RequestException, HttpStatusError, CheckRunNotFoundError))


def retry_call(
    fn: Callable[[], T],
    *,
    operation: str,
    attempts: int = DEFAULT_ATTEMPTS,
    retryable: Callable[[BaseException], bool] = is_transient,
    backoff: float = DEFAULT_BACKOFF_SECONDS,
    sleep: Callable[[float], None] | None = None,
) -> T:
    """Call ``fn`` until it succeeds or ``attempts`` retryable failures pile up.

    Exceptions rejected by ``retryable`` propagate unchanged. When every
    attempt fails a :class:`RemoteFetchError` wrapping the last error is raised.
    """
    pause = sleep if sleep is not None else time.sleep
    last_error: BaseException | None = None
    for i in range(max(1, attempts)):
        try:
            return fn()
        except Exception as e:
            if not retryable(e):
                raise
            last_error = e
            log.debug("%s failed (attempt %d/%d): %s", operation, i + 1, attempts, e)
            if i + 1 < attempts and backoff > 0:
                pause(backoff * (2**i))
    raise RemoteFetchError(operation, last_error) from last_error
