from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import requests

from gclaction import __version__
from gclaction.errors import HttpStatusError

from .retry import DEFAULT_BACKOFF_SECONDS, retry_call

log = logging.getLogger(__name__)

REQUEST_TIMEOUT_SECONDS = 30
DOWNLOAD_CHUNK_SIZE = 1 << 16
USER_AGENT = f"gclaction/{__version__}"


def new_session(token: str | None = None) -> requests.Session:
    session = requests.Session()
    session.headers["User-Agent"] = USER_AGENT
    if token:
        session.headers["Authorization"] = f"Bearer {token}"
    return session


def _checked(response: requests.Response) -> requests.Response:
    if response.status_code != 200:
        raise HttpStatusError(response.url, response.status_code)
    return response


def get_text(
    session: requests.Session,
    url: str,
    *,
    operation: str,
    headers: dict[str, str] | None = None,
    params: dict[str, Any] | None = None,
    attempts: int = 3,
    backoff: float = DEFAULT_BACKOFF_SECONDS,
) -> str:
    def once() -> str:
        log.debug("GET %s", url)
        res = session.get(url, headers=headers, params=params, timeout=REQUEST_TIMEOUT_SECONDS)
        return _checked(res).text

    return retry_call(once, operation=operation, attempts=attempts, backoff=backoff)


def get_json(
    session: requests.Session,
    url: str,
    *,
    operation: str,
    headers: dict[str, str] | None = None,
    params: dict[str, Any] | None = None,
    attempts: int = 3,
    backoff: float = DEFAULT_BACKOFF_SECONDS,
) -> Any:
    text = get_text(
        session,
        url,
        operation=operation,
        headers=headers,
        params=params,
        attempts=attempts,
        backoff=backoff,
    )
    return json.loads(text)


def download_file(
    session: requests.Session,
    url: str,
    dest: Path,
    *,
    operation: str,
    attempts: int = 3,
    backoff: float = DEFAULT_BACKOFF_SECONDS,
) -> Path:
    def once() -> Path:
        log.debug("Downloading %s -> %s", url, dest)
        with session.get(url, stream=True, timeout=REQUEST_TIMEOUT_SECONDS) as res:
            _checked(res)
            dest.parent.mkdir(parents=True, exist_ok=True)
            with dest.open("wb") as fh:
                for chunk in res.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
                    if chunk:
                        fh.write(chunk)
        return dest

    return retry_call(once, operation=operation, attempts=attempts, backoff=backoff)
