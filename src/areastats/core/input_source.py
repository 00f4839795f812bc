from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Optional, TextIO, Union

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from areastats.config import HTTP_TIMEOUT_SECONDS
from areastats.core.errors import InputSourceError

logger = logging.getLogger(__name__)


def _build_retry_session() -> requests.Session:
    """
    Build a requests Session with conservative retries.
    Published dataset hosts can be slow or transiently flaky.
    """
    session = requests.Session()

    retry = Retry(
        total=5,
        connect=5,
        read=5,
        status=5,
        backoff_factor=0.6,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=frozenset({"GET"}),
        raise_on_status=False,
    )

    adapter = HTTPAdapter(max_retries=retry, pool_connections=4, pool_maxsize=4)
    session.mount("https://", adapter)
    session.mount("http://", adapter)

    return session


_SESSION: Optional[requests.Session] = None


def _get_session() -> requests.Session:
    global _SESSION
    if _SESSION is None:
        _SESSION = _build_retry_session()
    return _SESSION


class InputSource:
    """
    A place a dataset can be read from.

    open() returns a text stream; the source owns that stream and close()
    releases it. Sources are context managers:

        with InputFile("datasets/areas.csv") as stream:
            areas.populate(stream, ...)
    """

    def __init__(self, source: str) -> None:
        self.source = source
        self._stream: Optional[TextIO] = None

    def open(self) -> TextIO:
        raise NotImplementedError

    def close(self) -> None:
        if self._stream is not None:
            self._stream.close()
            self._stream = None

    def __enter__(self) -> TextIO:
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.source!r})"


class InputFile(InputSource):
    """A dataset file on local disk, read as UTF-8 (a leading BOM is dropped)."""

    def __init__(self, path: Union[str, Path]) -> None:
        super().__init__(str(path))

    def open(self) -> TextIO:
        if self._stream is not None:
            return self._stream
        try:
            self._stream = open(self.source, "r", encoding="utf-8-sig", newline="")
        except OSError as exc:
            raise InputSourceError(f"InputFile.open: Failed to open file {self.source}") from exc
        logger.info("Opened %s", self.source)
        return self._stream


class RemoteInputSource(InputSource):
    """A dataset fetched over HTTP(S); the body is held in memory."""

    def __init__(self, url: str, timeout_seconds: int = HTTP_TIMEOUT_SECONDS) -> None:
        super().__init__(url)
        self.timeout_seconds = timeout_seconds

    def open(self) -> TextIO:
        if self._stream is not None:
            return self._stream
        try:
            resp = _get_session().get(self.source, timeout=self.timeout_seconds)
        except requests.RequestException as exc:
            raise InputSourceError(f"HTTP error while fetching {self.source}: {exc}") from exc

        if resp.status_code != 200:
            preview = (resp.text or "")[:200]
            raise InputSourceError(
                f"Failed to fetch {self.source} (status={resp.status_code}). Preview: {preview}"
            )

        resp.encoding = resp.encoding or "utf-8"
        text = resp.text
        if text.startswith("\ufeff"):
            text = text[1:]
        logger.info("Fetched %s (%d characters)", self.source, len(text))
        self._stream = io.StringIO(text)
        return self._stream


def is_url(location: str) -> bool:
    return str(location).lower().startswith(("http://", "https://"))


def resolve_source(root: Union[str, Path], filename: str) -> InputSource:
    """Source for filename under root, which is a directory or a base URL."""
    root_str = str(root)
    if is_url(root_str):
        return RemoteInputSource(f"{root_str.rstrip('/')}/{filename}")
    return InputFile(Path(root_str) / filename)
