from __future__ import annotations

import logging
import time
from typing import Callable
from urllib.parse import urlsplit

import requests

from ..config import SETTINGS, ServiceSettings
from ..processing.buffer import PixelBuffer
from .codec import decode_image

LOGGER = logging.getLogger(__name__)

SessionFactory = Callable[[], requests.Session]


class SourceError(RuntimeError):
    """Raised when the source image cannot be fetched after all retries."""


def _check_url(url: str) -> str:
    parts = urlsplit(url or "")
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise ValueError(f"Invalid source URL: {url!r}")
    return url


class SourceFetcher:
    def __init__(
        self,
        session_factory: SessionFactory | None = None,
        settings: ServiceSettings = SETTINGS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._session_factory = session_factory or requests.Session
        self._settings = settings
        self._sleep = sleep
        self._session = self._create_session()

    def _create_session(self) -> requests.Session:
        session = self._session_factory()
        session.headers.update({"User-Agent": "halftone-service/1.0"})
        return session

    def fetch_source(self, url: str) -> PixelBuffer:
        target_url = _check_url(url)
        last_exception: Exception | None = None
        attempts = self._settings.retries + 1
        for attempt in range(1, attempts + 1):
            try:
                response = self._session.get(target_url, timeout=self._settings.timeout)
                response.raise_for_status()
                return decode_image(response.content)
            except requests.RequestException as exc:
                LOGGER.warning("Fetching %s failed (attempt %d): %s", target_url, attempt, exc)
                last_exception = exc
                if attempt < attempts:
                    self._sleep(0.4 * attempt)
        raise SourceError(last_exception)


FETCHER = SourceFetcher()
