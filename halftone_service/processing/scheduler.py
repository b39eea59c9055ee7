from __future__ import annotations

import logging
import threading
from typing import Callable, Optional, TypeVar

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class LatestOnlyRunner:
    """Run jobs so that only the most recently started one's result is kept.

    A job that finishes after a newer job has begun returns ``None`` instead
    of its result. Jobs are not interrupted; their output is just discarded.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._generation = 0

    def begin(self) -> int:
        with self._lock:
            self._generation += 1
            return self._generation

    def is_current(self, token: int) -> bool:
        with self._lock:
            return token == self._generation

    def run(self, func: Callable[..., T], *args, **kwargs) -> Optional[T]:
        token = self.begin()
        result = func(*args, **kwargs)
        if not self.is_current(token):
            LOGGER.debug("Discarding superseded run %d", token)
            return None
        return result
