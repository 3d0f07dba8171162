"""
Request Sequencing

Issues monotonically increasing tokens per request family so that a slow
response which finishes after a newer request of the same family started can
be recognised and discarded instead of overwriting fresher state.
"""

import logging
import threading
from typing import Dict, Hashable

logger = logging.getLogger(__name__)


class RequestSequencer:
    """Per-family monotonic token counter."""

    def __init__(self):
        self._lock = threading.Lock()
        self._latest: Dict[Hashable, int] = {}

    def issue(self, family: Hashable) -> int:
        with self._lock:
            token = self._latest.get(family, 0) + 1
            self._latest[family] = token
            return token

    def latest(self, family: Hashable) -> int:
        with self._lock:
            return self._latest.get(family, 0)

    def is_current(self, family: Hashable, token: int) -> bool:
        current = self.latest(family)
        if token != current:
            logger.info("Discarding stale response for %s (token %s, latest %s)", family, token, current)
            return False
        return True

    def reset(self) -> None:
        with self._lock:
            self._latest.clear()
