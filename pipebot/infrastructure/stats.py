"""Operational stats recording."""

import threading
from typing import Dict


class StatsRecorder:
    """In-memory key/value stats, last write wins. Implements StatsPort."""

    def __init__(self):
        self._lock = threading.Lock()
        self._stats: Dict[str, str] = {}

    def record_stat(self, key: str, value: str) -> None:
        with self._lock:
            self._stats[key] = str(value)

    def get_stats(self) -> Dict[str, str]:
        """Return a copy of all stats, sorted by key."""
        with self._lock:
            return {k: self._stats[k] for k in sorted(self._stats)}