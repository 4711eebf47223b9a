"""
Short-lived in-memory storage for compression statistics.

Entries expire after a fixed TTL. Expired entries are dropped lazily on
read and swept on every write; the store also caps the number of entries,
evicting the oldest first.
"""
import time
import logging
import threading
from collections import OrderedDict
from typing import Callable, Optional, Tuple

from paperflow import config
from paperflow.models.compression import CompressionStatsRecord

logger = logging.getLogger(__name__)


class CompressionStatsStore:
    """Thread-safe TTL store of CompressionStatsRecord keyed by compression ID."""

    def __init__(
        self,
        ttl_seconds: float = config.STATS_TTL_SECONDS,
        max_entries: int = config.STATS_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic
    ):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max(1, max_entries)
        self._clock = clock
        self._entries: "OrderedDict[str, Tuple[float, CompressionStatsRecord]]" = OrderedDict()
        self._lock = threading.Lock()

    def put(self, record: CompressionStatsRecord) -> str:
        """Store a record and return its ID."""
        with self._lock:
            now = self._clock()
            self._sweep(now)
            self._entries.pop(record.id, None)
            self._entries[record.id] = (now + self.ttl_seconds, record)
            while len(self._entries) > self.max_entries:
                evicted_id, _ = self._entries.popitem(last=False)
                logger.debug(f"Evicted compression stats {evicted_id} (store full)")
        return record.id

    def get(self, compression_id: str) -> Optional[CompressionStatsRecord]:
        """Return a record, or None if it is unknown or expired."""
        with self._lock:
            entry = self._entries.get(compression_id)
            if entry is None:
                return None
            expires_at, record = entry
            if expires_at <= self._clock():
                del self._entries[compression_id]
                return None
            return record

    def sweep(self) -> int:
        """Drop all expired entries and return how many were removed."""
        with self._lock:
            return self._sweep(self._clock())

    def _sweep(self, now: float) -> int:
        # Entries are kept in insertion order, and every entry has the same TTL
        removed = 0
        while self._entries:
            first_id, (expires_at, _) = next(iter(self._entries.items()))
            if expires_at > now:
                break
            del self._entries[first_id]
            removed += 1
        return removed

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


# Process-wide store used by the API
compression_stats = CompressionStatsStore()
