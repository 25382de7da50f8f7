#!/usr/bin/env python3
"""
Short-lived in-memory cache for sheet loads and dashboard aggregates
"""

import time
import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, Hashable, Optional

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    data: Any
    timestamp: float
    sequence: int


class TimedCache:
    """
    Key -> {data, timestamp} store with a freshness window.

    Entries older than ttl are not returned by get() but stay available to
    get_stale() so a failed reload can fall back to the last good result.
    Every load takes a ticket from begin(); put() drops results from a load
    that started before the one that produced the stored entry, or before
    the key was last invalidated or patched.
    """

    def __init__(self, ttl: float = 30.0, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[Hashable, CacheEntry] = {}
        self._sequence = 0
        # Loads with a ticket below the fence started before a write
        self._fences: Dict[Hashable, int] = {}
        self._fence_all = 0
        self._lock = threading.Lock()

    def begin(self) -> int:
        """Reserve a sequence number for a load about to start"""
        with self._lock:
            self._sequence += 1
            return self._sequence

    def get(self, key: Hashable) -> Optional[Any]:
        """Fresh data for key, or None on a miss or expiry"""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() - entry.timestamp >= self.ttl:
                return None
            return entry.data

    def get_stale(self, key: Hashable) -> Optional[Any]:
        """Last stored data for key regardless of age"""
        with self._lock:
            entry = self._entries.get(key)
            return entry.data if entry else None

    def put(self, key: Hashable, data: Any, sequence: Optional[int] = None) -> bool:
        """Store data unless a newer load already stored a result for key"""
        with self._lock:
            if sequence is None:
                self._sequence += 1
                sequence = self._sequence
            existing = self._entries.get(key)
            floor = max(self._fence_all, self._fences.get(key, 0))
            if existing is not None:
                floor = max(floor, existing.sequence)
            if sequence < floor:
                logger.info(f"Discarding stale result for {key!r} (load {sequence} < {floor})")
                return False
            self._entries[key] = CacheEntry(data=data, timestamp=self._clock(), sequence=sequence)
            return True

    def update(self, key: Hashable, patch: Callable[[Any], Any]) -> bool:
        """
        Replace the stored data for key with patch(data), keeping its age.

        The entry takes a new sequence number so a load that was already in
        flight cannot overwrite the patched data.
        """
        with self._lock:
            self._sequence += 1
            self._fences[key] = self._sequence
            entry = self._entries.get(key)
            if entry is None:
                return False
            entry.data = patch(entry.data)
            entry.sequence = self._sequence
            return True

    def invalidate(self, key: Optional[Hashable] = None):
        """Expire one key, or everything when key is None

        Expired entries are kept for stale fallback.
        """
        with self._lock:
            self._sequence += 1
            if key is None:
                self._fence_all = self._sequence
            else:
                self._fences[key] = self._sequence

            keys = list(self._entries) if key is None else [key]
            for k in keys:
                entry = self._entries.get(k)
                if entry is not None:
                    entry.timestamp = float('-inf')

    def clear(self):
        with self._lock:
            self._entries.clear()
