#!/usr/bin/env python3
"""
Per-key locking for shared controller maps
"""

import threading
from typing import Dict, Hashable


class KeyedLocks:
    """Hands out one lock per key, created on first use"""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[Hashable, threading.Lock] = {}

    def get(self, key: Hashable) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
