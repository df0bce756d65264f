#!/usr/bin/env python3
"""
Bounded rolling history of metric samples per (entity, metric) key
"""

import logging
import threading
from collections import deque
from datetime import datetime
from typing import Deque, Dict, List, Tuple

from metricctl.models import MetricSample
from .locks import KeyedLocks

logger = logging.getLogger(__name__)

HistoryKey = Tuple[str, str]


class MetricStore:
    """
    Keeps the last `capacity` samples for every (entity_key, metric_name) pair.

    Histories are created on the first sample for a key and live as long as the
    store. Once a history is full the oldest sample is dropped before the new one
    is appended. Values are stored as given; range checking is the caller's job.
    """

    def __init__(self, capacity: int = 100):
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self._capacity = capacity
        self._histories: Dict[HistoryKey, Deque[MetricSample]] = {}
        self._create_lock = threading.Lock()
        self._locks = KeyedLocks()

    @property
    def capacity(self) -> int:
        return self._capacity

    def record(self, entity_key: str, metric_name: str, value: float, timestamp: datetime) -> MetricSample:
        """
        Append a sample to the history for (entity_key, metric_name)

        Args:
            entity_key: Entity the sample belongs to (instance, node, stream)
            metric_name: Metric name
            value: Sampled value
            timestamp: Sample time

        Returns:
            The stored sample
        """
        sample = MetricSample(value=value, timestamp=timestamp)
        key = (entity_key, metric_name)
        history = self._history(key)
        with self._locks.get(key):
            # deque(maxlen) evicts from the left on append
            history.append(sample)
        return sample

    def recent(self, entity_key: str, metric_name: str, n: int) -> List[MetricSample]:
        """Return the last n samples (fewer if the history is shorter), oldest first"""
        if n <= 0:
            return []
        snapshot = self.all(entity_key, metric_name)
        return snapshot[-n:]

    def all(self, entity_key: str, metric_name: str) -> List[MetricSample]:
        """Return the full bounded window, oldest first"""
        key = (entity_key, metric_name)
        history = self._histories.get(key)
        if history is None:
            return []
        with self._locks.get(key):
            return list(history)

    def values(self, entity_key: str, metric_name: str, n: int = 0) -> List[float]:
        """Sample values only; the last n when n > 0, otherwise the whole window"""
        samples = self.recent(entity_key, metric_name, n) if n > 0 else self.all(entity_key, metric_name)
        return [s.value for s in samples]

    def keys(self) -> List[HistoryKey]:
        with self._create_lock:
            return list(self._histories.keys())

    def __len__(self) -> int:
        return len(self._histories)

    def _history(self, key: HistoryKey) -> Deque[MetricSample]:
        history = self._histories.get(key)
        if history is None:
            with self._create_lock:
                history = self._histories.get(key)
                if history is None:
                    history = deque(maxlen=self._capacity)
                    self._histories[key] = history
                    logger.debug(f"Created history for {key[0]}/{key[1]} (capacity {self._capacity})")
        return history
