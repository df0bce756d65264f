#!/usr/bin/env python3
"""
Tests for the bounded metric store
"""

import threading

import pytest
from pydantic import ValidationError

from metricctl.core import MetricStore
from conftest import at


class TestMetricStore:
    """Test bounded per-key history"""

    def test_capacity_must_be_positive(self):
        with pytest.raises(ValueError):
            MetricStore(capacity=0)

    def test_record_and_read_back_in_order(self, store):
        for i in range(3):
            store.record("node-1", "cpu", float(i), at(i))

        samples = store.all("node-1", "cpu")

        assert [s.value for s in samples] == [0.0, 1.0, 2.0]
        assert [s.timestamp for s in samples] == [at(0), at(1), at(2)]

    def test_oldest_sample_evicted_when_full(self):
        store = MetricStore(capacity=3)
        for i in range(4):
            store.record("node-1", "cpu", float(i), at(i))

        values = store.values("node-1", "cpu")

        assert values == [1.0, 2.0, 3.0]
        assert 0.0 not in values

    def test_history_never_exceeds_capacity(self):
        store = MetricStore(capacity=5)
        for i in range(50):
            store.record("node-1", "cpu", float(i), at(i))
            assert len(store.all("node-1", "cpu")) <= 5

    def test_recent_returns_last_n(self, store):
        for i in range(10):
            store.record("node-1", "memory", float(i), at(i))

        assert [s.value for s in store.recent("node-1", "memory", 3)] == [7.0, 8.0, 9.0]

    def test_recent_with_short_history(self, store):
        store.record("node-1", "memory", 42.0, at(0))

        assert [s.value for s in store.recent("node-1", "memory", 5)] == [42.0]
        assert store.recent("node-1", "memory", 0) == []

    def test_unknown_key_reads_empty_without_creating(self, store):
        assert store.all("ghost", "cpu") == []
        assert store.recent("ghost", "cpu", 5) == []
        assert len(store) == 0

    def test_keys_are_independent(self, store):
        store.record("node-1", "cpu", 10.0, at(0))
        store.record("node-2", "cpu", 20.0, at(0))
        store.record("node-1", "memory", 30.0, at(0))

        assert store.values("node-1", "cpu") == [10.0]
        assert store.values("node-2", "cpu") == [20.0]
        assert store.values("node-1", "memory") == [30.0]
        assert set(store.keys()) == {("node-1", "cpu"), ("node-2", "cpu"), ("node-1", "memory")}

    def test_values_are_not_range_checked(self, store):
        store.record("node-1", "cpu", -500.0, at(0))
        store.record("node-1", "cpu", 1e9, at(1))

        assert store.values("node-1", "cpu") == [-500.0, 1e9]

    def test_samples_are_immutable(self, store):
        sample = store.record("node-1", "cpu", 1.0, at(0))

        with pytest.raises(ValidationError):
            sample.value = 2.0

    def test_snapshot_is_detached_from_store(self, store):
        store.record("node-1", "cpu", 1.0, at(0))
        snapshot = store.all("node-1", "cpu")

        store.record("node-1", "cpu", 2.0, at(1))

        assert len(snapshot) == 1

    def test_concurrent_writers_respect_capacity(self):
        store = MetricStore(capacity=50)

        def writer(offset):
            for i in range(200):
                store.record("node-1", "cpu", float(offset + i), at(i))

        threads = [threading.Thread(target=writer, args=(n * 1000,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(store.all("node-1", "cpu")) == 50
