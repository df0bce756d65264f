#!/usr/bin/env python3
"""
Shared fixtures for the controller test suite
"""

import logging
from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import pytest

from metricctl.config import Settings, StoreSettings, ScalingSettings, AlertingSettings
from metricctl.core import MetricStore, Registry, MetricsController
from metricctl.events import EventBus, EventHandler

T0 = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def at(seconds: float) -> datetime:
    """Timestamp `seconds` after T0"""
    return T0 + timedelta(seconds=seconds)


@pytest.fixture
def store():
    return MetricStore(capacity=100)


@pytest.fixture
def registry():
    return Registry()


@pytest.fixture
def event_bus():
    return EventBus()


@pytest.fixture
def settings():
    return Settings(
        store=StoreSettings(history_capacity=100),
        scaling=ScalingSettings(window_size=5, decision_history=100),
        alerting=AlertingSettings(history_capacity=100, default_min_samples=10),
    )


@pytest.fixture
def controller(settings, event_bus):
    return MetricsController(settings=settings, event_bus=event_bus)


@pytest.fixture
def recording_handler():
    """Handler mock that records every event it receives"""
    handler = Mock(spec=EventHandler)
    handler.name = "recording"
    handler.handle.return_value = True
    return handler


@pytest.fixture
def package_logger():
    """The metricctl logger, restored after the test"""
    package = logging.getLogger("metricctl")
    handlers, level, propagate = package.handlers[:], package.level, package.propagate
    yield package
    for handler in package.handlers[:]:
        if handler not in handlers:
            package.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in package.handlers:
            package.addHandler(handler)
    package.setLevel(level)
    package.propagate = propagate
