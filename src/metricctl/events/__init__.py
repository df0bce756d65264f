#!/usr/bin/env python3
"""
Events module for handing decisions and alerts to collaborators
"""

from .base import Event, EventType, EventHandler
from .core_events import (
    ScaleOutDecision,
    ScaleInDecision,
    AlertTriggered,
    AlertResolved,
    PolicyAdded,
    RuleAdded,
    decision_event,
    alert_event,
    policy_event,
    rule_event,
)
from .handlers import CallbackHandler, AlertLogHandler
from .event_bus import EventBus

__all__ = [
    "Event",
    "EventType",
    "EventHandler",
    "ScaleOutDecision",
    "ScaleInDecision",
    "AlertTriggered",
    "AlertResolved",
    "PolicyAdded",
    "RuleAdded",
    "decision_event",
    "alert_event",
    "policy_event",
    "rule_event",
    "CallbackHandler",
    "AlertLogHandler",
    "EventBus",
]
