#!/usr/bin/env python3
"""
Core event classes for the controller
"""

from dataclasses import dataclass

from metricctl.models import Alert, ScaleAction, ScalingDecision, AlertRule, ScalingPolicy
from .base import Event, EventType


@dataclass
class ScaleOutDecision(Event):
    """Event published when a group should gain instances"""
    event_type: EventType = EventType.SCALE_OUT_DECISION
    required_keys = ("group_id", "amount")


@dataclass
class ScaleInDecision(Event):
    """Event published when a group should lose instances"""
    event_type: EventType = EventType.SCALE_IN_DECISION
    required_keys = ("group_id", "amount")


@dataclass
class AlertTriggered(Event):
    """Event published when an alert becomes active"""
    event_type: EventType = EventType.ALERT_TRIGGERED
    required_keys = ("rule_key", "severity")


@dataclass
class AlertResolved(Event):
    """Event published when an active alert resolves"""
    event_type: EventType = EventType.ALERT_RESOLVED
    required_keys = ("rule_key", "severity")


@dataclass
class PolicyAdded(Event):
    """Event published when a scaling policy is registered"""
    event_type: EventType = EventType.POLICY_ADDED
    required_keys = ("group_id", "policy")


@dataclass
class RuleAdded(Event):
    """Event published when an alert rule is registered"""
    event_type: EventType = EventType.RULE_ADDED
    required_keys = ("name", "rule")


def decision_event(decision: ScalingDecision) -> Event:
    """Wrap a scaling decision in the matching event"""
    event_cls = ScaleOutDecision if decision.action == ScaleAction.SCALE_OUT else ScaleInDecision
    return event_cls(data=decision.model_dump(mode="json"))


def alert_event(alert: Alert) -> Event:
    """Wrap an alert transition in the matching event"""
    event_cls = AlertTriggered if alert.active else AlertResolved
    data = alert.model_dump(mode="json")
    data["severity"] = alert.severity.value
    return event_cls(data=data)


def policy_event(policy: ScalingPolicy) -> Event:
    return PolicyAdded(data={"group_id": policy.group_id, "policy": policy.model_dump(mode="json")})


def rule_event(rule: AlertRule) -> Event:
    return RuleAdded(data={"name": rule.name, "rule": rule.model_dump(mode="json")})
