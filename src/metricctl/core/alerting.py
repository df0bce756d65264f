#!/usr/bin/env python3
"""
Alert evaluator: threshold rules over bounded per-metric history

Rules compare `gt`/`lt` against the rolling mean of the whole window, which
damps single noisy samples. `eq` compares the latest raw sample instead, since
an exact match on a mean is rarely meaningful (an error rate of exactly zero
is a property of the current sample). Any other condition never fires.

Each rule key (`metric:rule_name`) moves through::

    absent -> active -> resolved -> active -> ...

Resolved alerts are kept; a re-trigger creates a new record.
"""

import logging
import threading
from datetime import datetime
from typing import Dict, List, Optional, Set, Tuple

from metricctl.events import EventBus, alert_event
from metricctl.events.event_metrics import metrics_collector
from metricctl.models import Alert, AlertCondition, AlertRule
from .locks import KeyedLocks
from .metric_store import MetricStore
from .registry import Registry

logger = logging.getLogger(__name__)

# Alert histories are keyed by metric name only
STREAM_ENTITY = "*"


def evaluate_condition(rule: AlertRule, mean: float, latest: float) -> Tuple[bool, Optional[float]]:
    """
    Evaluate a rule's condition

    Returns:
        (condition holds, value that was compared)
    """
    if rule.condition == AlertCondition.GT:
        return mean > rule.threshold, mean
    if rule.condition == AlertCondition.LT:
        return mean < rule.threshold, mean
    if rule.condition == AlertCondition.EQ:
        return latest == rule.threshold, latest
    return False, None


class AlertEvaluator:
    """Maintains alert state per rule from a stream of metric observations"""

    def __init__(
        self,
        registry: Registry,
        history_capacity: int = 100,
        event_bus: Optional[EventBus] = None
    ):
        self.registry = registry
        self.event_bus = event_bus
        self.history = MetricStore(capacity=history_capacity)
        self._current: Dict[str, Alert] = {}
        self._records: List[Alert] = []
        self._records_lock = threading.Lock()
        self._locks = KeyedLocks()
        self._capped: Set[str] = set()

    def observe(self, metric_name: str, value: float, now: datetime) -> List[Alert]:
        """
        Record a value for metric_name and evaluate every rule watching it

        Args:
            metric_name: Metric stream
            value: Observed value
            now: Observation time

        Returns:
            Alerts that triggered or resolved on this observation
        """
        with self._locks.get(metric_name):
            self.history.record(STREAM_ENTITY, metric_name, value, now)
            transitions = self._evaluate_locked(metric_name, now)
        self._publish(transitions)
        return transitions

    def evaluate(self, metric_name: str, now: datetime) -> List[Alert]:
        """Re-evaluate the rules for metric_name against the current window without adding a sample"""
        with self._locks.get(metric_name):
            transitions = self._evaluate_locked(metric_name, now)
        self._publish(transitions)
        return transitions

    def active_alerts(self) -> List[Alert]:
        with self._records_lock:
            return [a.model_copy() for a in self._records if a.active]

    def all_alerts(self) -> List[Alert]:
        """Every alert record ever created, resolved ones included, oldest first"""
        with self._records_lock:
            return [a.model_copy() for a in self._records]

    def alert_for(self, rule_key: str) -> Optional[Alert]:
        """Latest alert record for a rule key"""
        with self._records_lock:
            alert = self._current.get(rule_key)
            return alert.model_copy() if alert is not None else None

    def history_for(self, metric_name: str) -> List[float]:
        return self.history.values(STREAM_ENTITY, metric_name)

    def required_samples(self, rule: AlertRule) -> int:
        """Samples a rule needs before it is judged, capped at the history capacity"""
        capacity = self.history.capacity
        if rule.min_samples <= capacity:
            return rule.min_samples
        if rule.rule_key not in self._capped:
            self._capped.add(rule.rule_key)
            logger.warning(f"Rule '{rule.name}' wants {rule.min_samples} samples but only {capacity} "
                           f"are kept for '{rule.metric}'; judging it after {capacity}")
        return capacity

    def retire(self, rule: AlertRule, now: datetime) -> Optional[Alert]:
        """
        Resolve the active alert of a rule that no longer watches its rule key

        Args:
            rule: The rule as it was registered before being replaced or moved
            now: Resolution time

        Returns:
            The resolved alert, or None if the rule had no active alert
        """
        with self._locks.get(rule.metric):
            with self._records_lock:
                current = self._current.get(rule.rule_key)
                if current is None or not current.active:
                    return None
                current.active = False
                current.resolved_at = now
                snapshot = current.model_copy()

        logger.info(f"Alert resolved: {rule.rule_key} (rule replaced)")
        metrics_collector.record_alert_transition(snapshot.rule.name, snapshot.severity.value, False)
        self._publish([snapshot])
        return snapshot

    def _evaluate_locked(self, metric_name: str, now: datetime) -> List[Alert]:
        rules = self.registry.rules_for_metric(metric_name)
        if not rules:
            return []

        window = self.history.values(STREAM_ENTITY, metric_name)
        if not window:
            return []
        mean = sum(window) / len(window)
        latest = window[-1]

        transitions: List[Alert] = []
        for rule in rules:
            required = self.required_samples(rule)
            if len(window) < required:
                logger.debug(f"Rule '{rule.name}' warming up ({len(window)}/{required} samples)")
                continue

            triggered, compared = evaluate_condition(rule, mean, latest)
            alert = self._transition(rule, triggered, compared, now)
            if alert is not None:
                transitions.append(alert)
        return transitions

    def _transition(self, rule: AlertRule, triggered: bool, compared: Optional[float], now: datetime) -> Optional[Alert]:
        key = rule.rule_key
        with self._records_lock:
            current = self._current.get(key)
            is_active = current is not None and current.active

            if triggered and not is_active:
                alert = Alert(
                    rule_key=key,
                    rule=rule,
                    triggered_at=now,
                    active=True,
                    trigger_value=compared,
                )
                self._current[key] = alert
                self._records.append(alert)
                snapshot = alert.model_copy()
            elif not triggered and is_active:
                current.active = False
                current.resolved_at = now
                current.resolve_value = compared
                snapshot = current.model_copy()
            else:
                return None

        if snapshot.active:
            logger.warning(f"Alert triggered: {key} [{rule.severity.value}] "
                           f"{rule.condition_name} {rule.threshold:g} (value: {compared})")
        else:
            logger.info(f"Alert resolved: {key} (value: {compared})")
        # Resolutions are counted under the severity the alert triggered with
        metrics_collector.record_alert_transition(rule.name, snapshot.severity.value, snapshot.active)
        return snapshot

    def _publish(self, transitions: List[Alert]):
        if self.event_bus is None:
            return
        for alert in transitions:
            self.event_bus.publish(alert_event(alert))
