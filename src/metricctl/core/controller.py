#!/usr/bin/env python3
"""
Controller that owns the metric store, registry, scaling engine and alert evaluator
"""

import logging
import threading
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from metricctl.config import Settings, load_control_file
from metricctl.events import EventBus, EventHandler, EventType, policy_event, rule_event
from metricctl.models import Alert, AlertRule, MetricSample, ScalingDecision, ScalingPolicy
from .alerting import AlertEvaluator
from .logging_config import configure_logging_from_settings
from .metric_store import MetricStore
from .registry import Registry
from .scaling import ScalingEngine

logger = logging.getLogger(__name__)


class MetricsController:
    """
    Single entry point for samplers, config loaders, schedulers and notifiers.

    All state lives on the instance; construct one per control loop and pass it
    to the collaborators that feed or poll it.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        event_bus: Optional[EventBus] = None,
        setup_logging: bool = False
    ):
        """
        Initialize the controller

        Args:
            settings: Controller settings (defaults read from the environment)
            event_bus: Bus for decisions and alert transitions; a private one is created if omitted
            setup_logging: Install the handlers described by settings.logging on the metricctl logger
        """
        self.settings = settings or Settings()
        if setup_logging:
            self.configure_logging()
        self.event_bus = event_bus or EventBus()

        self.store = MetricStore(capacity=self.settings.store.history_capacity)
        self.registry = Registry()
        self.scaling = ScalingEngine(
            self.store,
            self.registry,
            window_size=self.settings.scaling.window_size,
            decision_history=self.settings.scaling.decision_history,
            event_bus=self.event_bus,
        )
        self.alerts = AlertEvaluator(
            self.registry,
            history_capacity=self.settings.alerting.history_capacity,
            event_bus=self.event_bus,
        )

        self._members: Dict[str, List[str]] = {}
        self._members_lock = threading.Lock()

        logger.info(f"Metrics controller initialized ({self.settings.environment}): "
                    f"store capacity {self.store.capacity}, scaling window {self.scaling.window_size}")
        if self.settings.debug:
            logger.debug(f"Debug mode enabled. Settings: {self.settings.get_config_dict()}")

    def configure_logging(self) -> logging.Logger:
        return configure_logging_from_settings(self.settings)

    # Inbound: samplers

    def record(self, entity_key: str, metric_name: str, value: float, timestamp: Optional[datetime] = None) -> MetricSample:
        return self.store.record(entity_key, metric_name, value, _as_utc(timestamp))

    def observe(self, metric_name: str, value: float, timestamp: Optional[datetime] = None) -> List[Alert]:
        return self.alerts.observe(metric_name, value, _as_utc(timestamp))

    # Inbound: configuration

    def add_policy(self, group_id: str, policy: ScalingPolicy) -> ScalingPolicy:
        registered = self.registry.add_policy(group_id, policy)
        self.event_bus.publish(policy_event(registered))
        return registered

    def add_rule(self, name: str, rule: AlertRule, now: Optional[datetime] = None) -> AlertRule:
        """
        Register an alert rule and publish it

        Replacing a rule with one on another metric resolves the alert the old
        rule left active, at now.
        """
        previous = self.registry.rule(name)
        registered = self.registry.add_rule(name, rule)
        self._rule_registered(previous, registered, _as_utc(now))
        return registered

    def load_config(self, path: str, now: Optional[datetime] = None) -> None:
        """Register every policy and rule declared in a YAML control file"""
        config = load_control_file(path, default_min_samples=self.settings.alerting.default_min_samples)
        previous = {rule.name: rule for rule in self.registry.all_rules()}

        policies, rules = self.registry.load(config)

        now = _as_utc(now)
        for policy in policies:
            self.event_bus.publish(policy_event(policy))
        for rule in rules:
            self._rule_registered(previous.get(rule.name), rule, now)
            previous[rule.name] = rule

    def _rule_registered(self, previous: Optional[AlertRule], rule: AlertRule, now: datetime):
        if previous is not None and previous.rule_key != rule.rule_key:
            self.alerts.retire(previous, now)
        # Warns once when the rule asks for more samples than are kept
        self.alerts.required_samples(rule)
        self.event_bus.publish(rule_event(rule))

    def add_group_members(self, group_id: str, member_keys: Iterable[str]) -> List[str]:
        """Track entity keys as members of a group for run_cycle"""
        with self._members_lock:
            members = self._members.setdefault(group_id, [])
            for key in member_keys:
                if key not in members:
                    members.append(key)
            return list(members)

    def remove_group_member(self, group_id: str, member_key: str) -> bool:
        with self._members_lock:
            members = self._members.get(group_id, [])
            if member_key in members:
                members.remove(member_key)
                return True
            return False

    def members(self, group_id: str) -> List[str]:
        with self._members_lock:
            return list(self._members.get(group_id, []))

    def subscribe(self, event_type: EventType, handler: EventHandler):
        self.event_bus.subscribe(event_type, handler)

    # Outbound: schedulers and notifiers

    def evaluate(self, group_id: str, member_keys: Iterable[str], now: Optional[datetime] = None) -> Optional[ScalingDecision]:
        return self.scaling.evaluate(group_id, member_keys, _as_utc(now))

    def run_cycle(self, now: Optional[datetime] = None) -> Dict[str, Optional[ScalingDecision]]:
        """
        Evaluate every group that has policies and tracked members

        Args:
            now: Evaluation time shared by every group in the cycle

        Returns:
            Decision (or None) per evaluated group
        """
        now = _as_utc(now)
        with self._members_lock:
            tracked = {group_id: list(keys) for group_id, keys in self._members.items() if keys}

        results: Dict[str, Optional[ScalingDecision]] = {}
        for group_id in self.registry.groups():
            if group_id not in tracked:
                logger.debug(f"Skipping group '{group_id}': no tracked members")
                continue
            results[group_id] = self.scaling.evaluate(group_id, tracked[group_id], now)

        decided = sum(1 for d in results.values() if d is not None)
        logger.info(f"Cycle at {now.isoformat()}: evaluated {len(results)} groups, {decided} decisions")
        return results

    def active_alerts(self) -> List[Alert]:
        return self.alerts.active_alerts()

    def all_alerts(self) -> List[Alert]:
        return self.alerts.all_alerts()


def _as_utc(timestamp: Optional[datetime]) -> datetime:
    """Current time when omitted; naive timestamps are taken to be UTC"""
    if timestamp is None:
        return datetime.now(timezone.utc)
    if timestamp.tzinfo is None:
        return timestamp.replace(tzinfo=timezone.utc)
    return timestamp
