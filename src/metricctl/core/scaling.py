#!/usr/bin/env python3
"""
Scaling engine module for making scaling decisions
"""

import logging
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from typing import Deque, Dict, Iterable, List, Optional

from metricctl.events import EventBus, decision_event
from metricctl.events.event_metrics import metrics_collector
from metricctl.models import MetricDimension, ScaleDirection, ScalingDecision, ScalingPolicy
from .locks import KeyedLocks
from .metric_store import MetricStore
from .registry import Registry

logger = logging.getLogger(__name__)


@dataclass
class CooldownState:
    """When a group last scaled and how long the firing policy asked it to wait"""
    last_scaled_at: datetime
    cooldown_seconds: float
    policy_name: str

    def remaining(self, now: datetime) -> float:
        elapsed = (now - self.last_scaled_at).total_seconds()
        return max(0.0, self.cooldown_seconds - elapsed)


class ScalingEngine:
    """Makes scaling decisions based on pooled member metrics and group policies"""

    def __init__(
        self,
        store: MetricStore,
        registry: Registry,
        window_size: int = 5,
        decision_history: int = 100,
        event_bus: Optional[EventBus] = None
    ):
        """
        Initialize scaling engine

        Args:
            store: Metric store holding per-member samples
            registry: Registry holding the group policies
            window_size: Recent samples per member and dimension pooled into each mean
            decision_history: Number of recent decisions kept for inspection
            event_bus: Optional bus receiving a decision event for every decision
        """
        self.store = store
        self.registry = registry
        self.window_size = window_size
        self.event_bus = event_bus
        self._cooldowns: Dict[str, CooldownState] = {}
        self._decisions: Deque[ScalingDecision] = deque(maxlen=decision_history)
        self._locks = KeyedLocks()

    def evaluate(self, group_id: str, member_keys: Iterable[str], now: datetime) -> Optional[ScalingDecision]:
        """
        Evaluate a group's policies against its members' recent metrics

        Args:
            group_id: Scaling group
            member_keys: Entity keys of the group's current members
            now: Evaluation time; timezone-aware, since it is compared with earlier decision times (MetricsController treats naive values as UTC)

        Returns:
            ScalingDecision, or None when cooling down, without data, or when no policy fires
        """
        policies = self.registry.policies_for(group_id)
        if not policies:
            raise KeyError(f"No scaling policies registered for group '{group_id}'")

        with self._locks.get(group_id):
            # Check if we're in cooldown
            cooldown = self._cooldowns.get(group_id)
            if cooldown is not None and cooldown.remaining(now) > 0:
                logger.debug(
                    f"Group '{group_id}' in cooldown after '{cooldown.policy_name}' "
                    f"({cooldown.remaining(now):.1f}s remaining)"
                )
                metrics_collector.record_scaling_skipped(group_id, "cooldown")
                return None

            means = self.aggregate(member_keys)
            if not means:
                logger.debug(f"Group '{group_id}' has no samples yet")
                metrics_collector.record_scaling_skipped(group_id, "no_data")
                return None

            decision = None
            for policy in policies:
                if not policy.enabled:
                    continue
                mean = means.get(policy.metric)
                if mean is None or not policy.crosses(mean):
                    continue

                decision = self._decide(group_id, policy, mean, now)
                self._cooldowns[group_id] = CooldownState(
                    last_scaled_at=now,
                    cooldown_seconds=policy.cooldown_seconds,
                    policy_name=policy.label,
                )
                self._decisions.append(decision)
                break

        if decision is None:
            logger.debug(f"Group '{group_id}': no scaling conditions met ({self._format_means(means)})")
            metrics_collector.record_scaling_skipped(group_id, "no_match")
            return None

        logger.info(f"Scaling decision: {decision.action.value} by {decision.amount} for group "
                    f"'{group_id}' - {decision.reason}")
        metrics_collector.record_scaling_decision(group_id, decision.action.value)
        if self.event_bus is not None:
            self.event_bus.publish(decision_event(decision))
        return decision

    def aggregate(self, member_keys: Iterable[str]) -> Dict[MetricDimension, float]:
        """
        Pool the last window_size samples of every member per dimension

        Args:
            member_keys: Entity keys to pool

        Returns:
            Mean per dimension; dimensions without any samples are left out
        """
        members = list(member_keys)
        means: Dict[MetricDimension, float] = {}
        for dimension in MetricDimension:
            pool: List[float] = []
            for member in members:
                pool.extend(self.store.values(member, dimension.value, self.window_size))
            if pool:
                means[dimension] = sum(pool) / len(pool)
        return means

    def in_cooldown(self, group_id: str, now: datetime) -> bool:
        return self.cooldown_remaining(group_id, now) > 0

    def cooldown_remaining(self, group_id: str, now: datetime) -> float:
        """Seconds until the group may scale again; 0 when idle"""
        cooldown = self._cooldowns.get(group_id)
        if cooldown is None:
            return 0.0
        return cooldown.remaining(now)

    def recent_decisions(self, group_id: Optional[str] = None, limit: Optional[int] = None) -> List[ScalingDecision]:
        """Recent decisions, oldest first, optionally for one group"""
        decisions = list(self._decisions)
        if group_id is not None:
            decisions = [d for d in decisions if d.group_id == group_id]
        if limit is not None:
            decisions = decisions[-limit:] if limit > 0 else []
        return decisions

    def _decide(self, group_id: str, policy: ScalingPolicy, mean: float, now: datetime) -> ScalingDecision:
        comparator = ">=" if policy.direction == ScaleDirection.UP else "<="
        return ScalingDecision(
            group_id=group_id,
            action=policy.action,
            amount=policy.scale_amount,
            reason=f"Policy '{policy.label}' triggered: {policy.metric.value} {mean:.2f} "
                   f"{comparator} {policy.threshold:g}",
            metric=policy.metric,
            observed=mean,
            threshold=policy.threshold,
            cooldown_seconds=policy.cooldown_seconds,
            policy_name=policy.label,
            decided_at=now,
        )

    @staticmethod
    def _format_means(means: Dict[MetricDimension, float]) -> str:
        return ", ".join(f"{dimension.value}={value:.2f}" for dimension, value in means.items())
