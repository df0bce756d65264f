#!/usr/bin/env python3
"""
Registry of scaling policies per group and alert rules per name
"""

import logging
import threading
from typing import Dict, List, Optional, Tuple

from metricctl.models import AlertRule, ScalingPolicy

logger = logging.getLogger(__name__)


class Registry:
    """Holds scaling policies (ordered per group) and alert rules (keyed by name)"""

    def __init__(self):
        self._lock = threading.RLock()
        self._policies: Dict[str, List[ScalingPolicy]] = {}
        self._rules: Dict[str, AlertRule] = {}

    def add_policy(self, group_id: str, policy: ScalingPolicy) -> ScalingPolicy:
        """
        Append a policy to the ordered list for a group

        Args:
            group_id: Scaling group
            policy: Policy to register; bound to group_id when it names no group

        Returns:
            The registered policy
        """
        if policy.group_id is None:
            policy = policy.model_copy(update={"group_id": group_id})
        elif policy.group_id != group_id:
            raise ValueError(f"Policy '{policy.label}' belongs to group '{policy.group_id}', not '{group_id}'")

        with self._lock:
            self._policies.setdefault(group_id, []).append(policy)
            position = len(self._policies[group_id])

        logger.info(f"Added policy '{policy.label}' to group '{group_id}' at position {position}")
        return policy

    def add_rule(self, name: str, rule: AlertRule) -> AlertRule:
        """
        Register a rule under name, replacing any rule already registered there

        Args:
            name: Rule name
            rule: Rule to register; renamed to name if it carries another

        Returns:
            The registered rule
        """
        if rule.name != name:
            rule = rule.model_copy(update={"name": name})

        with self._lock:
            # Re-registering moves the rule to the end of the evaluation order
            previous = self._rules.pop(name, None)
            self._rules[name] = rule

        if previous is not None:
            logger.warning(f"Alert rule with name '{name}' already exists. Overwriting.")
            if previous.rule_key != rule.rule_key:
                logger.warning(f"Alert rule '{name}' moved from '{previous.metric}' to '{rule.metric}'")
        else:
            logger.info(f"Added alert rule '{name}' on metric '{rule.metric}'")
        return rule

    def remove_rule(self, name: str) -> bool:
        with self._lock:
            removed = self._rules.pop(name, None) is not None
        if removed:
            logger.info(f"Removed alert rule '{name}'")
        else:
            logger.warning(f"Attempted to remove non-existent alert rule '{name}'")
        return removed

    def clear_policies(self, group_id: str) -> int:
        """Drop every policy for a group; returns how many were removed"""
        with self._lock:
            removed = self._policies.pop(group_id, [])
        if removed:
            logger.info(f"Cleared {len(removed)} policies from group '{group_id}'")
        return len(removed)

    def policies_for(self, group_id: str) -> List[ScalingPolicy]:
        with self._lock:
            return list(self._policies.get(group_id, []))

    def groups(self) -> List[str]:
        with self._lock:
            return [group_id for group_id, policies in self._policies.items() if policies]

    def rule(self, name: str) -> Optional[AlertRule]:
        with self._lock:
            return self._rules.get(name)

    def all_rules(self) -> List[AlertRule]:
        with self._lock:
            return list(self._rules.values())

    def rules_for_metric(self, metric_name: str) -> List[AlertRule]:
        """Enabled rules watching metric_name, in registration order"""
        with self._lock:
            return [r for r in self._rules.values() if r.metric == metric_name and r.enabled]

    def load(self, config) -> Tuple[List[ScalingPolicy], List[AlertRule]]:
        """
        Register every policy and rule of a ControlConfig

        Returns:
            (registered policies, registered rules) in file order
        """
        policies = [self.add_policy(policy.group_id, policy) for policy in config.policies]
        rules = [self.add_rule(rule.name, rule) for rule in config.rules]
        return policies, rules
