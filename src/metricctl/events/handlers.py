#!/usr/bin/env python3
"""
Event handlers bridging controller events to actuators and notifiers
"""

import logging
from typing import Callable, Optional

from metricctl.models import AlertSeverity
from .base import Event, EventHandler, EventType

logger = logging.getLogger(__name__)

SEVERITY_LOG_LEVELS = {
    AlertSeverity.CRITICAL.value: logging.CRITICAL,
    AlertSeverity.WARNING.value: logging.WARNING,
    AlertSeverity.INFO.value: logging.INFO,
}


class CallbackHandler(EventHandler):
    """Adapts a plain callable (cloud actuator, pager client) to the handler interface"""

    def __init__(self, name: str, callback: Callable[[Event], Optional[bool]]):
        super().__init__(name)
        self.callback = callback

    def handle(self, event: Event) -> bool:
        # Callbacks returning None count as handled
        result = self.callback(event)
        return True if result is None else bool(result)


class AlertLogHandler(EventHandler):
    """Logs alert transitions at a level matching the alert severity"""

    def __init__(self, log: Optional[logging.Logger] = None):
        super().__init__("AlertLogHandler")
        self.log = log or logger

    def handle(self, event: Event) -> bool:
        """
        Handle AlertTriggered / AlertResolved events

        Args:
            event: The alert event

        Returns:
            True if handled successfully
        """
        severity = event.data.get("severity", AlertSeverity.INFO.value)
        rule_key = event.data.get("rule_key")

        if event.event_type == EventType.ALERT_TRIGGERED:
            level = SEVERITY_LOG_LEVELS.get(severity, logging.INFO)
            self.log.log(
                level,
                f"ALERT [{severity}] {rule_key} triggered at {event.data.get('triggered_at')} "
                f"(value: {event.data.get('trigger_value')})"
            )
        elif event.event_type == EventType.ALERT_RESOLVED:
            self.log.info(
                f"RESOLVED [{severity}] {rule_key} at {event.data.get('resolved_at')} "
                f"(value: {event.data.get('resolve_value')})"
            )
        else:
            return False
        return True
