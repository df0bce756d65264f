#!/usr/bin/env python3
"""
Prometheus metrics for controller decisions, alerts and event dispatch
"""

import logging
from prometheus_client import Counter, Histogram, Gauge

logger = logging.getLogger(__name__)

# Event Bus Metrics
EVENT_BUS_PUBLISHED_TOTAL = Counter(
    'metricctl_event_bus_published_total',
    'Total events published to event bus',
    ['event_type']
)

EVENT_BUS_PROCESSED_TOTAL = Counter(
    'metricctl_event_bus_processed_total',
    'Total events processed by handlers',
    ['event_type', 'handler', 'status']
)

EVENT_BUS_HANDLER_DURATION = Histogram(
    'metricctl_event_bus_handler_duration_seconds',
    'Time taken to process events by handlers',
    ['event_type', 'handler'],
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0]
)

EVENT_BUS_SUBSCRIBERS = Gauge(
    'metricctl_event_bus_subscribers_count',
    'Number of subscribers per event type',
    ['event_type']
)

# Decision Metrics
SCALING_DECISIONS_TOTAL = Counter(
    'metricctl_scaling_decisions_total',
    'Scaling decisions emitted',
    ['group', 'action']
)

SCALING_SKIPPED_TOTAL = Counter(
    'metricctl_scaling_skipped_total',
    'Scaling evaluations that produced no decision',
    ['group', 'reason']
)

# Alert Metrics
ALERT_TRANSITIONS_TOTAL = Counter(
    'metricctl_alert_transitions_total',
    'Alert state transitions',
    ['rule', 'severity', 'state']
)

ACTIVE_ALERTS = Gauge(
    'metricctl_active_alerts',
    'Currently active alerts',
    ['severity']
)


class EventMetricsCollector:
    """Collects and manages controller metrics"""

    def record_event_published(self, event_type: str):
        EVENT_BUS_PUBLISHED_TOTAL.labels(event_type=event_type).inc()

    def record_event_processed(self, event_type: str, handler: str, success: bool, duration: float):
        """Record a handler invocation"""
        status = 'success' if success else 'failed'
        EVENT_BUS_PROCESSED_TOTAL.labels(
            event_type=event_type,
            handler=handler,
            status=status
        ).inc()
        EVENT_BUS_HANDLER_DURATION.labels(
            event_type=event_type,
            handler=handler
        ).observe(duration)

    def update_subscriber_count(self, event_type: str, count: int):
        EVENT_BUS_SUBSCRIBERS.labels(event_type=event_type).set(count)

    def record_scaling_decision(self, group: str, action: str):
        SCALING_DECISIONS_TOTAL.labels(group=group, action=action).inc()

    def record_scaling_skipped(self, group: str, reason: str):
        SCALING_SKIPPED_TOTAL.labels(group=group, reason=reason).inc()

    def record_alert_transition(self, rule: str, severity: str, active: bool):
        """Record a trigger or resolution and move the active gauge with it"""
        state = 'triggered' if active else 'resolved'
        ALERT_TRANSITIONS_TOTAL.labels(rule=rule, severity=severity, state=state).inc()
        if active:
            ACTIVE_ALERTS.labels(severity=severity).inc()
        else:
            ACTIVE_ALERTS.labels(severity=severity).dec()


# Global metrics collector instance
metrics_collector = EventMetricsCollector()
