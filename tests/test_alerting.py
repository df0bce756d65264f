#!/usr/bin/env python3
"""
Tests for the alert evaluator
"""

import logging

import pytest

from metricctl.core import AlertEvaluator, evaluate_condition
from metricctl.events import EventType
from metricctl.models import AlertRule, AlertSeverity
from conftest import at


def latency_rule(**kwargs):
    fields = dict(name="HighLatency", metric="latency", condition="gt", threshold=500,
                  severity=AlertSeverity.CRITICAL, min_samples=10)
    fields.update(kwargs)
    return AlertRule(**fields)


class TestAlertEvaluator:
    """Test alert state transitions"""

    @pytest.fixture
    def evaluator(self, registry):
        return AlertEvaluator(registry, history_capacity=100)

    def test_cold_start_then_trigger_then_resolve(self, evaluator, registry):
        registry.add_rule("HighLatency", latency_rule())

        for t in range(9):
            evaluator.observe("latency", 600, at(t))
        assert evaluator.active_alerts() == []

        transitions = evaluator.observe("latency", 600, at(9))
        assert len(transitions) == 1
        assert evaluator.active_alerts()[0].rule_key == "latency:HighLatency"

        for t in range(10, 20):
            evaluator.observe("latency", 100, at(t))

        alert = evaluator.all_alerts()[0]
        assert alert.active is False
        assert alert.resolved_at is not None
        assert alert.triggered_at < alert.resolved_at
        assert evaluator.active_alerts() == []

    def test_no_alert_before_min_samples_even_when_breaching(self, evaluator, registry):
        registry.add_rule("HighLatency", latency_rule(min_samples=5))

        for t in range(4):
            assert evaluator.observe("latency", 10_000, at(t)) == []
        assert evaluator.all_alerts() == []

    def test_active_alert_not_duplicated(self, evaluator, registry):
        registry.add_rule("HighLatency", latency_rule(min_samples=1))

        evaluator.observe("latency", 900, at(0))
        evaluator.observe("latency", 900, at(1))
        evaluator.evaluate("latency", at(2))
        evaluator.evaluate("latency", at(3))

        assert len(evaluator.all_alerts()) == 1
        assert len(evaluator.active_alerts()) == 1
        assert evaluator.active_alerts()[0].triggered_at == at(0)

    def test_equality_uses_latest_raw_value(self, evaluator, registry):
        registry.add_rule("NoErrors", AlertRule(name="NoErrors", metric="errorRate", condition="eq",
                                                threshold=0, min_samples=1))

        assert evaluator.observe("errorRate", 5, at(0)) == []
        transitions = evaluator.observe("errorRate", 0, at(1))

        assert len(transitions) == 1
        assert transitions[0].triggered_at == at(1)
        assert transitions[0].trigger_value == 0
        # Mean of the window is 2.5, so a smoothed comparison would not have fired
        assert sum(evaluator.history_for("errorRate")) / 2 == 2.5

    def test_less_than_uses_mean(self, evaluator, registry):
        registry.add_rule("LowThroughput", AlertRule(name="LowThroughput", metric="rps", condition="lt",
                                                     threshold=20, min_samples=2))

        evaluator.observe("rps", 50, at(0))
        # Latest is 0 but the mean is 25
        assert evaluator.observe("rps", 0, at(1)) == []
        assert len(evaluator.observe("rps", 0, at(2))) == 1

    def test_unknown_condition_never_triggers(self, evaluator, registry):
        registry.add_rule("Odd", AlertRule(name="Odd", metric="latency", condition="ge", threshold=0,
                                           min_samples=1))

        for t in range(5):
            evaluator.observe("latency", 100, at(t))

        assert evaluator.all_alerts() == []

    def test_retrigger_creates_new_record(self, evaluator, registry):
        registry.add_rule("NoErrors", AlertRule(name="NoErrors", metric="errorRate", condition="eq",
                                                threshold=0, min_samples=1))

        evaluator.observe("errorRate", 0, at(0))
        evaluator.observe("errorRate", 1, at(1))
        evaluator.observe("errorRate", 0, at(2))

        records = evaluator.all_alerts()
        assert len(records) == 2
        assert records[0].active is False and records[0].resolved_at == at(1)
        assert records[1].active is True and records[1].triggered_at == at(2)
        assert len(evaluator.active_alerts()) == 1
        assert evaluator.alert_for("errorRate:NoErrors").triggered_at == at(2)

    def test_rules_only_see_their_metric(self, evaluator, registry):
        registry.add_rule("HighLatency", latency_rule(min_samples=1))

        evaluator.observe("cpu", 10_000, at(0))

        assert evaluator.all_alerts() == []
        assert evaluator.history_for("latency") == []

    def test_history_is_bounded(self, registry):
        evaluator = AlertEvaluator(registry, history_capacity=10)

        for t in range(25):
            evaluator.observe("latency", t, at(t))

        assert evaluator.history_for("latency") == [float(v) for v in range(15, 25)]

    def test_min_samples_above_capacity_judged_when_history_full(self, registry, caplog):
        evaluator = AlertEvaluator(registry, history_capacity=100)
        registry.add_rule("Saturated", AlertRule(name="Saturated", metric="queue", condition="gt",
                                                 threshold=1, min_samples=150))

        with caplog.at_level(logging.WARNING, logger="metricctl.core.alerting"):
            for t in range(99):
                assert evaluator.observe("queue", 1000, at(t)) == []
            transitions = evaluator.observe("queue", 1000, at(99))
            evaluator.observe("queue", 1000, at(100))

        assert len(transitions) == 1
        assert transitions[0].triggered_at == at(99)
        capped = [r for r in caplog.records if "wants 150 samples" in r.getMessage()]
        assert len(capped) == 1

    def test_required_samples_within_capacity_unchanged(self, evaluator):
        assert evaluator.required_samples(latency_rule(min_samples=10)) == 10

    def test_retire_resolves_active_alert(self, registry, event_bus, recording_handler):
        evaluator = AlertEvaluator(registry, event_bus=event_bus)
        event_bus.subscribe(EventType.ALERT_RESOLVED, recording_handler)
        rule = registry.add_rule("HighLatency", latency_rule(min_samples=1))
        evaluator.observe("latency", 900, at(0))

        resolved = evaluator.retire(rule, at(5))

        assert resolved.active is False
        assert resolved.resolved_at == at(5)
        assert evaluator.active_alerts() == []
        recording_handler.handle.assert_called_once()
        assert evaluator.retire(rule, at(6)) is None

    def test_returned_alerts_are_snapshots(self, evaluator, registry):
        registry.add_rule("HighLatency", latency_rule(min_samples=1))
        evaluator.observe("latency", 900, at(0))

        snapshot = evaluator.active_alerts()[0]
        snapshot.active = False

        assert evaluator.active_alerts()[0].active is True

    def test_transitions_published(self, registry, event_bus, recording_handler):
        evaluator = AlertEvaluator(registry, event_bus=event_bus)
        event_bus.subscribe(EventType.ALERT_TRIGGERED, recording_handler)
        event_bus.subscribe(EventType.ALERT_RESOLVED, recording_handler)
        registry.add_rule("HighLatency", latency_rule(min_samples=1))

        evaluator.observe("latency", 900, at(0))
        evaluator.observe("latency", 0, at(1))
        evaluator.observe("latency", 0, at(2))

        types = [call[0][0].event_type for call in recording_handler.handle.call_args_list]
        assert types == [EventType.ALERT_TRIGGERED, EventType.ALERT_RESOLVED]
        assert recording_handler.handle.call_args_list[0][0][0].data["severity"] == "critical"


class TestEvaluateCondition:
    """Test the condition table"""

    @pytest.mark.parametrize("condition,mean,latest,expected", [
        ("gt", 10.0, 0.0, True),
        ("gt", 5.0, 100.0, False),
        ("lt", 1.0, 100.0, True),
        ("lt", 5.0, 0.0, False),
        ("eq", 2.5, 5.0, True),
        ("eq", 5.0, 2.5, False),
        ("between", 5.0, 5.0, False),
    ])
    def test_conditions(self, condition, mean, latest, expected):
        rule = AlertRule(name="r", metric="m", condition=condition, threshold=5.0)

        triggered, _ = evaluate_condition(rule, mean, latest)

        assert triggered is expected
