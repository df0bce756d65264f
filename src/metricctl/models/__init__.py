"""
Models package for controller data structures
"""

from .metrics import (
    MetricDimension,
    ScaleDirection,
    ScaleAction,
    AlertCondition,
    AlertSeverity,
    MetricSample,
    ScalingPolicy,
    ScalingDecision,
    AlertRule,
    Alert,
)

__all__ = [
    "MetricDimension",
    "ScaleDirection",
    "ScaleAction",
    "AlertCondition",
    "AlertSeverity",
    "MetricSample",
    "ScalingPolicy",
    "ScalingDecision",
    "AlertRule",
    "Alert",
]
