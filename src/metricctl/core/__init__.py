"""
Core controller modules
"""

from .metric_store import MetricStore
from .registry import Registry
from .scaling import ScalingEngine, CooldownState
from .alerting import AlertEvaluator, evaluate_condition
from .controller import MetricsController

__all__ = [
    "MetricStore",
    "Registry",
    "ScalingEngine",
    "CooldownState",
    "AlertEvaluator",
    "evaluate_condition",
    "MetricsController",
]
