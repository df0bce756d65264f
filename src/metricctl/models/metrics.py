#!/usr/bin/env python3
"""
Pydantic models for metric samples, scaling policies, alert rules and their outputs
"""

import logging
from datetime import datetime
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)


class MetricDimension(str, Enum):
    """Resource dimensions a scaling policy can watch"""
    CPU = "cpu"
    MEMORY = "memory"
    NETWORK = "network"


class ScaleDirection(str, Enum):
    """Direction a scaling policy fires in"""
    UP = "up"
    DOWN = "down"


class ScaleAction(str, Enum):
    """Actions handed to the actuator"""
    SCALE_OUT = "scale_out"
    SCALE_IN = "scale_in"


class AlertCondition(str, Enum):
    """Comparison operators supported by alert rules"""
    GT = "gt"
    LT = "lt"
    EQ = "eq"


class AlertSeverity(str, Enum):
    """Alert severities"""
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"


class MetricSample(BaseModel):
    """A single timestamped metric value"""
    model_config = ConfigDict(frozen=True)

    value: float = Field(..., description="Sampled value")
    timestamp: datetime = Field(..., description="When the value was sampled")


class ScalingPolicy(BaseModel):
    """Threshold policy for one resource dimension of a scaling group"""
    group_id: Optional[str] = Field(None, description="Scaling group; bound on registration when omitted")
    name: Optional[str] = Field(None, description="Label used in decision reasons")
    metric: MetricDimension = Field(..., description="Dimension compared against the threshold")
    threshold: float = Field(..., description="Pooled mean that triggers the policy")
    direction: ScaleDirection = Field(..., description="'up' fires on mean >= threshold, 'down' on mean <= threshold")
    cooldown_seconds: float = Field(..., ge=0, description="Minimum seconds before the group may scale again")
    scale_amount: int = Field(1, ge=1, description="Instances added or removed per decision")
    enabled: bool = Field(True, description="Disabled policies are never evaluated")

    @property
    def action(self) -> ScaleAction:
        return ScaleAction.SCALE_OUT if self.direction == ScaleDirection.UP else ScaleAction.SCALE_IN

    @property
    def label(self) -> str:
        return self.name or f"{self.metric.value}-{self.direction.value}-{self.threshold:g}"

    def crosses(self, mean: float) -> bool:
        """Check whether a pooled mean crosses this policy's threshold"""
        if self.direction == ScaleDirection.UP:
            return mean >= self.threshold
        return mean <= self.threshold


class ScalingDecision(BaseModel):
    """Decision handed to the actuator"""
    group_id: str = Field(..., description="Scaling group the decision applies to")
    action: ScaleAction = Field(..., description="scale_out or scale_in")
    amount: int = Field(..., ge=1, description="Number of instances to add or remove")
    reason: str = Field("", description="Human readable explanation")

    # Inputs that produced the decision
    metric: Optional[MetricDimension] = Field(None, description="Dimension that crossed its threshold")
    observed: Optional[float] = Field(None, description="Pooled mean at decision time")
    threshold: Optional[float] = Field(None, description="Threshold of the firing policy")
    cooldown_seconds: float = Field(0, ge=0, description="Cooldown started by this decision")
    policy_name: Optional[str] = Field(None, description="Label of the firing policy")
    decided_at: Optional[datetime] = Field(None, description="Evaluation time")


class AlertRule(BaseModel):
    """Threshold rule evaluated over one metric stream"""
    name: str = Field(..., min_length=1, description="Unique rule name")
    metric: str = Field(..., min_length=1, description="Metric stream the rule watches")
    condition: Union[AlertCondition, str] = Field(..., description="gt, lt or eq; anything else never fires")
    threshold: float = Field(..., description="Value compared against the window")
    severity: AlertSeverity = Field(AlertSeverity.WARNING, description="Alert severity")
    min_samples: int = Field(10, ge=1, description="Samples required before the rule is evaluated")
    enabled: bool = Field(True, description="Disabled rules are never evaluated")
    description: Optional[str] = Field(None, description="Free text carried onto alerts")

    @field_validator("condition", mode="before")
    @classmethod
    def _known_condition(cls, value):
        try:
            return AlertCondition(value)
        except ValueError:
            logger.warning(f"Unknown alert condition '{value}'; rule will never trigger")
            return value

    @property
    def rule_key(self) -> str:
        return f"{self.metric}:{self.name}"

    @property
    def condition_name(self) -> str:
        return self.condition.value if isinstance(self.condition, AlertCondition) else str(self.condition)


class Alert(BaseModel):
    """Alert record; kept after resolution for audit"""
    rule_key: str = Field(..., description="metric:rule_name")
    rule: AlertRule = Field(..., description="Rule that produced the alert")
    triggered_at: datetime = Field(..., description="Evaluation time of the trigger")
    resolved_at: Optional[datetime] = Field(None, description="Evaluation time of the resolution")
    active: bool = Field(True, description="Whether the alert is currently firing")
    trigger_value: Optional[float] = Field(None, description="Compared value when triggered")
    resolve_value: Optional[float] = Field(None, description="Compared value when resolved")

    @property
    def severity(self) -> AlertSeverity:
        return self.rule.severity
