#!/usr/bin/env python3
"""
Loader for YAML files declaring scaling policies and alert rules

Example document::

    policies:
      - group_id: web
        metric: cpu
        threshold: 80
        direction: up
        cooldown_seconds: 60
    rules:
      - name: HighLatency
        metric: latency
        condition: gt
        threshold: 500
        severity: critical
"""

import logging
import os
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from metricctl.models import AlertRule, ScalingPolicy

logger = logging.getLogger(__name__)


class ControlConfig(BaseModel):
    """Validated contents of a policy/rule file"""
    policies: List[ScalingPolicy] = Field(default_factory=list)
    rules: List[AlertRule] = Field(default_factory=list)

    @field_validator("policies")
    @classmethod
    def _policies_have_groups(cls, policies: List[ScalingPolicy]) -> List[ScalingPolicy]:
        for policy in policies:
            if not policy.group_id:
                raise ValueError(f"policy '{policy.label}' is missing group_id")
        return policies


def load_control_file(path: str, default_min_samples: Optional[int] = None) -> ControlConfig:
    """
    Parse a policy/rule YAML file

    Args:
        path: File to read
        default_min_samples: min_samples applied to rules that do not set one

    Returns:
        ControlConfig ready for Registry.load
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Control file not found: {path}")

    with open(path, "r") as f:
        raw = yaml.safe_load(f) or {}

    if default_min_samples is not None:
        for rule in raw.get("rules") or []:
            rule.setdefault("min_samples", default_min_samples)

    config = ControlConfig(
        policies=raw.get("policies") or [],
        rules=raw.get("rules") or [],
    )
    logger.info(f"Loaded {len(config.policies)} policies and {len(config.rules)} rules from {path}")
    return config
