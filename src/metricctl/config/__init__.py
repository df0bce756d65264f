"""
Configuration module for controller settings
"""

from .settings import Settings, StoreSettings, ScalingSettings, AlertingSettings, LoggingSettings
from .loader import ControlConfig, load_control_file

__all__ = [
    "Settings",
    "StoreSettings",
    "ScalingSettings",
    "AlertingSettings",
    "LoggingSettings",
    "ControlConfig",
    "load_control_file",
]
