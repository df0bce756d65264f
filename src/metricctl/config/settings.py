#!/usr/bin/env python3
"""
Configuration settings using Pydantic for environment variable loading
"""

import os
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file if it exists
load_dotenv()


class StoreSettings(BaseSettings):
    """Metric store configuration settings"""
    model_config = SettingsConfigDict(env_prefix="METRICCTL_STORE_", extra="ignore")

    history_capacity: int = Field(100, ge=1, description="Samples kept per (entity, metric) key")


class ScalingSettings(BaseSettings):
    """Scaling engine configuration settings"""
    model_config = SettingsConfigDict(env_prefix="METRICCTL_SCALING_", extra="ignore")

    window_size: int = Field(5, ge=1, description="Recent samples per member pooled into each mean")
    decision_history: int = Field(100, ge=1, description="Recent decisions kept for inspection")


class AlertingSettings(BaseSettings):
    """Alert evaluator configuration settings"""
    model_config = SettingsConfigDict(env_prefix="METRICCTL_ALERTING_", extra="ignore")

    history_capacity: int = Field(100, ge=1, description="Samples kept per metric stream")
    default_min_samples: int = Field(10, ge=1, description="min_samples for rules loaded without one")


class LoggingSettings(BaseSettings):
    """Logging configuration settings"""
    model_config = SettingsConfigDict(env_prefix="METRICCTL_LOG_", extra="ignore")

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: Optional[str] = None
    enable_colors: bool = True


class Settings(BaseSettings):
    """Main settings class that includes all sub-settings"""
    model_config = SettingsConfigDict(
        env_prefix="METRICCTL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: str = "development"
    debug: bool = False

    # Component settings
    store: StoreSettings = Field(default_factory=StoreSettings)
    scaling: ScalingSettings = Field(default_factory=ScalingSettings)
    alerting: AlertingSettings = Field(default_factory=AlertingSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    def get_config_dict(self) -> Dict[str, Any]:
        """Flatten settings into a plain dictionary for logging and diagnostics"""
        return {
            "environment": self.environment,
            "debug": self.debug,
            "store": self.store.model_dump(),
            "scaling": self.scaling.model_dump(),
            "alerting": self.alerting.model_dump(),
            "logging": self.logging.model_dump(),
        }

    @classmethod
    def load_from_yaml_with_env_override(cls, yaml_path: str) -> "Settings":
        """Load settings from YAML file and override with environment variables"""
        import yaml

        yaml_config: Dict[str, Any] = {}
        if os.path.exists(yaml_path):
            with open(yaml_path, "r") as f:
                # Process environment variables in YAML
                yaml_content = f.read()
                for key, value in os.environ.items():
                    yaml_content = yaml_content.replace(f"${{{key}}}", value)
                yaml_config = yaml.safe_load(yaml_content) or {}

        return Settings(
            environment=yaml_config.get("environment", "development"),
            debug=yaml_config.get("debug", False),
            store=StoreSettings(**yaml_config.get("store", {})),
            scaling=ScalingSettings(**yaml_config.get("scaling", {})),
            alerting=AlertingSettings(**yaml_config.get("alerting", {})),
            logging=LoggingSettings(**yaml_config.get("logging", {})),
        )
