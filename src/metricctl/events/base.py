#!/usr/bin/env python3
"""
Base event classes for handing decisions and alerts to collaborators
"""

import json
import uuid
from datetime import datetime, timezone
from typing import Dict, Any
from dataclasses import dataclass, field
from enum import Enum


class EventType(str, Enum):
    """Event types published by the controller"""

    # Scaling Events
    SCALE_OUT_DECISION = "ScaleOutDecision"
    SCALE_IN_DECISION = "ScaleInDecision"

    # Alert Events
    ALERT_TRIGGERED = "AlertTriggered"
    ALERT_RESOLVED = "AlertResolved"

    # Configuration Events
    POLICY_ADDED = "PolicyAdded"
    RULE_ADDED = "RuleAdded"


@dataclass
class Event:
    """Base class for all controller events"""

    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    event_type: EventType = field(init=False)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    source: str = "metricctl"
    data: Dict[str, Any] = field(default_factory=dict)
    metadata: Dict[str, Any] = field(default_factory=dict)

    # Keys a concrete event must carry in `data`
    required_keys = ()

    def __post_init__(self):
        for key in self.required_keys:
            if key not in self.data:
                raise ValueError(f"{key} is required")

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary"""
        return {
            "event_id": self.event_id,
            "event_type": self.event_type.value,
            "timestamp": self.timestamp.isoformat(),
            "source": self.source,
            "data": self.data,
            "metadata": self.metadata
        }

    def to_json(self) -> str:
        """Convert event to JSON string"""
        return json.dumps(self.to_dict(), default=str)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Event':
        """Create event from dictionary"""
        event = cls(
            event_id=data.get("event_id", str(uuid.uuid4())),
            timestamp=datetime.fromisoformat(data.get("timestamp", datetime.now(timezone.utc).isoformat())),
            source=data.get("source", "metricctl"),
            data=data.get("data", {}),
            metadata=data.get("metadata", {})
        )

        event_type = data.get("event_type")
        if event_type:
            event.event_type = EventType(event_type)

        return event


class EventHandler:
    """Base class for event handlers"""

    def __init__(self, name: str):
        self.name = name
        self.subscribed_events: set[EventType] = set()

    def handle(self, event: Event) -> bool:
        """
        Handle an event

        Args:
            event: The event to handle

        Returns:
            True if handled successfully, False otherwise
        """
        raise NotImplementedError("Subclasses must implement handle() method")

    def subscribe(self, event_type: EventType):
        """Subscribe to an event type"""
        self.subscribed_events.add(event_type)

    def unsubscribe(self, event_type: EventType):
        """Unsubscribe from an event type"""
        self.subscribed_events.discard(event_type)

    def is_subscribed(self, event_type: EventType) -> bool:
        """Check if subscribed to event type"""
        return event_type in self.subscribed_events
