#!/usr/bin/env python3
"""
In-process EventBus delivering controller events to subscribed handlers
"""

import logging
import threading
import time
from collections import defaultdict, deque
from typing import Deque, Dict, List, Optional

from .base import Event, EventHandler, EventType
from .event_metrics import metrics_collector

logger = logging.getLogger(__name__)


class EventBus:
    """Synchronous publish/subscribe bus; handlers run on the publishing thread"""

    def __init__(self, history_size: int = 1000):
        """
        Initialize the EventBus

        Args:
            history_size: Number of recently published events kept for inspection
        """
        self.subscribers: Dict[EventType, List[EventHandler]] = defaultdict(list)
        self._recent: Deque[Event] = deque(maxlen=history_size)
        self._lock = threading.Lock()

    def subscribe(self, event_type: EventType, handler: EventHandler):
        """
        Subscribe to an event type with a handler

        Args:
            event_type: The event type to subscribe to
            handler: The handler to process the event
        """
        with self._lock:
            handler.subscribe(event_type)
            self.subscribers[event_type].append(handler)
            count = len(self.subscribers[event_type])
        metrics_collector.update_subscriber_count(event_type.value, count)
        logger.info(f"Subscribed handler {handler.name} to event {event_type.value}")

    def unsubscribe(self, event_type: EventType, handler: EventHandler):
        """
        Unsubscribe a handler from an event type

        Args:
            event_type: The event type to unsubscribe from
            handler: The handler to remove
        """
        with self._lock:
            if handler not in self.subscribers[event_type]:
                return
            self.subscribers[event_type].remove(handler)
            handler.unsubscribe(event_type)
            count = len(self.subscribers[event_type])
        metrics_collector.update_subscriber_count(event_type.value, count)
        logger.info(f"Unsubscribed handler {handler.name} from event {event_type.value}")

    def publish(self, event: Event) -> int:
        """
        Publish an event to every handler subscribed to its type

        A handler that raises or returns False is logged and counted; the
        remaining handlers still run and the publisher never sees the error.

        Args:
            event: The event to publish

        Returns:
            Number of handlers that handled the event successfully
        """
        event_type = event.event_type
        with self._lock:
            self._recent.append(event)
            handlers = list(self.subscribers.get(event_type, []))

        metrics_collector.record_event_published(event_type.value)
        logger.debug(f"Published event {event_type.value} ({event.event_id}) to {len(handlers)} handlers")

        handled = 0
        for handler in handlers:
            started = time.perf_counter()
            try:
                success = bool(handler.handle(event))
            except Exception as e:
                logger.error(f"Handler {handler.name} failed for event {event_type.value}: {e}", exc_info=True)
                success = False
            metrics_collector.record_event_processed(
                event_type.value, handler.name, success, time.perf_counter() - started
            )
            if success:
                handled += 1
        return handled

    def recent_events(self, limit: int = 100, event_type: Optional[EventType] = None) -> List[Event]:
        """
        Get recently published events, oldest first

        Args:
            limit: Maximum number of events to return
            event_type: Only return events of this type

        Returns:
            List of events
        """
        with self._lock:
            events = list(self._recent)
        if event_type is not None:
            events = [e for e in events if e.event_type == event_type]
        return events[-limit:] if limit > 0 else []
