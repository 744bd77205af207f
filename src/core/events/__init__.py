"""
Events module for status tracking notifications.
"""

from core.events.channel import EventChannel, Subscription
from core.events.tracking_events import (
    AllTrackingStoppedEvent,
    StatusErrorEvent,
    StatusUpdateEvent,
    TrackingEvents,
    TrackingFailedEvent,
    TrackingTimeoutEvent,
)

__all__ = [
    "EventChannel",
    "Subscription",
    "TrackingEvents",
    "StatusUpdateEvent",
    "StatusErrorEvent",
    "TrackingTimeoutEvent",
    "TrackingFailedEvent",
    "AllTrackingStoppedEvent",
]
