"""
Events emitted by the status tracker.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from core.events.channel import EventChannel
from core.models.document import DocumentStatus


@dataclass
class _TrackingEvent:
    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data = asdict(self)
        for key, value in data.items():
            if isinstance(value, datetime):
                data[key] = value.isoformat()
            elif isinstance(value, DocumentStatus):
                data[key] = value.value
        data["event_type"] = type(self).__name__
        return data


@dataclass
class StatusUpdateEvent(_TrackingEvent):
    """The authority reported a new status for a tracked document."""

    document_id: str
    document_number: str
    old_status: DocumentStatus
    new_status: DocumentStatus
    generation_code: Optional[str] = None
    control_number: Optional[str] = None
    reception_seal: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class StatusErrorEvent(_TrackingEvent):
    """A single poll failed; tracking continues unless retries are exhausted."""

    document_id: str
    document_number: str
    error: str
    retry_count: int
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class TrackingTimeoutEvent(_TrackingEvent):
    document_id: str
    document_number: str
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class TrackingFailedEvent(_TrackingEvent):
    document_id: str
    document_number: str
    reason: str
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class AllTrackingStoppedEvent(_TrackingEvent):
    stopped_count: int
    timestamp: datetime = field(default_factory=datetime.now)


class TrackingEvents:
    """The tracker's outbound channels, one per event type."""

    def __init__(self):
        self.status_update: EventChannel[StatusUpdateEvent] = EventChannel(
            "status_update"
        )
        self.status_error: EventChannel[StatusErrorEvent] = EventChannel(
            "status_error"
        )
        self.tracking_timeout: EventChannel[TrackingTimeoutEvent] = EventChannel(
            "tracking_timeout"
        )
        self.tracking_failed: EventChannel[TrackingFailedEvent] = EventChannel(
            "tracking_failed"
        )
        self.all_tracking_stopped: EventChannel[AllTrackingStoppedEvent] = (
            EventChannel("all_tracking_stopped")
        )

    def channels(self):
        return (
            self.status_update,
            self.status_error,
            self.tracking_timeout,
            self.tracking_failed,
            self.all_tracking_stopped,
        )

    async def drain(self) -> None:
        for channel in self.channels():
            await channel.drain()
