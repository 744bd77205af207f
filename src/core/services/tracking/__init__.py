from core.services.tracking.status_tracker import (
    TRACKING_ENTRIES_KEY,
    StatusTracker,
    TrackingEntry,
)

__all__ = ["StatusTracker", "TrackingEntry", "TRACKING_ENTRIES_KEY"]
