from core.services.contingency.contingency_manager import (
    CONTINGENCY_REQUESTS_KEY,
    ContingencyQueueManager,
)

__all__ = ["ContingencyQueueManager", "CONTINGENCY_REQUESTS_KEY"]
