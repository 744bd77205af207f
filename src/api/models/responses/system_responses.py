"""
System health and status response models.
"""

from datetime import datetime
from typing import Dict

from pydantic import BaseModel, Field


class HealthCheckResponse(BaseModel):
    """Health check response model."""

    status: str = Field("healthy", description="Service health status")
    timestamp: datetime = Field(default_factory=datetime.now)
    version: str = Field("1.0.0", description="API version")
    services: Dict[str, str] = Field(
        default_factory=dict, description="Status of dependent services"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "status": "degraded",
                "timestamp": "2025-01-15T10:30:00",
                "version": "1.0.0",
                "services": {
                    "api": "healthy",
                    "authority": "unavailable",
                    "storage": "healthy",
                },
            }
        }
