"""
Error body returned for domain errors and unhandled failures.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    error: str = Field(..., description="Exception class name")
    message: str
    details: Optional[Dict[str, Any]] = Field(
        None, description="Identifiers of the request or document involved"
    )
    timestamp: datetime = Field(default_factory=datetime.now)
