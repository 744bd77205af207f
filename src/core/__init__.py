"""
Core package for the DTE contingency and status tracking service.
Contains the outbox, the status tracker and their configuration.
"""

import core.logging  # noqa: F401  Ensures logging is configured
from core.config import config

__all__ = ["config"]
