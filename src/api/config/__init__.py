"""
Process-level settings for the HTTP API.
"""

from api.config.settings import Settings, settings

__all__ = ["Settings", "settings"]
