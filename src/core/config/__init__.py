from core.config.config import (
    AppConfig,
    AuthorityAPIConfig,
    ContingencyConfig,
    TrackingConfig,
    config,
)

__all__ = [
    "AppConfig",
    "AuthorityAPIConfig",
    "ContingencyConfig",
    "TrackingConfig",
    "config",
]
