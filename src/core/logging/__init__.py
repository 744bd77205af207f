"""
Logging helpers for the DTE contingency core package.
"""

from core.logging.setup import (
    clear_document_id,
    configure_logging,
    get_document_id,
    set_document_id,
)

configure_logging()

__all__ = [
    "configure_logging",
    "set_document_id",
    "clear_document_id",
    "get_document_id",
]
