"""
Centralized logging configuration with document_id propagation.
"""

from __future__ import annotations

import os
import sys
from contextvars import ContextVar
from typing import Optional

from loguru import logger

DOCUMENT_ID_DEFAULT = "-"
_document_id_var: ContextVar[str] = ContextVar(
    "document_id", default=DOCUMENT_ID_DEFAULT
)
_is_configured = False

LOG_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<8} | document_id={extra[document_id]} | "
    "{name}:{function}:{line} - {message}"
)


def _patch_record(record):
    """Inject the contextual document_id into every log record."""
    record["extra"]["document_id"] = _document_id_var.get(DOCUMENT_ID_DEFAULT)


def configure_logging(level: Optional[str] = None):
    """Configure Loguru once with the standard format and patcher."""
    global _is_configured
    log_level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()

    logger.remove()
    if not _is_configured:
        logger.configure(
            extra={"document_id": DOCUMENT_ID_DEFAULT}, patcher=_patch_record
        )

    logger.add(
        sys.stdout,
        level=log_level,
        format=LOG_FORMAT,
        enqueue=False,
        backtrace=False,
        diagnose=False,
    )

    _is_configured = True


def set_document_id(document_id: Optional[str]) -> None:
    """Set the contextual document_id for subsequent log statements."""
    _document_id_var.set(document_id or DOCUMENT_ID_DEFAULT)


def clear_document_id() -> None:
    """Clear the contextual document_id."""
    _document_id_var.set(DOCUMENT_ID_DEFAULT)


def get_document_id() -> str:
    """Retrieve the current contextual document_id."""
    return _document_id_var.get(DOCUMENT_ID_DEFAULT)
