"""
Core utilities module.
"""

from core.utils.error_classifier import (
    contingency_reason_for,
    describe_error,
    is_retryable_error,
)

__all__ = ["is_retryable_error", "contingency_reason_for", "describe_error"]
