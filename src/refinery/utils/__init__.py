"""
Utilities module for Refinery.

Provides logging setup and lightweight metrics.
"""

from refinery.utils.logging import (
    setup_logging,
    get_logger,
    get_logger_with_context,
    reset_logging,
)
from refinery.utils.metrics import (
    Metrics,
    TimingStats,
    increment_documents_extracted,
    observe_stage_latency,
    time_stage,
)

__all__ = [
    # Logging
    "setup_logging",
    "get_logger",
    "get_logger_with_context",
    "reset_logging",
    # Metrics
    "Metrics",
    "TimingStats",
    "increment_documents_extracted",
    "observe_stage_latency",
    "time_stage",
]
