"""
Observability module.

Provides logging configuration, structured logging helpers and
correlation ID tracking.
"""

from facescan.observability.correlation import get_correlation_id, set_correlation_id
from facescan.observability.logger import configure_logging

__all__ = ["configure_logging", "get_correlation_id", "set_correlation_id"]
