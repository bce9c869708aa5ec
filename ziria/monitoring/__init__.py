"""
Monitoring and observability for the rendering service.

Usage
-----
>>> from ziria.monitoring import setup_monitoring
>>> setup_monitoring(app)
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fastapi import FastAPI

logger = getLogger(__name__)

__all__ = [
    "setup_monitoring",
    "configure_logging",
    "get_logger",
    "bind_request_id",
    "clear_context",
    "sanitize_log_message",
    "metrics",
    "setup_prometheus",
]

from ziria.monitoring.logging import (
    bind_request_id,
    clear_context,
    configure_logging,
    get_logger,
    sanitize_log_message,
)
from ziria.monitoring.prometheus import metrics, setup_prometheus


def setup_monitoring(app: FastAPI) -> None:
    """
    Set up structured logging and Prometheus metrics for the application.

    Parameters
    ----------
    app : FastAPI
        The FastAPI application instance.
    """
    configure_logging()
    logger.info("Structlog configured")

    setup_prometheus(app)
    logger.info("Prometheus metrics configured")
