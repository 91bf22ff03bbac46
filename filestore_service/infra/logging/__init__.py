"""Logging infrastructure.

Provides structured logging with:
- JSONL format for Loki/Elasticsearch ingestion
- Non-blocking QueueHandler/QueueListener pipeline
- OpenTelemetry trace correlation

Usage:
    from filestore_service.infra.logging import setup_logging

    setup_logging()
    logger = logging.getLogger(__name__)
    logger.info("Object uploaded", extra={"key": "report.pdf"})
"""

from __future__ import annotations

from .config import configure_logging, setup_logging, shutdown
from .formatters import JSONFormatter

__all__ = [
    "JSONFormatter",
    "configure_logging",
    "setup_logging",
    "shutdown",
]
