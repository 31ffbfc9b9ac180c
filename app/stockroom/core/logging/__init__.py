"""
Structured logging module for the Stockroom service.

This module provides:
- Structured JSON logging for production observability
- Contextual enrichment with request IDs, actor and request identifiers
- Environment-specific configurations
- Exception tracking helpers

Usage:
    from stockroom.core.logging import setup_logging, get_logger, add_to_log_context

    # Setup logging (usually done at application startup)
    setup_logging()

    # Get a logger
    logger = get_logger(__name__)

    # Use contextual logging
    with add_to_log_context(actor_id="123", supply_request_id="abc"):
        logger.info("Approving supply request")
"""

from .config import get_logger, get_logging_config, setup_exception_logging, setup_logging
from .exceptions import log_exception_with_context
from .filters import add_to_log_context, clear_log_context, get_log_context

__all__ = [
    "setup_logging",
    "setup_exception_logging",
    "get_logger",
    "get_logging_config",
    "add_to_log_context",
    "get_log_context",
    "clear_log_context",
    "log_exception_with_context",
]
