import logging
from typing import Any, Dict, Optional

from stockroom.core.logging.filters import get_log_context

logger = logging.getLogger(__name__)


def log_exception_with_context(
    exc: BaseException,
    message: str = "Exception occurred",
    level: int = logging.ERROR,
    extra_context: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Log an exception with the current log context and additional information.

    Args:
        exc: The exception to log
        message: Custom message to include with the log
        level: Logging level to use
        extra_context: Additional context to include in the log
    """
    context = get_log_context()

    log_extra = {
        "event_type": "exception_logged",
        "exception_type": type(exc).__name__,
        "exception_message": str(exc),
        **context,
    }

    if extra_context:
        log_extra.update(extra_context)

    logger.log(
        level,
        "%s: %s - %s",
        message,
        type(exc).__name__,
        str(exc),
        exc_info=(type(exc), exc, exc.__traceback__),
        extra=log_extra,
    )
