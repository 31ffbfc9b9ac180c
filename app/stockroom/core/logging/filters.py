import contextvars
import logging
import os
import socket
from contextlib import contextmanager
from typing import Any, Dict, Optional

_log_context: contextvars.ContextVar[Dict[str, Any]] = contextvars.ContextVar("log_context", default={})


class BaseContextFilter(logging.Filter):
    """
    Base filter that enriches log records with extra attributes.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        self.add_context(record)
        return True

    def add_context(self, record: logging.LogRecord) -> None:
        """
        Add context to the log record. Override this method in subclasses.

        Args:
            record: The LogRecord to enrich with context
        """
        pass


class GlobalContextFilter(BaseContextFilter):
    """
    Adds process-wide, static information (host, pid, environment, version) to every record.
    """

    def __init__(self, name: str = "") -> None:
        super().__init__(name)

        self.hostname = socket.gethostname()
        self.process_id = os.getpid()
        self.environment = os.getenv("ENVIRONMENT", "local")
        self.app_name = os.getenv("APP_NAME", "stockroom")
        self.app_version = os.getenv("APP_VERSION", "0.1.0")

    def add_context(self, record: logging.LogRecord) -> None:
        record.hostname = self.hostname
        record.process_id = self.process_id
        record.environment = self.environment
        record.app_name = self.app_name
        record.app_version = self.app_version


class DynamicContextFilter(BaseContextFilter):
    """
    Adds the values bound with `add_to_log_context` (actor, request ids, ...) to every record.
    """

    def add_context(self, record: logging.LogRecord) -> None:
        context = _log_context.get()
        for key, value in context.items():
            setattr(record, key, value)


class CombinedContextFilter(BaseContextFilter):
    """
    Applies both global and dynamic context enrichment in a single filter.
    """

    def __init__(self, name: str = "") -> None:
        super().__init__(name)

        self.global_filter = GlobalContextFilter(name)
        self.dynamic_filter = DynamicContextFilter(name)

    def add_context(self, record: logging.LogRecord) -> None:
        self.global_filter.add_context(record)
        self.dynamic_filter.add_context(record)


class NoiseReductionFilter(logging.Filter):
    """
    Drops log records that match known high-volume, low-value patterns.
    """

    def __init__(
        self,
        name: str = "",
        suppress_patterns: Optional[list[str]] = None,
        suppress_loggers: Optional[list[str]] = None,
        min_level: Optional[int] = None,
    ) -> None:
        super().__init__(name)

        self.suppress_patterns = suppress_patterns or ["/health"]
        self.suppress_loggers = suppress_loggers or []
        self.min_level = min_level

    def filter(self, record: logging.LogRecord) -> bool:
        if self.min_level and record.levelno < self.min_level:
            return False

        if record.name in self.suppress_loggers:
            return False

        message = record.getMessage()
        for pattern in self.suppress_patterns:
            if pattern in message:
                return False

        return True


@contextmanager
def add_to_log_context(**kwargs: Any):
    """
    Context manager for temporarily adding context to logs.

    Args:
        **kwargs: Key-value pairs to add to the logging context

    Example:
        with add_to_log_context(actor_id="123", supply_request_id="abc"):
            logger.info("Dispatching request")  # Will include actor_id and supply_request_id
    """
    current_context = _log_context.get()
    new_context = {**current_context, **kwargs}

    token = _log_context.set(new_context)

    try:
        yield
    finally:
        _log_context.reset(token)


def get_log_context() -> Dict[str, Any]:
    """Get the current logging context."""
    return _log_context.get()


def clear_log_context() -> None:
    """Reset the logging context to an empty state."""
    _log_context.set({})
