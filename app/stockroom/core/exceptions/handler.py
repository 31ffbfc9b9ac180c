import logging

from fastapi import Request
from fastapi_problem.cors import CorsConfiguration
from fastapi_problem.handler import new_exception_handler
from stockroom.core.config import settings
from stockroom.core.exceptions.errors import ServiceError
from stockroom.core.logging import get_log_context, get_logger

logger = get_logger(__name__)


def log_service_error(request: Request, exc: Exception) -> None:
    """Log client-facing service errors with the current log context; server faults are logged by the handler."""
    if not isinstance(exc, ServiceError) or exc.status >= 500:
        return

    logger.log(
        logging.WARNING,
        "HTTP %d: %s",
        exc.status,
        exc.detail,
        extra={
            "event_type": "service_error",
            "error_type": exc.type_,
            "status_code": exc.status,
            "path": request.url.path,
            "method": request.method,
            **get_log_context(),
        },
    )


eh = new_exception_handler(
    logger=logger,
    cors=CorsConfiguration(
        allow_origins=[str(origin).strip("/") for origin in settings.BACKEND_CORS_ORIGINS],
        allow_methods=["*"],
        allow_headers=["*"],
        allow_credentials=True,
    ),
    pre_hooks=[log_service_error],
    documentation_uri_template=f"{settings.SERVER_URL}/errors/{{type}}",
    strict_rfc9457=True,
)
