import logging
import logging.config
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from stockroom.core.config import settings


def get_logging_config() -> Dict[str, Any]:
    """
    Get the logging configuration dictionary based on the current environment.

    Returns:
        Dictionary containing the complete logging configuration
    """
    config: Dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {},
        "filters": {},
        "handlers": {},
        "loggers": {},
        "root": {
            "level": "WARNING",
            "handlers": [],
        },
    }

    if settings.ENVIRONMENT == "local":
        config["formatters"] = {
            "console": {
                "()": "stockroom.core.logging.formatters.ConsoleFormatter",
                "format": "%(asctime)s %(name)s %(levelname)s %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "detailed": {
                "()": "stockroom.core.logging.formatters.StructuredExceptionJsonFormatter",
                "format": "%(asctime)s %(name)s %(levelname)s %(message)s %(pathname)s %(lineno)d",
                "datefmt": "%Y-%m-%d %H:%M:%S",
                "rename_fields": {
                    "levelname": "level",
                    "asctime": "timestamp",
                    "name": "logger",
                    "pathname": "file_path",
                    "lineno": "line_number",
                },
            },
        }
    else:
        config["formatters"] = {
            "production": {
                "()": "stockroom.core.logging.formatters.ProductionFormatter",
            }
        }

    config["filters"] = {
        "context_filter": {
            "()": "stockroom.core.logging.filters.CombinedContextFilter",
        },
        "noise_reduction": {
            "()": "stockroom.core.logging.filters.NoiseReductionFilter",
            "suppress_patterns": ["/health"],
        },
    }

    if settings.ENVIRONMENT == "local":
        config["handlers"] = {
            "console": {
                "class": "logging.StreamHandler",
                "level": "DEBUG",
                "formatter": "console",
                "filters": ["context_filter"],
                "stream": "ext://sys.stdout",
            },
            "error_file": {
                "class": "logging.FileHandler",
                "level": "ERROR",
                "formatter": "detailed",
                "filters": ["context_filter"],
                "filename": str(Path(settings.BASE_DIR) / "logs" / "errors.log"),
                "mode": "a",
            },
        }
        config["root"]["handlers"] = ["console"]
    else:
        config["handlers"] = {
            "json_stdout": {
                "class": "logging.StreamHandler",
                "level": "INFO",
                "formatter": "production",
                "filters": ["context_filter", "noise_reduction"],
                "stream": "ext://sys.stdout",
            },
            "error_stderr": {
                "class": "logging.StreamHandler",
                "level": "ERROR",
                "formatter": "production",
                "filters": ["context_filter"],
                "stream": "ext://sys.stderr",
            },
        }
        config["root"]["handlers"] = ["json_stdout", "error_stderr"]

    app_level = "DEBUG" if settings.ENVIRONMENT == "local" else "INFO"

    app_handlers = list(config["root"]["handlers"])
    if settings.ENVIRONMENT == "local":
        app_handlers.append("error_file")

    config["loggers"] = {
        "stockroom": {
            "level": app_level,
            "handlers": app_handlers,
            "propagate": False,
        },
        "fastapi": {
            "level": "INFO",
            "propagate": True,
        },
        "uvicorn": {
            "level": "INFO",
            "propagate": True,
        },
        "uvicorn.access": {
            "level": "WARNING",
            "propagate": False,
        },
        "sqlalchemy": {
            "level": "WARNING",
            "propagate": True,
        },
        "sqlalchemy.engine": {
            "level": "INFO" if settings.DATABASE_ECHO else "WARNING",
            "propagate": True,
        },
    }

    return config


def load_config_from_yaml(config_path: Path) -> Optional[Dict[str, Any]]:
    """
    Load logging configuration from a YAML file.

    Args:
        config_path: Path to the YAML configuration file

    Returns:
        Dictionary containing the logging configuration, or None if file doesn't exist
    """
    if not config_path.exists():
        return None

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        print(f"Failed to load logging config from {config_path}: {e}", file=sys.stderr)
        return None


def setup_logging(config_override: Optional[Dict[str, Any]] = None) -> None:
    """
    Set up logging configuration for the application.

    The configuration comes from, in order of preference:
    1. A provided configuration override
    2. config/logging.<environment>.yaml, then config/logging.yaml
    3. The default programmatic configuration

    Args:
        config_override: Optional dictionary to override the default configuration
    """
    config = None

    if config_override:
        config = config_override
    else:
        config_path = Path(settings.BASE_DIR) / "config" / f"logging.{settings.ENVIRONMENT}.yaml"
        config = load_config_from_yaml(config_path)

        if config is None:
            config_path = Path(settings.BASE_DIR) / "config" / "logging.yaml"
            config = load_config_from_yaml(config_path)

    if config is None:
        config = get_logging_config()

    log_dir = Path(settings.BASE_DIR) / "logs"
    log_dir.mkdir(exist_ok=True)

    try:
        logging.config.dictConfig(config)
    except (ValueError, TypeError, AttributeError, ImportError) as e:
        print(f"Failed to configure logging: {e}", file=sys.stderr)
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            handlers=[logging.StreamHandler(sys.stdout)],
        )


def setup_exception_logging() -> None:
    """
    Install an exception hook that logs uncaught exceptions before the process terminates.
    """
    original_excepthook = sys.excepthook

    def handle_uncaught_exception(exc_type, exc_value, exc_traceback):
        if issubclass(exc_type, KeyboardInterrupt):
            original_excepthook(exc_type, exc_value, exc_traceback)
            return

        logger = logging.getLogger(__name__)
        logger.critical(
            "Uncaught exception, application will terminate",
            exc_info=(exc_type, exc_value, exc_traceback),
        )

        original_excepthook(exc_type, exc_value, exc_traceback)

    sys.excepthook = handle_uncaught_exception


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with the specified name.

    Args:
        name: The logger name (typically __name__)

    Returns:
        A configured logger instance
    """
    return logging.getLogger(name)
