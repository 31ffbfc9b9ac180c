import traceback
from typing import Any, Dict

from pythonjsonlogger.json import JsonFormatter


class StructuredExceptionJsonFormatter(JsonFormatter):
    """
    A JSON formatter that turns tracebacks into structured data.

    Unknown keyword arguments (as produced by YAML configs) are dropped
    before reaching the base formatter.
    """

    _ACCEPTED_KWARGS = (
        "fmt",
        "datefmt",
        "style",
        "json_default",
        "json_encoder",
        "json_serializer",
        "json_indent",
        "json_ensure_ascii",
        "prefix",
        "rename_fields",
        "static_fields",
        "reserved_attrs",
        "timestamp",
    )

    def __init__(self, **kwargs: Any):
        if "format" in kwargs and "fmt" not in kwargs:
            kwargs["fmt"] = kwargs.pop("format")

        valid_kwargs = {k: v for k, v in kwargs.items() if k in self._ACCEPTED_KWARGS and v is not None}

        super().__init__(**valid_kwargs)

    def add_fields(self, log_record: Dict[str, Any], record: Any, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)

        if record.exc_info:
            exc_type, exc_value, exc_traceback = record.exc_info

            exception_data = {
                "type": exc_type.__name__ if exc_type else None,
                "message": str(exc_value) if exc_value else None,
                "traceback": None,
            }

            if exc_traceback:
                exception_data["traceback"] = traceback.format_exception(exc_type, exc_value, exc_traceback)

            log_record["exception"] = exception_data

            log_record.pop("exc_info", None)
            log_record.pop("exc_text", None)


class ConsoleFormatter(JsonFormatter):
    """
    A simplified JSON formatter for console/development output.
    """

    def __init__(self, **kwargs):
        fmt = kwargs.pop("format", "%(asctime)s %(name)s %(levelname)s %(message)s")
        datefmt = kwargs.pop("datefmt", "%Y-%m-%d %H:%M:%S")
        rename_fields = kwargs.pop("rename_fields", {})

        default_rename_fields = {
            "levelname": "level",
            "asctime": "timestamp",
            "name": "logger",
        }

        rename_fields = {**default_rename_fields, **rename_fields}

        super().__init__(fmt=fmt, datefmt=datefmt, rename_fields=rename_fields, **kwargs)


class ProductionFormatter(StructuredExceptionJsonFormatter):
    """
    Formatter for production: every useful record field plus structured exceptions.
    """

    def __init__(self, **kwargs):
        fmt = kwargs.pop("format", None) or (
            "%(asctime)s %(name)s %(levelname)s %(message)s "
            "%(pathname)s %(lineno)d %(funcName)s %(process)d %(thread)d"
        )

        datefmt = kwargs.pop("datefmt", "%Y-%m-%dT%H:%M:%S")
        rename_fields = kwargs.pop("rename_fields", {})

        default_rename_fields = {
            "levelname": "level",
            "asctime": "timestamp",
            "name": "logger",
            "pathname": "file_path",
            "lineno": "line_number",
            "funcName": "function_name",
            "process": "process_id",
            "thread": "thread_id",
        }

        rename_fields = {**default_rename_fields, **rename_fields}

        super().__init__(fmt=fmt, datefmt=datefmt, rename_fields=rename_fields, **kwargs)
