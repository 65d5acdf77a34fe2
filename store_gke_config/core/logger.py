from datetime import datetime
import os
import re
import sys
import json
import logging
import traceback

from store_gke_config.core.logging_context import ContextFilter, LoggingContext


SUCCESS_LEVEL = 25
LOG_SEVERITY = {
    "DEBUG": "DEBUG",
    "INFO": "INFO",
    "SUCCESS": "SUCCESS",
    "WARNING": "WARNING",
    "ERROR": "ERROR",
    "CRITICAL": "CRITICAL"
}

logging.addLevelName(SUCCESS_LEVEL, "SUCCESS")

_RESERVED_RECORD_KEYS = [
    "msg", "args", "levelname", "levelno", "pathname",
    "filename", "module", "exc_info", "exc_text", "stack_info",
    "lineno", "funcName", "created", "msecs", "relativeCreated",
    "thread", "threadName", "process", "processName", "scope", "name", "taskName", "message"
]


class CustomLogger(logging.Logger):
    def success(self, message, *args, **kwargs):
        if self.isEnabledFor(SUCCESS_LEVEL):
            self.log(SUCCESS_LEVEL, message, *args, **kwargs, stacklevel=2)


def stringify_extra(value):
    if isinstance(value, (list, dict)):
        return str(value)
    else:
        return value


class CustomFormatter(logging.Formatter):

    def __init__(self, fmt="%(message)s", include_location=False):
        super().__init__(fmt)
        self.include_location = include_location

    def format(self, record):
        level_name = LOG_SEVERITY.get(record.levelname, record.levelname)

        scope_highlight = f"{record.scope}" if hasattr(record, "scope") else ""
        location = ""
        if self.include_location and hasattr(record, "module") and hasattr(record, "funcName") and hasattr(record, "lineno"):
            location = f"({record.module}:{record.funcName}:{record.lineno})"
            location = f"{record.pathname}:{record.lineno}\n{location}"

        metadata_line = f"{datetime.now().isoformat()} [{level_name}] {scope_highlight} {location}".strip()

        message = record.getMessage()
        message_split = message.splitlines()
        if len(message_split) > 1:
            message_line = f"     Message: {message_split[0]}"
            for line in message_split[1:]:
                message_line += f"\n             {line}"
        else:
            message_line = f"     Message: {message}"

        extra_items = [
            f"{key}: {stringify_extra(value)}"
            for key, value in record.__dict__.items()
            if key not in _RESERVED_RECORD_KEYS
        ]
        extra_info = ""
        if extra_items:
            extra_info = f"\n     {' '.join(extra_items)}"
        formatted_log = f"{metadata_line}\n{message_line}{extra_info}"
        if record.exc_info:
            # clickable "File path:line" stack traces
            format_exception = traceback.format_exception(record.exc_info[0], record.exc_info[1], record.exc_info[2])
            for i in range(len(format_exception)):
                format_exception[i] = re.sub(r'File "([^"]+)", line (\d+),', r'File "\1:\2"', format_exception[i])
            formatted_log += "\n" + "".join(format_exception)
        return formatted_log


class JSONFormatter(logging.Formatter):
    def format(self, record):
        log_dict = {
            "level": record.levelname,
            "message": record.getMessage(),
            "time": self.formatTime(record, self.datefmt),
            "logger": record.name,
        }
        if hasattr(record, "scope"):
            log_dict["scope"] = record.scope
        if hasattr(record, "module") and hasattr(record, "funcName") and hasattr(record, "lineno"):
            log_dict["location"] = {
                "module": record.module,
                "function": record.funcName,
                "line": record.lineno,
            }
        for key, value in record.__dict__.items():
            if key not in _RESERVED_RECORD_KEYS and key not in log_dict and key not in ("levelname", "msg"):
                log_dict[key] = stringify_extra(value)
        if record.exc_info:
            log_dict["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_dict, ensure_ascii=False, default=str)


_stream_handlers = []


def set_log_stream(stream) -> None:
    """Point every handler created by setup_logger at another stream."""
    for handler in _stream_handlers:
        handler.setStream(stream)


def _json_logs_enabled() -> bool:
    return os.environ.get("STORE_GKE_LOG_JSON", "false").strip().lower() in {"true", "1", "yes", "y", "on"}


def setup_logger(name: str, include_location=False, use_json=None):
    logging.setLoggerClass(CustomLogger)
    logger = logging.getLogger(name)
    logger.addFilter(ContextFilter())

    if use_json is None:
        use_json = _json_logs_enabled()

    if not any(isinstance(h, logging.StreamHandler) for h in logger.handlers):
        stream_handler = logging.StreamHandler(sys.stdout)
        stream_handler.setLevel(logging.DEBUG)
        if use_json:
            stream_handler.setFormatter(JSONFormatter())
        else:
            stream_handler.setFormatter(CustomFormatter(include_location=include_location))
        _stream_handlers.append(stream_handler)
        logger.addHandler(stream_handler)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    return logger


__all__ = [
    "SUCCESS_LEVEL",
    "CustomLogger",
    "CustomFormatter",
    "JSONFormatter",
    "LoggingContext",
    "setup_logger",
    "set_log_stream",
]
