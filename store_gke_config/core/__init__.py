from store_gke_config.core.config import Settings, get_settings
from store_gke_config.core.errors import (
    StoreGkeConfigError,
    ConfigError,
    CommandError,
    ErrorKind,
    ErrorInfo,
    classify_error,
)
from store_gke_config.core.logger import setup_logger, LoggingContext
from store_gke_config.core.render import render_template

__all__ = [
    "Settings",
    "get_settings",
    "StoreGkeConfigError",
    "ConfigError",
    "CommandError",
    "ErrorKind",
    "ErrorInfo",
    "classify_error",
    "setup_logger",
    "LoggingContext",
    "render_template",
]
