"""
Observability for hostconfig: structured logging and the logger factory.
"""

from .logging import (
    HostConfigLogger, LogLevel, LogFormatter, LogHandler,
    JSONLogFormatter, HumanReadableFormatter, ConsoleLogHandler, FileLogHandler,
    get_logger, get_correlation_id
)
from .factory import (
    LoggerFactory, configure_logging, is_logging_configured,
    get_logging_configuration, reset_logging, get_configuration_logger,
    get_provider_logger, TemporaryLoggingConfig
)

__all__ = [
    "HostConfigLogger",
    "LogLevel",
    "LogFormatter",
    "LogHandler",
    "JSONLogFormatter",
    "HumanReadableFormatter",
    "ConsoleLogHandler",
    "FileLogHandler",
    "get_logger",
    "get_correlation_id",
    "LoggerFactory",
    "configure_logging",
    "is_logging_configured",
    "get_logging_configuration",
    "reset_logging",
    "get_configuration_logger",
    "get_provider_logger",
    "TemporaryLoggingConfig",
]
