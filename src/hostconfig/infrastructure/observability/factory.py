"""
Centralized Logger Factory for hostconfig

Creates and caches loggers and applies one ``LoggingConfiguration`` to all of
them, so a host can route library output once at startup.
"""

import threading
from typing import Dict, List, Optional, TYPE_CHECKING

from .logging import (
    ROOT_LOGGER_NAME, HostConfigLogger, LogLevel, get_logger,
    JSONLogFormatter, HumanReadableFormatter, ConsoleLogHandler, FileLogHandler
)

# Use TYPE_CHECKING to avoid circular imports
if TYPE_CHECKING:
    from hostconfig.configuration.models import LoggingConfiguration


class LoggerFactory:
    """
    Thread-safe singleton owning every logger handed out by hostconfig.

    Loggers created before ``configure`` are reconfigured in place when a
    configuration arrives.
    """

    _instance: Optional['LoggerFactory'] = None
    _lock = threading.Lock()

    def __init__(self):
        self._loggers: Dict[str, HostConfigLogger] = {}
        self._config: Optional['LoggingConfiguration'] = None
        self._config_lock = threading.RLock()

    @classmethod
    def get_instance(cls) -> 'LoggerFactory':
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = LoggerFactory()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Reset singleton instance (useful for testing)."""
        with cls._lock:
            cls._instance = None

    def configure(self, config: 'LoggingConfiguration') -> None:
        """
        Apply a logging configuration to the root logger and every logger
        created so far.

        Args:
            config: Logging settings, typically bound from a configuration section
        """
        with self._config_lock:
            self._config = config
            self._apply_config_to_logger(get_logger(ROOT_LOGGER_NAME), config)
            for logger in self._loggers.values():
                self._apply_config_to_logger(logger, config)

    def get_logger(self, name: str, level: Optional[LogLevel] = None) -> HostConfigLogger:
        """
        Get or create a logger.

        Args:
            name: Dotted logger name, e.g. "hostconfig.configuration.root"
            level: Optional level override for this logger only

        Returns:
            HostConfigLogger: cached logger instance
        """
        with self._config_lock:
            logger = self._loggers.get(name)
            if logger is None:
                logger = get_logger(name)
                if self._config is not None:
                    self._apply_config_to_logger(logger, self._config)
                self._loggers[name] = logger
            if level is not None:
                logger.set_level(level)
            return logger

    def _apply_config_to_logger(self, logger: HostConfigLogger, config: 'LoggingConfiguration') -> None:
        logger.handlers.clear()
        logger.set_level(LogLevel(config.level))

        console_formatter = JSONLogFormatter() if config.format == "json" else HumanReadableFormatter()
        if config.output in ("console", "both"):
            logger.add_handler(ConsoleLogHandler(console_formatter))

        # Files always get JSON lines
        if config.output in ("file", "both") and config.file_path:
            logger.add_handler(FileLogHandler(JSONLogFormatter(), config.file_path))

    def get_configuration(self) -> Optional['LoggingConfiguration']:
        with self._config_lock:
            return self._config

    def is_configured(self) -> bool:
        with self._config_lock:
            return self._config is not None

    def get_logger_names(self) -> List[str]:
        with self._config_lock:
            return list(self._loggers.keys())

    def reset(self) -> None:
        """Drop the configuration and detach all handlers; loggers stay cached."""
        with self._config_lock:
            for logger in self._loggers.values():
                logger.handlers.clear()
                logger.set_level(LogLevel.INFO)
            get_logger(ROOT_LOGGER_NAME).handlers.clear()
            self._config = None


def configure_logging(config: 'LoggingConfiguration') -> None:
    """Configure global logging using the factory."""
    LoggerFactory.get_instance().configure(config)


def is_logging_configured() -> bool:
    return LoggerFactory.get_instance().is_configured()


def get_logging_configuration() -> Optional['LoggingConfiguration']:
    return LoggerFactory.get_instance().get_configuration()


def reset_logging() -> None:
    """Reset global logging state (useful for testing)."""
    LoggerFactory.get_instance().reset()


def get_configuration_logger(component: str) -> HostConfigLogger:
    """Logger for the aggregator and its collaborators."""
    return LoggerFactory.get_instance().get_logger(f"{ROOT_LOGGER_NAME}.configuration.{component}")


def get_provider_logger(provider_name: str) -> HostConfigLogger:
    """Logger for a concrete provider or its watcher."""
    return LoggerFactory.get_instance().get_logger(f"{ROOT_LOGGER_NAME}.providers.{provider_name}")


class TemporaryLoggingConfig:
    """Context manager for temporary logging configuration changes."""

    def __init__(self, config: 'LoggingConfiguration'):
        self.config = config
        self.original_config = None
        self.factory = LoggerFactory.get_instance()

    def __enter__(self):
        self.original_config = self.factory.get_configuration()
        self.factory.configure(self.config)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.original_config:
            self.factory.configure(self.original_config)
        else:
            self.factory.reset()
