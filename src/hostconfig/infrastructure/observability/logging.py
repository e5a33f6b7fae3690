"""
Structured Logging for hostconfig

Small structured logger with pluggable formatters and handlers. Records are
plain dictionaries so they can be rendered either as JSON lines or as
human-readable console output. A correlation id can be attached to every
record emitted inside ``correlation_context``.
"""

import json
import sys
import uuid
from abc import ABC, abstractmethod
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, TextIO, Union

correlation_id_var: ContextVar[Optional[str]] = ContextVar('correlation_id', default=None)


class LogLevel(Enum):
    """Log levels understood by HostConfigLogger"""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


_LEVEL_ORDER = {
    LogLevel.DEBUG: 0,
    LogLevel.INFO: 1,
    LogLevel.WARNING: 2,
    LogLevel.ERROR: 3,
    LogLevel.CRITICAL: 4,
}


class LogFormatter(ABC):
    """Abstract base class for log formatters"""

    @abstractmethod
    def format(self, record: Dict[str, Any]) -> str:
        """Format a log record into a string"""
        pass


class JSONLogFormatter(LogFormatter):
    """One JSON object per line"""

    def format(self, record: Dict[str, Any]) -> str:
        return json.dumps(record, default=str, ensure_ascii=False)


class HumanReadableFormatter(LogFormatter):
    """Aligned single-line output with extra fields indented below"""

    def format(self, record: Dict[str, Any]) -> str:
        timestamp = record.get('timestamp', '')
        level = record.get('level', 'INFO')
        logger_name = record.get('logger', 'unknown')
        message = record.get('message', '')
        correlation_id = record.get('correlation_id', '')

        if 'T' in timestamp:
            date_part, time_part = timestamp.split('T', 1)
            timestamp = f"{date_part} {time_part.split('.')[0].rstrip('Z')}"

        short_logger = logger_name.split('.')[-1]
        if len(short_logger) > 25:
            short_logger = short_logger[:22] + "..."

        line = f"[{timestamp}] {level:<8} [{short_logger:<25}] {message}"
        if correlation_id:
            line += f" (cid={correlation_id[:8]})"

        extra = record.get('extra')
        if extra:
            extra_lines = []
            for key, value in extra.items():
                text = str(value)
                if len(text) > 100:
                    text = text[:97] + "..."
                extra_lines.append(f"    {key}: {text}")
            line += "\n" + "\n".join(extra_lines)

        return line


class LogHandler(ABC):
    """Abstract base class for log handlers"""

    def __init__(self, formatter: LogFormatter):
        self.formatter = formatter

    @abstractmethod
    def emit(self, record: Dict[str, Any]) -> None:
        """Emit a log record"""
        pass


class ConsoleLogHandler(LogHandler):
    """Writes records to a text stream, stderr by default"""

    def __init__(self, formatter: LogFormatter, stream: Optional[TextIO] = None):
        super().__init__(formatter)
        self.stream = stream

    def emit(self, record: Dict[str, Any]) -> None:
        stream = self.stream or sys.stderr
        stream.write(self.formatter.format(record) + '\n')
        stream.flush()


class FileLogHandler(LogHandler):
    """Appends records to a file, falling back to stderr when the file is not writable"""

    def __init__(self, formatter: LogFormatter, file_path: Union[str, Path]):
        super().__init__(formatter)
        self.file_path = Path(file_path)
        try:
            self.file_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError:
            # emit() reports the failure on the first write
            pass

    def emit(self, record: Dict[str, Any]) -> None:
        formatted_message = self.formatter.format(record)
        try:
            with open(self.file_path, 'a', encoding='utf-8') as f:
                f.write(formatted_message + '\n')
        except OSError as e:
            sys.stderr.write(f"FileLogHandler failed to write to {self.file_path}: {e}\n")
            sys.stderr.write(formatted_message + '\n')


class HostConfigLogger:
    """
    Structured logger with correlation id support.

    A logger without handlers drops every record, so library code can log
    freely until the host application configures output.
    """

    def __init__(self, name: str, level: LogLevel = LogLevel.INFO):
        self.name = name
        self.level = level
        self.handlers: List[LogHandler] = []

    def add_handler(self, handler: LogHandler) -> None:
        self.handlers.append(handler)

    def remove_handler(self, handler: LogHandler) -> None:
        if handler in self.handlers:
            self.handlers.remove(handler)

    def set_level(self, level: LogLevel) -> None:
        self.level = level

    def is_enabled_for(self, level: LogLevel) -> bool:
        return _LEVEL_ORDER[level] >= _LEVEL_ORDER[self.level]

    def _create_log_record(self, level: LogLevel, message: str, extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        record = {
            'timestamp': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            'level': level.value,
            'logger': self.name,
            'message': message,
            'correlation_id': correlation_id_var.get(),
        }
        if extra:
            record['extra'] = extra
        return {k: v for k, v in record.items() if v is not None}

    def _log(self, level: LogLevel, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        if not self.handlers or not self.is_enabled_for(level):
            return

        record = self._create_log_record(level, message, extra)
        for handler in self.handlers:
            try:
                handler.emit(record)
            except Exception as e:
                sys.stderr.write(f"Logging handler failed: {e}\n")

    def debug(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        self._log(LogLevel.DEBUG, message, extra)

    def info(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        self._log(LogLevel.INFO, message, extra)

    def warning(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        self._log(LogLevel.WARNING, message, extra)

    def error(self, message: str, extra: Optional[Dict[str, Any]] = None, exc_info: Optional[BaseException] = None) -> None:
        """Log error message, attaching a summary of ``exc_info`` when given"""
        if exc_info is not None:
            extra = dict(extra or {})
            extra['exception'] = {
                'type': type(exc_info).__name__,
                'message': str(exc_info),
                'module': type(exc_info).__module__,
            }
        self._log(LogLevel.ERROR, message, extra)

    @contextmanager
    def correlation_context(self, correlation_id: Optional[str] = None):
        """Tag every record emitted inside the block with one correlation id"""
        if correlation_id is None:
            correlation_id = str(uuid.uuid4())

        token = correlation_id_var.set(correlation_id)
        try:
            yield correlation_id
        finally:
            correlation_id_var.reset(token)


ROOT_LOGGER_NAME = "hostconfig"

_loggers: Dict[str, HostConfigLogger] = {}


def get_logger(name: str, level: LogLevel = LogLevel.INFO) -> HostConfigLogger:
    """Get or create a logger; new loggers inherit the root logger's handlers"""
    if name not in _loggers:
        logger = HostConfigLogger(name, level)

        root_logger = _loggers.get(ROOT_LOGGER_NAME)
        if root_logger is not None and name != ROOT_LOGGER_NAME:
            logger.set_level(root_logger.level)
            for handler in root_logger.handlers:
                logger.add_handler(handler)

        _loggers[name] = logger
    return _loggers[name]


def get_correlation_id() -> Optional[str]:
    """Get the current correlation ID from context"""
    return correlation_id_var.get()
