"""Logging setup: levels, output formats, writers and rolling log files."""

from __future__ import annotations

import enum
import json
import logging
import os
import sys
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from pathlib import Path

LOG_ENV_VAR = "PILIPILI_LOG"
TRACE = 5

_INSTALLED_MARK = "_installed_by_logger_builder"
_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
_ANSI_COLOURS = {
    "ERROR": "\x1b[31m",
    "WARN": "\x1b[33m",
    "INFO": "\x1b[32m",
    "DEBUG": "\x1b[34m",
    "TRACE": "\x1b[35m",
}
_ANSI_RESET = "\x1b[0m"


class LogLevel(enum.IntEnum):
    """Verbosity threshold, ordered from silent to most verbose."""

    OFF = 0
    ERROR = 1
    WARN = 2
    INFO = 3
    DEBUG = 4
    TRACE = 5

    def __str__(self) -> str:
        return self.name.capitalize()

    def __format__(self, spec: str) -> str:
        return format(str(self), spec)

    def to_logging_level(self) -> int:
        """Return the matching numeric level of the ``logging`` module."""
        return _LOGGING_LEVELS[self]


_LOGGING_LEVELS = {
    LogLevel.OFF: logging.CRITICAL + 1,
    LogLevel.ERROR: logging.ERROR,
    LogLevel.WARN: logging.WARNING,
    LogLevel.INFO: logging.INFO,
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.TRACE: TRACE,
}


class LogFormat(enum.Enum):
    PRETTY = "pretty"
    COMPACT = "compact"
    JSON = "json"
    FULL = "full"


class LogWriter(enum.Enum):
    FILE = "file"
    CONSOLE = "console"


class _RollingFileHandler(logging.FileHandler):
    """File handler whose file name follows the current UTC period."""

    def __init__(self, directory: str | os.PathLike, prefix: str, pattern: str):
        self._directory = Path(directory)
        self._prefix = prefix
        self._pattern = pattern
        self._current = self._file_name(datetime.now(timezone.utc))
        super().__init__(self._directory / self._current, encoding="utf-8", delay=True)

    def _file_name(self, moment: datetime) -> str:
        stamp = moment.strftime(self._pattern)
        return f"{self._prefix}.{stamp}" if self._prefix else stamp

    def emit(self, record: logging.LogRecord) -> None:
        name = self._file_name(datetime.fromtimestamp(record.created, timezone.utc))
        if name != self._current:
            if self.stream is not None:
                self.stream.close()
                self.stream = None
            self._current = name
            self.baseFilename = os.path.abspath(self._directory / name)
        super().emit(record)


class LogRotation(enum.Enum):
    """How often a new log file is started."""

    MINUTELY = "%Y-%m-%d-%H-%M"
    HOURLY = "%Y-%m-%d-%H"
    DAILY = "%Y-%m-%d"
    NEVER = "never"

    def create_file_handler(
        self, directory: str | os.PathLike, file_prefix: str
    ) -> logging.FileHandler:
        """Create a file handler writing into ``directory``."""
        Path(directory).mkdir(parents=True, exist_ok=True)
        if self is LogRotation.NEVER:
            if not file_prefix:
                raise ValueError("a file prefix is required when log files never rotate")
            return logging.FileHandler(
                Path(directory) / file_prefix, encoding="utf-8", delay=True
            )
        return _RollingFileHandler(directory, file_prefix, self.value)


@dataclass(frozen=True)
class LogDisplayOptions:
    """Which parts of an event are shown besides its message."""

    level: bool = True
    target: bool = True
    thread_ids: bool = False
    thread_names: bool = False
    source_location: bool = False


def _level_name(levelno: int) -> str:
    if levelno >= logging.ERROR:
        return "ERROR"
    if levelno >= logging.WARNING:
        return "WARN"
    if levelno >= logging.INFO:
        return "INFO"
    if levelno >= logging.DEBUG:
        return "DEBUG"
    return "TRACE"


class _EventFormatter(logging.Formatter):
    def __init__(self, event_format: LogFormat, options: LogDisplayOptions, ansi: bool):
        super().__init__()
        self._event_format = event_format
        self._options = options
        self._ansi = ansi

    def _timestamp(self, record: logging.LogRecord) -> str:
        moment = datetime.fromtimestamp(record.created).astimezone()
        return f"{moment.strftime(_TIME_FORMAT)}.{int(record.msecs):03d}"

    def _message(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        return message

    def _level(self, record: logging.LogRecord) -> str:
        name = _level_name(record.levelno)
        padded = f"{name:>5}"
        if self._ansi:
            return f"{_ANSI_COLOURS[name]}{padded}{_ANSI_RESET}"
        return padded

    def format(self, record: logging.LogRecord) -> str:
        message = self._message(record)
        if self._event_format is LogFormat.JSON:
            return self._format_json(record, message)
        if self._event_format is LogFormat.PRETTY:
            return self._format_pretty(record, message)
        return self._format_line(record, message)

    def _format_line(self, record: logging.LogRecord, message: str) -> str:
        options = self._options
        parts = [self._timestamp(record)]
        if options.level:
            parts.append(self._level(record))
        if options.thread_names:
            parts.append(record.threadName or "")
        if options.thread_ids:
            parts.append(f"ThreadId({record.thread})")
        if options.target:
            parts.append(f"{record.name}:")
        if options.source_location:
            parts.append(f"{record.pathname}:{record.lineno}:")
        parts.append(message)
        return " ".join(parts)

    def _format_pretty(self, record: logging.LogRecord, message: str) -> str:
        options = self._options
        header = [f"  {self._timestamp(record)}"]
        if options.level:
            header.append(self._level(record))
        if options.target:
            header.append(f"{record.name}:")
        header.append(message)
        lines = [" ".join(header)]
        if options.source_location:
            lines.append(f"    at {record.pathname}:{record.lineno}")
        thread = []
        if options.thread_names:
            thread.append(record.threadName or "")
        if options.thread_ids:
            thread.append(f"ThreadId({record.thread})")
        if thread:
            lines.append("    on " + " ".join(thread))
        return "\n".join(lines) + "\n"

    def _format_json(self, record: logging.LogRecord, message: str) -> str:
        options = self._options
        event: dict[str, object] = {"timestamp": self._timestamp(record)}
        if options.level:
            event["level"] = _level_name(record.levelno)
        event["fields"] = {"message": message}
        if options.target:
            event["target"] = record.name
        if options.source_location:
            event["filename"] = record.pathname
            event["line_number"] = record.lineno
        if options.thread_names:
            event["threadName"] = record.threadName
        if options.thread_ids:
            event["threadId"] = f"ThreadId({record.thread})"
        return json.dumps(event, ensure_ascii=False)


def _level_from_env() -> LogLevel | None:
    text = os.environ.get(LOG_ENV_VAR, "").strip()
    if not text:
        return None
    try:
        return LogLevel[text.upper()]
    except KeyError:
        return None


class LoggerGuard:
    """Keeps an installed handler alive; closing it flushes and removes it."""

    def __init__(self, handler: logging.Handler, logger: logging.Logger, previous_level: int):
        self.handler = handler
        self._logger = logger
        self._previous_level = previous_level
        self._closed = False

    def close(self) -> None:
        """Flush and detach the handler, restoring the previous logger level."""
        if self._closed:
            return
        self._closed = True
        if self.handler in self._logger.handlers:
            self._logger.removeHandler(self.handler)
            self._logger.setLevel(self._previous_level)
        self.handler.flush()
        self.handler.close()

    def __enter__(self) -> LoggerGuard:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


@dataclass(frozen=True)
class LoggerBuilder:
    """Immutable builder that installs a handler on the root logger."""

    level: LogLevel = LogLevel.INFO
    writer: LogWriter = LogWriter.FILE
    directory: str = "./logs"
    file_prefix: str = ""
    rolling: LogRotation = LogRotation.DAILY
    format: LogFormat = LogFormat.COMPACT
    display_options: LogDisplayOptions = field(default_factory=LogDisplayOptions)

    def with_level(self, level: LogLevel) -> LoggerBuilder:
        return replace(self, level=level)

    def with_writer(self, writer: LogWriter) -> LoggerBuilder:
        return replace(self, writer=writer)

    def with_directory(self, directory: str | os.PathLike) -> LoggerBuilder:
        return replace(self, directory=os.fspath(directory))

    def with_file_prefix(self, file_prefix: str) -> LoggerBuilder:
        return replace(self, file_prefix=file_prefix)

    def with_rolling(self, rolling: LogRotation) -> LoggerBuilder:
        return replace(self, rolling=rolling)

    def with_format(self, format: LogFormat) -> LoggerBuilder:
        return replace(self, format=format)

    def with_display_options(self, display_options: LogDisplayOptions) -> LoggerBuilder:
        return replace(self, display_options=display_options)

    def init(self) -> LoggerGuard:
        """Install the configured handler on the root logger.

        The level named in the ``PILIPILI_LOG`` environment variable, when
        valid, takes precedence over the configured level.
        """
        if self.writer is LogWriter.FILE:
            handler: logging.Handler = self.rolling.create_file_handler(
                self.directory, self.file_prefix
            )
        else:
            handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            _EventFormatter(
                self.format, self.display_options, ansi=self.writer is LogWriter.CONSOLE
            )
        )
        setattr(handler, _INSTALLED_MARK, True)

        level = _level_from_env() or self.level
        root = logging.getLogger()
        for existing in list(root.handlers):
            if getattr(existing, _INSTALLED_MARK, False):
                root.removeHandler(existing)
                existing.close()
        previous_level = root.level
        root.addHandler(handler)
        root.setLevel(level.to_logging_level())
        return LoggerGuard(handler, root, previous_level)