"""
Structured logging for routing decisions.
"""

from __future__ import annotations

import json
import logging
import sys
import threading
import time
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, TextIO


class LogLevel(Enum):
    """Log levels."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"

    @property
    def numeric(self) -> int:
        return {
            "debug": logging.DEBUG,
            "info": logging.INFO,
            "warning": logging.WARNING,
            "error": logging.ERROR,
            "critical": logging.CRITICAL,
        }[self.value]


@dataclass
class LogRecord:
    """A structured log record.

    Attributes:
        level: Log level.
        event: Event name/type.
        message: Human-readable message.
        timestamp: Unix timestamp.
        data: Additional structured data.
    """

    level: str
    event: str
    message: str = ""
    timestamp: float = field(default_factory=time.time)
    data: dict[str, Any] = field(default_factory=dict)

    logger_name: str = ""
    thread_name: str = ""

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        d.update(d.pop("data", {}))
        return d

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)


class StructuredLogger:
    """Event logger with JSON or human-readable output.

    Example:
        events = StructuredLogger("tts_switchboard")
        events.mode_fallback("browser", "server", environment="server")

        # Bind request context
        req_events = events.bind(engine="azure")
        req_events.synthesis_start("Hello", voice="en-US-JennyNeural")
    """

    def __init__(
        self,
        name: str = "tts_switchboard",
        level: LogLevel = LogLevel.INFO,
        output: TextIO | None = None,
        json_format: bool = True,
    ):
        self.name = name
        self._level = level
        self._output = output
        self._json_format = json_format

        self._context: dict[str, Any] = {}
        self._lock = threading.Lock()

    @property
    def level(self) -> LogLevel:
        return self._level

    def bind(self, **context: Any) -> "StructuredLogger":
        """New logger that adds ``context`` to every record."""
        new_logger = StructuredLogger(
            name=self.name,
            level=self._level,
            output=self._output,
            json_format=self._json_format,
        )
        new_logger._context = {**self._context, **context}
        return new_logger

    def _log(
        self,
        level: LogLevel,
        event: str,
        message: str = "",
        **data: Any,
    ) -> None:
        if level.numeric < self._level.numeric:
            return

        record = LogRecord(
            level=level.value,
            event=event,
            message=message,
            data={**self._context, **data},
            logger_name=self.name,
            thread_name=threading.current_thread().name,
        )

        self._emit(record)

    def _emit(self, record: LogRecord) -> None:
        if self._json_format:
            line = record.to_json()
        else:
            line = self._format_human(record)

        # Resolved at emit time so pytest's capsys sees the output
        output = self._output or sys.stderr
        with self._lock:
            print(line, file=output)

    def _format_human(self, record: LogRecord) -> str:
        timestamp = time.strftime(
            "%Y-%m-%d %H:%M:%S",
            time.localtime(record.timestamp),
        )

        parts = [
            f"[{timestamp}]",
            f"[{record.level.upper()}]",
            f"[{record.event}]",
        ]

        if record.message:
            parts.append(record.message)

        if record.data:
            data_str = " ".join(f"{k}={v}" for k, v in record.data.items())
            parts.append(f"({data_str})")

        return " ".join(parts)

    def debug(self, event: str, message: str = "", **data: Any) -> None:
        self._log(LogLevel.DEBUG, event, message, **data)

    def info(self, event: str, message: str = "", **data: Any) -> None:
        self._log(LogLevel.INFO, event, message, **data)

    def warning(self, event: str, message: str = "", **data: Any) -> None:
        self._log(LogLevel.WARNING, event, message, **data)

    def error(self, event: str, message: str = "", **data: Any) -> None:
        self._log(LogLevel.ERROR, event, message, **data)

    def critical(self, event: str, message: str = "", **data: Any) -> None:
        self._log(LogLevel.CRITICAL, event, message, **data)

    # Routing events

    def mode_fallback(
        self,
        requested: str,
        effective: str,
        environment: str = "",
        **extra: Any,
    ) -> None:
        """A requested mode could not run here and was auto-resolved."""
        self.warning(
            "mode_fallback",
            f"Mode {requested} is not compatible with {environment} environment, "
            f"using {effective}",
            requested=requested,
            effective=effective,
            environment=environment,
            **extra,
        )

    def synthesis_start(
        self,
        text: str,
        voice: str = "",
        engine: str = "",
        **extra: Any,
    ) -> None:
        self.debug(
            "synthesis_start",
            "Starting synthesis",
            text_length=len(text),
            voice=voice,
            engine=engine,
            **extra,
        )

    def synthesis_complete(
        self,
        duration_ms: float,
        audio_bytes: int = 0,
        engine: str = "",
        **extra: Any,
    ) -> None:
        self.info(
            "synthesis_complete",
            f"Synthesis completed in {duration_ms:.1f}ms",
            duration_ms=duration_ms,
            audio_bytes=audio_bytes,
            engine=engine,
            **extra,
        )

    def synthesis_error(
        self,
        error: Exception,
        **extra: Any,
    ) -> None:
        self.error(
            "synthesis_error",
            str(error),
            error_type=type(error).__name__,
            **extra,
        )

    def synthesis_retry(
        self,
        engine: str,
        mode: str,
        previous_mode: str = "",
        **extra: Any,
    ) -> None:
        self.info(
            "synthesis_retry",
            f"Falling back to {mode} mode",
            engine=engine,
            mode=mode,
            previous_mode=previous_mode,
            **extra,
        )


_global_logger: StructuredLogger | None = None


def configure_logging(
    level: LogLevel | str = LogLevel.INFO,
    output: TextIO | None = None,
    json_format: bool = True,
) -> StructuredLogger:
    """Configure the process-wide event logger."""
    global _global_logger

    if isinstance(level, str):
        level = LogLevel(level.lower())

    _global_logger = StructuredLogger(
        name="tts_switchboard",
        level=level,
        output=output,
        json_format=json_format,
    )

    return _global_logger


def get_logger(name: str = "tts_switchboard") -> StructuredLogger:
    """Process-wide event logger, created on first use."""
    global _global_logger

    if _global_logger is None:
        _global_logger = StructuredLogger(name=name)

    return _global_logger
