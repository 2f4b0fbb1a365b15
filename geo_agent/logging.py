"""
Structured logging for the GeoGebra chat assistant.

Log lines are either coloured console lines or JSON objects, so the same
events are readable in a terminal and parseable by a log collector.

Usage:
    from geo_agent.logging import get_logger

    logger = get_logger("chat")
    logger.info("Server started", port=8000)
    logger.api("Chat request received", message_count=3)
    logger.validation("Invalid commands in chunk", errors=["unknown command: Foo"])
"""

import json
import sys
import time
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Optional


class LogLevel(Enum):
    """Log severity levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"


@dataclass
class LogEntry:
    """Structured log entry."""
    ts: float           # Unix timestamp
    module: str         # Module name
    level: str          # Log level
    msg: str            # Message
    tag: Optional[str] = None      # Semantic tag (API/VALIDATION)
    details: Optional[dict] = None  # Additional data

    def to_json(self) -> str:
        """Convert to JSON string, omitting None fields."""
        data = {k: v for k, v in asdict(self).items() if v is not None}
        return json.dumps(data, ensure_ascii=False, default=str)

    def to_console(self) -> str:
        """Format for console output with colors."""
        colors = {
            "DEBUG": "\033[90m",    # Gray
            "INFO": "\033[97m",     # White
            "WARN": "\033[93m",     # Yellow
            "ERROR": "\033[91m",    # Red
        }
        reset = "\033[0m"

        color = colors.get(self.level, "")
        timestamp = time.strftime("%H:%M:%S", time.localtime(self.ts))
        details_str = ""
        if self.details:
            details_str = " " + json.dumps(self.details, ensure_ascii=False, default=str)

        if self.tag == "API":
            return f"{color}[{timestamp}] [API] {self.msg}{details_str}{reset}"
        elif self.tag == "VALIDATION":
            return f"{color}[{timestamp}] ⚠️ {self.msg}{details_str}{reset}"
        else:
            return f"{color}[{timestamp}] [{self.level}] [{self.module}] {self.msg}{details_str}{reset}"


class StructuredLogger:
    """
    Structured logger with console or JSON output.

    Args:
        module: Module name for identification
        min_level: Minimum level to log (default: INFO)
        json_format: Emit JSON lines instead of coloured console lines
    """

    _LEVEL_ORDER = {
        LogLevel.DEBUG: 0,
        LogLevel.INFO: 1,
        LogLevel.WARN: 2,
        LogLevel.ERROR: 3,
    }

    def __init__(
        self,
        module: str,
        min_level: LogLevel = LogLevel.INFO,
        json_format: bool = False,
    ):
        self.module = module
        self.min_level = min_level
        self.json_format = json_format

    def _should_log(self, level: LogLevel) -> bool:
        """Check if level meets minimum threshold."""
        return self._LEVEL_ORDER.get(level, 0) >= self._LEVEL_ORDER.get(self.min_level, 0)

    def log(
        self,
        level: LogLevel,
        msg: str,
        tag: Optional[str] = None,
        **extra
    ) -> None:
        """
        Log a message with optional extra fields.

        Args:
            level: Log level
            msg: Log message
            tag: Optional semantic tag
            **extra: Additional fields to include
        """
        if not self._should_log(level):
            return

        entry = LogEntry(
            ts=time.time(),
            module=self.module,
            level=level.value,
            msg=msg,
            tag=tag,
            details=extra if extra else None
        )

        line = entry.to_json() if self.json_format else entry.to_console()
        stream = sys.stderr if level == LogLevel.ERROR else sys.stdout
        stream.write(line + "\n")
        stream.flush()

    # ========== Standard Levels ==========

    def debug(self, msg: str, **extra) -> None:
        """Log debug message."""
        self.log(LogLevel.DEBUG, msg, **extra)

    def info(self, msg: str, **extra) -> None:
        """Log info message."""
        self.log(LogLevel.INFO, msg, **extra)

    def warn(self, msg: str, **extra) -> None:
        """Log warning message."""
        self.log(LogLevel.WARN, msg, **extra)

    def error(self, msg: str, **extra) -> None:
        """Log error message."""
        self.log(LogLevel.ERROR, msg, **extra)

    # ========== Pipeline-Specific Methods ==========

    def api(self, msg: str, **extra) -> None:
        """Log a chat request pipeline event."""
        self.log(LogLevel.INFO, msg, tag="API", **extra)

    def validation(self, msg: str, **extra) -> None:
        """Log invalid commands found in model output."""
        self.log(LogLevel.WARN, msg, tag="VALIDATION", **extra)


# ========== Logger Factory ==========

_loggers: dict[str, StructuredLogger] = {}
_min_level: LogLevel = LogLevel.INFO
_json_format: bool = False


def configure_logging(level: str = "INFO", json_format: bool = False) -> None:
    """
    Set the minimum level and output format for all loggers.

    Args:
        level: Level name (DEBUG, INFO, WARN, ERROR)
        json_format: Emit JSON lines
    """
    global _min_level, _json_format
    name = level.upper()
    if name == "WARNING":
        name = "WARN"
    _min_level = LogLevel(name)
    _json_format = json_format
    # Update existing loggers
    for logger in _loggers.values():
        logger.min_level = _min_level
        logger.json_format = _json_format


def get_logger(module: str) -> StructuredLogger:
    """
    Get or create a logger for the given module.

    Args:
        module: Module name

    Returns:
        StructuredLogger instance
    """
    if module not in _loggers:
        _loggers[module] = StructuredLogger(module, _min_level, _json_format)
    return _loggers[module]
