"""Connector log helpers that keep LOG messages consistent and readable."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from source_snowflake.models import log_message

LEVELS = ("TRACE", "DEBUG", "INFO", "WARN", "ERROR", "FATAL")


class RunLogger:
    """Collects log entries and forwards them as protocol LOG messages."""

    def __init__(self, emit: Optional[Callable[[Dict[str, Any]], None]] = None, max_detail: int = 1800) -> None:
        self.emit = emit
        self.max_detail = max_detail
        self.entries: List[Dict[str, str]] = []

    def log(self, level: str, message: str) -> None:
        level = level.upper()
        if level not in LEVELS:
            raise ValueError(f"Unknown log level: {level}")
        message = message.strip() if message else ""
        if len(message) > self.max_detail:
            message = message[: self.max_detail] + "..."
        self.entries.append(
            {"ts": datetime.now(timezone.utc).isoformat(), "level": level, "message": message}
        )
        if self.emit:
            self.emit(log_message(level, message))

    def info(self, message: str) -> None:
        self.log("INFO", message)

    def warn(self, message: str) -> None:
        self.log("WARN", message)

    def error(self, message: str) -> None:
        self.log("ERROR", message)

    def trace(self, level: str | None = None) -> List[Dict[str, str]]:
        if level is None:
            return list(self.entries)
        return [e for e in self.entries if e["level"] == level.upper()]
