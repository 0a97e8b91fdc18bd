"""WebSocket event type definitions."""

import time
from enum import Enum
from typing import Any, Optional


class EventType(str, Enum):
    """Discriminant values for frames generated by the relay itself."""

    LOG = "log"


class LogLevel(str, Enum):
    """Severity of a log event."""

    INFO = "info"
    ERROR = "error"


class Role(str, Enum):
    """Role a connection declares when it connects."""

    DEVICE = "device"
    MONITOR = "monitor"

    @classmethod
    def from_query(cls, value: Optional[str]) -> "Role":
        """Resolve the ``role`` query parameter. Only "monitor" selects MONITOR."""
        if value == cls.MONITOR.value:
            return cls.MONITOR
        return cls.DEVICE


class Outcome(str, Enum):
    """Classification result for an inbound frame."""

    RELAY = "relay"  # Allow-listed telemetry, forwarded to monitors
    LOG_ONLY = "log_only"  # Valid JSON, unknown or missing type
    REJECT = "reject"  # Not parseable


def now_ms() -> int:
    """Milliseconds since the epoch."""
    return int(time.time() * 1000)


def create_log_event(
    level: str | LogLevel,
    message: str,
    meta: Optional[Any] = None,
) -> dict[str, Any]:
    """
    Create a log event payload.

    Args:
        level: Severity of the event.
        message: Short human-readable description.
        meta: Optional structured payload attached to the event.

    Returns:
        Complete event dict ready for JSON serialization.
    """
    if isinstance(level, LogLevel):
        level = level.value

    return {
        "type": EventType.LOG.value,
        "level": level,
        "message": message,
        "timestamp": now_ms(),
        "meta": meta,
    }
