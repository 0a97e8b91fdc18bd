"""WebSocket components for role-based telemetry relay."""

from .events import EventType, LogLevel, Outcome, Role, create_log_event
from .registry import Connection, ConnectionRegistry
from .router import DEFAULT_TELEMETRY_TYPES, MessageRouter

__all__ = [
    "Connection",
    "ConnectionRegistry",
    "DEFAULT_TELEMETRY_TYPES",
    "EventType",
    "LogLevel",
    "MessageRouter",
    "Outcome",
    "Role",
    "create_log_event",
]
