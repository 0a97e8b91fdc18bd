"""Role-based WebSocket relay from devices to monitors."""

__version__ = "1.0.0"
