"""API routes for the telemetry relay."""

from .command import router as command_router

__all__ = ["command_router"]
