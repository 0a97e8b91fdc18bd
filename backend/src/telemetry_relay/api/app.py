"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.staticfiles import StaticFiles

from .routes import command_router
from .websocket import ConnectionRegistry, MessageRouter, Role

if TYPE_CHECKING:
    from ..config import RelayConfig

logger = logging.getLogger(__name__)


def create_app(
    config: "RelayConfig",
    registry: Optional[ConnectionRegistry] = None,
    message_router: Optional[MessageRouter] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config: Relay settings (WebSocket path, allow-list, static directory).
        registry: Connection registry. A fresh one is created if omitted.
        message_router: Router bound to the registry. Created if omitted.

    Returns:
        Configured FastAPI application.
    """
    if registry is None:
        registry = message_router.registry if message_router else ConnectionRegistry()
    if message_router is None:
        message_router = MessageRouter(registry, config.telemetry_types)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan context manager."""
        logger.info(f"Relay starting, telemetry types: {sorted(message_router.telemetry_types)}")
        yield
        logger.info("Relay shutting down")

    app = FastAPI(
        title="Telemetry Relay",
        description="Role-based WebSocket relay from devices to monitors",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.registry = registry
    app.state.message_router = message_router

    app.include_router(command_router)

    @app.websocket(config.ws_path)
    async def websocket_endpoint(websocket: WebSocket):
        """Per-connection loop: register, route each frame, clean up on close."""
        await websocket.accept()
        # First value wins when the parameter is repeated
        roles = websocket.query_params.getlist("role")
        connection = await message_router.on_connect(websocket, roles[0] if roles else None)

        try:
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    await message_router.on_disconnect(
                        connection, message.get("code"), message.get("reason") or ""
                    )
                    break
                text = message.get("text")
                if text is None:
                    data = message.get("bytes") or b""
                    text = data.decode("utf-8", errors="replace")
                await message_router.handle_message(connection, text)
        except WebSocketDisconnect:
            pass
        except Exception as e:
            await message_router.on_error(connection, e)
        finally:
            await message_router.on_close(websocket)

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "connections": len(registry),
            "monitors": registry.count(Role.MONITOR),
            "devices": registry.count(Role.DEVICE),
        }

    # Mounted last so it does not shadow the routes above
    if config.static_dir and Path(config.static_dir).is_dir():
        app.mount("/", StaticFiles(directory=config.static_dir, html=True), name="static")
        logger.info(f"Serving static files from {config.static_dir}")

    return app
