"""Registry of live WebSocket connections and their declared roles."""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import WebSocket
from starlette.websockets import WebSocketState

from .events import Role

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class Connection:
    """A live socket tagged with the role it declared at connect time."""

    websocket: WebSocket
    role: Role

    @property
    def is_open(self) -> bool:
        """True while both sides of the socket are connected."""
        return (
            self.websocket.client_state == WebSocketState.CONNECTED
            and self.websocket.application_state == WebSocketState.CONNECTED
        )

    @property
    def is_monitor(self) -> bool:
        return self.role is Role.MONITOR


class ConnectionRegistry:
    """
    Tracks connected sockets keyed by the socket handle.

    All methods are synchronous, so on a single event loop a snapshot taken
    by monitors() never observes a half-applied register/unregister.
    """

    def __init__(self):
        self._connections: dict[WebSocket, Connection] = {}

    def register(self, websocket: WebSocket, role: Role) -> Connection:
        """Record a newly accepted socket with its role."""
        connection = Connection(websocket=websocket, role=role)
        self._connections[websocket] = connection
        logger.debug(f"Registered {role.value} connection. Total: {len(self._connections)}")
        return connection

    def unregister(self, websocket: WebSocket) -> Optional[Connection]:
        """
        Remove a socket from the registry.

        Returns:
            The removed connection, or None if the socket was not registered.
        """
        connection = self._connections.pop(websocket, None)
        if connection is not None:
            logger.debug(
                f"Unregistered {connection.role.value} connection. Total: {len(self._connections)}"
            )
        return connection

    def get(self, websocket: WebSocket) -> Optional[Connection]:
        return self._connections.get(websocket)

    def monitors(self) -> tuple[Connection, ...]:
        """
        Snapshot of all connections registered as monitors.

        The transport state of each entry may change after the snapshot is
        taken; callers check Connection.is_open before sending.
        """
        return tuple(c for c in self._connections.values() if c.is_monitor)

    def count(self, role: Optional[Role] = None) -> int:
        """Number of connections, optionally restricted to one role."""
        if role is None:
            return len(self._connections)
        return sum(1 for c in self._connections.values() if c.role is role)

    def __len__(self) -> int:
        return len(self._connections)

    def __contains__(self, websocket: object) -> bool:
        return websocket in self._connections
