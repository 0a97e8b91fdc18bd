"""Message routing: classify inbound frames and fan out to monitors."""

import json
import logging
from typing import Any, Iterable, Optional

from fastapi import WebSocket

from .events import LogLevel, Outcome, Role, create_log_event
from .registry import Connection, ConnectionRegistry

logger = logging.getLogger(__name__)

DEFAULT_TELEMETRY_TYPES = ("motor", "steering", "arm")

# Normal closure, going away, no status code
NORMAL_CLOSE_CODES = frozenset({1000, 1001, 1005})


def _reject_constant(name: str) -> None:
    # NaN and Infinity are not JSON
    raise ValueError(f"Invalid JSON constant: {name}")


class MessageRouter:
    """
    Decides, per inbound frame, whether to relay it, log it, or reject it.

    Every log event is also broadcast to the current monitors through the
    same send path as relayed telemetry, so monitors receive an interleaved
    stream distinguishable by the "type" field.
    """

    def __init__(
        self,
        registry: ConnectionRegistry,
        telemetry_types: Iterable[str] = DEFAULT_TELEMETRY_TYPES,
    ):
        self._registry = registry
        self._telemetry_types = frozenset(telemetry_types)

    @property
    def registry(self) -> ConnectionRegistry:
        return self._registry

    @property
    def telemetry_types(self) -> frozenset[str]:
        return self._telemetry_types

    # --- Classification ---

    def classify(self, raw: str) -> tuple[Outcome, Any]:
        """
        Classify a raw frame.

        Returns:
            Tuple of (outcome, parsed value). The parsed value is None on REJECT.
        """
        try:
            parsed = json.loads(raw, parse_constant=_reject_constant)
        except (ValueError, RecursionError):
            return Outcome.REJECT, None

        if isinstance(parsed, dict):
            message_type = parsed.get("type")
            if isinstance(message_type, str) and message_type in self._telemetry_types:
                return Outcome.RELAY, parsed

        return Outcome.LOG_ONLY, parsed

    async def handle_message(self, connection: Connection, raw: str) -> Outcome:
        """Classify a frame received on a connection and dispatch it."""
        outcome, parsed = self.classify(raw)
        role = connection.role.value

        if outcome is Outcome.REJECT:
            await self.log_error("invalid payload", {"role": role, "payload": raw})
        elif outcome is Outcome.RELAY:
            # Type only; the full payload already reaches monitors as the relay frame
            await self.log_info("monitoring data received", {"type": parsed["type"]})
            await self.relay(raw)
        else:
            await self.log_info("message received", {"role": role, "payload": raw})

        return outcome

    # --- Connection lifecycle ---

    async def on_connect(self, websocket: WebSocket, query_role: Optional[str] = None) -> Connection:
        """Register an accepted socket. Anything but "monitor" is a device."""
        connection = self._registry.register(websocket, Role.from_query(query_role))
        await self.log_info("connected", {"role": connection.role.value})
        return connection

    async def on_close(self, websocket: WebSocket) -> None:
        """Unregister a socket; duplicate close notifications are ignored."""
        connection = self._registry.unregister(websocket)
        if connection is None:
            return
        await self.log_info("disconnected", {"role": connection.role.value})

    async def on_disconnect(self, connection: Connection, code: Optional[int], reason: str = "") -> None:
        """Report an abnormal close code as a transport error. Normal closes are silent."""
        if code is None or code in NORMAL_CLOSE_CODES:
            return
        description = f"connection closed with code {code}"
        if reason:
            description = f"{description}: {reason}"
        await self.on_error(connection, description)

    async def on_error(self, connection: Connection, error: BaseException | str) -> None:
        """Report a transport error. Cleanup is left to on_close."""
        await self.log_error("socket error", {"role": connection.role.value, "error": str(error)})

    async def broadcast_command(self, command: Any) -> None:
        """Hook for outbound commands. Only logs; nothing is sent to devices yet."""
        await self.log_info("command broadcast stub", {"command": command})

    # --- Logging ---

    async def log_info(self, message: str, meta: Optional[Any] = None) -> None:
        await self._log(LogLevel.INFO, message, meta)

    async def log_error(self, message: str, meta: Optional[Any] = None) -> None:
        await self._log(LogLevel.ERROR, message, meta)

    async def _log(self, level: LogLevel, message: str, meta: Optional[Any]) -> None:
        event = create_log_event(level, message, meta)
        python_level = logging.ERROR if level is LogLevel.ERROR else logging.INFO
        logger.log(python_level, f"[{level.value}] {message} {meta if meta is not None else ''}".rstrip())
        await self.broadcast(event)

    # --- Broadcast ---

    async def broadcast(self, payload: dict[str, Any]) -> int:
        """Serialize a payload and send it to every open monitor."""
        return await self._send_to_monitors(json.dumps(payload))

    async def relay(self, raw: str) -> int:
        """Send a telemetry frame to every open monitor exactly as received."""
        return await self._send_to_monitors(raw)

    async def _send_to_monitors(self, data: str) -> int:
        """
        Send a text frame to the monitor snapshot.

        Returns:
            Number of monitors the frame was delivered to.
        """
        delivered = 0
        for connection in self._registry.monitors():
            if not connection.is_open:
                continue
            try:
                await connection.websocket.send_text(data)
                delivered += 1
            except Exception as e:
                logger.warning(f"Failed to send to monitor: {e}")
        return delivered
