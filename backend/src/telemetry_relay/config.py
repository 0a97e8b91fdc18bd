"""Runtime configuration loaded from environment variables."""

import os
from typing import Literal, Mapping, Optional

from pydantic import BaseModel, Field, field_validator

from .api.websocket import DEFAULT_TELEMETRY_TYPES


class RelayConfig(BaseModel):
    """Settings for the relay server."""

    host: str = "0.0.0.0"
    port: int = Field(default=8080, ge=0, le=65535)
    ws_path: str = Field(default="/ws", pattern=r"^/")
    static_dir: Optional[str] = "public"
    telemetry_types: tuple[str, ...] = Field(default=DEFAULT_TELEMETRY_TYPES, min_length=1)
    log_level: Literal["critical", "error", "warning", "info", "debug"] = "info"

    @field_validator("telemetry_types", mode="before")
    @classmethod
    def _split_types(cls, value):
        # Accept "motor, steering,arm" from the environment
        if isinstance(value, str):
            return tuple(t.strip() for t in value.split(",") if t.strip())
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_level(cls, value):
        return value.lower() if isinstance(value, str) else value

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "RelayConfig":
        """Build config from HOST, PORT, WS_PATH, STATIC_DIR, TELEMETRY_TYPES and LOG_LEVEL."""
        env = os.environ if environ is None else environ
        keys = {
            "host": "HOST",
            "port": "PORT",
            "ws_path": "WS_PATH",
            "static_dir": "STATIC_DIR",
            "telemetry_types": "TELEMETRY_TYPES",
            "log_level": "LOG_LEVEL",
        }
        values = {field: env[var] for field, var in keys.items() if env.get(var)}
        return cls(**values)
