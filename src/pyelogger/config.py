"""Server configuration for pyelogger."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pyelogger._constants import DEFAULT_DATABASE_URL, DEFAULT_PORT
from pyelogger.exceptions import ELoggerConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_int(name: str, value: str) -> int:
    try:
        parsed = int(value)
    except ValueError as exc:
        raise ELoggerConfigError(f"{name} must be an integer, got {value!r}") from exc
    if parsed <= 0:
        raise ELoggerConfigError(f"{name} must be positive, got {parsed}")
    return parsed


@dataclasses.dataclass(frozen=True)
class ELoggerConfig:
    """Logger configuration.

    Parameters
    ----------
    host : str
        Interface the TCP listener binds to.
    port : int
        TCP port the sensor bus connects to. 0 binds an ephemeral port.
    database_url : str or None
        SQLAlchemy URL of the log-entry database. ``None`` disables the
        database sink.
    forward_url : str or None
        Optional HTTP endpoint that receives every committed log entry
        as JSON.
    read_size : int
        Maximum bytes read from a connection per iteration.
    max_line_length : int
        Unterminated lines longer than this are discarded.
    flush_on_disconnect : bool
        Commit a held sampling request immediately when its connection
        closes instead of abandoning it.
    """

    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    database_url: str | None = DEFAULT_DATABASE_URL
    forward_url: str | None = None
    read_size: int = 4096
    max_line_length: int = 4096
    flush_on_disconnect: bool = False

    def __post_init__(self) -> None:
        if not 0 <= self.port < 65536:
            raise ELoggerConfigError(f"port must be between 0 and 65535, got {self.port}")
        if self.read_size <= 0:
            raise ELoggerConfigError(f"read_size must be positive, got {self.read_size}")
        if self.max_line_length <= 0:
            raise ELoggerConfigError(f"max_line_length must be positive, got {self.max_line_length}")

    @classmethod
    def from_env(cls, **overrides: Any) -> ELoggerConfig:
        """Create configuration from environment variables.

        Reads the optional ``ELOGGER_*`` variables. Explicit keyword
        arguments override environment values.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        host = env.get("ELOGGER_HOST")
        if host:
            config_kwargs["host"] = host

        for env_key, field_name in (
            ("ELOGGER_PORT", "port"),
            ("ELOGGER_READ_SIZE", "read_size"),
            ("ELOGGER_MAX_LINE_LENGTH", "max_line_length"),
        ):
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_int(env_key, val)

        # An empty value disables the sink explicitly.
        if "ELOGGER_DATABASE_URL" in env:
            config_kwargs["database_url"] = env["ELOGGER_DATABASE_URL"] or None
        forward_url = env.get("ELOGGER_FORWARD_URL")
        if forward_url:
            config_kwargs["forward_url"] = forward_url

        if "flush_on_disconnect" not in overrides:
            config_kwargs["flush_on_disconnect"] = _env_bool(env.get("ELOGGER_FLUSH_ON_DISCONNECT"), False)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
