"""
=============================================================================
SERVER AND CLIENT CONFIGURATION
=============================================================================

Configuration is fixed at startup. The acceptor, the supervisor and every
session read the same ServerConfig instance, and nothing writes to it
afterwards (the dataclasses are frozen).

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── python -m lineserver 9000 --backlog 64                    │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── LINESERVER_LOG_LEVEL=DEBUG python -m lineserver 9000      │
    │                                                                      │
    │   3. Defaults (this file)                                           │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

import os
import logging
from dataclasses import dataclass
from typing import Optional

from .protocol import MAX_MESSAGE_SIZE


_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class ServerConfig:
    """
    Configuration for the line server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog, buffer_size

    SESSION SETTINGS
    - max_sessions

    LIFECYCLE
    - accept_timeout, shutdown_timeout

    LOGGING
    - log_level

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "0.0.0.0"
    """
    The IPv4 address to bind to.
    - "0.0.0.0" - All interfaces (default)
    - "127.0.0.1" - Localhost only
    """

    port: int = 8080
    """
    The port number to listen on. 0 asks the OS for a free port;
    the bound port is then available from LineServer.address.
    """

    backlog: int = 128
    """
    Maximum number of connections queued by the kernel before accept().
    """

    buffer_size: int = MAX_MESSAGE_SIZE
    """
    Maximum bytes taken by one receive. One receive is one message.
    """

    # ─────────────────────────────────────────────────────────────────────
    # SESSION SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    max_sessions: Optional[int] = None
    """
    Cap on concurrently running sessions. None = as many as the host can
    start threads for. Connections over the cap are dropped.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LIFECYCLE
    # ─────────────────────────────────────────────────────────────────────

    accept_timeout: float = 1.0
    """
    How often the accept loop wakes up to check for shutdown.
    """

    shutdown_timeout: float = 2.0
    """
    How long shutdown waits for live sessions before abandoning them.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """
    Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    DEBUG also logs the content of every message.
    """

    @classmethod
    def from_env(cls, **overrides) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        LINESERVER_HOST          Bind address (default: 0.0.0.0)
        LINESERVER_PORT          Listening port (default: 8080)
        LINESERVER_BACKLOG       Listen backlog (default: 128)
        LINESERVER_MAX_SESSIONS  Session cap (default: unlimited)
        LINESERVER_LOG_LEVEL     Logging level (default: INFO)

        =====================================================================

        Keyword overrides win over the environment; None values are
        ignored so argparse defaults can be passed straight through.
        """
        max_sessions = os.getenv("LINESERVER_MAX_SESSIONS")
        values = dict(
            host=os.getenv("LINESERVER_HOST", "0.0.0.0"),
            port=int(os.getenv("LINESERVER_PORT", "8080")),
            backlog=int(os.getenv("LINESERVER_BACKLOG", "128")),
            max_sessions=int(max_sessions) if max_sessions else None,
            log_level=os.getenv("LINESERVER_LOG_LEVEL", "INFO"),
        )
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    @property
    def level(self) -> int:
        """Numeric logging level."""
        return getattr(logging, self.log_level.upper(), logging.INFO)

    def validate(self) -> None:
        """
        Validate configuration values.

        Fail fast at startup instead of deep inside the accept loop.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if not 1 <= self.buffer_size <= MAX_MESSAGE_SIZE:
            raise ValueError(f"buffer_size must be between 1 and {MAX_MESSAGE_SIZE}")

        if self.max_sessions is not None and self.max_sessions < 1:
            raise ValueError("max_sessions must be >= 1")

        if self.accept_timeout <= 0:
            raise ValueError("accept_timeout must be > 0")

        if self.log_level.upper() not in _LOG_LEVELS:
            raise ValueError(f"Unknown log level: {self.log_level}")


@dataclass(frozen=True)
class ClientConfig:
    """Configuration for the interactive client."""

    host: str = "localhost"
    port: int = 8080
    buffer_size: int = MAX_MESSAGE_SIZE
    prompt: str = "> "

    @property
    def max_line(self) -> int:
        """Longest message, in encoded bytes, sent to the server in one go."""
        return self.buffer_size - 1
