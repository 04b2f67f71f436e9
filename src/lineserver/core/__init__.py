"""
=============================================================================
CORE SERVER COMPONENTS
=============================================================================

The networking and concurrency plumbing, independent of what the
session actually says on the wire.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         SOCKET SERVER                                │
    │  ─────────────────────────────────────────────────────────────────  │
    │  • Creates, binds and listens on the TCP socket                     │
    │  • Runs the accept() loop and nothing else                          │
    │  • Wraps each client socket in a Connection and dispatches it       │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    │ dispatch(conn)
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                       SESSION SUPERVISOR                             │
    │  ─────────────────────────────────────────────────────────────────  │
    │  • Starts one ExecutionContext (thread) per connection              │
    │  • Reaper thread joins contexts as they finish                      │
    │  • Drops the connection if no context can be started                │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    │ context runs the session
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONNECTION + STREAM PRIMITIVES                    │
    │  ─────────────────────────────────────────────────────────────────  │
    │  • send_all(): write everything, retry on EINTR                     │
    │  • receive_some(): one bounded read, retry on EINTR                 │
    │  • Connection: owns the client socket, tracks session state         │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, SessionState
from .supervisor import SessionSupervisor, ExecutionContext, ContextState
from .stream import send_all, receive_some

__all__ = [
    "SocketServer",       # Listening socket + accept loop
    "Connection",         # One client socket, owned by one session
    "SessionState",       # ACTIVE / TERMINATED
    "SessionSupervisor",  # Thread-per-connection spawner + reaper
    "ExecutionContext",   # The thread running one session
    "ContextState",       # Context lifecycle enum
    "send_all",
    "receive_some",
]
