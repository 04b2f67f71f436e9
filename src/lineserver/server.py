"""
=============================================================================
LINE SERVER
=============================================================================

Ties the acceptor, the session supervisor and the session handler into a
running server.

=============================================================================
ARCHITECTURE OVERVIEW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      LINE SERVER ARCHITECTURE                        │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │                        ┌─────────────────┐                          │
    │                        │   LineServer    │                          │
    │                        │ (Orchestrator)  │                          │
    │                        └────────┬────────┘                          │
    │                                 │                                    │
    │            ┌────────────────────┼────────────────────┐              │
    │            ▼                    ▼                    ▼              │
    │    ┌──────────────┐    ┌──────────────────┐  ┌──────────────┐      │
    │    │ SocketServer │    │SessionSupervisor │  │SessionHandler│      │
    │    │  (accept)    │    │ (thread/conn +   │  │ (protocol)   │      │
    │    │              │    │  reaper)         │  │              │      │
    │    └──────────────┘    └──────────────────┘  └──────────────┘      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
CONNECTION LIFECYCLE
=============================================================================

    1. CLIENT CONNECTS
       └── SocketServer accepts, wraps the socket in a Connection

    2. DISPATCH
       └── SessionSupervisor starts a thread running SessionHandler
       └── If that fails: log, close that one connection, keep going

    3. SESSION (in its own thread)
       └── receive → acknowledge / farewell → repeat

    4. END
       └── Connection closed by the session; reaper joins the thread

=============================================================================
FAILURE DOMAINS
=============================================================================

    Where it fails                    What stops
    ──────────────────────────────    ───────────────────────────
    bind() / listen() / accept()      the whole server (OSError)
    starting a session thread         that one connection
    I/O inside a session              that one session
    client closes / sends "quit"      nothing, normal end

=============================================================================
"""

import logging
from typing import Callable, Optional, Tuple

from .config import ServerConfig
from .core import SocketServer, Connection, SessionSupervisor
from .handlers import SessionHandler


logger = logging.getLogger(__name__)


class LineServer:
    """
    Concurrent line-oriented TCP server.

    Usage:
        server = LineServer(ServerConfig(port=9000))
        server.run()  # Blocks until SIGINT/SIGTERM or shutdown()

    Every client gets "I got your message\\n" for each message it sends,
    and "Bye.\\n" followed by a close when it sends quit or exit.
    """

    def __init__(
        self,
        config: Optional[ServerConfig] = None,
        handler: Optional[Callable[[Connection], None]] = None,
    ):
        """
        Initialize the server.

        Args:
            config: Server configuration, fixed for the server's lifetime.
            handler: Session handler; defaults to SessionHandler().
        """
        self.config = config or ServerConfig()
        self.config.validate()

        self._socket_server = SocketServer(self.config)
        self._supervisor = SessionSupervisor(max_sessions=self.config.max_sessions)
        self._handler = handler or SessionHandler()

        self._running = False

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port); meaningful once the server is listening."""
        return self._socket_server.address

    @property
    def supervisor(self) -> SessionSupervisor:
        return self._supervisor

    @property
    def is_running(self) -> bool:
        return self._running

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def run(self):
        """
        Start the server (blocking).

        Raises:
            OSError: If the listening socket cannot be set up, or accept()
                     fails hard. No sessions can proceed in either case.
        """
        self._setup_logging()

        self._supervisor.start()
        self._running = True

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def shutdown(self):
        """Stop accepting connections; run() then cleans up and returns."""
        self._socket_server.shutdown()

    def wait_until_listening(self, timeout: Optional[float] = None) -> bool:
        return self._socket_server.wait_until_listening(timeout)

    def _setup_logging(self):
        """Configure logging based on config."""
        logging.basicConfig(
            level=self.config.level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("lineserver").setLevel(self.config.level)

    def _shutdown(self):
        """
        Stop the reaper once the acceptor has stopped.

        Sessions still running get shutdown_timeout seconds to finish;
        after that they are abandoned as daemon threads.
        """
        if not self._running:
            return

        logger.info("Shutting down server...")
        self._running = False

        self._supervisor.shutdown(wait=True, timeout=self.config.shutdown_timeout)

        logger.info(f"Server stopped ({self._supervisor.stats})")

    # =========================================================================
    # DISPATCH
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """
        Hand a freshly accepted connection to its own execution context.

        Runs on the acceptor thread and never blocks on the session.
        """
        context = self._supervisor.spawn(self._handler, conn)

        if context is None:
            logger.warning(f"[{conn.id}] Dropping connection from {conn.peer}")
            conn.drop()
            return

        logger.debug(f"[{conn.id}] {conn.peer} handed to {context.name}")


# =============================================================================
# MODULE SUMMARY
# =============================================================================
#
# LineServer wires together:
#
# 1. SocketServer: listening socket and accept loop (acceptor thread)
# 2. SessionSupervisor: one thread per connection, reaper thread
# 3. SessionHandler: the acknowledge / farewell protocol
#
# Nothing mutable is shared between sessions; the only shared state is the
# supervisor's live-context table, guarded by its own lock.
# =============================================================================
