"""
=============================================================================
CONNECTION ACCEPTOR
=============================================================================

Owns the listening socket and runs the accept loop. For every accepted
client it builds a Connection and hands it to a dispatch callback, then
goes straight back to accept(). It never reads from, writes to, or waits
on a client itself.

=============================================================================
SOCKET LIFECYCLE (Server Side)
=============================================================================

    1. socket()    Create an IPv4 TCP socket
    2. bind()      Reserve HOST:PORT            ─┐
    3. listen()    Start queueing connections    ├─ failure here is fatal
    4. accept()    Loop forever                 ─┘  for the whole server
    5. close()     On shutdown

                    ┌───────────────────────┐
                    │   Listening Socket    │ ◄── Owned by SocketServer only
                    └───────────┬───────────┘
                                │ accept()
        ┌───────────────────────┼───────────────────────┐
        ▼                       ▼                       ▼
    ┌───────────┐         ┌───────────┐         ┌───────────┐
    │Connection │         │Connection │         │Connection │
    │ (session) │         │ (session) │         │ (session) │
    └───────────┘         └───────────┘         └───────────┘

=============================================================================
ACCEPT ERRORS
=============================================================================

    InterruptedError  → a signal arrived mid-accept; just accept again
    socket.timeout    → the 1s poll for shutdown; accept again
    other OSError     → the listening socket is broken; raise (fatal)

=============================================================================
"""

import socket
import signal
import logging
import threading
from typing import Optional, Callable, Tuple

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)


class SocketServer:
    """
    Low-level TCP acceptor.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      SocketServer Internals                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    start(dispatch)                                                   │
    │        ├──► _create_socket()   socket() + SO_REUSEADDR, NODELAY     │
    │        ├──► bind() / listen()  OSError → log and raise              │
    │        ├──► _setup_signals()   SIGTERM/SIGINT → shutdown()          │
    │        └──► _accept_loop()     blocks until shutdown()              │
    │                 └──► accept() → Connection → dispatch(conn)         │
    │                                                                      │
    │    shutdown()       Stop the loop (idempotent, any thread)          │
    │    _cleanup()       Restore signals, close the listening socket     │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    Usage:
        def dispatch(conn: Connection):
            ...  # start a session for conn, do not block

        server = SocketServer(config)
        server.start(dispatch)  # Blocks until shutdown
    """

    def __init__(self, config: ServerConfig):
        self.config = config

        self._socket: Optional[socket.socket] = None
        self._bound_address: Optional[Tuple[str, int]] = None

        self._running = False
        self._listening = threading.Event()

        self._original_handlers: dict = {}

    @property
    def address(self) -> Tuple[str, int]:
        """
        The (host, port) actually bound.

        Differs from the configured address when port 0 was requested.
        """
        return self._bound_address or (self.config.host, self.config.port)

    def _create_socket(self) -> socket.socket:
        """Create and configure the listening socket."""
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        # Restart without waiting out TIME_WAIT. Deliberately no
        # SO_REUSEPORT: a second server on a taken port must fail to bind.
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        # Replies are tiny; send them now (accepted sockets inherit this)
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)

        # Wake up periodically to notice shutdown()
        sock.settimeout(self.config.accept_timeout)

        return sock

    def _setup_signals(self):
        """
        Turn SIGTERM and SIGINT into a graceful shutdown.

        Python only allows signal handlers on the main thread, so an
        embedded server (or one run by the test suite) skips this step.
        """
        if threading.current_thread() is not threading.main_thread():
            return

        def shutdown_handler(signum, frame):
            signal_name = signal.Signals(signum).name
            logger.info(f"Received {signal_name}, initiating shutdown...")
            self.shutdown()

        self._original_handlers[signal.SIGTERM] = signal.signal(signal.SIGTERM, shutdown_handler)
        self._original_handlers[signal.SIGINT] = signal.signal(signal.SIGINT, shutdown_handler)

    def _restore_signals(self):
        """Restore original signal handlers."""
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    def start(self, dispatch: Callable[[Connection], None]):
        """
        Bind, listen and accept connections until shutdown() is called.

        Args:
            dispatch: Called with each new Connection on the acceptor
                      thread. It must hand the connection off and return
                      promptly; the acceptor keeps no reference to it.

        Raises:
            OSError: If the socket cannot be bound or put into listening
                     mode, or if accept() fails hard.
        """
        self._socket = self._create_socket()

        try:
            self._socket.bind((self.config.host, self.config.port))
            self._socket.listen(self.config.backlog)
        except OSError as e:
            logger.error(f"Failed to listen on {self.config.host}:{self.config.port}: {e}")
            self._socket.close()
            self._socket = None
            raise

        self._bound_address = self._socket.getsockname()[:2]
        self._running = True

        self._setup_signals()

        logger.info(f"Server listening on {self.address[0]}:{self.address[1]}")
        self._listening.set()

        try:
            self._accept_loop(dispatch)
        finally:
            self._cleanup()

    def _accept_loop(self, dispatch: Callable[[Connection], None]):
        """
        Accept connections and dispatch them, forever.

        The loop only ever blocks in accept().
        """
        while self._running:
            try:
                client_socket, client_address = self._socket.accept()
            except (socket.timeout, InterruptedError):
                continue
            except OSError as e:
                if not self._running:
                    break  # shutdown() raced with accept()
                logger.error(f"Accept error: {e}")
                raise

            logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")

            dispatch(Connection(
                socket=client_socket,
                address=client_address,
                buffer_size=self.config.buffer_size,
            ))

    def shutdown(self):
        """
        Stop accepting connections.

        Safe to call from a signal handler, from another thread, or more
        than once. Running sessions are not touched.
        """
        if self._running:
            logger.info("Shutting down acceptor...")
        self._running = False

    def _cleanup(self):
        self._running = False
        self._restore_signals()

        if self._socket:
            self._socket.close()
            self._socket = None

        self._listening.clear()
        logger.info("Acceptor stopped")

    def wait_until_listening(self, timeout: Optional[float] = None) -> bool:
        """
        Block until the socket is bound and listening.

        Returns:
            True once listening, False on timeout.
        """
        return self._listening.wait(timeout)
