"""
=============================================================================
CONNECTION ENDPOINT
=============================================================================

Wraps one accepted client socket together with the peer's address.

A Connection belongs to exactly one session. The acceptor creates it,
hands it to the supervisor, and forgets it; from then on only the session
thread reads, writes and closes it.

=============================================================================
TCP IS A BYTE STREAM, NOT A MESSAGE PROTOCOL!
=============================================================================

    Client sends:                 Server might receive:
        send("Hello\\n")              recv() → "Hello\\nWorld\\n"
        send("World\\n")              recv() → "Hel" then "lo\\nWorld\\n"

This protocol does not try to fix that. One receive() is one message,
and the server replies once per receive. Interactive clients send one
line and wait for the reply before sending the next, which keeps the two
in step in practice.

=============================================================================
SESSION STATE
=============================================================================

    ACTIVE ──────────────────────────────► TERMINATED
      │  peer closed (recv → b"")              ▲
      │  "quit" / "exit" (after "Bye.")        │
      └── unrecoverable I/O error ─────────────┘

=============================================================================
"""

import socket
import time
import logging
from enum import Enum
from dataclasses import dataclass, field
import uuid

from ..protocol import MAX_MESSAGE_SIZE
from .stream import send_all, receive_some


logger = logging.getLogger(__name__)


class SessionState(Enum):
    """Lifecycle of the session bound to a connection."""
    ACTIVE = "active"
    TERMINATED = "terminated"


@dataclass
class Connection:
    """
    Represents a client connection.

    Attributes:
        socket: The accepted client socket.
        address: Client's (ip, port) tuple.
        id: Short identifier used in log lines.
        state: Session state for this connection.
        created_at: Timestamp when the connection was accepted.
        messages_received: Number of non-empty receives so far.
        buffer_size: Maximum bytes per receive.
        linger: Seconds to drain unread input while closing.
    """

    socket: socket.socket
    address: tuple[str, int]

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: SessionState = SessionState.ACTIVE
    created_at: float = field(default_factory=time.time)
    messages_received: int = 0

    buffer_size: int = MAX_MESSAGE_SIZE
    linger: float = 0.5

    def __post_init__(self):
        # The listening socket polls with a timeout; sessions block.
        self.socket.settimeout(None)

    @property
    def client_ip(self) -> str:
        """Get the client IP address."""
        return self.address[0]

    @property
    def client_port(self) -> int:
        """Get the client port."""
        return self.address[1]

    @property
    def peer(self) -> str:
        """Peer address as ip:port."""
        return f"{self.client_ip}:{self.client_port}"

    @property
    def age(self) -> float:
        """Get connection age in seconds."""
        return time.time() - self.created_at

    @property
    def closed(self) -> bool:
        return self.socket.fileno() == -1

    # =========================================================================
    # I/O
    # =========================================================================

    def receive(self) -> bytes:
        """
        Receive one message (up to buffer_size bytes).

        Returns:
            The message bytes, or b"" if the client closed the connection.

        Raises:
            OSError: On an unrecoverable read error.
        """
        data = receive_some(self.socket, self.buffer_size)
        if data:
            self.messages_received += 1
        return data

    def send(self, data: bytes) -> int:
        """
        Send a reply in full.

        Returns:
            Bytes written (short only on a zero-progress write).

        Raises:
            OSError: On an unrecoverable write error.
        """
        return send_all(self.socket, data)

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection gracefully.

        1. shutdown(SHUT_WR): send FIN so the client's next read returns b""
        2. Drain anything the client sent that we never read, for at most
           `linger` seconds in total, however the client keeps writing
        3. close(): release the file descriptor

        Safe to call more than once.
        """
        if self.closed:
            return

        self.state = SessionState.TERMINATED

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already gone

        deadline = time.monotonic() + self.linger
        try:
            while True:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                self.socket.settimeout(remaining)
                if not self.socket.recv(1024):
                    break
        except OSError:
            pass  # Includes socket.timeout

        self.socket.close()
        logger.debug(
            f"[{self.id}] Connection closed after {self.messages_received} messages, {self.age:.3f}s"
        )

    def drop(self):
        """
        Close immediately, without the shutdown/drain sequence.

        Used by the acceptor for connections it cannot serve; it must not
        wait on the client.
        """
        self.state = SessionState.TERMINATED
        self.socket.close()
        logger.debug(f"[{self.id}] Connection dropped")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
