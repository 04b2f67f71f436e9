"""
=============================================================================
SESSION HANDLER
=============================================================================

Drives one client's request/reply loop, from the moment its connection is
accepted until it is closed. Runs inside that connection's own execution
context, so it may block on its socket freely.

=============================================================================
SESSION LOOP
=============================================================================

    ┌─────────────────────────────────────────────────────────────────┐
    │   while ACTIVE:                                                  │
    │       data = receive()              up to 255 bytes, fresh       │
    │           ├── b""     → TERMINATED  (peer closed, no reply)      │
    │           └── OSError → raise       (context exits abnormally)   │
    │                                                                  │
    │       if is_termination_command(data):                           │
    │           send("Bye.\\n")            failure logged, not raised   │
    │           TERMINATED                                             │
    │       else:                                                      │
    │           send("I got your message\\n")   failure raises          │
    │                                                                  │
    │   close()                           always                       │
    └─────────────────────────────────────────────────────────────────┘

Each reply is fully written before the next receive starts.

=============================================================================
"""

import logging

from ..core.connection import Connection, SessionState
from ..protocol import ACKNOWLEDGEMENT, FAREWELL, is_termination_command


logger = logging.getLogger(__name__)


class SessionHandler:
    """
    Runs the acknowledge / farewell protocol on a connection.

    The handler itself is stateless and shared by every session; all
    per-session state lives on the Connection.
    """

    def __call__(self, conn: Connection):
        self.handle(conn)

    def handle(self, conn: Connection):
        """
        Serve a connection until the session terminates.

        Returns normally when the client disconnects or sends a
        termination command. Raises OSError when the connection cannot
        be read, or an acknowledgement cannot be written; the connection
        is closed either way.
        """
        logger.info(f"[{conn.id}] connected: {conn.peer}")

        with conn:
            while conn.state is SessionState.ACTIVE:
                data = conn.receive()

                if not data:
                    logger.info(f"[{conn.id}] client disconnected: {conn.peer}")
                    conn.state = SessionState.TERMINATED
                    break

                logger.info(f"[{conn.id}] msg from {conn.peer} -> {_printable(data)}")

                if is_termination_command(data):
                    self._farewell(conn)
                    conn.state = SessionState.TERMINATED
                    break

                conn.send(ACKNOWLEDGEMENT)

    def _farewell(self, conn: Connection):
        try:
            conn.send(FAREWELL)
        except OSError as e:
            logger.error(f"[{conn.id}] ERROR writing farewell to {conn.peer}: {e}")
        logger.info(f"[{conn.id}] client disconnected (quit/exit): {conn.peer}")


def _printable(data: bytes) -> str:
    return data.decode("utf-8", errors="replace").rstrip("\r\n")
