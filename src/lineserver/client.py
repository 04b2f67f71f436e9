"""
=============================================================================
INTERACTIVE CLIENT
=============================================================================

The counterpart of the server: one line in, one reply out.

    $ python -m lineserver.client localhost 9000
    Connected. Type messages; 'quit' or 'exit' to close.
    > hello
    I got your message
    > quit
    Bye.

=============================================================================
CLIENT LOOP
=============================================================================

    ┌─────────────────────────────────────────────────────────────────┐
    │   loop:                                                          │
    │       message = next 254 bytes     EOF → close, exit 0          │
    │       send_all(message)            newline included             │
    │       reply = receive_some(255)    b"" → "(server closed         │
    │                                           connection)", exit 0   │
    │       print(reply)                 newline appended if missing  │
    │       if message is quit/exit:     → close, exit 0              │
    └─────────────────────────────────────────────────────────────────┘

The last check looks at what the operator TYPED, not at what the server
answered. A "quit" ends the client even if the reply was something else.

=============================================================================
LONG LINES
=============================================================================

The server reads at most 255 bytes per message and answers each read. So a
typed line is encoded first and sent in pieces of at most 254 BYTES, one
piece per round trip, with the prompt shown again between pieces. A
multibyte character is never split across two pieces.

=============================================================================
"""

import argparse
import logging
import socket
import sys
from typing import Optional, Sequence, TextIO

from .config import ClientConfig
from .core.stream import send_all, receive_some
from .protocol import format_reply, is_termination_command


logger = logging.getLogger(__name__)

GREETING = "Connected. Type messages; 'quit' or 'exit' to close.\n"
SERVER_CLOSED = "(server closed connection)\n"


class LineClient:
    """
    Interactive line client over a connected socket.

    Usage:
        client = LineClient.connect(ClientConfig("localhost", 9000))
        sys.exit(client.run())

    Streams default to the process's stdin/stdout/stderr; tests pass
    StringIO objects instead.
    """

    def __init__(
        self,
        sock: socket.socket,
        config: Optional[ClientConfig] = None,
        input_stream: Optional[TextIO] = None,
        output_stream: Optional[TextIO] = None,
        error_stream: Optional[TextIO] = None,
    ):
        self.sock = sock
        self.config = config or ClientConfig()

        self.input = input_stream or sys.stdin
        self.output = output_stream or sys.stdout
        self.errors = error_stream or sys.stderr

        # Encoded rest of a line longer than max_line bytes
        self._pending = b""

    @classmethod
    def connect(cls, config: ClientConfig, **streams) -> "LineClient":
        """
        Resolve the host and connect.

        Raises:
            socket.gaierror: If the host name cannot be resolved.
            OSError: If the connection cannot be established.
        """
        address = socket.gethostbyname(config.host)
        sock = socket.create_connection((address, config.port))
        logger.debug(f"Connected to {address}:{config.port}")
        return cls(sock, config, **streams)

    def _write(self, text: str):
        self.output.write(text)
        self.output.flush()

    def _next_message(self) -> bytes:
        """
        Next piece of operator input, at most max_line bytes.

        Returns:
            The encoded piece, or b"" at end of input.
        """
        if not self._pending:
            self._pending = self.input.readline().encode("utf-8")

        limit = self.config.max_line
        if len(self._pending) <= limit:
            message, self._pending = self._pending, b""
            return message

        # Back off to the start of a UTF-8 character
        cut = limit
        while cut > 0 and self._pending[cut] & 0xC0 == 0x80:
            cut -= 1
        if cut == 0:
            cut = limit

        message, self._pending = self._pending[:cut], self._pending[cut:]
        return message

    def run(self) -> int:
        """
        Run the prompt/send/print loop until EOF, quit/exit, or the
        server hangs up.

        Returns:
            Process exit status: 0 on a normal end, 1 on an I/O error.
        """
        self._write(GREETING)

        with self.sock:
            while True:
                self._write(self.config.prompt)

                message = self._next_message()
                if not message:
                    return 0

                try:
                    send_all(self.sock, message)
                except OSError as e:
                    print(f"ERROR writing to socket: {e}", file=self.errors)
                    return 1

                try:
                    reply = receive_some(self.sock, self.config.buffer_size)
                except OSError as e:
                    print(f"ERROR reading from socket: {e}", file=self.errors)
                    return 1

                if not reply:
                    self._write(SERVER_CLOSED)
                    return 0

                self._write(format_reply(reply))

                if is_termination_command(message):
                    return 0


def main(argv: Optional[Sequence[str]] = None):
    """Client CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="lineclient",
        description="Interactive client for lineserver",
    )
    parser.add_argument("host", help="Server host name or IP address")
    parser.add_argument("port", type=int, help="Server port")
    args = parser.parse_args(argv)

    config = ClientConfig(host=args.host, port=args.port)

    try:
        client = LineClient.connect(config)
    except socket.gaierror:
        print("ERROR, no such host", file=sys.stderr)
        sys.exit(1)
    except OSError as e:
        print(f"ERROR connecting: {e}", file=sys.stderr)
        sys.exit(1)

    sys.exit(client.run())


if __name__ == "__main__":
    main()
