"""
=============================================================================
WIRE MESSAGES
=============================================================================

Every byte the server ever writes is one of two fixed replies:

    ┌──────────────────────────┬────────────────────────────────────────┐
    │  Reply                   │  When                                   │
    ├──────────────────────────┼────────────────────────────────────────┤
    │  b"I got your message\\n" │  Any message that is not a command      │
    │  b"Bye.\\n"               │  "quit" / "exit", then the server closes│
    └──────────────────────────┴────────────────────────────────────────┘

There is no framing on the wire. Whatever bytes one recv() call returns
are treated as one message, capped at MAX_MESSAGE_SIZE. Longer input is
split over several receives and each piece gets its own reply.

=============================================================================
"""

from typing import Union


ACKNOWLEDGEMENT = b"I got your message\n"
FAREWELL = b"Bye.\n"

# Largest chunk taken by a single receive (one byte short of a 256 buffer).
MAX_MESSAGE_SIZE = 255

TERMINATION_TOKENS = ("quit", "exit")

# Only this many characters of the first token are compared.
TOKEN_LIMIT = 7

# Leading whitespace skipped before the first token, and the token delimiters.
WHITESPACE = b" \t\r\n"


def format_reply(data: Union[bytes, str]) -> str:
    """
    Render a received reply for display.

    The text is shown verbatim, with a newline appended when the reply
    does not already end in one.
    """
    if isinstance(data, bytes):
        data = data.decode("utf-8", errors="replace")
    if data and not data.endswith("\n"):
        data += "\n"
    return data
