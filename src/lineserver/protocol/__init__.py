"""
=============================================================================
LINE PROTOCOL
=============================================================================

The protocol layer is pure: no sockets, no threads, no logging.

    messages.py   Fixed replies and size limits
    commands.py   "quit" / "exit" detection

Both the server's session handler and the interactive client import
from here, so they always agree on what counts as a command.

=============================================================================
"""

from .messages import (
    ACKNOWLEDGEMENT,
    FAREWELL,
    MAX_MESSAGE_SIZE,
    TERMINATION_TOKENS,
    TOKEN_LIMIT,
    format_reply,
)
from .commands import first_token, is_termination_command

__all__ = [
    # Wire constants
    "ACKNOWLEDGEMENT",
    "FAREWELL",
    "MAX_MESSAGE_SIZE",
    "TERMINATION_TOKENS",
    "TOKEN_LIMIT",
    # Helpers
    "format_reply",
    "first_token",
    "is_termination_command",
]
