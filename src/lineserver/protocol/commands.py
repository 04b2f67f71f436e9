"""
=============================================================================
COMMAND CLASSIFICATION
=============================================================================

Decides whether a received chunk asks the server to end the session.

    "  QUIT now\\n"
     └┬┘└──┬─┘
      │    └── first token, up to the next space/tab/CR/LF
      └─────── leading whitespace is skipped

    token[:7].lower() in ("quit", "exit")  →  termination command

Only the FIRST word counts, and it must match exactly:

    "quit"      → True         "quitter"   → False
    "Exit\\r\\n"  → True         "exiting"   → False
    "Quit now"  → True         "now quit"  → False

Received data is handled like a C string: anything after a NUL byte is
ignored.

Classification is pure. The server applies it to every received chunk;
the client applies it to the operator's input line.

=============================================================================
"""

import re
from typing import Union

from .messages import TERMINATION_TOKENS, TOKEN_LIMIT, WHITESPACE


_FIRST_TOKEN = re.compile(rb"[^ \t\r\n]*")

_TERMINATION_TOKENS = frozenset(token.encode("ascii") for token in TERMINATION_TOKENS)


def first_token(message: Union[bytes, str]) -> bytes:
    """
    Extract the length-limited, case-folded first token of a message.

    Args:
        message: Raw received bytes, or a line of operator input.

    Returns:
        At most TOKEN_LIMIT lowercase bytes; b"" for empty or
        all-whitespace input.
    """
    if isinstance(message, str):
        message = message.encode("utf-8", errors="replace")

    message = message.split(b"\0", 1)[0]
    stripped = message.lstrip(WHITESPACE)

    # bytes.lower() folds ASCII only, like C tolower()
    return _FIRST_TOKEN.match(stripped).group(0)[:TOKEN_LIMIT].lower()


def is_termination_command(message: Union[bytes, str]) -> bool:
    """
    Check whether a message is a "quit" or "exit" command.

    Tokens longer than TOKEN_LIMIT are truncated before comparison, so
    they can never equal a four-letter command.
    """
    return first_token(message) in _TERMINATION_TOKENS
