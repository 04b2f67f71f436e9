"""
=============================================================================
LINESERVER - Concurrent Line-Oriented TCP Server and Client
=============================================================================

A small TCP server that serves any number of clients at once, each in its
own thread, with a deliberately tiny protocol:

    client → "hello\\n"          server → "I got your message\\n"
    client → "anything else"    server → "I got your message\\n"
    client → "quit" / "exit"    server → "Bye.\\n"  (then closes)

The interesting part is not the protocol but the plumbing around it:

    1. ACCEPTOR
       - One listening socket, one accept loop that never blocks on a client

    2. ONE EXECUTION CONTEXT PER CONNECTION
       - A dedicated thread per session, nothing mutable shared
       - A failure in one session never reaches another, or the acceptor

    3. REAPER
       - Finished session threads are joined by a separate reaper thread,
         so they never pile up and the acceptor never waits for them

    4. INTERACTIVE CLIENT
       - Reads a line, sends it, prints the reply, until EOF or quit/exit

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    lineserver/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # Server CLI (python -m lineserver PORT)
    ├── server.py            # LineServer orchestrator
    ├── client.py            # Interactive client (python -m lineserver.client)
    ├── config.py            # ServerConfig / ClientConfig
    ├── core/
    │   ├── socket_server.py # Listening socket + accept loop
    │   ├── connection.py    # Client socket wrapper, session state
    │   ├── supervisor.py    # Thread per connection + reaper
    │   └── stream.py        # send_all / receive_some
    ├── handlers/
    │   └── session.py       # The acknowledge / farewell loop
    └── protocol/
        ├── messages.py      # Wire constants
        └── commands.py      # quit / exit detection

=============================================================================
QUICK START
=============================================================================

    from lineserver import LineServer, ServerConfig

    server = LineServer(ServerConfig(port=9000))
    server.run()

    $ python -m lineserver 9000
    $ python -m lineserver.client localhost 9000

=============================================================================
"""

__version__ = "1.0.0"

from .server import LineServer
from .client import LineClient
from .config import ServerConfig, ClientConfig

__all__ = ["LineServer", "LineClient", "ServerConfig", "ClientConfig", "__version__"]
