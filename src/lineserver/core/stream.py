"""
=============================================================================
RELIABLE STREAM PRIMITIVES
=============================================================================

Two helpers over a connected byte-stream socket. Both retry transparently
when a system call is interrupted by a signal, and report only real
failures or an orderly shutdown.

=============================================================================
send_all() vs socket.sendall()
=============================================================================

socket.sendall() gives up on the first error and never tells you how many
bytes went out. send_all() loops over send() itself:

    ┌─────────────────────────────────────────────────────────────────┐
    │   sent = 0                                                       │
    │   while sent < len(data):                                        │
    │       n = send(data[sent:])                                      │
    │           ├── InterruptedError → try again                      │
    │           ├── OSError          → raise (hard failure)           │
    │           ├── n == 0           → stop, short write is success   │
    │           └── n > 0            → sent += n                      │
    │   return sent                                                    │
    └─────────────────────────────────────────────────────────────────┘

A write that makes zero progress ends the loop quietly with a short count
instead of spinning or failing. Callers that care can compare the return
value with len(data).

=============================================================================
receive_some()
=============================================================================

One recv() call, nothing more. It does NOT reassemble messages:

    b"..."  → up to `capacity` bytes, whatever the kernel had
    b""     → the peer shut down its side (orderly close)
    OSError → hard failure (reset, timeout, bad descriptor, ...)

Message boundaries are entirely the caller's business.

=============================================================================
"""

import socket


def send_all(sock: socket.socket, data: bytes) -> int:
    """
    Write the whole of `data` to the socket.

    Args:
        sock: Connected stream socket.
        data: Bytes to send.

    Returns:
        Number of bytes written. Less than len(data) only if a write
        made zero progress.

    Raises:
        OSError: On any failure other than an interrupted call.
    """
    view = memoryview(data)
    sent = 0

    while sent < len(view):
        try:
            n = sock.send(view[sent:])
        except InterruptedError:
            continue

        if n == 0:
            break
        sent += n

    return sent


def receive_some(sock: socket.socket, capacity: int) -> bytes:
    """
    Read up to `capacity` bytes with a single receive.

    Args:
        sock: Connected stream socket.
        capacity: Maximum number of bytes to return.

    Returns:
        The received bytes; b"" when the peer closed the connection.

    Raises:
        ValueError: If capacity is not positive.
        OSError: On any failure other than an interrupted call.
    """
    if capacity <= 0:
        raise ValueError(f"capacity must be > 0, got {capacity}")

    while True:
        try:
            return sock.recv(capacity)
        except InterruptedError:
            continue
