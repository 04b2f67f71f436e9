"""
Session handlers.

A handler is any callable taking a Connection. The server runs it in the
connection's own execution context.
"""

from .session import SessionHandler

__all__ = ["SessionHandler"]
