"""
=============================================================================
LINE SERVER CLI ENTRY POINT
=============================================================================

    # Listen on port 9000, all interfaces
    python -m lineserver 9000

    # Localhost only, verbose
    python -m lineserver 9000 --host 127.0.0.1 --log-level DEBUG

    # At most 100 simultaneous sessions
    python -m lineserver 9000 --max-sessions 100

Exit status:
    0   Shut down by SIGINT/SIGTERM
    1   Could not bind/listen, accept failed, or invalid configuration
    2   Bad command line (argparse)

=============================================================================
"""

import argparse
import sys
from typing import Optional, Sequence

from . import __version__
from .server import LineServer
from .config import ServerConfig


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lineserver",
        description="Concurrent line-oriented TCP server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m lineserver 9000                      # All interfaces, port 9000
  python -m lineserver 9000 --host 127.0.0.1     # Localhost only
  python -m lineserver 9000 --log-level DEBUG    # Log every message
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "port",
        type=int,
        help="Port to listen on"
    )

    parser.add_argument(
        "--host", "-H",
        default=None,
        help="Address to bind to (default: 0.0.0.0)"
    )

    parser.add_argument(
        "--backlog", "-b",
        type=int,
        default=None,
        help="Listen backlog (default: 128)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # SESSION ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--max-sessions", "-m",
        type=int,
        default=None,
        help="Maximum simultaneous sessions (default: unlimited)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # META ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"lineserver {__version__}"
    )

    return parser


def main(argv: Optional[Sequence[str]] = None):
    """
    Main CLI entry point.

    Command-line flags override LINESERVER_* environment variables,
    which override the defaults in ServerConfig.
    """
    args = build_parser().parse_args(argv)

    try:
        config = ServerConfig.from_env(
            port=args.port,
            host=args.host,
            backlog=args.backlog,
            max_sessions=args.max_sessions,
            log_level=args.log_level,
        )
        server = LineServer(config)
        server.run()
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
