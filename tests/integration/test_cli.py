"""
Tests for the server command line.
"""

import socket

import pytest

from lineserver.__main__ import build_parser, main


class TestServerCLI:
    """Tests for python -m lineserver."""

    def test_port_required(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main([])

        assert exc_info.value.code != 0
        assert "port" in capsys.readouterr().err

    def test_arguments_parsed(self):
        args = build_parser().parse_args(
            ["9000", "--host", "127.0.0.1", "--max-sessions", "10", "--log-level", "DEBUG"]
        )

        assert args.port == 9000
        assert args.host == "127.0.0.1"
        assert args.max_sessions == 10
        assert args.log_level == "DEBUG"
        assert args.backlog is None

    def test_port_in_use_exits_with_failure(self, free_port, capsys):
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as other:
            other.bind(("127.0.0.1", free_port))
            other.listen(1)

            with pytest.raises(SystemExit) as exc_info:
                main([str(free_port), "--host", "127.0.0.1", "--log-level", "ERROR"])

        assert exc_info.value.code == 1
        assert "Error:" in capsys.readouterr().err

    def test_invalid_port_exits_with_failure(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["70000"])

        assert exc_info.value.code == 1
        assert "Invalid port" in capsys.readouterr().err
