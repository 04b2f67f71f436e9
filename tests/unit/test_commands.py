"""
Unit tests for command classification and wire helpers.
"""

import pytest

from lineserver.protocol import (
    ACKNOWLEDGEMENT,
    FAREWELL,
    first_token,
    format_reply,
    is_termination_command,
)


class TestIsTerminationCommand:
    """Tests for is_termination_command()."""

    @pytest.mark.parametrize("message", [
        b"quit",
        b"exit",
        b"QUIT",
        b"Exit\r\n",
        b"  exit\n",
        b"\t\r\n quit",
        b"Quit now",
        b"exit\tplease",
        "quit\n",
        "  EXIT  ",
    ])
    def test_commands_recognised(self, message):
        assert is_termination_command(message) is True

    @pytest.mark.parametrize("message", [
        b"quitter",
        b"exiting",
        b"now quit",
        b"qui",
        b"hello\n",
        b"quit!",
        b"quitquit",
        "exit-code",
    ])
    def test_other_words_rejected(self, message):
        """Only an exact first-token match counts."""
        assert is_termination_command(message) is False

    @pytest.mark.parametrize("message", [b"", b"   ", b"\r\n", b" \t\r\n", ""])
    def test_empty_and_whitespace_rejected(self, message):
        assert is_termination_command(message) is False

    def test_only_four_whitespace_characters_skipped(self):
        """Vertical tab and form feed are part of the token."""
        assert is_termination_command(b"\x0bquit") is False
        assert is_termination_command(b"\x0cexit") is False

    def test_text_after_nul_ignored(self):
        """Received data behaves like a NUL-terminated string."""
        assert is_termination_command(b"quit\0garbage") is True
        assert is_termination_command(b"\0quit") is False

    def test_deterministic(self):
        for message in (b"QUIT", b"hello", b"  exit\n", b"quitter"):
            assert is_termination_command(message) == is_termination_command(message)


class TestFirstToken:
    """Tests for first_token()."""

    def test_case_folded(self):
        assert first_token(b"  HeLLo world") == b"hello"

    def test_limited_to_seven_characters(self):
        assert first_token(b"quittersome") == b"quitter"
        assert first_token(b"abcdefghij\n") == b"abcdefg"

    def test_str_input(self):
        assert first_token("Exit now") == b"exit"

    def test_empty(self):
        assert first_token(b"\r\n") == b""


class TestFormatReply:
    """Tests for format_reply()."""

    def test_newline_kept(self):
        assert format_reply(ACKNOWLEDGEMENT) == "I got your message\n"
        assert format_reply(FAREWELL) == "Bye.\n"

    def test_newline_appended(self):
        assert format_reply(b"pong") == "pong\n"

    def test_invalid_utf8_replaced(self):
        assert format_reply(b"\xff\n") == "�\n"

    def test_empty(self):
        assert format_reply(b"") == ""
