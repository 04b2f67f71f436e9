"""
Unit tests for send_all() and receive_some().
"""

import socket

import pytest

from lineserver.core.stream import send_all, receive_some


class ScriptedSocket:
    """
    Socket stand-in whose send()/recv() results are scripted.

    Each script entry is either a value to return (send: byte count to
    accept, recv: bytes to return) or an exception to raise.
    """

    def __init__(self, send_script=(), recv_script=()):
        self.send_script = list(send_script)
        self.recv_script = list(recv_script)
        self.sent = []
        self.capacities = []

    def send(self, data):
        result = self.send_script.pop(0)
        if isinstance(result, BaseException):
            raise result
        accepted = bytes(data[:result])
        self.sent.append(accepted)
        return len(accepted)

    def recv(self, capacity):
        self.capacities.append(capacity)
        result = self.recv_script.pop(0)
        if isinstance(result, BaseException):
            raise result
        return result[:capacity]


def recv_all(sock, size):
    data = b""
    while len(data) < size:
        chunk = sock.recv(size - len(data))
        if not chunk:
            break
        data += chunk
    return data


class TestSendAll:
    """Tests for send_all()."""

    def test_partial_writes_are_continued(self):
        sock = ScriptedSocket(send_script=[3, 100])

        assert send_all(sock, b"hello world") == 11
        assert sock.sent == [b"hel", b"lo world"]

    def test_interrupted_write_retried(self):
        sock = ScriptedSocket(send_script=[InterruptedError(), InterruptedError(), 100])

        assert send_all(sock, b"Bye.\n") == 5
        assert sock.sent == [b"Bye.\n"]

    def test_zero_progress_is_short_success(self):
        """A write that makes no progress stops the loop without error."""
        sock = ScriptedSocket(send_script=[2, 0])

        assert send_all(sock, b"abcdef") == 2
        assert sock.send_script == []

    def test_hard_error_raised(self):
        sock = ScriptedSocket(send_script=[4, BrokenPipeError("peer gone")])

        with pytest.raises(BrokenPipeError):
            send_all(sock, b"I got your message\n")

    def test_empty_data(self):
        sock = ScriptedSocket()

        assert send_all(sock, b"") == 0
        assert sock.sent == []

    def test_real_socket(self):
        a, b = socket.socketpair()
        with a, b:
            b.settimeout(5)
            payload = b"x" * 4000

            assert send_all(a, payload) == len(payload)
            assert recv_all(b, len(payload)) == payload


class TestReceiveSome:
    """Tests for receive_some()."""

    def test_single_read(self):
        sock = ScriptedSocket(recv_script=[b"hello\n"])

        assert receive_some(sock, 255) == b"hello\n"
        assert sock.capacities == [255]

    def test_interrupted_read_retried(self):
        sock = ScriptedSocket(recv_script=[InterruptedError(), b"data"])

        assert receive_some(sock, 255) == b"data"
        assert sock.capacities == [255, 255]

    def test_orderly_shutdown(self):
        sock = ScriptedSocket(recv_script=[b""])

        assert receive_some(sock, 255) == b""

    def test_hard_error_raised(self):
        sock = ScriptedSocket(recv_script=[ConnectionResetError("reset")])

        with pytest.raises(ConnectionResetError):
            receive_some(sock, 255)

    def test_capacity_must_be_positive(self):
        with pytest.raises(ValueError):
            receive_some(ScriptedSocket(), 0)

    def test_capacity_bounds_one_read(self):
        """No reassembly: the rest stays for the next call."""
        a, b = socket.socketpair()
        with a, b:
            b.settimeout(5)
            a.sendall(b"a" * 300)

            assert receive_some(b, 255) == b"a" * 255
            assert receive_some(b, 255) == b"a" * 45

    def test_peer_close(self):
        a, b = socket.socketpair()
        with b:
            b.settimeout(5)
            a.close()

            assert receive_some(b, 255) == b""
