"""Tests for the MPD connection against a scripted server."""

import socket
from pathlib import Path

import pytest

from mpd_sticker.config import Config
from mpd_sticker.connection import Connection
from mpd_sticker.protocol import AckCode, MpdError, Pair, ServerError

from .conftest import GREETING, FakeServer


class TestGreeting:
    """Connection setup."""

    def test_server_version(self, conn: Connection):
        """Greeting version is exposed as a tuple."""
        assert conn.server_version == (0, 24, 0)

    def test_bad_greeting(self, socket_pair: tuple[socket.socket, FakeServer]):
        """Non-MPD banner fails and closes the connection."""
        client_sock, server = socket_pair
        server.reply("HELLO")
        with pytest.raises(MpdError) as exc_info:
            Connection(client_sock)
        assert exc_info.value.code == "bad_greeting"
        assert client_sock.fileno() == -1


class TestSendAndReceive:
    """Command transmission and pair reading."""

    def test_send_command(self, conn: Connection, server: FakeServer):
        """Command line is sent with quoted arguments."""
        conn.send_command("sticker list", "song", "a.mp3")
        assert server.received() == ['sticker list "song" "a.mp3"']

    def test_pairs_then_end(self, conn: Connection, server: FakeServer):
        """Pairs are returned in order, then None at OK."""
        conn.send_command("sticker list", "song", "a.mp3")
        server.reply("sticker: a=1", "sticker: b=2", "OK")
        assert conn.recv_pair() == Pair("sticker", "a=1")
        assert conn.recv_pair() == Pair("sticker", "b=2")
        assert conn.recv_pair() is None

    def test_recv_without_pending_response(self, conn: Connection):
        """Receiving with nothing pending returns None immediately."""
        assert conn.recv_pair() is None
        assert conn.recv_pair() is None

    def test_drained_twice(self, conn: Connection, server: FakeServer):
        """After the end of a response further receives return None."""
        conn.send_command("sticker list", "song", "a.mp3")
        server.reply("OK")
        assert conn.recv_pair() is None
        assert conn.recv_pair() is None

    def test_ack(self, conn: Connection, server: FakeServer):
        """ACK raises ServerError and ends the response."""
        conn.send_command("sticker get", "song", "a.mp3", "x")
        server.reply("ACK [50@0] {sticker} no such sticker")
        with pytest.raises(ServerError) as exc_info:
            conn.recv_pair()
        assert exc_info.value.ack is AckCode.NO_EXIST
        assert conn.recv_pair() is None

    def test_busy(self, conn: Connection, server: FakeServer):
        """A new command before the previous response is drained is refused."""
        conn.send_command("sticker list", "song", "a.mp3")
        with pytest.raises(MpdError) as exc_info:
            conn.send_command("stickernames")
        assert exc_info.value.code == "busy"

    def test_response_finish(self, conn: Connection, server: FakeServer):
        """Remaining pairs are discarded and the connection accepts new commands."""
        conn.send_command("sticker list", "song", "a.mp3")
        server.reply("sticker: a=1", "sticker: b=2", "OK")
        conn.response_finish()
        conn.send_command("stickernames")
        assert server.received() == ['sticker list "song" "a.mp3"', "stickernames"]

    def test_run_command_ack(self, conn: Connection, server: FakeServer):
        """run_command propagates the server error."""
        server.reply("ACK [3@0] {password} incorrect password")
        with pytest.raises(ServerError) as exc_info:
            conn.run_command("password", "nope")
        assert exc_info.value.ack is AckCode.PASSWORD

    def test_malformed_line(self, conn: Connection, server: FakeServer):
        """A line without separator is a protocol error."""
        conn.send_command("stickernames")
        server.reply("garbage", "OK")
        with pytest.raises(MpdError) as exc_info:
            conn.recv_pair()
        assert exc_info.value.code == "malformed_line"


class TestFailures:
    """Transport failures and closing."""

    def test_server_closed(self, conn: Connection, server: FakeServer):
        """EOF in the middle of a response marks the connection closed."""
        conn.send_command("stickernames")
        server.reply("sticker: a")
        server.close()
        assert conn.recv_pair() == Pair("sticker", "a")
        with pytest.raises(MpdError) as exc_info:
            conn.recv_pair()
        assert exc_info.value.code == "io"
        assert conn.closed

    def test_send_after_close(self, conn: Connection):
        """Commands on a closed connection are refused."""
        conn.close()
        with pytest.raises(MpdError) as exc_info:
            conn.send_command("stickernames")
        assert exc_info.value.code == "closed"

    def test_close_twice(self, conn: Connection):
        """close() is idempotent."""
        conn.close()
        conn.close()
        assert conn.closed

    def test_timeout(self):
        """A silent server yields a timeout error."""
        client_sock, server_sock = socket.socketpair()
        try:
            server_sock.sendall(f"{GREETING}\n".encode())
            client_sock.settimeout(0.05)
            conn = Connection(client_sock)
            conn.send_command("stickernames")
            with pytest.raises(MpdError) as exc_info:
                conn.recv_pair()
            assert exc_info.value.code == "timeout"
            assert conn.closed
        finally:
            client_sock.close()
            server_sock.close()


class TestOpen:
    """Connection.open() from configuration."""

    def test_password_sent(self, monkeypatch: pytest.MonkeyPatch, socket_pair: tuple[socket.socket, FakeServer]):
        """Configured password is sent right after the greeting."""
        client_sock, server = socket_pair
        monkeypatch.setattr(socket, "create_connection", lambda address, timeout: client_sock)
        server.reply(GREETING, "OK")
        cfg = Config(data_dir=Path("/fake"), password="secret")
        conn = Connection.open(cfg)
        assert server.received() == ['password "secret"']
        assert not conn.closed

    def test_wrong_password(self, monkeypatch: pytest.MonkeyPatch, socket_pair: tuple[socket.socket, FakeServer]):
        """A rejected password closes the connection and raises."""
        client_sock, server = socket_pair
        monkeypatch.setattr(socket, "create_connection", lambda address, timeout: client_sock)
        server.reply(GREETING, "ACK [3@0] {password} incorrect password")
        with pytest.raises(ServerError):
            Connection.open(Config(data_dir=Path("/fake"), password="wrong"))
        assert client_sock.fileno() == -1

    def test_connect_refused(self, monkeypatch: pytest.MonkeyPatch):
        """Socket errors while connecting become MpdError."""

        def refuse(address: tuple[str, int], timeout: float) -> socket.socket:
            raise ConnectionRefusedError("refused")

        monkeypatch.setattr(socket, "create_connection", refuse)
        with pytest.raises(MpdError) as exc_info:
            Connection.open(Config(data_dir=Path("/fake")))
        assert exc_info.value.code == "io"
