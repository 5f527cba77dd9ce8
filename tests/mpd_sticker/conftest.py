"""Scripted MPD server over a socket pair."""

import socket
from collections.abc import Iterator

import pytest

from mpd_sticker.connection import Connection

GREETING = "OK MPD 0.24.0"


class FakeServer:
    """Server end of a socket pair: queues response lines and captures what the client sent."""

    def __init__(self, sock: socket.socket) -> None:
        self._sock = sock
        self._sock.settimeout(1.0)

    def reply(self, *lines: str) -> None:
        """Queue response lines for the client to read."""
        self._sock.sendall("".join(line + "\n" for line in lines).encode())

    def received(self) -> list[str]:
        """Return the command lines sent by the client since the last call."""
        data = b""
        while not data.endswith(b"\n"):
            data += self._sock.recv(65536)
        return data.decode().splitlines()

    def close(self) -> None:
        """Close the server end."""
        self._sock.close()


@pytest.fixture
def socket_pair() -> Iterator[tuple[socket.socket, FakeServer]]:
    """Connected client socket and its scripted server."""
    client_sock, server_sock = socket.socketpair()
    client_sock.settimeout(1.0)
    server = FakeServer(server_sock)
    yield client_sock, server
    server.close()
    client_sock.close()


@pytest.fixture
def server(socket_pair: tuple[socket.socket, FakeServer]) -> FakeServer:
    """Scripted server of the socket pair."""
    return socket_pair[1]


@pytest.fixture
def conn(socket_pair: tuple[socket.socket, FakeServer]) -> Iterator[Connection]:
    """Connection that has already read the greeting."""
    client_sock, server = socket_pair
    server.reply(GREETING)
    connection = Connection(client_sock)
    yield connection
    connection.close()
