"""Synchronous connection to an MPD server."""

import logging
import socket
from types import TracebackType

from mpd_sticker.config import Config
from mpd_sticker.protocol import ACK_PREFIX, RESPONSE_OK, MpdError, Pair, encode_command, parse_ack, parse_greeting, parse_pair

logger = logging.getLogger(__name__)


class Connection:
    """One MPD connection: sends commands and reads their responses pair by pair.

    At most one response is outstanding at a time. Sending a new command
    before the previous response has been drained fails with ``busy``.
    Not thread-safe; callers sharing a connection must serialize access.
    """

    def __init__(self, sock: socket.socket) -> None:
        """Wrap a connected socket and read the server greeting.

        Args:
            sock: Connected stream socket; the Connection takes ownership of it.

        Raises:
            MpdError: Unreadable or invalid greeting.

        """
        self._sock = sock
        self._reader = sock.makefile("rb")
        self._receiving = False  # a response is pending and not yet fully read
        self._closed = False
        try:
            self.server_version: tuple[int, ...] = parse_greeting(self._read_line())
        except MpdError:
            self.close()
            raise

    @staticmethod
    def open(cfg: Config) -> "Connection":
        """Connect to the server described by ``cfg`` and authenticate if a password is set.

        Raises:
            MpdError: Connection failure or rejected password.

        """
        try:
            if cfg.is_unix_socket:
                sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
                sock.settimeout(cfg.timeout)
                address = "\0" + cfg.host[1:] if cfg.host.startswith("@") else cfg.host
                try:
                    sock.connect(address)
                except OSError:
                    sock.close()
                    raise
            else:
                sock = socket.create_connection((cfg.host, cfg.port), timeout=cfg.timeout)
        except OSError as e:
            raise MpdError("io", f"Cannot connect to {cfg.host}: {e}") from e

        conn = Connection(sock)
        logger.info("Connected to %s (protocol %s)", cfg.host, ".".join(map(str, conn.server_version)))
        if cfg.password is not None:
            try:
                conn.run_command("password", cfg.password)
            except MpdError:
                conn.close()
                raise
        return conn

    @property
    def closed(self) -> bool:
        """Whether the connection has been closed or has failed."""
        return self._closed

    def send_command(self, command: str, *args: str) -> None:
        """Transmit one command line.

        Raises:
            MpdError: Connection closed (code: ``closed``), previous response
                not drained (code: ``busy``), or transport failure.

        """
        if self._closed:
            raise MpdError("closed", "Connection is closed.")
        if self._receiving:
            raise MpdError("busy", "Previous response has not been read to the end.")
        line = encode_command(command, *args)
        logger.debug("Command: %s", command)
        try:
            self._sock.sendall(line)
        except OSError as e:
            raise self._fail(e) from e
        self._receiving = True

    def recv_pair(self) -> Pair | None:
        """Read the next pair of the pending response.

        Returns None at the end of the response, and on every call when no
        response is pending.

        Raises:
            ServerError: The server answered with ``ACK``; the response is over.
            MpdError: Transport failure or malformed line.

        """
        if not self._receiving:
            return None
        line = self._read_line()
        if line == RESPONSE_OK:
            self._receiving = False
            return None
        if line.startswith(ACK_PREFIX):
            self._receiving = False
            error = parse_ack(line)
            logger.debug("Server error %s: %s", error.ack, error)
            raise error
        return parse_pair(line)

    def response_finish(self) -> None:
        """Discard the remaining pairs of the pending response.

        Raises:
            ServerError: The response ended with ``ACK``.

        """
        while self.recv_pair() is not None:
            pass

    def run_command(self, command: str, *args: str) -> None:
        """Send a command and wait for its final status, discarding any pairs."""
        self.send_command(command, *args)
        self.response_finish()

    def close(self) -> None:
        """Close the socket. Safe to call more than once."""
        if self._closed and self._reader.closed:
            return
        self._closed = True
        self._receiving = False
        self._reader.close()
        self._sock.close()

    def __enter__(self) -> "Connection":
        return self

    def __exit__(
        self, exc_type: type[BaseException] | None, exc: BaseException | None, tb: TracebackType | None
    ) -> None:
        self.close()

    def _read_line(self) -> str:
        """Read one line without its terminator."""
        try:
            raw = self._reader.readline()
        except TimeoutError as e:
            raise self._fail(e, code="timeout") from e
        except OSError as e:
            raise self._fail(e) from e
        if not raw.endswith(b"\n"):
            self._mark_broken()
            raise MpdError("io", "Connection closed by server.")
        try:
            return raw[:-1].decode()
        except UnicodeDecodeError:
            self._mark_broken()
            raise MpdError("malformed_line", "Response line is not valid UTF-8.") from None

    def _fail(self, e: OSError, code: str = "io") -> MpdError:
        """Mark the connection unusable and build the error to raise."""
        self._mark_broken()
        logger.warning("Connection failed: %s", e)
        return MpdError(code, f"Connection failed: {e}")

    def _mark_broken(self) -> None:
        self._closed = True
        self._receiving = False
