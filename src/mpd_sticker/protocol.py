"""Wire primitives for the MPD text protocol.

Line-oriented UTF-8 with newline framing. A command is a verb followed by
double-quoted arguments; a response is zero or more ``key: value`` lines
followed by a status line.

Command:  sticker get "song" "dir/a.mp3" "rating"
Pair:     sticker: rating=5
Success:  OK
Error:    ACK [50@0] {sticker} no such sticker
Greeting: OK MPD 0.24.0
"""

import re
from dataclasses import dataclass
from enum import IntEnum

GREETING_PREFIX = "OK MPD "
RESPONSE_OK = "OK"
ACK_PREFIX = "ACK "

_ACK_RE = re.compile(r"^ACK \[(\d+)@(\d+)\] \{([^}]*)\} ?(.*)$")


class AckCode(IntEnum):
    """Error codes carried by ``ACK`` status lines."""

    NOT_LIST = 1
    ARG = 2
    PASSWORD = 3
    PERMISSION = 4
    UNKNOWN = 5

    NO_EXIST = 50
    PLAYLIST_MAX = 51
    SYSTEM = 52
    PLAYLIST_LOAD = 53
    UPDATE_ALREADY = 54
    PLAYER_SYNC = 55
    EXIST = 56


class MpdError(Exception):
    """Error raised by connection and sticker operations."""

    def __init__(self, code: str, message: str) -> None:
        """Initialize with a machine-readable code and a human-readable message.

        Args:
            code: Machine-readable error code (e.g. "invalid_argument").
            message: Human-readable error description.

        """
        super().__init__(message)
        self.code = code


class ServerError(MpdError):
    """The server rejected a command with an ``ACK`` status line."""

    def __init__(self, ack: AckCode | int, command_list_num: int, command: str, message: str) -> None:
        """Initialize from the parsed fields of an ``ACK`` line.

        Args:
            ack: Server error code; unknown codes are kept as plain ints.
            command_list_num: Index of the failing command inside a command list.
            command: Name of the command that failed (may be empty).
            message: Server-provided error text.

        """
        super().__init__("server", message)
        self.ack = ack
        self.command_list_num = command_list_num
        self.command = command


@dataclass(frozen=True, slots=True)
class Pair:
    """One ``key: value`` line of a response."""

    key: str
    value: str


def quote_arg(arg: str) -> str:
    """Wrap an argument in double quotes, escaping embedded quotes and backslashes."""
    return '"' + arg.replace("\\", "\\\\").replace('"', '\\"') + '"'


def encode_command(command: str, *args: str) -> bytes:
    """Serialize a command and its arguments to a newline-terminated line.

    The command is sent verbatim, so it may hold a sub-command (``sticker set``).

    Raises:
        MpdError: A newline in the command or an argument (code: ``invalid_argument``).

    """
    for part in (command, *args):
        if "\n" in part:
            raise MpdError("invalid_argument", f"Newline not allowed in command line: {part!r}")
    return " ".join([command, *(quote_arg(arg) for arg in args)]).encode() + b"\n"


def parse_pair(line: str) -> Pair:
    """Split a response line at the first ``": "`` into a Pair.

    Raises:
        MpdError: No separator in the line (code: ``malformed_line``).

    """
    key, sep, value = line.partition(": ")
    if not sep or not key:
        raise MpdError("malformed_line", f"Malformed response line: {line!r}")
    return Pair(key=key, value=value)


def parse_ack(line: str) -> ServerError:
    """Parse an ``ACK`` status line into a ServerError (returned, not raised)."""
    m = _ACK_RE.match(line)
    if m is None:
        return ServerError(AckCode.UNKNOWN, 0, "", line.removeprefix(ACK_PREFIX))
    raw_code = int(m.group(1))
    ack: AckCode | int
    try:
        ack = AckCode(raw_code)
    except ValueError:
        ack = raw_code
    return ServerError(ack, int(m.group(2)), m.group(3), m.group(4))


def parse_greeting(line: str) -> tuple[int, ...]:
    """Parse the ``OK MPD x.y.z`` banner into a version tuple.

    Raises:
        MpdError: Not an MPD greeting (code: ``bad_greeting``).

    """
    if not line.startswith(GREETING_PREFIX):
        raise MpdError("bad_greeting", f"Not an MPD server: {line!r}")
    try:
        return tuple(int(part) for part in line.removeprefix(GREETING_PREFIX).split("."))
    except ValueError:
        raise MpdError("bad_greeting", f"Malformed protocol version: {line!r}") from None
