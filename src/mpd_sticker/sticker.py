"""Sticker commands: encoding, ``name=value`` parsing and response receiving.

Stickers are name/value pairs attached to database objects, addressed by an
object type ("song") and a URI. MPD assigns no meaning to them.

Responses carry one ``sticker: name=value`` row per sticker. ``sticker find``
precedes each row with the object's URI (``file: dir/a.mp3``), and
``stickernames`` returns bare names (``sticker: rating``) that are read with
:meth:`Connection.recv_pair` instead of :func:`recv_sticker`.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TypeAlias

from mpd_sticker.connection import Connection
from mpd_sticker.protocol import AckCode, MpdError, ServerError

logger = logging.getLogger(__name__)

STICKER_KEY = "sticker"


@dataclass(frozen=True, slots=True)
class StickerPair:
    """A parsed sticker."""

    name: str
    value: str


@dataclass(frozen=True, slots=True)
class StickerMatch:
    """One result row of ``sticker find``: the object URI and its matching sticker."""

    uri: str
    name: str
    value: str


# --- Commands ---


@dataclass(frozen=True, slots=True)
class SetSticker:
    """Add or replace a sticker value."""

    type: str
    uri: str
    name: str
    value: str


@dataclass(frozen=True, slots=True)
class DeleteSticker:
    """Delete one sticker, or every sticker of the object when ``name`` is empty."""

    type: str
    uri: str
    name: str | None = None


@dataclass(frozen=True, slots=True)
class GetSticker:
    """Query one sticker value."""

    type: str
    uri: str
    name: str


@dataclass(frozen=True, slots=True)
class ListStickers:
    """Query all stickers of one object."""

    type: str
    uri: str


@dataclass(frozen=True, slots=True)
class FindStickers:
    """Search objects below ``base_uri`` (or all objects of the type) carrying sticker ``name``."""

    type: str
    base_uri: str | None
    name: str


@dataclass(frozen=True, slots=True)
class StickerNames:
    """Query the sorted, unique list of all sticker names."""


StickerCommand: TypeAlias = SetSticker | DeleteSticker | GetSticker | ListStickers | FindStickers | StickerNames


def _require(**fields: str | None) -> None:
    """Reject missing or empty required arguments.

    Raises:
        MpdError: A field is None or empty (code: ``invalid_argument``).

    """
    for field_name, value in fields.items():
        if not value:
            raise MpdError("invalid_argument", f"Sticker {field_name} must not be empty.")


def encode(cmd: StickerCommand) -> tuple[str, tuple[str, ...]]:
    """Validate a sticker command and return its verb and arguments.

    Raises:
        MpdError: A required argument is missing (code: ``invalid_argument``).

    """
    match cmd:
        case SetSticker(type=type_, uri=uri, name=name, value=value):
            _require(type=type_, uri=uri, name=name)
            if value is None:
                raise MpdError("invalid_argument", "Sticker value must not be None.")
            return "sticker set", (type_, uri, name, value)
        case DeleteSticker(type=type_, uri=uri, name=name):
            _require(type=type_, uri=uri)
            if name:
                return "sticker delete", (type_, uri, name)
            return "sticker delete", (type_, uri)
        case GetSticker(type=type_, uri=uri, name=name):
            _require(type=type_, uri=uri, name=name)
            return "sticker get", (type_, uri, name)
        case ListStickers(type=type_, uri=uri):
            _require(type=type_, uri=uri)
            return "sticker list", (type_, uri)
        case FindStickers(type=type_, base_uri=base_uri, name=name):
            _require(type=type_, name=name)
            # The server requires the positional URI; "" means the whole type.
            return "sticker find", (type_, base_uri or "", name)
        case StickerNames():
            return "stickernames", ()
    raise TypeError(f"Not a sticker command: {cmd!r}")


def send(conn: Connection, cmd: StickerCommand) -> None:
    """Encode a sticker command and transmit it; the response must be drained by the caller."""
    verb, args = encode(cmd)
    conn.send_command(verb, *args)


# --- Send / run variants ---


def send_sticker_set(conn: Connection, type_: str, uri: str, name: str, value: str) -> None:
    """Send ``sticker set``."""
    send(conn, SetSticker(type_, uri, name, value))


def run_sticker_set(conn: Connection, type_: str, uri: str, name: str, value: str) -> None:
    """Send ``sticker set`` and wait for the server to confirm it."""
    send_sticker_set(conn, type_, uri, name, value)
    conn.response_finish()


def send_sticker_delete(conn: Connection, type_: str, uri: str, name: str | None = None) -> None:
    """Send ``sticker delete``; without ``name`` every sticker of the object is deleted."""
    send(conn, DeleteSticker(type_, uri, name))


def run_sticker_delete(conn: Connection, type_: str, uri: str, name: str | None = None) -> None:
    """Send ``sticker delete`` and wait for the server to confirm it."""
    send_sticker_delete(conn, type_, uri, name)
    conn.response_finish()


def send_sticker_get(conn: Connection, type_: str, uri: str, name: str) -> None:
    """Send ``sticker get``. Read the result with :func:`recv_sticker`."""
    send(conn, GetSticker(type_, uri, name))


def send_sticker_list(conn: Connection, type_: str, uri: str) -> None:
    """Send ``sticker list``. Read the results with :func:`recv_sticker`."""
    send(conn, ListStickers(type_, uri))


def send_sticker_find(conn: Connection, type_: str, base_uri: str | None, name: str) -> None:
    """Send ``sticker find``. Read the results with :func:`recv_sticker_match`."""
    send(conn, FindStickers(type_, base_uri, name))


def send_stickernames(conn: Connection) -> None:
    """Send ``stickernames``. Read the results with :meth:`Connection.recv_pair`."""
    send(conn, StickerNames())


# --- Parsing / receiving ---


def parse_sticker(text: str) -> tuple[str, str]:
    """Split a ``name=value`` sticker string at the first ``=``.

    The name may be empty; the value may itself contain ``=``.

    Raises:
        MpdError: No ``=`` in the input (code: ``malformed_sticker``).

    """
    name, sep, value = text.partition("=")
    if not sep:
        raise MpdError("malformed_sticker", f"Sticker without '=': {text!r}")
    return name, value


def _unexpected_key(key: str) -> MpdError:
    """Build the error for a row whose key does not belong in a sticker response."""
    return MpdError("unexpected_key", f"Unexpected key in sticker response: {key!r}")


def recv_sticker(conn: Connection) -> StickerPair | None:
    """Receive the next sticker of a ``get`` or ``list`` response.

    Returns None at the end of the response.

    Raises:
        MpdError: A row with a key other than ``sticker`` (code: ``unexpected_key``)
            or a value without ``=`` (code: ``malformed_sticker``).

    """
    pair = conn.recv_pair()
    if pair is None:
        return None
    if pair.key != STICKER_KEY:
        raise _unexpected_key(pair.key)
    name, value = parse_sticker(pair.value)
    return StickerPair(name=name, value=value)


def iter_stickers(conn: Connection) -> Iterator[StickerPair]:
    """Yield every remaining sticker of the pending response."""
    while (sticker := recv_sticker(conn)) is not None:
        yield sticker


def recv_sticker_match(conn: Connection) -> StickerMatch | None:
    """Receive the next result of a ``find`` response.

    Each ``sticker`` row is attributed to the most recent non-sticker row,
    whose value is the object URI. Returns None at the end of the response.

    Raises:
        MpdError: A ``sticker`` row with no preceding URI row (code: ``unexpected_key``)
            or a value without ``=`` (code: ``malformed_sticker``).

    """
    uri: str | None = None
    while (pair := conn.recv_pair()) is not None:
        if pair.key != STICKER_KEY:
            uri = pair.value
            continue
        if uri is None:
            raise _unexpected_key(pair.key)
        name, value = parse_sticker(pair.value)
        return StickerMatch(uri=uri, name=name, value=value)
    return None


def iter_sticker_matches(conn: Connection) -> Iterator[StickerMatch]:
    """Yield every remaining result of a pending ``find`` response."""
    while (match := recv_sticker_match(conn)) is not None:
        yield match


class StickerClient:
    """High-level sticker operations over one connection.

    Every method sends one command and reads its response to the end, also
    when a row is rejected, so the connection stays usable.
    """

    def __init__(self, conn: Connection) -> None:
        """Initialize client.

        Args:
            conn: Open connection; the client does not close it.

        """
        self._conn = conn

    def set_sticker(self, type_: str, uri: str, name: str, value: str) -> None:
        """Add or replace a sticker value."""
        run_sticker_set(self._conn, type_, uri, name, value)

    def delete_sticker(self, type_: str, uri: str, name: str | None = None) -> None:
        """Delete one sticker, or all stickers of the object when ``name`` is omitted."""
        run_sticker_delete(self._conn, type_, uri, name)

    def get_sticker(self, type_: str, uri: str, name: str) -> str | None:
        """Return a sticker value, or None if the object has no such sticker."""
        send_sticker_get(self._conn, type_, uri, name)
        try:
            with self._reading():
                stickers = list(iter_stickers(self._conn))
        except ServerError as e:
            if e.ack == AckCode.NO_EXIST:
                return None
            raise
        return stickers[0].value if stickers else None

    def list_stickers(self, type_: str, uri: str) -> dict[str, str]:
        """Return all stickers of an object as a name → value mapping."""
        send_sticker_list(self._conn, type_, uri)
        with self._reading():
            return {sticker.name: sticker.value for sticker in iter_stickers(self._conn)}

    def find_stickers(self, type_: str, name: str, base_uri: str | None = None) -> list[StickerMatch]:
        """Return every object below ``base_uri`` that carries sticker ``name``."""
        send_sticker_find(self._conn, type_, base_uri, name)
        with self._reading():
            return list(iter_sticker_matches(self._conn))

    def sticker_names(self) -> list[str]:
        """Return the sorted, unique list of sticker names known to the server."""
        send_stickernames(self._conn)
        names: list[str] = []
        with self._reading():
            while (pair := self._conn.recv_pair()) is not None:
                if pair.key != STICKER_KEY:
                    raise _unexpected_key(pair.key)
                names.append(pair.value)
        logger.debug("Received %d sticker names", len(names))
        return names

    @contextmanager
    def _reading(self) -> Iterator[None]:
        """Discard the rest of the response when a row cannot be read, then re-raise."""
        try:
            yield
        except ServerError:
            raise
        except MpdError:
            self._discard_rest()
            raise

    def _discard_rest(self) -> None:
        """Read the pending response to its status line, ignoring bad rows."""
        while not self._conn.closed:
            try:
                if self._conn.recv_pair() is None:
                    return
            except ServerError:
                return
            except MpdError as e:
                logger.debug("Discarding unreadable row: %s", e)
