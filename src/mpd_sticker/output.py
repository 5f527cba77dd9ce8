"""Structured output for CLI and JSON modes."""

# ruff: noqa: T201

import json
import sys
from typing import NoReturn

import typer

from mpd_sticker.sticker import StickerMatch


class Output:
    """Handles all CLI output in JSON or human-readable format."""

    def __init__(self, *, json_mode: bool) -> None:
        """Initialize output handler.

        Args:
            json_mode: If True, output JSON envelopes; otherwise human-readable text.

        """
        self._json_mode = json_mode

    def _success(self, data: dict[str, object], message: str) -> None:
        """Print a success result in JSON or human-readable format."""
        if self._json_mode:
            print(json.dumps({"ok": True, "data": data}))
        else:
            print(message)

    def print_error_and_exit(self, code: str, message: str) -> NoReturn:
        """Print an error in JSON or human-readable format and exit with code 1.

        Raises:
            typer.Exit: Always, with code 1.

        """
        if self._json_mode:
            print(json.dumps({"ok": False, "error": code, "message": message}))
        else:
            print(f"Error: {message}", file=sys.stderr)
        raise typer.Exit(code=1)

    def print_value(self, uri: str, name: str, value: str) -> None:
        """Print a single sticker value."""
        self._success({"uri": uri, "name": name, "value": value}, value)

    def print_sticker_set(self, uri: str, name: str) -> None:
        """Print sticker set confirmation."""
        self._success({"uri": uri, "name": name}, f"Sticker '{name}' set on '{uri}'.")

    def print_sticker_deleted(self, uri: str, name: str | None) -> None:
        """Print sticker deletion confirmation."""
        message = f"Sticker '{name}' deleted from '{uri}'." if name else f"All stickers deleted from '{uri}'."
        self._success({"uri": uri, "name": name}, message)

    def print_stickers(self, uri: str, stickers: dict[str, str]) -> None:
        """Print all stickers of one object as name=value lines."""
        if self._json_mode:
            print(json.dumps({"ok": True, "data": {"uri": uri, "stickers": stickers}}))
        else:
            for name, value in stickers.items():
                print(f"{name}={value}")

    def print_matches(self, matches: list[StickerMatch]) -> None:
        """Print find results as uri: name=value lines."""
        if self._json_mode:
            rows = [{"uri": m.uri, "name": m.name, "value": m.value} for m in matches]
            print(json.dumps({"ok": True, "data": {"matches": rows}}))
        else:
            for m in matches:
                print(f"{m.uri}: {m.name}={m.value}")

    def print_names(self, names: list[str]) -> None:
        """Print the list of sticker names."""
        if self._json_mode:
            print(json.dumps({"ok": True, "data": {"names": names}}))
        else:
            for name in names:
                print(name)
