"""Application context shared across CLI commands."""

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

import typer

from mpd_sticker.config import Config
from mpd_sticker.connection import Connection
from mpd_sticker.output import Output
from mpd_sticker.protocol import MpdError
from mpd_sticker.sticker import StickerClient


@dataclass(frozen=True, slots=True)
class AppContext:
    """Shared application state passed through Typer context."""

    out: Output
    cfg: Config

    @contextmanager
    def session(self) -> Iterator[StickerClient]:
        """Open a connection for one command; MPD errors are printed and exit with code 1."""
        try:
            with Connection.open(self.cfg) as conn:
                yield StickerClient(conn)
        except MpdError as e:
            self.out.print_error_and_exit(e.code, str(e))

    def object_type(self, type_: str | None) -> str:
        """Resolve the --type option against the configured default."""
        return type_ or self.cfg.default_type


def use_context(ctx: typer.Context) -> AppContext:
    """Extract application context from Typer context."""
    result: AppContext = ctx.obj
    return result
