"""List sticker names."""

import typer

from mpd_sticker.app_context import use_context


def names(ctx: typer.Context) -> None:
    """List every sticker name known to the server."""
    app = use_context(ctx)
    with app.session() as client:
        result = client.sticker_names()
    app.out.print_names(result)
