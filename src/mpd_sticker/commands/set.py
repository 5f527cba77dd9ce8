"""Set a sticker value."""

import typer

from mpd_sticker.app_context import use_context


def set_(
    ctx: typer.Context,
    uri: str,
    name: str,
    value: str,
    *,
    type_: str | None = typer.Option(None, "--type", "-t", help="Object type (default from config)"),
) -> None:
    """Add or replace sticker NAME on URI."""
    app = use_context(ctx)
    with app.session() as client:
        client.set_sticker(app.object_type(type_), uri, name, value)
    app.out.print_sticker_set(uri, name)
