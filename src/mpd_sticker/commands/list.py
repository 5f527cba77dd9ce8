"""List the stickers of one object."""

import typer

from mpd_sticker.app_context import use_context


def list_(
    ctx: typer.Context,
    uri: str,
    *,
    type_: str | None = typer.Option(None, "--type", "-t", help="Object type (default from config)"),
) -> None:
    """List all stickers on URI."""
    app = use_context(ctx)
    with app.session() as client:
        stickers = client.list_stickers(app.object_type(type_), uri)
    app.out.print_stickers(uri, stickers)
