"""Delete stickers."""

import typer

from mpd_sticker.app_context import use_context


def delete(
    ctx: typer.Context,
    uri: str,
    name: str | None = typer.Argument(default=None, help="Sticker name; omit to delete all stickers of URI"),
    *,
    type_: str | None = typer.Option(None, "--type", "-t", help="Object type (default from config)"),
) -> None:
    """Delete sticker NAME from URI, or all of its stickers."""
    app = use_context(ctx)
    with app.session() as client:
        client.delete_sticker(app.object_type(type_), uri, name)
    app.out.print_sticker_deleted(uri, name)
