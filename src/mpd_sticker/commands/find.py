"""Search objects by sticker name."""

import typer

from mpd_sticker.app_context import use_context


def find(
    ctx: typer.Context,
    name: str,
    base_uri: str | None = typer.Argument(default=None, help="Directory to search in; omit to search everything"),
    *,
    type_: str | None = typer.Option(None, "--type", "-t", help="Object type (default from config)"),
) -> None:
    """Find objects carrying sticker NAME, optionally below BASE_URI."""
    app = use_context(ctx)
    with app.session() as client:
        matches = client.find_stickers(app.object_type(type_), name, base_uri)
    app.out.print_matches(matches)
