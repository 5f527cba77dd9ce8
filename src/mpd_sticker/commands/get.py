"""Print one sticker value."""

import typer

from mpd_sticker.app_context import use_context


def get(
    ctx: typer.Context,
    uri: str,
    name: str,
    *,
    type_: str | None = typer.Option(None, "--type", "-t", help="Object type (default from config)"),
) -> None:
    """Print the value of sticker NAME on URI."""
    app = use_context(ctx)
    with app.session() as client:
        value = client.get_sticker(app.object_type(type_), uri, name)
    if value is None:
        app.out.print_error_and_exit("not_found", f"No sticker '{name}' on '{uri}'.")
    app.out.print_value(uri, name, value)
