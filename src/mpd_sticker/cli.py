"""CLI entry point for mpd-sticker."""

from pathlib import Path
from typing import Annotated

import typer
from mm_clikit import TyperPlus
from pydantic import ValidationError

from mpd_sticker.app_context import AppContext
from mpd_sticker.commands.delete import delete
from mpd_sticker.commands.find import find
from mpd_sticker.commands.get import get
from mpd_sticker.commands.list import list_
from mpd_sticker.commands.names import names
from mpd_sticker.commands.set import set_
from mpd_sticker.config import Config
from mpd_sticker.log import setup_logging
from mpd_sticker.output import Output

app = TyperPlus(package_name="mpd-sticker")


@app.callback()
def callback(
    ctx: typer.Context,
    *,
    json_output: Annotated[bool, typer.Option("--json", help="Output results as JSON.")] = False,
    data_dir: Annotated[Path | None, typer.Option("--data-dir", help="Data directory path.")] = None,
    host: Annotated[str | None, typer.Option("--host", help="MPD host or socket path (overrides config).")] = None,
    port: Annotated[int | None, typer.Option("--port", help="MPD port (overrides config).")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", help="Also log protocol traffic to stderr.")] = False,
) -> None:
    """Read and write MPD stickers."""
    out = Output(json_mode=json_output)
    overrides = {key: value for key, value in (("host", host), ("port", port)) if value is not None}
    try:
        cfg = Config.build(data_dir)
        if overrides:
            cfg = Config(**(cfg.model_dump(exclude={"config_path", "log_path"}) | overrides))
    except ValidationError as e:
        fields = ", ".join(".".join(map(str, err["loc"])) for err in e.errors())
        out.print_error_and_exit("invalid_config", f"Invalid configuration: {fields}.")
    cfg.data_dir.mkdir(parents=True, exist_ok=True)
    setup_logging(cfg.log_path, verbose=verbose)
    ctx.obj = AppContext(out=out, cfg=cfg)


app.command(aliases=["g"])(get)
app.command("set", aliases=["s"])(set_)
app.command()(delete)
app.command("list", aliases=["l"])(list_)
app.command(aliases=["f"])(find)
app.command()(names)
