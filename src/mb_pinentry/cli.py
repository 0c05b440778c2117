"""CLI entry point for mb-pinentry."""

from pathlib import Path
from typing import Annotated

import typer
from mm_clikit import TyperPlus

from mb_pinentry.app_context import AppContext
from mb_pinentry.commands.clear_passphrase import clear_passphrase
from mb_pinentry.commands.confirm import confirm
from mb_pinentry.commands.getpin import getpin
from mb_pinentry.commands.message import message
from mb_pinentry.config import Config
from mb_pinentry.log import setup_logging
from mb_pinentry.output import Output

app = TyperPlus(package_name="mb-pinentry")


@app.callback()
def callback(
    ctx: typer.Context,
    *,
    json_output: Annotated[bool, typer.Option("--json", help="Output results as JSON.")] = False,
    data_dir: Annotated[Path | None, typer.Option("--data-dir", help="Data directory path.")] = None,
    binary: Annotated[str | None, typer.Option("--binary", help="pinentry program to run.")] = None,
    debug: Annotated[bool, typer.Option("--debug", help="Log the Assuan exchange and run pinentry with --debug.")] = False,
    no_global_grab: Annotated[
        bool, typer.Option("--no-global-grab", help="Grab the keyboard only while the pinentry window is focused.")
    ] = False,
) -> None:
    """Ask for passphrases and confirmations through GnuPG's pinentry."""
    cfg = Config.build(data_dir, binary).with_flags(debug=debug, no_global_grab=no_global_grab)
    cfg.data_dir.mkdir(parents=True, exist_ok=True)
    setup_logging(cfg.log_path, debug=debug)
    ctx.obj = AppContext(out=Output(json_mode=json_output), cfg=cfg)


app.command(aliases=["p"])(getpin)
app.command(aliases=["c"])(confirm)
app.command(aliases=["m"])(message)
app.command("clear-passphrase")(clear_passphrase)
