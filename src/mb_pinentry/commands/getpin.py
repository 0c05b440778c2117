"""Ask for a PIN or passphrase."""

from typing import Annotated

import typer

from mb_pinentry.app_context import use_context
from mb_pinentry.assuan import PinentryError
from mb_pinentry.dialog import Dialog
from mb_pinentry.quality import length_quality
from mb_pinentry.session import connect


def getpin(
    ctx: typer.Context,
    *,
    title: Annotated[str | None, typer.Option(help="Window title")] = None,
    desc: Annotated[str | None, typer.Option(help="Description text")] = None,
    prompt: Annotated[str | None, typer.Option(help="Prompt in front of the entry field")] = None,
    repeat: Annotated[str | None, typer.Option(help="Ask twice, with this label for the second entry")] = None,
    key_info: Annotated[str | None, typer.Option("--key-info", help="Cache ID for the external password cache")] = None,
    quality_bar: Annotated[bool, typer.Option("--quality-bar", help="Show a length-based quality bar")] = False,
    timeout: Annotated[int, typer.Option(min=0, help="Dialog timeout in seconds (0 = configured default)")] = 0,
) -> None:
    """Ask for a PIN or passphrase and print it."""
    app = use_context(ctx)
    dialog = Dialog(
        title=title,
        description=desc,
        prompt=prompt,
        repeat=repeat,
        key_info=key_info,
        quality_bar=quality_bar,
        timeout=timeout,
    )
    try:
        with connect(app.cfg, dialog, quality=length_quality if quality_bar else None) as client:
            result = client.get_pin()
    except (PinentryError, ExceptionGroup) as e:
        app.out.print_pinentry_error_and_exit(e)
    app.out.print_pin(result)
