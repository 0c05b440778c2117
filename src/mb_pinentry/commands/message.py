"""Show a message."""

from typing import Annotated

import typer

from mb_pinentry.app_context import use_context
from mb_pinentry.assuan import PinentryError
from mb_pinentry.dialog import Dialog
from mb_pinentry.session import connect


def message(
    ctx: typer.Context,
    desc: Annotated[str, typer.Argument(help="Message text")],
    *,
    title: Annotated[str | None, typer.Option(help="Window title")] = None,
) -> None:
    """Show a message with an OK button."""
    app = use_context(ctx)
    try:
        with connect(app.cfg, Dialog(title=title, description=desc)) as client:
            client.message()
    except (PinentryError, ExceptionGroup) as e:
        app.out.print_pinentry_error_and_exit(e)
    app.out.print_message_shown()
