"""Ask the user to confirm."""

from typing import Annotated

import typer

from mb_pinentry.app_context import use_context
from mb_pinentry.assuan import PinentryClient, PinentryError, is_not_confirmed
from mb_pinentry.dialog import Dialog
from mb_pinentry.session import connect


def ask_confirmation(client: PinentryClient, *, one_button: bool = False) -> bool:
    """Run CONFIRM, treating a not-confirmed error as a decline."""
    try:
        return client.confirm("--one-button" if one_button else "")
    except PinentryError as e:
        # Current pinentry reports the negative button as an error
        if not is_not_confirmed(e):
            raise
        return False


def confirm(
    ctx: typer.Context,
    *,
    desc: Annotated[str | None, typer.Option(help="Question to confirm")] = None,
    ok: Annotated[str | None, typer.Option(help="OK button label")] = None,
    not_ok: Annotated[str | None, typer.Option("--not-ok", help="Non-affirmative button label")] = None,
    one_button: Annotated[bool, typer.Option("--one-button", help="Show only an OK button")] = False,
) -> None:
    """Ask the user to confirm. Exits with code 1 if declined."""
    app = use_context(ctx)
    dialog = Dialog(description=desc, ok=ok, not_ok=not_ok)
    try:
        with connect(app.cfg, dialog) as client:
            confirmed = ask_confirmation(client, one_button=one_button)
    except (PinentryError, ExceptionGroup) as e:
        app.out.print_pinentry_error_and_exit(e)
    app.out.print_confirmed(confirmed=confirmed)
    if not confirmed:
        raise typer.Exit(code=1)
