"""Clear a cached passphrase."""

import typer

from mb_pinentry.app_context import use_context
from mb_pinentry.assuan import PinentryError
from mb_pinentry.session import connect


def clear_passphrase(ctx: typer.Context, cache_id: str) -> None:
    """Clear the passphrase cached under CACHE_ID by the external password cache."""
    app = use_context(ctx)
    try:
        with connect(app.cfg) as client:
            client.clear_passphrase(cache_id)
    except (PinentryError, ExceptionGroup) as e:
        app.out.print_pinentry_error_and_exit(e)
    app.out.print_passphrase_cleared(cache_id)
