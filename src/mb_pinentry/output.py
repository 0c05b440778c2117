"""Structured output for CLI and JSON modes."""

# ruff: noqa: T201 — this module is the output layer; print() is its sole mechanism for producing CLI output.

import json
import sys
from typing import NoReturn

import typer

from mb_pinentry.assuan import AssuanError, GetPinResult, TransportError, UnexpectedResponseError, is_cancelled, is_not_confirmed


def describe_error(err: BaseException) -> tuple[str, str]:
    """Map a pinentry failure to a machine-readable code and a human-readable message."""
    if is_cancelled(err):
        return "cancelled", "Operation cancelled."
    if is_not_confirmed(err):
        return "not_confirmed", "Not confirmed."
    if isinstance(err, BaseExceptionGroup):
        codes_messages = [describe_error(e) for e in err.exceptions]
        return codes_messages[0][0], "; ".join(message for _, message in codes_messages)
    match err:
        case AssuanError():
            return "assuan_error", f"{err.description} (code {err.code})"
        case UnexpectedResponseError():
            return "unexpected_response", str(err)
        case TransportError():
            return "transport_error", str(err)
        case _:
            return "internal", str(err)


class Output:
    """Handles all CLI output in JSON or human-readable format."""

    def __init__(self, *, json_mode: bool) -> None:
        """Initialize output handler.

        Args:
            json_mode: If True, output JSON envelopes; otherwise human-readable text.

        """
        self._json_mode = json_mode

    def _success(self, data: dict[str, object], message: str) -> None:
        """Print a success result in JSON or human-readable format."""
        if self._json_mode:
            print(json.dumps({"ok": True, "data": data}))
        else:
            print(message)

    def print_error_and_exit(self, code: str, message: str) -> NoReturn:
        """Print an error in JSON or human-readable format and exit with code 1.

        Raises:
            typer.Exit: Always, with code 1.

        """
        if self._json_mode:
            print(json.dumps({"ok": False, "error": code, "message": message}))
        else:
            print(f"Error: {message}", file=sys.stderr)
        raise typer.Exit(code=1)

    def print_pinentry_error_and_exit(self, err: BaseException) -> NoReturn:
        """Print a pinentry failure and exit with code 1."""
        code, message = describe_error(err)
        self.print_error_and_exit(code, message)

    def print_pin(self, result: GetPinResult) -> None:
        """Print the entered PIN; in JSON mode with cache and repeat flags."""
        self._success(
            {"pin": result.pin, "password_from_cache": result.password_from_cache, "pin_repeated": result.pin_repeated},
            result.pin,
        )

    def print_confirmed(self, *, confirmed: bool) -> None:
        """Print the confirmation outcome."""
        self._success({"confirmed": confirmed}, "Confirmed." if confirmed else "Declined.")

    def print_message_shown(self) -> None:
        """Print message acknowledgement."""
        self._success({}, "Message acknowledged.")

    def print_passphrase_cleared(self, cache_id: str) -> None:
        """Print cache clear confirmation."""
        self._success({"cache_id": cache_id}, f"Cleared cached passphrase '{cache_id}'.")
