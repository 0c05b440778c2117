"""Synchronous Assuan client driving a pinentry process.

One command is in flight at a time: every directive is written and its reply
read before the call returns. The only exchange initiated by pinentry is
``INQUIRE QUALITY`` during ``GETPIN``, answered inline without an
acknowledgement.
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from types import TracebackType

from mb_pinentry.assuan import protocol as p
from mb_pinentry.assuan.protocol import LineKind, UnexpectedResponseError
from mb_pinentry.assuan.transport import ProcessTransport, Transport
from mb_pinentry.quality import no_quality

logger = logging.getLogger(__name__)

# Given the PIN typed so far, return a quality score in [-100, 100] or None for no opinion.
# Negative scores turn the quality bar red.
QualityFunc = Callable[[str], int | None]


@dataclass(frozen=True)
class GetPinResult:
    """Outcome of a GETPIN exchange."""

    pin: str = ""
    password_from_cache: bool = False
    pin_repeated: bool = False


class PinentryClient:
    """Client for a single pinentry process."""

    def __init__(
        self,
        *,
        binary_name: str = "pinentry",
        args: Sequence[str] = (),
        commands: Sequence[str] = (),
        quality: QualityFunc | None = None,
        transport: Transport | None = None,
    ) -> None:
        """Start pinentry, check its greeting, and send the starting commands.

        Args:
            binary_name: pinentry program to run.
            args: Extra command-line arguments for the program.
            commands: Directives sent in order right after the greeting, each requiring OK.
            quality: Quality strategy for ``INQUIRE QUALITY``; without one every inquiry is cancelled.
            transport: Line transport; defaults to a child process over stdin/stdout.

        Raises:
            TransportError: pinentry cannot be started or the pipe fails.
            AssuanError: pinentry rejects a starting command.
            UnexpectedResponseError: The greeting or a reply is not OK.
            ExceptionGroup: A handshake failure combined with a failure to close.

        """
        self._transport = transport if transport is not None else ProcessTransport()
        self._quality = quality if quality is not None else no_quality
        self._closed = False

        self._transport.start(binary_name, list(args))
        try:
            line = self._read_line()
            if p.classify(line) is not LineKind.OK:
                raise UnexpectedResponseError(line)
            for command in commands:
                self.command(command)
        except Exception as e:
            close_error: Exception | None = None
            try:
                self.close()
            except Exception as ce:  # noqa: BLE001
                close_error = ce
            combined = p.combine_errors(e, close_error)
            if combined is e:
                raise
            raise combined from None
        except BaseException as e:
            # Interrupted: skip BYE, which may block, and release the process directly
            self._closed = True
            try:
                self._transport.close()
            except Exception as ce:  # noqa: BLE001
                e.add_note(f"closing pinentry also failed: {ce}")
            raise

    def __enter__(self) -> "PinentryClient":
        return self

    def __exit__(
        self, exc_type: type[BaseException] | None, exc: BaseException | None, tb: TracebackType | None
    ) -> None:
        try:
            self.close()
        except Exception as close_error:
            if not isinstance(exc, Exception):
                raise
            raise p.combine_errors(exc, close_error) from None

    @property
    def closed(self) -> bool:
        """Check if the connection has been closed."""
        return self._closed

    # --- Directives ---

    def command(self, command: str) -> None:
        """Send a single directive and require OK.

        Raises:
            AssuanError: pinentry replied with ERR.
            UnexpectedResponseError: The reply is neither OK nor ERR.

        """
        self._write_line(command)
        self._read_ok()

    def confirm(self, option: str = "") -> bool:
        """Ask the user for confirmation. Return False if declined.

        Args:
            option: Optional CONFIRM flag, e.g. ``--one-button``.

        Raises:
            AssuanError: pinentry replied with ERR; test cancellation with ``is_cancelled``.
            UnexpectedResponseError: Any other reply.

        """
        self._write_line(f"{p.CONFIRM} {option}" if option else p.CONFIRM)
        line = self._read_line()
        if p.classify(line) is LineKind.OK:
            return True
        if line == p.NOT_CONFIRMED:
            return False
        raise UnexpectedResponseError(line)

    def get_pin(self) -> GetPinResult:
        """Ask the user for a PIN or passphrase.

        Raises:
            AssuanError: pinentry replied with ERR; test cancellation with ``is_cancelled``.
            UnexpectedResponseError: A reply that does not belong to GETPIN.
            TransportError: The pipe fails, including while answering a quality inquiry.

        """
        self._write_line(p.GETPIN)
        pin = ""
        password_from_cache = False
        pin_repeated = False
        while True:
            line = self._read_line()
            match p.classify(line):
                case LineKind.OK:
                    return GetPinResult(pin=pin, password_from_cache=password_from_cache, pin_repeated=pin_repeated)
                case LineKind.DATA:
                    pin = p.decode_data(line[2:])
                case LineKind.STATUS if line == p.STATUS_PASSWORD_FROM_CACHE:
                    password_from_cache = True
                case LineKind.STATUS if line == p.STATUS_PIN_REPEATED:
                    pin_repeated = True
                case LineKind.INQUIRE:
                    keyword, argument = p.parse_inquiry(line)
                    if keyword != p.INQUIRE_QUALITY:
                        raise UnexpectedResponseError(line)
                    self._answer_quality(argument)
                case _:
                    raise UnexpectedResponseError(line)

    def message(self) -> None:
        """Show a message with a single OK button."""
        self.command(p.MESSAGE)

    def clear_passphrase(self, cache_id: str) -> None:
        """Clear the cached passphrase for a cache ID."""
        self.command(f"{p.CLEARPASSPHRASE} {p.escape(cache_id)}")

    def close(self) -> None:
        """Say BYE and release the process, even if BYE fails.

        Does nothing if already closed.

        Raises:
            PinentryError: BYE failed or releasing the process failed.
            ExceptionGroup: Both failed.

        """
        if self._closed:
            return
        self._closed = True
        bye_error: Exception | None = None
        try:
            self._write_line(p.BYE)
            self._read_ok()
        except Exception as e:  # noqa: BLE001
            bye_error = e
        try:
            self._transport.close()
        except Exception as e:
            if bye_error is None:
                raise
            raise p.combine_errors(bye_error, e) from None
        if bye_error is not None:
            raise bye_error

    # --- Quality inquiry ---

    def _answer_quality(self, argument: bytes) -> None:
        """Answer ``INQUIRE QUALITY`` with ``D <score>`` + ``END``, or ``CAN`` when there is no opinion.

        pinentry consumes the answer without acknowledging it, so nothing is
        read here; GETPIN resumes with the next line. A failed write aborts GETPIN.
        """
        quality = self._quality(p.decode_data(argument))
        if quality is None:
            self._write_line(p.CAN)
            return
        self._write_line(f"D {p.clamp_quality(quality)}", secret=True)
        self._write_line(p.END)

    # --- Line I/O ---

    def _read_line(self) -> bytes:
        """Read the next meaningful line, skipping blanks and comments.

        Raises:
            AssuanError: The line is an ERR reply.
            UnexpectedResponseError: The line starts with ERR but is malformed.

        """
        while True:
            line = self._transport.read_line()
            kind = p.classify(line)
            logger.debug("< %s", _redact(line, kind))
            match kind:
                case LineKind.BLANK | LineKind.COMMENT:
                    continue
                case LineKind.ERROR:
                    raise p.decode_error(line)
                case _:
                    return line

    def _read_ok(self) -> None:
        line = self._read_line()
        if p.classify(line) is not LineKind.OK:
            raise UnexpectedResponseError(line)

    def _write_line(self, line: str, *, secret: bool = False) -> None:
        if "\n" in line or "\r" in line:
            msg = "directive must be a single line; escape arguments with escape()"
            raise ValueError(msg)
        self._transport.write(line.encode() + b"\n")
        logger.debug("> %s", "D [redacted]" if secret else line)


def _redact(line: bytes, kind: LineKind) -> str:
    """Render a read line for the log without the PIN."""
    if kind is LineKind.DATA:
        return "D [redacted]"
    if kind is LineKind.INQUIRE:
        keyword, _ = p.parse_inquiry(line)
        return f"INQUIRE {keyword} [redacted]"
    return line.decode(errors="replace")

