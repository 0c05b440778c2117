"""Line transport between the client and the pinentry process."""

import contextlib
import logging
import subprocess  # nosec B404
from collections.abc import Sequence
from typing import IO, Protocol

from mb_pinentry.assuan.protocol import TransportError

logger = logging.getLogger(__name__)

# Grace period for pinentry to exit after stdin is closed
_CLOSE_TIMEOUT = 3.0


class Transport(Protocol):
    """Byte-line duplex channel to a pinentry program.

    Implementations with their own read timeout or cancellation can be
    injected into ``PinentryClient``; the client itself never times out.
    """

    def start(self, name: str, args: Sequence[str]) -> None:
        """Start the program."""
        ...

    def write(self, data: bytes) -> int:
        """Write data exactly as given and return the number of bytes written."""
        ...

    def read_line(self) -> bytes:
        """Read the next line without its ``\\n`` terminator.

        Raises:
            TransportError: End of stream or read failure.

        """
        ...

    def close(self) -> None:
        """Release the program."""
        ...


class ProcessTransport:
    """Runs pinentry as a child process and talks to it over stdin/stdout."""

    def __init__(self) -> None:
        """Initialize an unstarted transport."""
        self._proc: subprocess.Popen[bytes] | None = None

    def start(self, name: str, args: Sequence[str]) -> None:
        """Spawn the pinentry program with piped stdin and stdout.

        Raises:
            TransportError: Already started or the program cannot be executed.

        """
        if self._proc is not None:
            raise TransportError("pinentry process already started")
        cmd = [name, *args]
        try:
            # S603: the binary comes from the user's own config or gpg-agent.conf
            self._proc = subprocess.Popen(  # noqa: S603  # nosec B603
                cmd,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
            )
        except OSError as e:
            raise TransportError(f"failed to start {name}: {e}") from e
        logger.debug("Started %s (pid %d)", cmd, self._proc.pid)

    def write(self, data: bytes) -> int:
        """Write and flush data to pinentry's stdin.

        Raises:
            TransportError: Not started or the pipe is broken.

        """
        stdin = self._pipe(self._require_proc().stdin)
        try:
            written = stdin.write(data)
            stdin.flush()
        except OSError as e:
            raise TransportError(f"write to pinentry failed: {e}") from e
        return written

    def read_line(self) -> bytes:
        """Read one line from pinentry's stdout.

        Raises:
            TransportError: Not started, read failure, or pinentry closed its stdout.

        """
        stdout = self._pipe(self._require_proc().stdout)
        try:
            line = stdout.readline()
        except OSError as e:
            raise TransportError(f"read from pinentry failed: {e}") from e
        if not line.endswith(b"\n"):
            raise TransportError("pinentry closed the connection")
        return line[:-1]

    def close(self) -> None:
        """Close the pipes and wait for pinentry to exit, killing it after a grace period.

        Raises:
            TransportError: Not started.

        """
        proc = self._require_proc()
        for pipe in (proc.stdin, proc.stdout):
            if pipe is not None:
                with contextlib.suppress(OSError):
                    pipe.close()
        try:
            proc.wait(timeout=_CLOSE_TIMEOUT)
        except subprocess.TimeoutExpired:
            logger.warning("pinentry (pid %d) did not exit, killing it", proc.pid)
            proc.kill()
            proc.wait()
        logger.debug("pinentry (pid %d) exited with %s", proc.pid, proc.returncode)

    def _require_proc(self) -> subprocess.Popen[bytes]:
        if self._proc is None:
            raise TransportError("pinentry process not started")
        return self._proc

    @staticmethod
    def _pipe(pipe: IO[bytes] | None) -> IO[bytes]:
        if pipe is None or pipe.closed:
            raise TransportError("pinentry pipe is closed")
        return pipe
