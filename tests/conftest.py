"""Shared fixtures: a scripted line transport standing in for pinentry."""

from collections import deque
from collections.abc import Sequence

import pytest

from mb_pinentry.assuan import PinentryClient, TransportError

GREETING = "OK Pleased to meet you"


class ScriptedTransport:
    """Replays queued reply lines and records every write."""

    def __init__(self) -> None:
        self.started: tuple[str, list[str]] | None = None
        self.written: list[bytes] = []
        self.close_calls = 0
        self.start_error: Exception | None = None
        self.write_error: Exception | None = None
        self.close_error: Exception | None = None
        self._replies: deque[bytes] = deque()

    def feed(self, *lines: str) -> None:
        """Queue reply lines (without terminators)."""
        self._replies.extend(line.encode() for line in lines)

    @property
    def lines(self) -> list[str]:
        """Written lines without terminators."""
        return [data.decode().removesuffix("\n") for data in self.written]

    @property
    def pending(self) -> int:
        """Number of queued replies not read yet."""
        return len(self._replies)

    def start(self, name: str, args: Sequence[str]) -> None:
        if self.start_error is not None:
            raise self.start_error
        self.started = (name, list(args))

    def write(self, data: bytes) -> int:
        if self.write_error is not None:
            raise self.write_error
        self.written.append(data)
        return len(data)

    def read_line(self) -> bytes:
        if not self._replies:
            raise TransportError("pinentry closed the connection")
        return self._replies.popleft()

    def close(self) -> None:
        self.close_calls += 1
        if self.close_error is not None:
            raise self.close_error


@pytest.fixture
def bare_transport() -> ScriptedTransport:
    """Transport with no replies queued."""
    return ScriptedTransport()


@pytest.fixture
def transport() -> ScriptedTransport:
    """Transport that greets with OK."""
    t = ScriptedTransport()
    t.feed(GREETING)
    return t


@pytest.fixture
def client(transport: ScriptedTransport) -> PinentryClient:
    """Connected client with no starting commands; writes recorded so far are cleared."""
    c = PinentryClient(transport=transport)
    transport.written.clear()
    return c
