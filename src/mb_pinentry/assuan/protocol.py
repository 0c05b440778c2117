"""Assuan line codec used to talk to pinentry.

One directive or reply per line, terminated by ``\\n``. Arguments are
percent-escaped so that they can never contain a line break.

Client → pinentry:  SETDESC Enter%0Apassphrase
pinentry → client:  OK | ERR <code> <description> | D <data> | S <keyword> | INQUIRE <keyword> <argument>
"""

import json
import re
from enum import Enum, auto

# Directives
BYE = "BYE"
CAN = "CAN"
CLEARPASSPHRASE = "CLEARPASSPHRASE"
CONFIRM = "CONFIRM"
END = "END"
GETPIN = "GETPIN"
MESSAGE = "MESSAGE"
OPTION = "OPTION"
SETCANCEL = "SETCANCEL"
SETDESC = "SETDESC"
SETERROR = "SETERROR"
SETGENPIN = "SETGENPIN"
SETGENPIN_TT = "SETGENPIN_TT"
SETKEYINFO = "SETKEYINFO"
SETNOTOK = "SETNOTOK"
SETOK = "SETOK"
SETPROMPT = "SETPROMPT"
SETQUALITYBAR = "SETQUALITYBAR"
SETQUALITYBAR_TT = "SETQUALITYBAR_TT"
SETREPEAT = "SETREPEAT"
SETREPEATERROR = "SETREPEATERROR"
SETREPEATOK = "SETREPEATOK"
SETTIMEOUT = "SETTIMEOUT"
SETTITLE = "SETTITLE"

# Exact-match replies
STATUS_PASSWORD_FROM_CACHE = b"S PASSWORD_FROM_CACHE"
STATUS_PIN_REPEATED = b"S PIN_REPEATED"
NOT_CONFIRMED = b"ASSUAN_Not_Confirmed"

# Inquiry keywords
INQUIRE_QUALITY = "QUALITY"

# Option names
OPTION_ALLOW_EXTERNAL_PASSWORD_CACHE = "allow-external-password-cache"
OPTION_DEFAULT_OK = "default-ok"
OPTION_DEFAULT_CANCEL = "default-cancel"
OPTION_DEFAULT_PROMPT = "default-prompt"
OPTION_TTY_NAME = "ttyname"
OPTION_TTY_TYPE = "ttytype"
OPTION_LC_CTYPE = "lc-ctype"

# Error codes (GPG_ERR_SOURCE_PINENTRY << 24 | error)
ASSUAN_ERROR_CODE_CANCELLED = 83886179
ASSUAN_ERROR_CODE_NOT_CONFIRMED = 83886194

QUALITY_MIN = -100
QUALITY_MAX = 100

_ERROR_RE = re.compile(rb"\AERR (\d+) (.*)\Z", re.DOTALL)
_PERCENT = ord("%")
_UPPERCASE_HEX = frozenset(b"0123456789ABCDEF")


class LineKind(Enum):
    """Classification of a single reply line."""

    BLANK = auto()
    COMMENT = auto()
    OK = auto()
    ERROR = auto()
    DATA = auto()
    STATUS = auto()
    INQUIRE = auto()
    OTHER = auto()


class PinentryError(Exception):
    """Base class for all errors raised while talking to pinentry."""


class AssuanError(PinentryError):
    """An ``ERR`` reply sent by pinentry."""

    def __init__(self, code: int, description: str) -> None:
        """Initialize with the numeric code and the description from the ``ERR`` line.

        Args:
            code: Assuan error code (e.g. ``ASSUAN_ERROR_CODE_CANCELLED``).
            description: Human-readable text following the code.

        """
        super().__init__(description)
        self.code = code
        self.description = description

    def __repr__(self) -> str:
        return f"AssuanError(code={self.code}, description={self.description!r})"


class UnexpectedResponseError(PinentryError):
    """A reply line that does not fit the exchange in progress."""

    def __init__(self, line: bytes | str) -> None:
        """Initialize with the offending raw line."""
        self.line = line.decode(errors="replace") if isinstance(line, bytes) else line
        super().__init__(f"pinentry: unexpected response: {json.dumps(self.line, ensure_ascii=False)}")


class TransportError(PinentryError):
    """The pinentry process could not be started, written to, read from, or closed."""


def escape(text: str) -> str:
    """Percent-escape line breaks and percent signs so text fits on one directive line."""
    return text.replace("%", "%25").replace("\n", "%0A").replace("\r", "%0D")


def unescape(data: bytes) -> bytes:
    """Decode ``%XY`` escapes where X and Y are uppercase hex digits.

    Invalid escape sequences are kept literally instead of raising: some
    pinentry builds (pinentry-mac 1.1.1) send the PIN in ``INQUIRE QUALITY``
    without escaping it.
    """
    out = bytearray()
    i = 0
    n = len(data)
    while i < n:
        if data[i] == _PERCENT and i + 2 < n and data[i + 1] in _UPPERCASE_HEX and data[i + 2] in _UPPERCASE_HEX:
            out.append(int(data[i + 1 : i + 3], 16))
            i += 3
        else:
            out.append(data[i])
            i += 1
    return bytes(out)


def decode_data(data: bytes) -> str:
    """Unescape a data payload and decode it as UTF-8."""
    return unescape(data).decode(errors="replace")


def classify(line: bytes) -> LineKind:
    """Classify a reply line (without its terminator)."""
    if not line.strip():
        return LineKind.BLANK
    if line.startswith(b"#"):
        return LineKind.COMMENT
    if line.startswith(b"OK"):
        return LineKind.OK
    if line.startswith(b"ERR "):
        return LineKind.ERROR
    if line.startswith(b"D "):
        return LineKind.DATA
    if line.startswith(b"INQUIRE "):
        return LineKind.INQUIRE
    if line.startswith(b"S "):
        return LineKind.STATUS
    return LineKind.OTHER


def decode_error(line: bytes) -> AssuanError:
    """Decode an ``ERR <code> <description>`` line.

    A code too long to parse becomes 0; the description is kept either way.

    Raises:
        UnexpectedResponseError: The line does not match the ``ERR`` grammar.

    """
    match = _ERROR_RE.match(line)
    if match is None:
        raise UnexpectedResponseError(line)
    try:
        code = int(match[1])
    except ValueError:
        code = 0
    return AssuanError(code, match[2].decode(errors="replace"))


def parse_inquiry(line: bytes) -> tuple[str, bytes]:
    """Split an ``INQUIRE <keyword> <argument>`` line into keyword and raw argument."""
    keyword, _, argument = line.removeprefix(b"INQUIRE ").partition(b" ")
    return keyword.decode(errors="replace"), argument


def option(name: str, value: str | None = None) -> str:
    """Build the argument of an ``OPTION`` directive."""
    return name if value is None else f"{name}={value}"


def clamp_quality(quality: int) -> int:
    """Clamp a quality score into [-100, 100]."""
    return max(QUALITY_MIN, min(QUALITY_MAX, quality))


def is_cancelled(err: BaseException | None) -> bool:
    """Check whether an error (or any error in a group) is the user cancelling the dialog."""
    return _has_code(err, ASSUAN_ERROR_CODE_CANCELLED)


def is_not_confirmed(err: BaseException | None) -> bool:
    """Check whether an error (or any error in a group) is the user pressing the negative button."""
    return _has_code(err, ASSUAN_ERROR_CODE_NOT_CONFIRMED)


def combine_errors(primary: Exception, secondary: Exception | None) -> Exception:
    """Combine two failures of one code path so neither hides the other."""
    if secondary is None:
        return primary
    return ExceptionGroup(f"pinentry: {primary}", [primary, secondary])


def _has_code(err: BaseException | None, code: int) -> bool:
    if isinstance(err, BaseExceptionGroup):
        return any(_has_code(e, code) for e in err.exceptions)
    return isinstance(err, AssuanError) and err.code == code
