"""GnuPG integration: pinentry-program lookup and tty options."""

import os
import re
from collections.abc import Mapping
from pathlib import Path

from mb_pinentry.assuan.protocol import OPTION_TTY_NAME, OPTION_TTY_TYPE, option

_PINENTRY_PROGRAM_RE = re.compile(r"^\s*pinentry-program\s+(\S+)", re.MULTILINE)


def default_gnupg_home() -> Path:
    """Return $GNUPGHOME, falling back to ~/.gnupg."""
    home = os.environ.get("GNUPGHOME")
    return Path(home) if home else Path.home() / ".gnupg"


def pinentry_program(conf_path: Path) -> str | None:
    """Return the pinentry-program configured in gpg-agent.conf, or None if missing."""
    try:
        text = conf_path.read_text(errors="replace")
    except OSError:
        return None
    match = _PINENTRY_PROGRAM_RE.search(text)
    return match[1] if match else None


def tty_options(env: Mapping[str, str] | None = None) -> list[str]:
    """Build ttyname/ttytype OPTION arguments from GPG_TTY and TERM, so curses pinentry finds the terminal."""
    env = os.environ if env is None else env
    result: list[str] = []
    if tty := env.get("GPG_TTY"):
        result.append(option(OPTION_TTY_NAME, tty))
    if term := env.get("TERM"):
        result.append(option(OPTION_TTY_TYPE, term))
    return result
