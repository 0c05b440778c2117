"""Open pinentry sessions from application configuration."""

import logging

from mb_pinentry.assuan import PinentryClient, QualityFunc, Transport
from mb_pinentry.config import Config
from mb_pinentry.dialog import Dialog

logger = logging.getLogger(__name__)


def connect(
    cfg: Config,
    dialog: Dialog | None = None,
    *,
    quality: QualityFunc | None = None,
    transport: Transport | None = None,
) -> PinentryClient:
    """Start the configured pinentry and send the dialog setup during the handshake.

    Configured OPTIONs go first, then the dialog's own. The configured timeout
    applies only when the dialog does not set one.

    Args:
        cfg: Application configuration (binary, arguments, options, timeout).
        dialog: Dialog texts; defaults to pinentry's own.
        quality: Quality strategy; required for the quality bar to show scores.
        transport: Line transport override, e.g. one with a read timeout.

    """
    dialog = dialog or Dialog()
    updates: dict[str, object] = {"options": [*cfg.assuan_options(), *dialog.options]}
    if dialog.timeout == 0 and cfg.timeout > 0:
        updates["timeout"] = cfg.timeout
    dialog = dialog.model_copy(update=updates)
    logger.info("Starting %s %s", cfg.binary_name, " ".join(cfg.args))
    return PinentryClient(
        binary_name=cfg.binary_name,
        args=cfg.args,
        commands=dialog.commands(),
        quality=quality,
        transport=transport,
    )
