# Path: config/logging.py
# Purpose: Configure application-wide logging from settings.
# Layer: config.
# Details: Applies AppSettings.log_level once at startup; modules log through logging.getLogger(__name__).

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install a root handler at the requested level."""

    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        numeric = logging.INFO
    logging.basicConfig(level=numeric, format=LOG_FORMAT)
    # urllib3 connection chatter drowns the client's own messages at DEBUG.
    logging.getLogger("urllib3").setLevel(max(numeric, logging.WARNING))
