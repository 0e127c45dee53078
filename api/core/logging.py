"""
Process-wide logging setup.

Modules log through `logging.getLogger(__name__)` with `event key=value` messages;
this only installs the root handler once.
"""

from __future__ import annotations

import logging

from .settings import env_str

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

_configured = False


def configure_logging() -> None:
    global _configured
    if _configured:
        return None
    level_name = env_str("LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
    _configured = True
