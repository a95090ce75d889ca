"""Logging setup for the relay service.

Plain-text lines on stdout, one logger per module. Messages carry
``session=...`` style pairs so a session can be followed across requests.
"""
import logging
import sys
from typing import Optional

from . import config


def setup_logging(level: Optional[str] = None) -> None:
    """Configure the root logger once per process."""
    log_level = level or config.LOG_LEVEL

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
    )

    root = logging.getLogger()
    root.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    root.handlers.clear()
    root.addHandler(handler)

    # receivers poll every second or so; access lines drown everything else
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
