# geofeed_verifier/utils/logging.py
from __future__ import annotations

import logging
import sys
from typing import Union

ROOT_LOGGER_NAME = "geofeed_verifier"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str) -> logging.Logger:
    """
    Return a logger under the package root, so a single
    configure_logging() call controls every module.
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def configure_logging(level: Union[int, str] = logging.WARNING) -> logging.Logger:
    """
    Attach one stderr handler to the package root logger.

    stdout is reserved for the verification report; calling this more
    than once only changes the level.
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper())

    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(level)
    if not any(getattr(h, "_geofeed_verifier", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._geofeed_verifier = True  # type: ignore[attr-defined]
        root.addHandler(handler)
    root.propagate = False
    return root
