"""Central logging configuration driven by LOG_LEVEL and LOG_FILE."""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Optional

_CONFIGURED = False

_FORMAT = "%(asctime)s %(levelname)s %(threadName)s %(name)s: %(message)s"


def configure_logging(level_override: Optional[int] = None) -> None:
    """Configure global logging based on LOG_LEVEL and LOG_FILE.

    ``LOG_LEVEL`` 0 keeps logging silent, 1 enables INFO and 2 or more
    enables DEBUG. Records go to ``LOG_FILE`` when it is set and to stderr
    otherwise, leaving stdout free for resolver output.
    """
    global _CONFIGURED
    if _CONFIGURED:
        return

    if level_override is not None:
        level: Optional[int] = level_override
    else:
        level = _read_level(os.getenv("LOG_LEVEL", "0"))

    if level is None or level <= 0:
        # Silent mode; keep logging disabled.
        logging.getLogger("jvmdeps").addHandler(logging.NullHandler())
        _CONFIGURED = True
        return

    log_path = os.getenv("LOG_FILE")
    if log_path:
        log_file = Path(log_path)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logging.basicConfig(
            level=_map_level(level),
            filename=log_file,
            filemode="a",
            format=_FORMAT,
            force=True,
        )
    else:
        logging.basicConfig(
            level=_map_level(level),
            stream=sys.stderr,
            format=_FORMAT,
            force=True,
        )
    _CONFIGURED = True


def _read_level(raw: str) -> Optional[int]:
    try:
        return int(raw)
    except ValueError:
        return None


def _map_level(level: int) -> int:
    if level >= 2:
        return logging.DEBUG
    return logging.INFO
