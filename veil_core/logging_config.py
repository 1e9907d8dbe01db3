"""
Logging configuration for Veil clients.

Supports two output formats:
  - **human** – single-line, warnings and errors coloured on a TTY
  - **json**  – newline-delimited JSON for log aggregators

Only the ``veil`` logger hierarchy is configured, so embedding
applications keep control of the root logger.  Modules never log key
material, randomness or third-party amounts.

Usage:
    from veil_core.logging_config import setup_logging
    setup_logging(level="DEBUG", fmt="json", log_file="veil.log")
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

LOGGER_NAME = "veil"


def _component(record: logging.LogRecord) -> str:
    """``veil.elgamal`` -> ``elgamal``."""
    prefix = LOGGER_NAME + "."
    return record.name[len(prefix):] if record.name.startswith(prefix) else record.name


class _JSONFormatter(logging.Formatter):
    """Emit each log record as a single JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "component": _component(record),
            "msg": record.getMessage(),
        }
        if record.exc_info and record.exc_info[1]:
            log_obj["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_obj, default=str)


class _HumanFormatter(logging.Formatter):
    """Single-line format; warnings and errors are highlighted on a TTY."""

    WARN = "\033[33m"
    ALERT = "\033[31m"
    RESET = "\033[0m"

    def __init__(self, colour: bool = False):
        super().__init__()
        self.colour = colour

    def _paint(self, record: logging.LogRecord, text: str) -> str:
        if not self.colour or record.levelno < logging.WARNING:
            return text
        tint = self.ALERT if record.levelno >= logging.ERROR else self.WARN
        return f"{tint}{text}{self.RESET}"

    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        level = self._paint(record, f"[{record.levelname:<7}]")
        line = f"{ts} {level} {_component(record)}: {record.getMessage()}"
        if record.exc_info and record.exc_info[1]:
            line += "\n" + self.formatException(record.exc_info)
        return line


def setup_logging(
    level: str = "INFO",
    fmt: str = "human",
    log_file: Optional[str] = None,
) -> logging.Logger:
    """
    Configure the ``veil`` logger and return it.

    Parameters
    ----------
    level : str
        One of DEBUG, INFO, WARNING, ERROR, CRITICAL.
    fmt : str
        ``"human"`` for single-line output, ``"json"`` for
        newline-delimited JSON.
    log_file : str, optional
        If provided, logs are *also* written to this file (always JSON).
    """
    if fmt not in ("human", "json"):
        raise ValueError(f"Unknown log format: {fmt!r}")

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(
        _JSONFormatter() if fmt == "json" else _HumanFormatter(colour=sys.stderr.isatty())
    )
    logger.addHandler(console)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(path))
        fh.setFormatter(_JSONFormatter())
        logger.addHandler(fh)

    return logger
