"""Logging for ``cheque_ocr``.

Modules log through ``get_logger(__name__)``; nothing is printed until the CLI
(or a host application) calls :func:`configure_logging`. The level comes from
the ``--log-level`` option, else ``CHEQUE_OCR_LOG_LEVEL``, else ``INFO``.
"""

from __future__ import annotations

import logging
import os
import sys

LOG_LEVEL_ENV = "CHEQUE_OCR_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_root = logging.getLogger("cheque_ocr")
_root.addHandler(logging.NullHandler())
_handler: logging.StreamHandler | None = None


def resolve_level(value: str | None = None) -> int:
    """Map a level name (``"debug"``) or number (``"10"``) to a logging level.

    ``None`` falls back to ``CHEQUE_OCR_LOG_LEVEL`` and then ``INFO``. Unknown
    names raise ``ValueError`` so a typo on the command line is reported.
    """

    raw = (value if value is not None else os.getenv(LOG_LEVEL_ENV) or "INFO").strip()
    if raw.isdigit():
        return int(raw)
    level = logging.getLevelNamesMapping().get(raw.upper())
    if level is None:
        raise ValueError(f"unknown log level: {raw!r}")
    return level


def configure_logging(level: int | str | None = None) -> logging.Logger:
    """Send ``cheque_ocr`` records to stderr at ``level``.

    The first call installs the stream handler; later calls only change the
    level. Returns the package logger.
    """

    global _handler
    resolved = level if isinstance(level, int) else resolve_level(level)
    if _handler is None:
        _handler = logging.StreamHandler(sys.stderr)
        _handler.setFormatter(logging.Formatter(LOG_FORMAT))
        _root.addHandler(_handler)
        _root.propagate = False
    _root.setLevel(resolved)
    return _root


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


__all__ = ["LOG_LEVEL_ENV", "configure_logging", "get_logger", "resolve_level"]
