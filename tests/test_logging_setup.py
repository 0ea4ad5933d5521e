import io
import logging

import pytest

from cheque_ocr import logging_setup
from cheque_ocr.logging_setup import configure_logging, get_logger, resolve_level


@pytest.fixture()
def pkg_logger(monkeypatch):
    logger = logging.getLogger("cheque_ocr")
    saved = (list(logger.handlers), logger.level, logger.propagate)
    stream = io.StringIO()
    monkeypatch.setattr(logging_setup, "_handler", None)
    monkeypatch.setattr(logging_setup.sys, "stderr", stream)
    yield logger, stream
    logger.handlers, level, logger.propagate = saved
    logger.setLevel(level)


@pytest.mark.parametrize(
    "value,expected",
    [
        ("debug", logging.DEBUG),
        (" Warning ", logging.WARNING),
        ("15", 15),
        ("ERROR", logging.ERROR),
    ],
)
def test_resolve_level(value, expected):
    assert resolve_level(value) == expected


def test_resolve_level_uses_env_then_info(monkeypatch):
    assert resolve_level() == logging.INFO
    monkeypatch.setenv("CHEQUE_OCR_LOG_LEVEL", "error")
    assert resolve_level() == logging.ERROR
    assert resolve_level("debug") == logging.DEBUG


def test_resolve_level_rejects_unknown_names():
    with pytest.raises(ValueError, match="chatty"):
        resolve_level("chatty")


def test_library_logging_is_silent_by_default():
    assert any(
        isinstance(h, logging.NullHandler) for h in logging.getLogger("cheque_ocr").handlers
    )


def test_configure_logging_routes_package_records_to_stderr(pkg_logger):
    logger, stream = pkg_logger

    assert configure_logging("WARNING") is logger
    get_logger("cheque_ocr.ingest").info("hidden")
    get_logger("cheque_ocr.ingest").warning("skipping missing or empty file")

    out = stream.getvalue()
    assert "hidden" not in out
    assert "WARNING cheque_ocr.ingest: skipping missing or empty file" in out
    assert logger.propagate is False


def test_reconfiguring_changes_level_without_adding_handlers(pkg_logger):
    logger, stream = pkg_logger

    configure_logging("WARNING")
    n_handlers = len(logger.handlers)
    configure_logging(logging.DEBUG)
    get_logger("cheque_ocr.extractor").debug("analyze: lines=1")

    assert len(logger.handlers) == n_handlers
    assert logger.level == logging.DEBUG
    assert "analyze: lines=1" in stream.getvalue()
