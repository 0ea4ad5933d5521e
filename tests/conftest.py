"""Pytest configuration for test isolation.

The package reads a handful of ``CHEQUE_OCR_*`` environment variables (log
level, Tesseract language, worker count). A developer shell or a local ``.env``
may set them, which would make assertions about defaults flaky, so every test
starts with them cleared.
"""

from __future__ import annotations

import pytest

_ENV_VARS = (
    "CHEQUE_OCR_LOG_LEVEL",
    "CHEQUE_OCR_TESSERACT_LANG",
    "CHEQUE_OCR_MAX_WORKERS",
)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
