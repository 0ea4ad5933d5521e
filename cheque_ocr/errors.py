"""Exceptions raised by the ingestion side of ``cheque_ocr``.

The field extractor itself has no error path; these only surface from the
workflow that feeds it.
"""

from __future__ import annotations


class ChequeOcrError(Exception):
    """Base class for package errors."""


class NoDocumentsError(ChequeOcrError, ValueError):
    """Raised when ingestion is called without a single readable, non-empty file."""


__all__ = ["ChequeOcrError", "NoDocumentsError"]
