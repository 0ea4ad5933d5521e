"""Public interface for the ``cheque_ocr`` package.

Symbol re-exports only; see :mod:`cheque_ocr.extractor` for the field
extractor and :mod:`cheque_ocr.ingest` for the multi-file workflow.
"""

from .errors import ChequeOcrError, NoDocumentsError
from .extractor import analyze
from .ingest import aggregate_fields, ingest_files
from .models import (
    ChequeOcrAnalysis,
    Currency,
    DocumentReport,
    IngestReport,
    MatchTrace,
    OcrResult,
    OcrSource,
    ParsedFields,
)
from .ocr import ImageOcrEngine, TesseractEngine, extract_text_from_file

__all__ = [
    # Extraction
    "analyze",
    "ChequeOcrAnalysis",
    "Currency",
    "MatchTrace",
    "ParsedFields",
    # Ingestion
    "aggregate_fields",
    "extract_text_from_file",
    "ingest_files",
    "DocumentReport",
    "ImageOcrEngine",
    "IngestReport",
    "OcrResult",
    "OcrSource",
    "TesseractEngine",
    # Errors
    "ChequeOcrError",
    "NoDocumentsError",
]
