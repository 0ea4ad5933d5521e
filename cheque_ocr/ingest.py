"""Ingestion workflow: files in, per-document reports and aggregated fields out.

For one instrument the caller may upload several files (front, back, a PDF
scan). Each file is run through text recovery and :func:`analyze`; the parsed
fields are then folded together with the first non-empty value per field
winning, in upload order.

Work runs on a bounded thread pool. Results keep input order regardless of
completion order.
"""

from __future__ import annotations

import os
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import fields as dc_fields
from os import PathLike
from pathlib import Path
from typing import Any

from .errors import NoDocumentsError
from .extractor import analyze
from .logging_setup import get_logger
from .models import DocumentReport, IngestReport, ParsedFields
from .ocr import ImageOcrEngine, extract_text_from_file

_MAX_WORKERS_CAP = 16

_logger = get_logger(__name__)


def _resolve_concurrency(n_files: int, requested: int | None = None) -> int:
    """Resolve the worker count for ``n_files`` documents.

    Honors ``requested`` first, then ``CHEQUE_OCR_MAX_WORKERS``; defaults to
    ``min(4, n_files)``. Always within ``[1, min(n_files, 16)]``.
    """

    if requested is None:
        env_val = os.getenv("CHEQUE_OCR_MAX_WORKERS")
        try:
            requested = int(env_val) if env_val else None
        except ValueError:
            _logger.warning("ignoring non-integer CHEQUE_OCR_MAX_WORKERS=%r", env_val)
            requested = None
    upper = max(1, min(n_files, _MAX_WORKERS_CAP))
    if requested is not None and requested > 0:
        return min(requested, upper)
    return min(4, upper)


def aggregate_fields(fields_seq: Iterable[ParsedFields]) -> ParsedFields:
    """Fold several extraction results; the earliest non-``None`` value wins."""

    merged: dict[str, Any] = {}
    for parsed in fields_seq:
        for f in dc_fields(parsed):
            val = getattr(parsed, f.name)
            if val is not None and merged.get(f.name) is None:
                merged[f.name] = val
    return ParsedFields(**merged)


def _usable_uploads(
    paths: Sequence[str | PathLike[str]], content_types: Sequence[str | None] | None
) -> list[tuple[Path, str | None]]:
    if content_types is None:
        content_types = [None] * len(paths)
    elif len(content_types) != len(paths):
        raise ValueError(f"got {len(content_types)} content types for {len(paths)} files")
    usable: list[tuple[Path, str | None]] = []
    for raw, ctype in zip(paths, content_types):
        p = Path(raw)
        if not p.is_file() or p.stat().st_size == 0:
            _logger.warning("skipping missing or empty file path=%s", p)
            continue
        usable.append((p, ctype))
    return usable


def _process_one(
    path: Path, content_type: str | None, image_ocr: ImageOcrEngine | None
) -> tuple[DocumentReport, ParsedFields]:
    ocr_result = extract_text_from_file(path, content_type, image_ocr=image_ocr)
    parsed, matches = analyze(ocr_result.text)
    report = DocumentReport(
        file_name=path.name,
        file_path=path.as_posix(),
        content_type=content_type,
        ocr_source=ocr_result.source,
        ocr_confidence=ocr_result.confidence,
        ocr_text=ocr_result.text,
        parsed_fields=parsed.to_dict(),
        parser_matches=dict(matches),
        engine_metadata=dict(ocr_result.metadata),
    )
    _logger.info(
        "ingested path=%s source=%s usable=%s fields=%d",
        path,
        ocr_result.source,
        ocr_result.is_usable,
        len(report.parsed_fields),
    )
    return report, parsed


def ingest_files(
    paths: Sequence[str | PathLike[str]],
    *,
    content_types: Sequence[str | None] | None = None,
    image_ocr: ImageOcrEngine | None = None,
    concurrency: int | None = None,
) -> IngestReport:
    """Run text recovery and field extraction over uploaded files.

    ``content_types`` lines up with ``paths`` and carries the MIME type the
    uploader reported for each file (``None`` entries fall back to the file
    extension).

    Raises
    ------
    NoDocumentsError
        When ``paths`` contains no existing, non-empty file.
    ValueError
        When ``content_types`` and ``paths`` differ in length.
    """

    usable = _usable_uploads(paths, content_types)
    if not usable:
        raise NoDocumentsError("at least one non-empty file is required for OCR")

    workers = _resolve_concurrency(len(usable), concurrency)
    with ThreadPoolExecutor(max_workers=workers) as pool:
        results = list(pool.map(lambda u: _process_one(u[0], u[1], image_ocr), usable))

    documents = [report for report, _ in results]
    aggregated = aggregate_fields(parsed for _, parsed in results)
    return IngestReport(documents=documents, aggregated_fields=aggregated.to_dict())


__all__ = ["aggregate_fields", "ingest_files"]
