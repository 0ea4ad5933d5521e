"""Text recovery adapters feeding the extractor.

:func:`extract_text_from_file` picks a reader by content type (or file
extension) and always returns an :class:`~cheque_ocr.models.OcrResult`:

- plain text files are read as-is;
- PDFs go through ``pdfplumber``; scanned PDFs without a text layer are
  rendered page by page and handed to the image OCR engine;
- images are opened with Pillow and handed to the image OCR engine.

Reader and engine failures are logged and degrade to an empty result with
``source=none`` so one unreadable upload never aborts a batch.
"""

from __future__ import annotations

import mimetypes
import os
from collections.abc import Sequence
from os import PathLike
from pathlib import Path
from typing import Protocol

import pdfplumber
from PIL import Image

from .logging_setup import get_logger
from .models import OcrResult, OcrSource

DEFAULT_TESSERACT_LANG = "tur+eng"
PDF_RENDER_RESOLUTION = 300

_logger = get_logger(__name__)


class ImageOcrEngine(Protocol):
    """Recognizes text on already-decoded images.

    Returns the text and a confidence in ``[0, 1]`` (``None`` when unknown).
    """

    def recognize(self, image: Image.Image) -> tuple[str, float | None]: ...


class TesseractEngine:
    """Image OCR via ``pytesseract`` (requires the ``tesseract`` binary)."""

    def __init__(self, lang: str | None = None) -> None:
        self.lang = lang or os.getenv("CHEQUE_OCR_TESSERACT_LANG") or DEFAULT_TESSERACT_LANG

    def recognize(self, image: Image.Image) -> tuple[str, float | None]:
        import pytesseract  # deferred: only needed when images are processed

        text = pytesseract.image_to_string(image, lang=self.lang)
        data = pytesseract.image_to_data(
            image, lang=self.lang, output_type=pytesseract.Output.DICT
        )
        # Tesseract reports -1 for non-word boxes.
        scores = [float(c) for c in data.get("conf", []) if float(c) >= 0]
        confidence = (sum(scores) / len(scores) / 100.0) if scores else None
        return text.strip(), confidence


def _classify(path: Path, content_type: str | None) -> str:
    ctype = (content_type or "").split(";", 1)[0].strip().lower()
    if not ctype or ctype == "application/octet-stream":
        ctype = mimetypes.guess_type(path.name)[0] or ""
    if ctype == "application/pdf":
        return "pdf"
    if ctype.startswith("image/"):
        return "image"
    if ctype.startswith("text/"):
        return "text"
    return "unknown"


def _empty(reason: str, **metadata: object) -> OcrResult:
    return OcrResult(text="", source=OcrSource.NONE, metadata={"error": reason, **metadata})


def _recognize_images(
    images: Sequence[Image.Image], engine: ImageOcrEngine
) -> tuple[str, float | None]:
    texts: list[str] = []
    scores: list[float] = []
    for image in images:
        text, confidence = engine.recognize(image)
        if text:
            texts.append(text)
        if confidence is not None:
            scores.append(confidence)
    return "\n".join(texts), (sum(scores) / len(scores) if scores else None)


def _read_text_file(path: Path) -> OcrResult:
    text = path.read_text(encoding="utf-8", errors="replace")
    return OcrResult(text=text.strip(), source=OcrSource.TEXT, confidence=1.0)


def _read_image(path: Path, engine: ImageOcrEngine | None) -> OcrResult:
    if engine is None:
        return _empty("image OCR engine not configured")
    with Image.open(path) as image:
        text, confidence = engine.recognize(image)
    return OcrResult(text=text, source=OcrSource.IMAGE, confidence=confidence)


def _read_pdf(path: Path, engine: ImageOcrEngine | None) -> OcrResult:
    text = ""
    pages = 0
    try:
        with pdfplumber.open(path) as pdf:
            pages = len(pdf.pages)
            text = "\n".join(page.extract_text() or "" for page in pdf.pages).strip()
            if text:
                return OcrResult(
                    text=text, source=OcrSource.PDF, confidence=1.0, metadata={"pages": pages}
                )
            if engine is None:
                return _empty("pdf has no text layer and image OCR is not configured")
            _logger.info("pdf has no text layer; falling back to image OCR path=%s", path)
            images = [
                page.to_image(resolution=PDF_RENDER_RESOLUTION).original for page in pdf.pages
            ]
    except Exception as e:  # noqa: BLE001 - pdfminer raises a wide range of types
        _logger.warning("pdf text extraction failed path=%s: %s", path, e)
        return _empty(f"pdf extraction failed: {e}")

    ocr_text, confidence = _recognize_images(images, engine)
    return OcrResult(
        text=ocr_text,
        source=OcrSource.IMAGE,
        confidence=confidence,
        metadata={"fallback": "pdf-image-ocr", "pages": pages or len(images)},
    )


def extract_text_from_file(
    path: str | PathLike[str],
    content_type: str | None = None,
    *,
    image_ocr: ImageOcrEngine | None = None,
) -> OcrResult:
    """Recover text from ``path``; never raises for unreadable inputs.

    Parameters
    ----------
    path:
        File on disk (an upload already written by the storage layer).
    content_type:
        Optional MIME type reported by the uploader; the file extension is
        used when it is missing or generic.
    image_ocr:
        Engine for images and scanned PDFs. Without one, image inputs yield an
        empty result.
    """

    p = Path(path)
    kind = _classify(p, content_type)
    try:
        if kind == "text":
            return _read_text_file(p)
        if kind == "pdf":
            return _read_pdf(p, image_ocr)
        if kind == "image":
            return _read_image(p, image_ocr)
    except Exception as e:  # noqa: BLE001 - collaborator failures must not abort a batch
        _logger.warning("text recovery failed path=%s kind=%s: %s", p, kind, e, exc_info=True)
        return _empty(str(e), kind=kind)
    return _empty(f"unsupported content type: {content_type or p.suffix or 'unknown'}")


__all__ = [
    "DEFAULT_TESSERACT_LANG",
    "ImageOcrEngine",
    "TesseractEngine",
    "extract_text_from_file",
]
