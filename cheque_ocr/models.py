"""Data models for ``cheque_ocr``.

Two groups live here:

- The extraction result: :class:`ParsedFields` (frozen dataclass, every field
  optional) and the :data:`MatchTrace` mapping, returned together as a
  :class:`ChequeOcrAnalysis`.
- Ingestion DTOs: :class:`OcrResult` handed over by the OCR adapters, and the
  Pydantic report models serialized by the CLI.

``None`` always means "not found". Field values are plain strings/floats so
results stay JSON-friendly; dates are ISO ``YYYY-MM-DD`` strings.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import StrEnum
from typing import Any, NamedTuple, TypeAlias

from pydantic import BaseModel, ConfigDict, computed_field


class Currency(StrEnum):
    TRY = "TRY"
    USD = "USD"


class OcrSource(StrEnum):
    """Where the recognized text came from."""

    IMAGE = "image"
    PDF = "pdf"
    TEXT = "text"
    NONE = "none"


# Attribute name -> JSON key, in output order.
FIELD_KEYS: dict[str, str] = {
    "amount": "amount",
    "currency": "currency",
    "due_date": "dueDate",
    "issue_date": "issueDate",
    "issuer": "issuer",
    "recipient": "recipient",
    "bank_name": "bankName",
    "bank_branch": "bankBranch",
    "bank_city": "bankCity",
    "bank_account": "bankAccount",
    "iban": "iban",
    "serial_number": "serialNumber",
    "endorsed_by": "endorsedBy",
    "issue_place": "issuePlace",
}


@dataclass(frozen=True, slots=True)
class ParsedFields:
    """Structured fields recovered from a cheque or senet.

    Built by the extractor through a first-match-wins builder; instances are
    immutable once handed to the caller.
    """

    amount: float | None = None
    currency: Currency | None = None
    due_date: str | None = None
    issue_date: str | None = None
    issuer: str | None = None
    recipient: str | None = None
    bank_name: str | None = None
    bank_branch: str | None = None
    bank_city: str | None = None
    bank_account: str | None = None
    iban: str | None = None
    serial_number: str | None = None
    endorsed_by: str | None = None
    issue_place: str | None = None

    @property
    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))

    def to_dict(self) -> dict[str, Any]:
        """Return populated fields keyed by their camelCase JSON names."""

        out: dict[str, Any] = {}
        for attr, key in FIELD_KEYS.items():
            val = getattr(self, attr)
            if val is None:
                continue
            out[key] = str(val) if isinstance(val, Currency) else val
        return out


MatchTrace: TypeAlias = dict[str, str]
"""Matcher/fallback key -> raw substring or line that produced a field.

For debugging and manual verification only; never consulted by business logic.
"""


class ChequeOcrAnalysis(NamedTuple):
    fields: ParsedFields
    matches: MatchTrace


@dataclass(frozen=True, slots=True)
class OcrResult:
    """Text recovered from one file by an OCR/PDF/plain-text reader.

    ``confidence`` is in ``[0, 1]`` when the engine reports one. The extractor
    ignores both ``confidence`` and ``source``; they are carried for audit.
    """

    text: str
    source: OcrSource
    confidence: float | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def is_usable(self) -> bool:
        return bool(self.text.strip())


# ---------------------------------------------------------------------------
# Ingestion reports (JSON output)
# ---------------------------------------------------------------------------


class DocumentReport(BaseModel):
    """Per-file outcome of the ingestion workflow."""

    model_config = ConfigDict(extra="forbid")

    file_name: str
    file_path: str
    content_type: str | None = None
    ocr_source: OcrSource
    ocr_confidence: float | None = None
    ocr_text: str
    parsed_fields: dict[str, Any]
    parser_matches: dict[str, str]
    engine_metadata: dict[str, Any] = {}


class IngestReport(BaseModel):
    """All documents for one instrument plus the fields aggregated across them."""

    model_config = ConfigDict(extra="forbid")

    documents: list[DocumentReport]
    aggregated_fields: dict[str, Any]

    @computed_field  # type: ignore[prop-decorator]
    @property
    def usable_count(self) -> int:
        return sum(1 for d in self.documents if d.ocr_text.strip())


__all__ = [
    "FIELD_KEYS",
    "ChequeOcrAnalysis",
    "Currency",
    "DocumentReport",
    "IngestReport",
    "MatchTrace",
    "OcrResult",
    "OcrSource",
    "ParsedFields",
]
