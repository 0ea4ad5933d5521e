"""Heuristic field extraction from cheque/senet OCR text.

Entry point: :func:`analyze`. Processing order:

1. Line-scoped matchers (bank line, due date, issue date, amount).
2. Whole-text matchers over the upper-cased text (IBAN, account, serial,
   branch, issue place, endorsement, recipient, issuer).
3. Whole-text fallbacks for a missing due date or amount.
4. Derived fields: ``bank_city`` from the branch, and ``bank_name``
   synthesized from the branch when no ``BANKASI`` line was found.

The function is pure and never raises; unparseable candidates are skipped.
"""

from __future__ import annotations

from typing import Any

from .logging_setup import get_logger
from .models import ChequeOcrAnalysis, Currency, MatchTrace, ParsedFields
from .normalizers import title_case, turkish_upper
from .patterns import FALLBACK_MATCHERS, LINE_MATCHERS, TEXT_MATCHERS, Extraction

_logger = get_logger(__name__)


class _FieldBuilder:
    """Accumulates field values; the first value set for a field is kept."""

    def __init__(self) -> None:
        self._values: dict[str, Any] = {}
        self.trace: MatchTrace = {}

    def has(self, name: str) -> bool:
        return self._values.get(name) is not None

    def get(self, name: str) -> Any:
        return self._values.get(name)

    def set(self, name: str, value: Any) -> bool:
        if value is None or self.has(name):
            return False
        self._values[name] = value
        return True

    def apply(self, trace_key: str, extraction: Extraction) -> None:
        values, raw = extraction
        applied = [self.set(name, val) for name, val in values.items()]
        if any(applied):
            self.trace[trace_key] = raw

    def build(self) -> ParsedFields:
        return ParsedFields(**self._values)


def _split_lines(text: str) -> list[str]:
    return [line.strip() for line in text.splitlines() if line.strip()]


def _derive(builder: _FieldBuilder, branch_raw: str | None) -> None:
    branch = builder.get("bank_branch")
    if branch_raw and not builder.has("bank_name"):
        first = branch_raw.split()[0]
        if builder.set("bank_name", title_case(f"{first} Bankası")):
            builder.trace["bankNameFallback"] = first

    if branch:
        parts = branch.split()
        # Known limitation: the last token is often "Şubesi" rather than a city.
        if len(parts) > 1:
            builder.set("bank_city", title_case(parts[-1]))


def analyze(text: str) -> ChequeOcrAnalysis:
    """Extract cheque/senet fields from recognized ``text``.

    Returns a ``(fields, matches)`` pair. Irrelevant or empty input yields a
    ``ParsedFields`` with every field ``None`` and an empty trace.
    """

    builder = _FieldBuilder()
    lines = _split_lines(text)

    for matcher in LINE_MATCHERS:
        for line in lines:
            extraction = matcher.match(line)
            if extraction is not None:
                builder.apply(matcher.trace_key, extraction)
                break

    upper = turkish_upper(text)
    for text_matcher in TEXT_MATCHERS:
        extraction = text_matcher.match(upper)
        if extraction is not None:
            builder.apply(text_matcher.trace_key, extraction)

    for fallback in FALLBACK_MATCHERS:
        if builder.has(fallback.field):
            continue
        extraction = fallback.match(text)
        if extraction is not None:
            builder.apply(fallback.trace_key, extraction)

    if builder.has("amount") and not builder.has("currency"):
        builder.set("currency", Currency.TRY)

    _derive(builder, builder.trace.get("branch"))

    fields = builder.build()
    _logger.debug(
        "analyze: lines=%d fields=%s",
        len(lines),
        ",".join(sorted(fields.to_dict())) or "-",
    )
    return ChequeOcrAnalysis(fields=fields, matches=builder.trace)


__all__ = ["analyze"]
