"""Matcher table for cheque/senet field extraction.

Matching runs against Turkish-upper-cased text (see
:func:`cheque_ocr.normalizers.turkish_upper`), so keywords are written in
upper case with ``[Iİ]`` wherever a lowercase ``i`` in the source would
surface as a dotted capital.

Three ordered tables drive :func:`cheque_ocr.extractor.analyze`:

- ``LINE_MATCHERS``: scanned line by line; the first line that passes the
  keyword gate and yields a value wins the field.
- ``TEXT_MATCHERS``: one regex per field over the whole text; the first match
  in document order wins. Free-text values stop at the end of the line; when
  they run into another ``LABEL:`` on the same line, the label words are
  trimmed off.
- ``FALLBACK_MATCHERS``: unanchored whole-text retries for fields the line
  scan missed.

All patterns are compiled once at import and never mutated.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeAlias

from .normalizers import (
    find_amount,
    find_date,
    infer_currency,
    normalize_whitespace,
    title_case,
    turkish_upper,
)

Extraction: TypeAlias = tuple[dict[str, Any], str]
"""Field values keyed by ``ParsedFields`` attribute, plus the trace string."""


@dataclass(frozen=True, slots=True)
class LineMatcher:
    field: str
    trace_key: str
    gate: re.Pattern[str] | None
    extract: Callable[[str], Extraction | None]

    def match(self, source: str) -> Extraction | None:
        if self.gate is not None and not self.gate.search(turkish_upper(source)):
            return None
        return self.extract(source)


@dataclass(frozen=True, slots=True)
class TextMatcher:
    field: str
    trace_key: str
    pattern: re.Pattern[str]
    normalize: Callable[[str], str | None]
    free_text: bool = False

    def match(self, upper_text: str) -> Extraction | None:
        m = self.pattern.search(upper_text)
        if m is None:
            return None
        raw = normalize_whitespace(m.group("value"))
        if self.free_text and _LABEL_COLON_RE.match(upper_text, m.end("value")):
            raw = _strip_trailing_label(raw)
        value = self.normalize(raw)
        if value is None:
            return None
        return {self.field: value}, raw


# ---------------------------------------------------------------------------
# Regex building blocks
# ---------------------------------------------------------------------------

_I = "[Iİ]"
_HSPACE = r"[^\S\n]"
# Separator between a keyword and its value: colons, dashes, spaces; never a newline.
_SEP = rf"(?:[:\-]|{_HSPACE})*"
_FREE_TEXT = rf"(?P<value>[\w-]+(?:{_HSPACE}+[\w-]+)*)"


def _keyword(alternatives: str) -> str:
    return rf"(?<!\w)(?:{alternatives})(?!\w)"


# Free text followed by ":" ran into the next field's label on the same line.
_LABEL_COLON_RE = re.compile(rf"{_HSPACE}*:")
_ASCII_FOLD = str.maketrans("İŞÇÜÖĞ", "ISCUOG")
_LABEL_WORDS = frozenset(
    "ALICI AMOUNT BRANCH BY CEK CIRO CURO DATE DUE EDEN ENDORSED HESAP IBAN ISSUE ISSUER"
    " KESIDE KESIDECI LEHDAR NO ODEME PAYEE PLACE SAHIBI SERI SUBE SUBESI TARIH TARIHI"
    " TUTAR VADE YERI".split()
)


def _strip_trailing_label(value: str) -> str:
    """Drop the label words in front of a trailing ``:``.

    Known label words are removed from the end; an unknown label still costs
    its last word.
    """

    tokens = value.split()
    kept = list(tokens)
    while kept and kept[-1].translate(_ASCII_FOLD) in _LABEL_WORDS:
        kept.pop()
    if len(kept) == len(tokens):
        kept.pop()
    return " ".join(kept)


BANK_LINE_GATE = re.compile(rf"BANKAS{_I}")
DUE_DATE_GATE = re.compile(r"VADE|ÖDEME|DUE")
ISSUE_DATE_GATE = re.compile(rf"KE[ŞS]{_I}DE|{_I}SSUE")

_BRANCH_SUFFIX_RE = re.compile(r"[ŞS]UBE.*")

IBAN_RE = re.compile(r"(?P<value>TR[\d \t]{10,36})")
ACCOUNT_RE = re.compile(rf"(?<!\w)HESAP{_HSPACE}*NO(?!\w){_SEP}(?P<value>\d[\d \t-]*)")
SERIAL_RE = re.compile(rf"(?<!\w)SER{_I}(?:{_HSPACE}*NO)?(?!\w){_SEP}(?P<value>[\w-]+)")
BRANCH_RE = re.compile(
    rf"(?:{_keyword(f'[ŞS]UBES{_I}|[ŞS]UBE|BRANCH')}|(?<!\w)ŞB\.){_SEP}{_FREE_TEXT}"
)
ISSUE_PLACE_RE = re.compile(
    _keyword(f"KE[ŞS]{_I}DE{_HSPACE}*YER{_I}|{_I}SSUE{_HSPACE}*PLACE") + _SEP + _FREE_TEXT
)
ENDORSE_RE = re.compile(
    _keyword(f"(?:C{_I}RO|CÜRO)(?:{_HSPACE}+EDEN)?|ENDORSE(?:D{_HSPACE}+BY|MENT|D)?")
    + _SEP
    + _FREE_TEXT
)
RECIPIENT_RE = re.compile(_keyword(f"LEHDAR|AL{_I}C{_I}|PAYEE") + _SEP + _FREE_TEXT)
ISSUER_RE = re.compile(
    _keyword(f"KE[ŞS]{_I}DEC{_I}?|ÇEK{_HSPACE}*SAH{_I}B{_I}|{_I}SSUER") + _SEP + _FREE_TEXT
)


# ---------------------------------------------------------------------------
# Extractors / normalizers
# ---------------------------------------------------------------------------


def _bank_name_from_line(line: str) -> Extraction | None:
    # turkish_upper preserves length, so the suffix offset applies to ``line``.
    m = _BRANCH_SUFFIX_RE.search(turkish_upper(line))
    cleaned = line[: m.start()] if m else line
    name = title_case(cleaned.strip())
    if name is None:
        return None
    return {"bank_name": name}, line


def _date_field(attr: str, *, trace_line: bool) -> Callable[[str], Extraction | None]:
    def _extract(source: str) -> Extraction | None:
        found = find_date(source)
        if found is None:
            return None
        iso, raw = found
        return {attr: iso}, (source if trace_line else raw)

    return _extract


def _amount_field(*, trace_line: bool) -> Callable[[str], Extraction | None]:
    def _extract(source: str) -> Extraction | None:
        found = find_amount(source)
        if found is None:
            return None
        values = {"amount": found.amount, "currency": infer_currency(source, found.marker)}
        return values, (source if trace_line else found.raw)

    return _extract


def _compact(raw: str) -> str | None:
    return re.sub(r"\s+", "", raw) or None


def _compact_iban(raw: str) -> str | None:
    iban = re.sub(r"\s+", "", raw)[:34]
    return iban if len(iban) > 2 else None


def _compact_account(raw: str) -> str | None:
    return re.sub(r"\s+", "", raw).rstrip("-") or None


# ---------------------------------------------------------------------------
# Tables (evaluation order is significant)
# ---------------------------------------------------------------------------

LINE_MATCHERS: tuple[LineMatcher, ...] = (
    LineMatcher("bank_name", "bankLine", BANK_LINE_GATE, _bank_name_from_line),
    LineMatcher("due_date", "dueDateLine", DUE_DATE_GATE, _date_field("due_date", trace_line=True)),
    LineMatcher(
        "issue_date", "issueDateLine", ISSUE_DATE_GATE, _date_field("issue_date", trace_line=True)
    ),
    LineMatcher("amount", "amountLine", None, _amount_field(trace_line=True)),
)

TEXT_MATCHERS: tuple[TextMatcher, ...] = (
    TextMatcher("iban", "iban", IBAN_RE, _compact_iban),
    TextMatcher("bank_account", "account", ACCOUNT_RE, _compact_account),
    TextMatcher("serial_number", "serialNumber", SERIAL_RE, _compact),
    TextMatcher("bank_branch", "branch", BRANCH_RE, title_case, free_text=True),
    TextMatcher("issue_place", "issuePlace", ISSUE_PLACE_RE, title_case, free_text=True),
    TextMatcher("endorsed_by", "endorsedBy", ENDORSE_RE, title_case, free_text=True),
    TextMatcher("recipient", "recipient", RECIPIENT_RE, title_case, free_text=True),
    TextMatcher("issuer", "issuer", ISSUER_RE, title_case, free_text=True),
)

FALLBACK_MATCHERS: tuple[LineMatcher, ...] = (
    LineMatcher("due_date", "genericDate", None, _date_field("due_date", trace_line=False)),
    LineMatcher("amount", "amountFallback", None, _amount_field(trace_line=False)),
)


__all__ = [
    "FALLBACK_MATCHERS",
    "LINE_MATCHERS",
    "TEXT_MATCHERS",
    "Extraction",
    "LineMatcher",
    "TextMatcher",
]
