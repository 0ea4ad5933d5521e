"""Normalization helpers for OCR'd cheque text.

Covers Turkish-aware casing, whitespace cleanup, date parsing (numeric
``DD.MM.YYYY`` and long-form ``7 MART 2025``) and Turkish-formatted amounts
(``12.500,75``). Every parser returns ``None`` instead of raising when the
candidate cannot be turned into a valid value.
"""

from __future__ import annotations

import math
import re
from datetime import date
from typing import NamedTuple

from .models import Currency

# ---------------------------------------------------------------------------
# Casing
# ---------------------------------------------------------------------------

_UPPER_MAP = {"i": "İ", "ı": "I"}
_LOWER_MAP = {"İ": "i", "I": "ı"}


def _map_chars(text: str, table: dict[str, str], fallback: str) -> str:
    out: list[str] = []
    for c in text:
        mapped = table.get(c)
        if mapped is None:
            conv = c.upper() if fallback == "upper" else c.lower()
            # Keep offsets stable: "ß".upper() == "SS" and friends stay as-is.
            mapped = conv if len(conv) == 1 else c
        out.append(mapped)
    return "".join(out)


def turkish_upper(text: str) -> str:
    """Upper-case with Turkish dotted/dotless i rules; output has the input's length."""

    return _map_chars(text, _UPPER_MAP, "upper")


def turkish_lower(text: str) -> str:
    return _map_chars(text, _LOWER_MAP, "lower")


def normalize_whitespace(value: str) -> str:
    return re.sub(r"\s+", " ", value).strip()


def title_case(value: str | None) -> str | None:
    """Lower-case, then capitalize the first letter of each whitespace token.

    ``"ZİRAAT BANKASI"`` -> ``"Ziraat Bankası"``. Blank input gives ``None``.
    """

    if not value:
        return None
    tokens = turkish_lower(value).split()
    if not tokens:
        return None
    return " ".join(turkish_upper(t[0]) + t[1:] for t in tokens)


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------

TURKISH_MONTHS: dict[str, str] = {
    "OCAK": "01",
    "ŞUBAT": "02",
    "SUBAT": "02",
    "MART": "03",
    "NİSAN": "04",
    "NISAN": "04",
    "MAYIS": "05",
    "HAZİRAN": "06",
    "HAZIRAN": "06",
    "TEMMUZ": "07",
    "AĞUSTOS": "08",
    "AGUSTOS": "08",
    "EYLÜL": "09",
    "EYLUL": "09",
    "EKİM": "10",
    "EKIM": "10",
    "KASIM": "11",
    "ARALIK": "12",
}

_YEAR = r"(\d{4}|\d{2})(?!\d)"

# Punctuation around dates (":", ",", "*") is noise for both date patterns.
_DATE_NOISE_RE = re.compile(r"[^\w\s./-]")

_NUMERIC_DATE_RE = re.compile(r"(?<!\d)(\d{1,2})[./-](\d{1,2})[./-]" + _YEAR)


def _month_alternatives() -> str:
    # Longest first so "NİSAN" is not shadowed by a shorter prefix; ASCII "I"
    # also accepts the dotted form produced by upper-casing a lowercase "i".
    names = sorted(TURKISH_MONTHS, key=len, reverse=True)
    return "|".join(n.replace("I", "[Iİ]") for n in names)


_LONG_DATE_RE = re.compile(r"(?<!\d)(\d{1,2})\s+(" + _month_alternatives() + r")\s+" + _YEAR)


def _expand_year(year: str) -> str:
    return f"20{year}" if len(year) == 2 else year


def _iso_date(day: str, month: str, year: str) -> str | None:
    try:
        return date(int(_expand_year(year)), int(month), int(day)).isoformat()
    except ValueError:
        return None


def _lookup_month(name: str) -> str | None:
    return TURKISH_MONTHS.get(name) or TURKISH_MONTHS.get(name.replace("İ", "I"))


def find_date(text: str) -> tuple[str, str] | None:
    """Return ``(iso_date, raw_match)`` for the first valid date in ``text``.

    Numeric day-first dates are tried before long-form Turkish dates. Matches
    that are not real calendar days (``31.02.2025``) are skipped.
    """

    cleaned = turkish_upper(_DATE_NOISE_RE.sub(" ", text))

    for m in _NUMERIC_DATE_RE.finditer(cleaned):
        iso = _iso_date(m.group(1), m.group(2), m.group(3))
        if iso is not None:
            return iso, m.group(0)

    for m in _LONG_DATE_RE.finditer(cleaned):
        month = _lookup_month(m.group(2))
        if month is None:
            continue
        iso = _iso_date(m.group(1), month, m.group(3))
        if iso is not None:
            return iso, m.group(0)

    return None


# ---------------------------------------------------------------------------
# Amounts
# ---------------------------------------------------------------------------

_LETTERS = "A-ZÇĞİÖŞÜ"
_NUMBER = r"\d(?:[\d.,]*\d)?"
_USD_MARKERS = frozenset({"$", "USD"})


def _marker(group: str) -> str:
    return rf"(?P<{group}>₺|\$|(?<![{_LETTERS}])(?:TRY|TL|USD)(?![{_LETTERS}]))"


# A numeric literal counts as an amount only next to a currency marker.
_AMOUNT_RE = re.compile(
    rf"{_marker('lead_cur')}\s*(?P<lead>{_NUMBER})"
    rf"|(?P<trail>{_NUMBER})\s*{_marker('trail_cur')}"
)


def _to_amount(raw: str) -> float | None:
    # Turkish format: "." groups thousands, "," separates decimals.
    s = raw.replace(".", "").replace(",", ".")
    try:
        val = float(s)
    except ValueError:
        return None
    if not math.isfinite(val) or val <= 0:
        return None
    return val


class AmountMatch(NamedTuple):
    amount: float
    raw: str
    marker: str


def find_amount(text: str) -> AmountMatch | None:
    """Return the first currency-marked amount with its literal and marker."""

    for m in _AMOUNT_RE.finditer(turkish_upper(text)):
        raw = m.group("lead") or m.group("trail")
        val = _to_amount(raw)
        if val is not None:
            return AmountMatch(val, raw, m.group("lead_cur") or m.group("trail_cur"))
    return None


def infer_currency(source: str, marker: str | None = None) -> Currency:
    """``USD`` for a ``$``/``USD`` marker or any ``$`` in ``source``, else ``TRY``."""

    if marker in _USD_MARKERS or "$" in source:
        return Currency.USD
    return Currency.TRY


__all__ = [
    "TURKISH_MONTHS",
    "AmountMatch",
    "find_amount",
    "find_date",
    "infer_currency",
    "normalize_whitespace",
    "title_case",
    "turkish_lower",
    "turkish_upper",
]
