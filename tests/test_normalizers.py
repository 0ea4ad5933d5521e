import pytest

from cheque_ocr.models import Currency
from cheque_ocr.normalizers import (
    AmountMatch,
    find_amount,
    find_date,
    infer_currency,
    normalize_whitespace,
    title_case,
    turkish_lower,
    turkish_upper,
)


def test_turkish_upper_handles_dotted_and_dotless_i():
    assert turkish_upper("istanbul ılık") == "İSTANBUL ILIK"
    assert turkish_upper("şube çek") == "ŞUBE ÇEK"


def test_turkish_lower_handles_dotted_and_dotless_i():
    assert turkish_lower("İZMİR KARŞIYAKA") == "izmir karşıyaka"


def test_turkish_upper_preserves_length():
    s = "straße ıi"
    assert len(turkish_upper(s)) == len(s)


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("ZİRAAT BANKASI", "Ziraat Bankası"),
        ("  ahmet   yılmaz ", "Ahmet Yılmaz"),
        ("KARŞIYAKA ŞUBESİ", "Karşıyaka Şubesi"),
        ("", None),
        ("   ", None),
        (None, None),
    ],
)
def test_title_case(raw, expected):
    assert title_case(raw) == expected


def test_normalize_whitespace_collapses_runs():
    assert normalize_whitespace("  a \t b\n\nc  ") == "a b c"


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("15.03.2025", "2025-03-15"),
        ("5/6/2025", "2025-06-05"),
        ("01-12-24", "2024-12-01"),
        ("7 MART 2025", "2025-03-07"),
        ("3 subat 2026", "2026-02-03"),
        ("12 ekim 2025", "2025-10-12"),
        ("1 kasım 2025", "2025-11-01"),
        ("20 Ağustos 2025", "2025-08-20"),
        ("Vade: 9 nisan 2025,", "2025-04-09"),
    ],
)
def test_find_date(raw, expected):
    found = find_date(raw)
    assert found is not None
    assert found[0] == expected


@pytest.mark.parametrize("raw", ["31.02.2025", "15.13.2025", "7 FOO 2025", "no date here", ""])
def test_find_date_rejects_invalid(raw):
    assert find_date(raw) is None


def test_find_date_prefers_numeric_form_and_returns_raw():
    assert find_date("7 MART 2025 / 01.04.2025") == ("2025-04-01", "01.04.2025")


def test_find_date_skips_invalid_then_takes_next():
    assert find_date("31.02.2025 or 28.02.2025") == ("2025-02-28", "28.02.2025")


@pytest.mark.parametrize(
    "raw,amount,marker",
    [
        ("12.500,75 TL", 12500.75, "TL"),
        ("₺ 1.000", 1000.0, "₺"),
        ("$250,50", 250.5, "$"),
        ("TRY 3.000", 3000.0, "TRY"),
        ("5000 tl", 5000.0, "TL"),
        ("99 USD", 99.0, "USD"),
        ("5 TL", 5.0, "TL"),
    ],
)
def test_find_amount(raw, amount, marker):
    found = find_amount(raw)
    assert found is not None
    assert (found.amount, found.marker) == (amount, marker)


@pytest.mark.parametrize("raw", ["12.500,75", "0 TL", "TUTAR TL", "ATL 50", ""])
def test_find_amount_rejects(raw):
    assert find_amount(raw) is None


def test_find_amount_returns_raw_literal():
    assert find_amount("TUTAR: 12.500,75 TL") == AmountMatch(12500.75, "12.500,75", "TL")


@pytest.mark.parametrize(
    "source,marker,expected",
    [
        ("$ 100", "$", Currency.USD),
        ("100 USD", "USD", Currency.USD),
        ("100 TL", "TL", Currency.TRY),
        ("₺ 100", "₺", Currency.TRY),
        # A "$" anywhere on the line wins over the marker next to the number.
        ("100 TL ($3)", "TL", Currency.USD),
        ("100 TL", None, Currency.TRY),
    ],
)
def test_infer_currency(source, marker, expected):
    assert infer_currency(source, marker) is expected
