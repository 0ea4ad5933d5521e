import pytest
from PIL import Image

from cheque_ocr import NoDocumentsError, ParsedFields, aggregate_fields, ingest_files
from cheque_ocr.errors import ChequeOcrError
from cheque_ocr.ingest import _resolve_concurrency
from cheque_ocr.models import Currency, OcrSource


def test_aggregate_fields_first_non_empty_value_wins():
    merged = aggregate_fields(
        [
            ParsedFields(amount=100.0, currency=Currency.TRY),
            ParsedFields(amount=999.0, iban="TR001122334455"),
            ParsedFields(iban="TR999", issuer="Ahmet Yılmaz"),
        ]
    )
    assert merged == ParsedFields(
        amount=100.0, currency=Currency.TRY, iban="TR001122334455", issuer="Ahmet Yılmaz"
    )


def test_aggregate_fields_of_nothing_is_empty():
    assert aggregate_fields([]).is_empty


def test_ingest_files_reports_each_document_in_input_order(tmp_path):
    front = tmp_path / "front.txt"
    front.write_text("ZİRAAT BANKASI\nVADE: 15.03.2025\n", encoding="utf-8")
    back = tmp_path / "back.txt"
    back.write_text("TUTAR: 12.500,75 TL\nVADE: 01.01.2030\n", encoding="utf-8")

    report = ingest_files([front, back], concurrency=2)

    assert [d.file_name for d in report.documents] == ["front.txt", "back.txt"]
    assert all(d.ocr_source is OcrSource.TEXT for d in report.documents)
    assert report.documents[0].parsed_fields == {
        "dueDate": "2025-03-15",
        "bankName": "Ziraat Bankası",
    }
    assert report.documents[1].parser_matches["amountLine"] == "TUTAR: 12.500,75 TL"
    assert report.aggregated_fields == {
        "amount": 12500.75,
        "currency": "TRY",
        "dueDate": "2025-03-15",
        "bankName": "Ziraat Bankası",
    }
    assert report.usable_count == 2


def test_ingest_files_skips_missing_and_empty_files(tmp_path):
    empty = tmp_path / "empty.txt"
    empty.write_text("", encoding="utf-8")
    good = tmp_path / "good.txt"
    good.write_text("IBAN: TR33 0006 1005 1978 6457 8413 26", encoding="utf-8")

    report = ingest_files([tmp_path / "missing.txt", empty, good])

    assert [d.file_name for d in report.documents] == ["good.txt"]
    assert report.aggregated_fields == {"iban": "TR330006100519786457841326"}


def test_ingest_files_counts_unreadable_documents(tmp_path):
    img = tmp_path / "front.png"
    img.write_bytes(b"\x89PNG not really")

    report = ingest_files([img])

    assert report.usable_count == 0
    assert report.documents[0].ocr_source is OcrSource.NONE
    assert report.aggregated_fields == {}


def test_ingest_files_requires_a_usable_file(tmp_path):
    empty = tmp_path / "empty.txt"
    empty.write_text("", encoding="utf-8")

    with pytest.raises(NoDocumentsError) as ei:
        ingest_files([empty, tmp_path / "missing.pdf"])

    assert isinstance(ei.value, ChequeOcrError)
    assert isinstance(ei.value, ValueError)


def test_report_serializes_to_json(tmp_path):
    p = tmp_path / "cek.txt"
    p.write_text("TUTAR: $50", encoding="utf-8")

    dumped = ingest_files([p]).model_dump(mode="json")

    doc = dumped["documents"][0]
    assert doc["ocr_source"] == "text"
    assert doc["parsed_fields"] == {"amount": 50.0, "currency": "USD"}
    assert dumped["usable_count"] == 1


@pytest.mark.parametrize(
    "n_files,requested,env,expected",
    [
        (1, None, None, 1),
        (10, None, None, 4),
        (10, 2, None, 2),
        (3, 8, None, 3),
        (100, 50, None, 16),
        (10, None, "6", 6),
        (10, 3, "6", 3),
        (10, None, "abc", 4),
        (10, None, "0", 4),
        (0, None, None, 1),
    ],
)
def test_resolve_concurrency(monkeypatch, n_files, requested, env, expected):
    if env is not None:
        monkeypatch.setenv("CHEQUE_OCR_MAX_WORKERS", env)
    assert _resolve_concurrency(n_files, requested) == expected


class _FakeEngine:
    def recognize(self, image):
        return "TUTAR: 750 TL", 0.9


def test_uploader_content_type_overrides_extension(tmp_path):
    upload = tmp_path / "upload.bin"
    Image.new("RGB", (8, 8), "white").save(upload, format="PNG")
    note = tmp_path / "note.txt"
    note.write_text("LEHDAR: MEHMET DEMİR", encoding="utf-8")

    report = ingest_files(
        [upload, note], content_types=["image/png", None], image_ocr=_FakeEngine()
    )

    first, second = report.documents
    assert first.content_type == "image/png"
    assert first.ocr_source is OcrSource.IMAGE
    assert first.ocr_confidence == 0.9
    assert second.content_type is None
    assert second.ocr_source is OcrSource.TEXT
    assert report.aggregated_fields == {
        "amount": 750.0,
        "currency": "TRY",
        "recipient": "Mehmet Demir",
    }


def test_content_types_must_line_up_with_paths(tmp_path):
    p = tmp_path / "cek.txt"
    p.write_text("VADE: 15.03.2025", encoding="utf-8")

    with pytest.raises(ValueError, match="2 content types for 1 files"):
        ingest_files([p], content_types=["text/plain", "image/png"])
