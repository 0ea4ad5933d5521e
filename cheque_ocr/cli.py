"""CLI for the ``cheque_ocr`` package.

Command handlers (``cmd_parse_text``, ``cmd_ingest``) return process exit
codes and write errors to stderr; the Typer app wires them to the console.
Environment variables (``CHEQUE_OCR_*``) are loaded from a local ``.env`` via
``python-dotenv`` before any command runs.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv

from .logging_setup import configure_logging


def _emit_json(payload: object) -> None:
    typer.echo(json.dumps(payload, ensure_ascii=False, indent=2))


def cmd_parse_text(text_path: str) -> int:
    """Run the field extractor over a plain-text OCR dump and print JSON.

    ``text_path`` of ``"-"`` reads from stdin. Output shape:
    ``{"fields": {...}, "matches": {...}}``.
    """

    from .extractor import analyze

    try:
        if text_path == "-":
            text = sys.stdin.read()
        else:
            text = Path(text_path).read_text(encoding="utf-8", errors="replace")
    except FileNotFoundError:
        print(f"Error: File not found: {text_path}", file=sys.stderr)
        return 1
    except PermissionError:
        print(f"Error: Permission denied: {text_path}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: Unexpected failure reading '{text_path}': {e}", file=sys.stderr)
        return 1

    parsed, matches = analyze(text)
    _emit_json({"fields": parsed.to_dict(), "matches": matches})
    return 0


def cmd_ingest(
    paths: list[str],
    *,
    concurrency: int | None = None,
    image_ocr: bool = True,
    aggregate_only: bool = False,
) -> int:
    """Recover text from each file, extract fields, and print the report as JSON.

    Returns ``1`` when no file could be read or when none of them produced any
    text; ``0`` otherwise.
    """

    from .errors import NoDocumentsError
    from .ingest import ingest_files
    from .ocr import TesseractEngine

    engine = TesseractEngine() if image_ocr else None
    try:
        report = ingest_files(paths, image_ocr=engine, concurrency=concurrency)
    except NoDocumentsError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if report.usable_count == 0:
        print("Error: no text could be recovered from the supplied files.", file=sys.stderr)
        return 1

    if aggregate_only:
        _emit_json(report.aggregated_fields)
    else:
        _emit_json(report.model_dump(mode="json"))
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help="Extract cheque/senet fields (amount, dates, bank, IBAN, parties) from OCR text.",
)


@app.command("parse-text")
def parse_text_cmd(
    text_path: str = typer.Option(
        "-", "--text-path", help="Plain-text OCR output to analyze ('-' for stdin)."
    ),
) -> None:
    code = cmd_parse_text(text_path)
    if code:
        raise typer.Exit(code)


@app.command("ingest")
def ingest_cmd(
    paths: Annotated[list[Path], typer.Argument(help="Uploaded files for one instrument.")],
    concurrency: int | None = typer.Option(
        None, min=1, help="Worker threads (falls back to CHEQUE_OCR_MAX_WORKERS)."
    ),
    image_ocr: bool = typer.Option(
        True, "--image-ocr/--no-image-ocr", help="Run Tesseract on images and scanned PDFs."
    ),
    aggregate_only: bool = typer.Option(
        False, help="Print only the fields aggregated across all files."
    ),
) -> None:
    code = cmd_ingest(
        [str(p) for p in paths],
        concurrency=concurrency,
        image_ocr=image_ocr,
        aggregate_only=aggregate_only,
    )
    if code:
        raise typer.Exit(code)


@app.callback()
def _root(
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        help="Level name or number; defaults to CHEQUE_OCR_LOG_LEVEL, then INFO.",
    ),
) -> None:
    """Load ``.env`` from the working directory and configure logging."""

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    try:
        configure_logging(log_level)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--log-level") from e


if __name__ == "__main__":  # pragma: no cover
    app()
