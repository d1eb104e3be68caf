from __future__ import annotations

import csv
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from openpyxl import load_workbook
from openpyxl.utils.datetime import from_excel

from .amounts import parse_amount
from .errors import MissingPrecondition, UnsupportedSource
from .models import CandidateMatch, ParsedPayment
from .parsing import is_court_payment

log = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = {".csv", ".tsv", ".txt", ".xlsx"}
DATE_FORMATS = ("%d/%m/%Y", "%d.%m.%Y", "%Y-%m-%d")

DATE_COLUMN = 0
REFERENCE_COLUMN = 4
DESCRIPTION_COLUMN = 5
AMOUNT_COLUMN = 6


@dataclass
class StatementBatch:
    """Payments ready for the pipeline plus what was left out on the way."""

    payments: List[ParsedPayment] = field(default_factory=list)
    skipped: int = 0
    invalid: int = 0


def parse_date(value: object) -> Optional[date]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, (int, float)):
        try:
            return from_excel(value).date()
        except (ValueError, OverflowError, TypeError):
            return None
    text = str(value).strip()
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def _cell(row: Sequence[object], index: int) -> object:
    return row[index] if index < len(row) else None


def _text(value: object) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_spreadsheet_rows(rows: Iterable[Sequence[object]], header_rows: int = 12) -> StatementBatch:
    """Bank export rows: date, ..., reference, description, amount."""
    batch = StatementBatch()
    for index, row in enumerate(rows):
        if index < header_rows:
            continue
        description = _cell(row, DESCRIPTION_COLUMN)
        if not is_court_payment(description):
            batch.skipped += 1
            continue
        amount = parse_amount(_cell(row, AMOUNT_COLUMN))
        if amount is None or amount <= 0:
            batch.skipped += 1
            continue
        payment_date = parse_date(_cell(row, DATE_COLUMN))
        if payment_date is None:
            log.warning("Row %d has no usable date: %r", index + 1, _cell(row, DATE_COLUMN))
            batch.invalid += 1
            continue
        batch.payments.append(
            ParsedPayment(
                payment_date=payment_date,
                description=description.strip(),
                total_amount=amount,
                reference=_text(_cell(row, REFERENCE_COLUMN)),
            )
        )
    return batch


def parse_statement_lines(text: str) -> StatementBatch:
    """Pasted statement lines: ``DD/MM/YYYY<TAB>[reference<TAB>]description[<TAB>amount]``."""
    batch = StatementBatch()
    for number, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            continue
        fields = [part.strip() for part in line.split("\t")]
        payment_date = parse_date(fields[0])
        rest = fields[1:]
        amount = None
        if len(rest) >= 2 and parse_amount(rest[-1]) is not None:
            amount = parse_amount(rest.pop())
        description = rest[-1] if rest else ""
        reference = rest[0] if len(rest) >= 2 else None
        if not is_court_payment(description):
            batch.skipped += 1
            continue
        if payment_date is None:
            log.warning("Line %d has no usable date: %r", number, fields[0])
            batch.invalid += 1
            continue
        batch.payments.append(
            ParsedPayment(
                payment_date=payment_date,
                description=description,
                total_amount=amount,
                reference=reference,
            )
        )
    return batch


def parse_job_table(text: str) -> StatementBatch:
    """Markdown table rows ``| date | court | file number | amount |`` with real dates."""
    batch = StatementBatch()
    rows = [line.strip() for line in text.splitlines() if line.strip().startswith("|") and "---" not in line]
    for row in rows[1:]:
        parts = [part.strip() for part in row.strip("|").split("|")]
        if len(parts) < 4:
            batch.invalid += 1
            continue
        job_date = parse_date(parts[0])
        court_name, file_number = parts[1], parts[2]
        amount = parse_amount(parts[3])
        if job_date is None or not court_name or not file_number or amount is None or amount <= 0:
            log.warning("Unusable table row: %s", row)
            batch.invalid += 1
            continue
        batch.payments.append(
            ParsedPayment(
                payment_date=job_date,
                description=row,
                total_amount=amount,
                received_date=job_date,
                scheduled_date=job_date,
                candidate=CandidateMatch(court_name=court_name, file_number=file_number),
            )
        )
    return batch


def _require(path: Path) -> Path:
    path = Path(path)
    if not path.exists():
        raise MissingPrecondition(f"Source file not found: {path}")
    return path


def read_statement(path: Path, header_rows: int = 12) -> StatementBatch:
    path = _require(path)
    ext = path.suffix.lower()
    if ext not in SUPPORTED_EXTENSIONS:
        raise UnsupportedSource(f"Unsupported file extension: {ext or path.name}")
    if ext == ".xlsx":
        workbook = load_workbook(path, read_only=True, data_only=True)
        try:
            rows = list(workbook.active.iter_rows(values_only=True))
        finally:
            workbook.close()
        batch = parse_spreadsheet_rows(rows, header_rows)
    elif ext == ".csv":
        with path.open(newline="", encoding="utf-8-sig") as handle:
            batch = parse_spreadsheet_rows(list(csv.reader(handle)), header_rows)
    else:
        batch = parse_statement_lines(path.read_text(encoding="utf-8"))
    log.info(
        "Read %s: %d court payments, %d skipped, %d invalid",
        path.name,
        len(batch.payments),
        batch.skipped,
        batch.invalid,
    )
    return batch


def read_job_table(path: Path) -> StatementBatch:
    return parse_job_table(_require(path).read_text(encoding="utf-8"))


__all__ = [
    "StatementBatch",
    "SUPPORTED_EXTENSIONS",
    "parse_date",
    "parse_spreadsheet_rows",
    "parse_statement_lines",
    "parse_job_table",
    "read_statement",
    "read_job_table",
]
