"""Encode a string table as an xlsx workbook or a CSV file.

Pure functions, no store access. Cells are written as the strings the
advisor produced; no numeric or date conversion is attempted.
"""

import csv
import io
from dataclasses import dataclass
from datetime import UTC, datetime

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE

from src.errors.domain import UnsupportedFormatError
from src.services.output_extractor import TableSpec

XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
CSV_MIME = "text/csv"


@dataclass(frozen=True)
class EncodedFile:
    filename: str
    mime: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


def _report_filename(extension: str) -> str:
    return f"report-{datetime.now(UTC).strftime('%Y%m%d-%H%M%S')}.{extension}"


def _xlsx_cell(value: str) -> str:
    # openpyxl rejects control characters in cell values
    return ILLEGAL_CHARACTERS_RE.sub("", value)


def _encode_xlsx(table: TableSpec) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.append([_xlsx_cell(h) for h in table.headers])
    for row in table.rows:
        ws.append([_xlsx_cell(v) for v in row])
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def _encode_csv(table: TableSpec) -> bytes:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(table.headers)
    writer.writerows(table.rows)
    return buffer.getvalue().encode("utf-8")


def encode_table(output_format: str, table: TableSpec) -> EncodedFile:
    """Render table in the requested format.

    Args:
        output_format: 'xlsx' or 'csv' (case-insensitive).
        table: Headers and string rows.

    Returns:
        EncodedFile with a timestamped report filename and MIME type.

    Raises:
        UnsupportedFormatError: For any other format.
    """
    fmt = output_format.strip().lower()
    if fmt == "xlsx":
        return EncodedFile(_report_filename("xlsx"), XLSX_MIME, _encode_xlsx(table))
    if fmt == "csv":
        return EncodedFile(_report_filename("csv"), CSV_MIME, _encode_csv(table))
    raise UnsupportedFormatError(output_format)
