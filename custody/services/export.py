"""Spreadsheet export of ledger reports."""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal
from io import BytesIO
from typing import Any, Protocol, runtime_checkable

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter

from custody.exceptions import CollaboratorError

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# Excel limits sheet titles to 31 characters.
_MAX_SHEET_TITLE = 31


@runtime_checkable
class ReportExporter(Protocol):
    """Interface for turning report rows into a downloadable file."""

    def export(self, rows: Sequence[Sequence[Any]], sheet_name: str) -> bytes:
        """Render ``rows`` (first row is the header) and return the file contents."""
        ...


class XlsxReportExporter:
    """Writes rows to a single-sheet workbook. The last row is styled as a total when ``total_row`` is set."""

    def __init__(self, *, total_row: bool = True) -> None:
        self.total_row = total_row
        self.header_font = Font(bold=True)
        self.header_fill = PatternFill(start_color="D9E1F2", end_color="D9E1F2", fill_type="solid")
        self.total_font = Font(bold=True)

    def export(self, rows: Sequence[Sequence[Any]], sheet_name: str) -> bytes:
        wb = Workbook()
        ws = wb.active
        ws.title = sheet_name[:_MAX_SHEET_TITLE] or "Report"

        for row in rows:
            ws.append([_cell_value(v) for v in row])

        if rows:
            for cell in ws[1]:
                cell.font = self.header_font
                cell.fill = self.header_fill
            if self.total_row and len(rows) > 1:
                for cell in ws[ws.max_row]:
                    cell.font = self.total_font

        for idx, column in enumerate(ws.columns, start=1):
            width = max((len(str(c.value)) for c in column if c.value is not None), default=8)
            ws.column_dimensions[get_column_letter(idx)].width = min(width + 2, 60)

        buffer = BytesIO()
        try:
            wb.save(buffer)
        except (OSError, ValueError) as exc:
            raise CollaboratorError(f"Failed to render spreadsheet: {exc}") from exc
        return buffer.getvalue()


def _cell_value(value: Any) -> Any:
    if isinstance(value, Decimal):
        return float(value)
    return value
