from __future__ import annotations

from datetime import date, datetime, time
from io import BytesIO
from typing import Any

import openpyxl
import xlrd

from ..detection import FormatKind
from .base import ContainerAdapter

# Compound document signature shared by legacy BIFF workbooks.
OLE2_MAGIC = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"


def cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return str(value)


def legacy_cell_value(cell: Any, datemode: int) -> Any:
    """Convert an xlrd cell to the Python value openpyxl would have produced."""
    if cell.ctype in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK):
        return None
    if cell.ctype == xlrd.XL_CELL_BOOLEAN:
        return bool(cell.value)
    if cell.ctype == xlrd.XL_CELL_DATE:
        return xlrd.xldate.xldate_as_datetime(cell.value, datemode)
    if cell.ctype == xlrd.XL_CELL_ERROR:
        return xlrd.error_text_from_code.get(cell.value, "#ERR")
    return cell.value


class SpreadsheetAdapter(ContainerAdapter):
    """Workbooks rendered sheet by sheet as tab-joined rows.

    OOXML workbooks go through openpyxl, legacy ``.xls`` files through xlrd.
    """

    kind = FormatKind.SPREADSHEET
    label = "spreadsheet"

    def extract(self, data: bytes) -> str:
        if data.startswith(OLE2_MAGIC):
            return self._extract_legacy(data)
        workbook = openpyxl.load_workbook(BytesIO(data), data_only=True)
        try:
            sheets = [
                (sheet_name, workbook[sheet_name].iter_rows(values_only=True)) for sheet_name in workbook.sheetnames
            ]
            return render_sheets(sheets)
        finally:
            workbook.close()

    def _extract_legacy(self, data: bytes) -> str:
        book = xlrd.open_workbook(file_contents=data)
        try:
            sheets = []
            for sheet in book.sheets():
                rows = [
                    tuple(legacy_cell_value(cell, book.datemode) for cell in sheet.row(index))
                    for index in range(sheet.nrows)
                ]
                sheets.append((sheet.name, rows))
            return render_sheets(sheets)
        finally:
            book.release_resources()


def render_sheets(sheets) -> str:
    parts: list[str] = []
    for sheet_name, rows in sheets:
        parts.append(f"--- Sheet: {sheet_name} ---")
        for row in rows:
            parts.append("\t".join(cell_text(value) for value in row))
        parts.append("")
    return "\n".join(parts)


__all__ = ["OLE2_MAGIC", "SpreadsheetAdapter", "cell_text", "legacy_cell_value", "render_sheets"]
