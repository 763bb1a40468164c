"""Read listing rows from an .xlsx workbook in formula-preserving mode.

Cells are read without evaluating formulas so that ``=HYPERLINK(...)``
cells keep their link target instead of collapsing to the visible label.
"""

from __future__ import annotations

import io
from pathlib import Path
from typing import Any, Iterator
from xml.etree.ElementTree import ParseError
from zipfile import BadZipFile

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException
from openpyxl.worksheet.formula import ArrayFormula

from rural_explorer.common.errors import WorkbookError
from rural_explorer.common.models import RawRow


def _header_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _cell_value(value: Any) -> Any:
    if isinstance(value, ArrayFormula):
        return value.text
    return value


def _unique_headers(header_row: tuple) -> list[str | None]:
    """Keep the first column under each header; later repeats get _1, _2, ..."""
    seen: dict[str, int] = {}
    headers: list[str | None] = []
    for value in header_row:
        header = _header_text(value)
        if header is not None:
            count = seen.get(header, 0)
            seen[header] = count + 1
            if count:
                header = f"{header}_{count}"
        headers.append(header)
    return headers


def _iter_sheet_rows(values: Iterator[tuple]) -> Iterator[RawRow]:
    try:
        header_row = next(values)
    except StopIteration:
        return
    headers = _unique_headers(header_row)

    for values_row in values:
        row: dict[str, Any] = {}
        for header, value in zip(headers, values_row):
            if header is None or value is None:
                continue
            row[header] = _cell_value(value)
        if row:
            yield row


def read_rows(source: Path | bytes) -> list[RawRow]:
    """Return the first worksheet as header-keyed rows, blank rows dropped."""
    handle = io.BytesIO(source) if isinstance(source, (bytes, bytearray)) else source
    try:
        workbook = load_workbook(handle, read_only=True, data_only=False)
    except (InvalidFileException, BadZipFile, ParseError, SyntaxError, KeyError, OSError) as exc:
        raise WorkbookError(f"Unreadable workbook: {exc}") from exc

    try:
        if not workbook.sheetnames:
            raise WorkbookError("Workbook has no worksheets")
        sheet = workbook[workbook.sheetnames[0]]
        # Sheet XML is parsed lazily; lxml parse errors subclass SyntaxError too.
        try:
            return list(_iter_sheet_rows(sheet.iter_rows(values_only=True)))
        except (ParseError, SyntaxError, BadZipFile, KeyError, ValueError, OSError) as exc:
            raise WorkbookError(f"Unreadable worksheet: {exc}") from exc
    finally:
        workbook.close()
