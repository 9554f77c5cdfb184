from __future__ import annotations

import asyncio
import io
import pathlib
import zipfile
from typing import Iterable, List, Sequence

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from ..types import RosterEntry
from .base import RosterSource, build_entry


def _rows_to_entries(rows: Iterable[tuple], skip_header: bool) -> List[RosterEntry]:
    entries = []
    for line_no, row in enumerate(rows, start=1):
        if skip_header and line_no == 1:
            continue
        cells = [cell for cell in row if cell is not None and str(cell).strip() != ""]
        if not cells:
            continue
        if len(row) < 2:
            raise ValueError(f"Row {line_no}: expected number and user columns")
        try:
            entries.append(build_entry(row[0], row[1]))
        except ValueError as exc:
            raise ValueError(f"Row {line_no}: {exc}") from exc
    return entries


def parse_xlsx_bytes(data: bytes, skip_header: bool = True) -> List[RosterEntry]:
    """Parse ``number,user`` rows from the first sheet of an xlsx workbook."""
    try:
        workbook = load_workbook(io.BytesIO(data), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError) as exc:
        raise ValueError(f"Unreadable xlsx workbook: {exc}") from exc
    try:
        sheet = workbook.worksheets[0]
        return _rows_to_entries(sheet.iter_rows(max_col=2, values_only=True), skip_header)
    finally:
        workbook.close()


class XlsxRosterSource(RosterSource):
    """Read roster entries from the first sheet of an xlsx file."""

    def __init__(self, path: str, skip_header: bool = True) -> None:
        self._path = pathlib.Path(path)
        self._skip_header = skip_header

    async def fetch_entries(self) -> Sequence[RosterEntry]:
        data = await asyncio.to_thread(self._read_bytes)
        return parse_xlsx_bytes(data, skip_header=self._skip_header)

    def _read_bytes(self) -> bytes:
        if not self._path.exists():
            raise RuntimeError(f"Roster file not found: {self._path}")
        return self._path.read_bytes()
