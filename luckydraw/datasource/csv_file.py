from __future__ import annotations

import asyncio
import csv
import io
import pathlib
from typing import List, Sequence

from ..types import RosterEntry
from .base import RosterSource, build_entry


def parse_csv_text(text: str, skip_header: bool = True) -> List[RosterEntry]:
    """Parse ``number,user`` rows; the first row is a header unless told otherwise."""
    rows = list(csv.reader(io.StringIO(text)))
    if skip_header:
        rows = rows[1:]
    entries = []
    for line_no, row in enumerate(rows, start=2 if skip_header else 1):
        if not row or all(not cell.strip() for cell in row):
            continue
        if len(row) < 2:
            raise ValueError(f"Row {line_no}: expected number and user columns")
        try:
            entries.append(build_entry(row[0], row[1]))
        except ValueError as exc:
            raise ValueError(f"Row {line_no}: {exc}") from exc
    return entries


class CsvRosterSource(RosterSource):
    """Read roster entries from a CSV file on disk."""

    def __init__(self, path: str, skip_header: bool = True) -> None:
        self._path = pathlib.Path(path)
        self._skip_header = skip_header

    async def fetch_entries(self) -> Sequence[RosterEntry]:
        text = await asyncio.to_thread(self._read_text)
        return parse_csv_text(text, skip_header=self._skip_header)

    def _read_text(self) -> str:
        if not self._path.exists():
            raise RuntimeError(f"Roster file not found: {self._path}")
        # utf-8-sig strips the BOM spreadsheet exports tend to add
        return self._path.read_text(encoding="utf-8-sig")
