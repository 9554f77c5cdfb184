from __future__ import annotations

import datetime as dt
import secrets
from typing import Callable, Iterator, List, Optional

from .types import WinnerRecord


def _utc_now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class WinnersLog:
    """In-memory history of settled draws, newest first."""

    def __init__(self, clock: Optional[Callable[[], dt.datetime]] = None) -> None:
        self._clock = clock or _utc_now
        self._records: List[WinnerRecord] = []

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[WinnerRecord]:
        return iter(list(self._records))

    def record(self, value: str, owner: str) -> WinnerRecord:
        winner = WinnerRecord(
            id=secrets.token_hex(8),
            value=value,
            owner=owner,
            completed_at=self._clock(),
        )
        self._records.insert(0, winner)
        return winner

    def clear(self) -> None:
        self._records.clear()
