from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

from .config import DrawSettings
from .types import RosterEntry


class Roster:
    """Ordered draw-eligible entries plus the subset not drawn yet."""

    def __init__(self, entries: Iterable[RosterEntry] = ()) -> None:
        self._entries: Tuple[RosterEntry, ...] = tuple(entries)
        self._remaining: List[RosterEntry] = list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> Tuple[RosterEntry, ...]:
        return self._entries

    @property
    def remaining(self) -> Tuple[RosterEntry, ...]:
        return tuple(self._remaining)

    @property
    def remaining_count(self) -> int:
        return len(self._remaining)

    def take(self, index: int) -> RosterEntry:
        """Remove and return the remaining entry at ``index``."""
        return self._remaining.pop(index)

    def duplicate_numbers(self) -> List[int]:
        seen = set()
        duplicates = []
        for entry in self._entries:
            if entry.number in seen and entry.number not in duplicates:
                duplicates.append(entry.number)
            seen.add(entry.number)
        return duplicates


def detect_digit_count(entries: Sequence[RosterEntry]) -> int:
    if not entries:
        raise ValueError("cannot detect digit count of an empty roster")
    return len(str(max(entry.number for entry in entries)))


def settings_for_roster(settings: DrawSettings, entries: Sequence[RosterEntry]) -> DrawSettings:
    """Widen or narrow the range so it matches the roster's largest number."""
    if not entries:
        return settings
    digits = detect_digit_count(entries)
    return settings.copy(digit_count=digits, min_value=0, max_value=10 ** digits - 1)
