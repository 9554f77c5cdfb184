from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Optional


class SessionState(IntEnum):
    IDLE = 0
    REVEALING = 1
    SETTLING = 2

    @property
    def running(self) -> bool:
        return self is not SessionState.IDLE


class DrawOutcome(str, Enum):
    ACCEPTED = "accepted"
    ALREADY_RUNNING = "already_running"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class RosterEntry:
    number: int
    owner: str

    def __post_init__(self) -> None:
        if isinstance(self.number, bool) or not isinstance(self.number, int):
            raise ValueError(f"Invalid roster number: {self.number!r}")
        if self.number < 0:
            raise ValueError(f"Roster number must not be negative: {self.number}")


@dataclass(frozen=True)
class DrawRange:
    digit_count: int
    min_value: int
    max_value: int

    @property
    def total(self) -> int:
        return self.max_value - self.min_value + 1

    def format(self, number: int) -> str:
        return str(number).zfill(self.digit_count)


@dataclass(frozen=True)
class DigitSlot:
    index: int
    value: int = 0
    stopped: bool = False


@dataclass(frozen=True)
class DrawResult:
    value: str
    owner: Optional[str] = None


@dataclass(frozen=True)
class WinnerRecord:
    id: str
    value: str
    owner: str
    completed_at: dt.datetime

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "value": self.value,
            "owner": self.owner,
            "completed_at": self.completed_at.isoformat(),
        }
