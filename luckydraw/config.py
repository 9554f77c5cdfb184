from __future__ import annotations

import os
import pathlib
from dataclasses import dataclass, replace
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv

from .types import DrawRange

DEFAULT_OWNER = "Random Guest"


def _int_from_env(value: Optional[str], default: int) -> int:
    if value is None or value == "":
        return default
    return int(value)


@dataclass(frozen=True)
class RevealTiming:
    """Cadence of the digit reveal, in milliseconds."""

    tick_interval_ms: int = 50
    generating_time_ms: int = 1500
    digit_stop_delay_ms: int = 300
    settle_delay_ms: int = 200

    def __post_init__(self) -> None:
        if self.tick_interval_ms <= 0:
            raise ValueError("tick_interval_ms must be positive")
        for name in ("generating_time_ms", "digit_stop_delay_ms", "settle_delay_ms"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative")

    def stop_offset(self, index: int, slot_count: int) -> int:
        """Elapsed time at which slot ``index`` stops, counted from draw start."""
        return self.generating_time_ms + (slot_count - 1 - index) * self.digit_stop_delay_ms


@dataclass(frozen=True)
class DrawSettings:
    digit_count: int = 3
    min_value: int = 0
    max_value: int = 999
    timing: RevealTiming = RevealTiming()
    default_owner: str = DEFAULT_OWNER

    def __post_init__(self) -> None:
        if self.digit_count < 1:
            raise ValueError("digit_count must be at least 1")
        if self.min_value < 0:
            raise ValueError("min_value must not be negative")
        if self.max_value < self.min_value:
            raise ValueError("max_value must be greater than or equal to min_value")

    @property
    def draw_range(self) -> DrawRange:
        return DrawRange(
            digit_count=self.digit_count,
            min_value=self.min_value,
            max_value=self.max_value,
        )

    def copy(self, **updates) -> "DrawSettings":
        return replace(self, **updates)

    def with_timing(self, **updates) -> "DrawSettings":
        return replace(self, timing=replace(self.timing, **updates))


@dataclass(frozen=True)
class RosterSourceSettings:
    path: str = ""
    url: str = ""
    number_key: str = "number"
    owner_key: str = "user"
    timeout_seconds: int = 10


@dataclass(frozen=True)
class EngineSettings:
    draw: DrawSettings = DrawSettings()
    roster: RosterSourceSettings = RosterSourceSettings()


def draw_settings_from_environment() -> DrawSettings:
    defaults = DrawSettings()
    timing = RevealTiming(
        tick_interval_ms=_int_from_env(
            os.getenv("REVEAL__TICK_INTERVAL_MS"), defaults.timing.tick_interval_ms
        ),
        generating_time_ms=_int_from_env(
            os.getenv("REVEAL__GENERATING_TIME_MS"), defaults.timing.generating_time_ms
        ),
        digit_stop_delay_ms=_int_from_env(
            os.getenv("REVEAL__DIGIT_STOP_DELAY_MS"), defaults.timing.digit_stop_delay_ms
        ),
        settle_delay_ms=_int_from_env(
            os.getenv("REVEAL__SETTLE_DELAY_MS"), defaults.timing.settle_delay_ms
        ),
    )
    return DrawSettings(
        digit_count=_int_from_env(os.getenv("DRAW__DIGIT_COUNT"), defaults.digit_count),
        min_value=_int_from_env(os.getenv("DRAW__MIN_VALUE"), defaults.min_value),
        max_value=_int_from_env(os.getenv("DRAW__MAX_VALUE"), defaults.max_value),
        timing=timing,
        default_owner=os.getenv("DRAW__DEFAULT_OWNER") or DEFAULT_OWNER,
    )


def load_from_environment() -> EngineSettings:
    roster = RosterSourceSettings(
        path=os.getenv("ROSTER__PATH", ""),
        url=os.getenv("ROSTER__URL", ""),
        number_key=os.getenv("ROSTER__NUMBER_KEY", "number"),
        owner_key=os.getenv("ROSTER__OWNER_KEY", "user"),
        timeout_seconds=_int_from_env(os.getenv("ROSTER__TIMEOUT_SECONDS"), 10),
    )
    return EngineSettings(draw=draw_settings_from_environment(), roster=roster)


@lru_cache(maxsize=1)
def load_config(dotenv_path: Optional[str] = None) -> EngineSettings:
    if dotenv_path:
        load_dotenv(dotenv_path)
    else:
        default_path = pathlib.Path(".env")
        if default_path.exists():
            load_dotenv(default_path)
    return load_from_environment()
