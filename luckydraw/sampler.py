from __future__ import annotations

import logging
import random
from typing import MutableSet, Optional

from .roster import Roster
from .types import DrawRange, DrawResult

MAX_SAMPLE_ATTEMPTS = 1000


class SamplerRetryExceeded(Exception):
    """Raised internally when the range search gives up."""


class ValueSampler:
    """Pick the next winning value from a roster or a numeric range.

    Roster draws are without replacement. Range draws skip any formatted
    value already present in the exclusion set and add the chosen value to
    it. ``sample`` returns ``None`` when nothing eligible is left.
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        max_attempts: int = MAX_SAMPLE_ATTEMPTS,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._rng = rng or random.Random()
        self._max_attempts = max_attempts
        self._logger = logger or logging.getLogger("luckydraw.sampler")

    def sample(
        self,
        roster: Roster,
        draw_range: DrawRange,
        exclusion: MutableSet[str],
    ) -> Optional[DrawResult]:
        if roster.remaining_count > 0:
            return self._sample_roster(roster, draw_range)

        if len(exclusion) >= draw_range.total:
            self._logger.info(
                "All %s values in [%s, %s] have been drawn.",
                draw_range.total,
                draw_range.min_value,
                draw_range.max_value,
            )
            return None

        try:
            value = self._search_range(draw_range, exclusion)
        except SamplerRetryExceeded as exc:
            self._logger.warning("%s; treating range as exhausted.", exc)
            return None

        exclusion.add(value)
        return DrawResult(value=value, owner=None)

    def _sample_roster(self, roster: Roster, draw_range: DrawRange) -> DrawResult:
        index = self._rng.randrange(roster.remaining_count)
        entry = roster.take(index)
        return DrawResult(value=draw_range.format(entry.number), owner=entry.owner)

    def _search_range(self, draw_range: DrawRange, exclusion: MutableSet[str]) -> str:
        attempts = 0
        while attempts < self._max_attempts:
            number = self._rng.randint(draw_range.min_value, draw_range.max_value)
            formatted = draw_range.format(number)
            if formatted not in exclusion:
                return formatted
            attempts += 1
        raise SamplerRetryExceeded(
            f"No undrawn value found after {self._max_attempts} attempts"
        )
