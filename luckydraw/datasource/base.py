from __future__ import annotations

import abc
from typing import Any, Sequence

from ..types import RosterEntry


def build_entry(number: Any, owner: Any) -> RosterEntry:
    """Coerce one raw roster row into a :class:`RosterEntry`.

    Raises `ValueError` when the number is not a non-negative integer or the
    owner is blank.
    """
    if isinstance(number, bool):
        raise ValueError(f"Invalid roster number: {number!r}")
    if isinstance(number, float):
        if not number.is_integer():
            raise ValueError(f"Roster number must be an integer: {number!r}")
        number = int(number)
    elif isinstance(number, str):
        text = number.strip()
        if not text.isdigit():
            raise ValueError(f"Roster number must be an integer: {number!r}")
        number = int(text)
    elif not isinstance(number, int):
        raise ValueError(f"Invalid roster number: {number!r}")
    if number < 0:
        raise ValueError(f"Roster number must not be negative: {number}")

    owner_text = "" if owner is None else str(owner).strip()
    if not owner_text:
        raise ValueError(f"Roster entry {number} has no owner")
    return RosterEntry(number=number, owner=owner_text)


class RosterSource(abc.ABC):
    """Abstract roster provider."""

    @abc.abstractmethod
    async def fetch_entries(self) -> Sequence[RosterEntry]:
        """Return every draw-eligible entry, in source order.

        Implementations should raise `ValueError` if a row fails validation
        and `RuntimeError` if the source is unavailable.
        """

    async def close(self) -> None:
        """Optional hook for sources that require cleanup."""
        return None
