from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

import requests

from ..types import RosterEntry
from .base import RosterSource, build_entry


@dataclass(frozen=True)
class HttpJsonRosterSourceConfig:
    """Configuration describing how to parse the upstream JSON payload."""

    url: str
    number_key: str = "number"
    owner_key: str = "user"
    entries_key: str = "entries"
    timeout_seconds: int = 10


class HttpJsonRosterSource(RosterSource):
    """Fetch roster entries from a JSON HTTP endpoint.

    The payload is either a list of row objects or an object holding that
    list under ``entries_key``.
    """

    def __init__(self, config: HttpJsonRosterSourceConfig) -> None:
        self._config = config

    async def fetch_entries(self) -> Sequence[RosterEntry]:
        payload = await asyncio.to_thread(
            self._get_json, self._config.url, self._config.timeout_seconds
        )
        return self._parse_payload(payload)

    @staticmethod
    def _get_json(url: str, timeout_seconds: int) -> Any:
        resp = requests.get(url, timeout=timeout_seconds)
        resp.raise_for_status()
        return resp.json()

    def _parse_payload(self, payload: Any) -> Sequence[RosterEntry]:
        cfg = self._config
        if isinstance(payload, Mapping):
            try:
                payload = payload[cfg.entries_key]
            except KeyError as exc:
                raise ValueError(f"Missing entries field: {cfg.entries_key}") from exc
        if not isinstance(payload, list):
            raise ValueError("HTTP API returned non-list roster payload")

        entries = []
        for position, row in enumerate(payload):
            if not isinstance(row, Mapping):
                raise ValueError(f"Roster row {position} is not an object")
            try:
                number = row[cfg.number_key]
            except KeyError as exc:
                raise ValueError(f"Roster row {position} missing field: {cfg.number_key}") from exc
            entries.append(build_entry(number, row.get(cfg.owner_key)))
        return tuple(entries)
