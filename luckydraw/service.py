from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import List, Optional, Sequence, Tuple

from .config import EngineSettings, load_config
from .datasource import (
    CsvRosterSource,
    HttpJsonRosterSource,
    HttpJsonRosterSourceConfig,
    RosterSource,
    XlsxRosterSource,
)
from .session import DrawListener, DrawSession
from .timers import AsyncioTimerScheduler
from .types import DigitSlot, DrawOutcome, RosterEntry, WinnerRecord


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stderr,
    )


class TerminalRenderer(DrawListener):
    """Prints every animation frame on a single terminal line."""

    def __init__(self, stream=None) -> None:
        self._stream = stream or sys.stdout
        self._settled: Optional[asyncio.Event] = None

    def arm(self) -> asyncio.Event:
        self._settled = asyncio.Event()
        return self._settled

    def on_frame(self, slots: Tuple[DigitSlot, ...]) -> None:
        digits = " ".join(str(slot.value) if slot.stopped else f"[{slot.value}]" for slot in slots)
        self._stream.write(f"\r  {digits}  ")
        self._stream.flush()

    def on_draw_settled(self, record: WinnerRecord) -> None:
        self._stream.write(f"\n  Lucky number {record.value} -> {record.owner}\n")
        self._stream.flush()
        if self._settled is not None:
            self._settled.set()


def build_roster_source(settings: EngineSettings, args: argparse.Namespace) -> Optional[RosterSource]:
    path = args.roster or settings.roster.path
    url = args.roster_url or settings.roster.url
    if path and url:
        raise RuntimeError("Configure either a roster file or a roster URL, not both.")
    if path:
        if path.lower().endswith(".xlsx"):
            return XlsxRosterSource(path)
        return CsvRosterSource(path)
    if url:
        return HttpJsonRosterSource(
            HttpJsonRosterSourceConfig(
                url=url,
                number_key=settings.roster.number_key,
                owner_key=settings.roster.owner_key,
                timeout_seconds=settings.roster.timeout_seconds,
            )
        )
    return None


async def load_entries(source: Optional[RosterSource]) -> Sequence[RosterEntry]:
    if source is None:
        return ()
    try:
        return await source.fetch_entries()
    finally:
        await source.close()


async def run(args: argparse.Namespace) -> List[WinnerRecord]:
    settings = load_config(args.env_file)
    configure_logging(args.verbose)
    logger = logging.getLogger("luckydraw.service")

    entries = await load_entries(build_roster_source(settings, args))
    renderer = TerminalRenderer()
    session = DrawSession(settings.draw, AsyncioTimerScheduler(), listeners=[renderer])
    if entries:
        session.load_roster(entries)

    for _ in range(args.draws):
        settled = renderer.arm()
        outcome = session.request_draw()
        if outcome is DrawOutcome.EXHAUSTED:
            logger.warning("All possible lucky numbers have been drawn; stopping.")
            break
        await settled.wait()

    winners = list(session.winners)
    for record in winners:
        logger.info("%s  %s  %s", record.completed_at.isoformat(), record.value, record.owner)
    return winners


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Lucky number draw")
    parser.add_argument("--env-file", type=str, default=None, help="Path to .env file with settings")
    parser.add_argument("--roster", type=str, default=None, help="CSV or xlsx file with number,user columns.")
    parser.add_argument("--roster-url", type=str, default=None, help="JSON endpoint serving the roster.")
    parser.add_argument("--draws", type=int, default=1, help="Number of draws to run (default 1).")
    parser.add_argument(
        "--verbose", action="store_true", help="Enable debug logging (default INFO)."
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    try:
        asyncio.run(run(args))
    except KeyboardInterrupt:
        print("Draw stopped by user.")


if __name__ == "__main__":
    main()
