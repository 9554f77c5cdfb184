from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from .config import DrawSettings
from .reveal import (
    CancelAll,
    CancelTicking,
    DrawSettled,
    Effect,
    Event,
    Finish,
    FrameChanged,
    Reset,
    RevealStarted,
    RevealState,
    ScheduleSettle,
    ScheduleStop,
    Settle,
    SlotStopped,
    Start,
    StartTicking,
    Stop,
    Tick,
    step,
)
from .roster import Roster, settings_for_roster
from .sampler import ValueSampler
from .timers import TimerHandle, TimerScheduler
from .types import DigitSlot, DrawOutcome, DrawResult, RosterEntry, SessionState, WinnerRecord
from .winners import WinnersLog


class DrawListener:
    """Receives reveal hooks. Override only the hooks you need."""

    def on_reveal_started(self, slot_count: int) -> None:
        pass

    def on_frame(self, slots: Tuple[DigitSlot, ...]) -> None:
        pass

    def on_slot_stopped(self, index: int, digit: int) -> None:
        pass

    def on_draw_settled(self, record: WinnerRecord) -> None:
        pass


@dataclass(frozen=True)
class SessionSnapshot:
    state: SessionState
    slots: Tuple[DigitSlot, ...]
    result: Optional[DrawResult]
    winners: Tuple[WinnerRecord, ...]
    settings: DrawSettings
    roster_size: int
    remaining_entries: int
    drawn_values: int


class DrawSession:
    """Runs lucky-number draws one at a time.

    The session owns the roster, the exclusion set and the winners log, and
    drives the reveal state machine through ``scheduler``. Every method must be
    called from the scheduler's thread.
    """

    def __init__(
        self,
        settings: DrawSettings,
        scheduler: TimerScheduler,
        *,
        roster: Iterable[RosterEntry] = (),
        sampler: Optional[ValueSampler] = None,
        rng: Optional[random.Random] = None,
        winners: Optional[WinnersLog] = None,
        listeners: Iterable[DrawListener] = (),
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._initial_settings = settings
        self._initial_entries: Tuple[RosterEntry, ...] = tuple(roster)
        self._settings = settings
        self._active_settings = settings
        self._roster = Roster(self._initial_entries)
        self._scheduler = scheduler
        self._rng = rng or random.Random()
        self._sampler = sampler or ValueSampler(rng=self._rng)
        self._winners = winners or WinnersLog()
        self._listeners: List[DrawListener] = list(listeners)
        self._logger = logger or logging.getLogger("luckydraw.session")

        self._exclusions: Set[str] = set()
        self._reveal = RevealState()
        self._tick_handles: Dict[int, TimerHandle] = {}
        self._timers: List[TimerHandle] = []
        # bumped by every Reset; effects of an older transition are dropped
        self._generation = 0

    @property
    def state(self) -> SessionState:
        return self._reveal.phase

    @property
    def settings(self) -> DrawSettings:
        return self._settings

    @property
    def slots(self) -> Tuple[DigitSlot, ...]:
        return self._reveal.slots

    @property
    def result(self) -> Optional[DrawResult]:
        return self._reveal.revealed

    @property
    def roster(self) -> Roster:
        return self._roster

    @property
    def exclusions(self) -> frozenset:
        return frozenset(self._exclusions)

    @property
    def winners(self) -> Tuple[WinnerRecord, ...]:
        return tuple(self._winners)

    def add_listener(self, listener: DrawListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: DrawListener) -> None:
        self._listeners.remove(listener)

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            state=self.state,
            slots=self.slots,
            result=self.result,
            winners=self.winners,
            settings=self._settings,
            roster_size=len(self._roster),
            remaining_entries=self._roster.remaining_count,
            drawn_values=len(self._exclusions),
        )

    def request_draw(self) -> DrawOutcome:
        if self.state.running:
            self._logger.info("Draw already running (state=%s); request ignored.", self.state.name)
            return DrawOutcome.ALREADY_RUNNING

        settings = self._settings
        result = self._sampler.sample(self._roster, settings.draw_range, self._exclusions)
        if result is None:
            self._logger.warning(
                "No eligible values left (roster remaining=%s, range=[%s, %s]).",
                self._roster.remaining_count,
                settings.min_value,
                settings.max_value,
            )
            return DrawOutcome.EXHAUSTED

        self._active_settings = settings
        timing = settings.timing
        self._logger.info(
            "Draw started with %s slots; settles after %s ms.",
            len(result.value),
            timing.stop_offset(0, len(result.value)) + timing.settle_delay_ms,
        )
        self._dispatch(Start(result=result, timing=settings.timing))
        return DrawOutcome.ACCEPTED

    def update_settings(self, settings: DrawSettings) -> None:
        """Use ``settings`` from the next draw on; an in-flight reveal keeps its timing."""
        self._settings = settings

    def load_roster(
        self, entries: Sequence[RosterEntry], *, adjust_settings: bool = True
    ) -> DrawSettings:
        """Replace the roster wholesale and return the settings now in effect."""
        self._roster = Roster(entries)
        duplicates = self._roster.duplicate_numbers()
        if duplicates:
            self._logger.warning("Roster contains duplicate numbers: %s", duplicates)
        if adjust_settings and entries:
            self._settings = settings_for_roster(self._settings, entries)
        self._logger.info(
            "Roster loaded with %s entries; digit_count=%s.",
            len(self._roster),
            self._settings.digit_count,
        )
        return self._settings

    def clear_history(self) -> None:
        self._winners.clear()

    def reset(self) -> None:
        if self.state.running:
            self._logger.info("Reset cancels the in-flight draw.")
        self._dispatch(Reset())
        self._settings = self._initial_settings
        self._roster = Roster(self._initial_entries)
        self._exclusions.clear()
        self._winners.clear()

    def _dispatch(self, event: Event) -> None:
        transition = step(self._reveal, event)
        self._reveal = transition.state
        if isinstance(event, Reset):
            self._generation += 1
        generation = self._generation
        for effect in transition.effects:
            if generation != self._generation:
                # a hook reset the session part way through this transition
                self._logger.debug("Dropping stale effects of %s.", type(event).__name__)
                break
            self._apply(effect)

    def _apply(self, effect: Effect) -> None:
        if isinstance(effect, StartTicking):
            index = effect.index
            self._tick_handles[index] = self._scheduler.call_every(
                effect.period_ms, lambda: self._dispatch(Tick(index=index, digit=self._rng.randrange(10)))
            )
        elif isinstance(effect, CancelTicking):
            handle = self._tick_handles.pop(effect.index, None)
            if handle is not None:
                handle.cancel()
        elif isinstance(effect, ScheduleStop):
            index = effect.index
            self._timers.append(
                self._scheduler.call_later(effect.delay_ms, lambda: self._dispatch(Stop(index=index)))
            )
        elif isinstance(effect, ScheduleSettle):
            self._timers.append(self._scheduler.call_later(effect.delay_ms, self._on_settle_timer))
        elif isinstance(effect, CancelAll):
            self._cancel_timers()
        elif isinstance(effect, RevealStarted):
            self._notify("on_reveal_started", effect.slot_count)
        elif isinstance(effect, FrameChanged):
            self._notify("on_frame", effect.slots)
        elif isinstance(effect, SlotStopped):
            self._logger.debug("Slot %s stopped on %s.", effect.index, effect.digit)
            self._notify("on_slot_stopped", effect.index, effect.digit)
        elif isinstance(effect, DrawSettled):
            self._record_winner(effect.result)

    def _on_settle_timer(self) -> None:
        self._dispatch(Settle())

    def _record_winner(self, result: DrawResult) -> None:
        owner = result.owner or self._active_settings.default_owner
        record = self._winners.record(value=result.value, owner=owner)
        self._logger.info("Draw settled: %s -> %s", record.value, record.owner)
        self._cancel_timers()
        self._dispatch(Finish())
        self._notify("on_draw_settled", record)

    def _cancel_timers(self) -> None:
        for handle in self._tick_handles.values():
            handle.cancel()
        self._tick_handles.clear()
        for handle in self._timers:
            handle.cancel()
        self._timers.clear()

    def _notify(self, hook: str, *args) -> None:
        for listener in list(self._listeners):
            try:
                getattr(listener, hook)(*args)
            except Exception:
                self._logger.exception("Listener %r failed in %s", listener, hook)
