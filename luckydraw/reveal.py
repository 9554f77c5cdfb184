"""Digit reveal state machine.

``step`` is a pure function: it takes the current :class:`RevealState` and an
event, and returns the next state together with the effects the driver must
carry out. Scheduling effects (``StartTicking``, ``ScheduleStop`` ...) tell the
driver which timers to arm or cancel; hook effects (``RevealStarted``,
``SlotStopped`` ...) are forwarded to listeners.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Tuple, Union

from .config import RevealTiming
from .types import DigitSlot, DrawResult, SessionState


# Events


@dataclass(frozen=True)
class Start:
    result: DrawResult
    timing: RevealTiming


@dataclass(frozen=True)
class Tick:
    index: int
    digit: int


@dataclass(frozen=True)
class Stop:
    index: int


@dataclass(frozen=True)
class Settle:
    pass


@dataclass(frozen=True)
class Finish:
    pass


@dataclass(frozen=True)
class Reset:
    pass


Event = Union[Start, Tick, Stop, Settle, Finish, Reset]


# Effects


@dataclass(frozen=True)
class StartTicking:
    index: int
    period_ms: int


@dataclass(frozen=True)
class CancelTicking:
    index: int


@dataclass(frozen=True)
class ScheduleStop:
    index: int
    delay_ms: int


@dataclass(frozen=True)
class ScheduleSettle:
    delay_ms: int


@dataclass(frozen=True)
class CancelAll:
    pass


@dataclass(frozen=True)
class RevealStarted:
    slot_count: int


@dataclass(frozen=True)
class FrameChanged:
    slots: Tuple[DigitSlot, ...]


@dataclass(frozen=True)
class SlotStopped:
    index: int
    digit: int


@dataclass(frozen=True)
class DrawSettled:
    result: DrawResult


Effect = Union[
    StartTicking,
    CancelTicking,
    ScheduleStop,
    ScheduleSettle,
    CancelAll,
    RevealStarted,
    FrameChanged,
    SlotStopped,
    DrawSettled,
]


@dataclass(frozen=True)
class RevealState:
    """Snapshot of one reveal.

    ``pending`` is the sampled result while the reveal runs and is never shown
    to observers; ``revealed`` becomes set once the draw settles.
    """

    phase: SessionState = SessionState.IDLE
    slots: Tuple[DigitSlot, ...] = ()
    pending: Optional[DrawResult] = None
    revealed: Optional[DrawResult] = None
    timing: Optional[RevealTiming] = None

    @property
    def display(self) -> str:
        return "".join(str(slot.value) for slot in self.slots)

    @property
    def all_stopped(self) -> bool:
        return bool(self.slots) and all(slot.stopped for slot in self.slots)


@dataclass(frozen=True)
class Transition:
    state: RevealState
    effects: Tuple[Effect, ...] = ()


def step(state: RevealState, event: Event) -> Transition:
    if isinstance(event, Start):
        return _start(state, event)
    if isinstance(event, Tick):
        return _tick(state, event)
    if isinstance(event, Stop):
        return _stop(state, event)
    if isinstance(event, Settle):
        return _settle(state)
    if isinstance(event, Finish):
        return _finish(state)
    if isinstance(event, Reset):
        return Transition(RevealState(), (CancelAll(),))
    raise TypeError(f"Unknown reveal event: {event!r}")


def _start(state: RevealState, event: Start) -> Transition:
    if state.phase is not SessionState.IDLE:
        return Transition(state)
    value = event.result.value
    if not value.isdigit():
        raise ValueError(f"winning value must be all digits, got {value!r}")

    slots = tuple(DigitSlot(index=i) for i in range(len(value)))
    timing = event.timing
    effects: Tuple[Effect, ...] = (
        (RevealStarted(slot_count=len(slots)), FrameChanged(slots))
        + tuple(StartTicking(index=i, period_ms=timing.tick_interval_ms) for i in range(len(slots)))
        + (ScheduleStop(index=len(slots) - 1, delay_ms=timing.generating_time_ms),)
    )
    next_state = RevealState(
        phase=SessionState.REVEALING,
        slots=slots,
        pending=event.result,
        timing=timing,
    )
    return Transition(next_state, effects)


def _tick(state: RevealState, event: Tick) -> Transition:
    if state.phase is not SessionState.REVEALING or not 0 <= event.index < len(state.slots):
        return Transition(state)
    slot = state.slots[event.index]
    if slot.stopped:
        return Transition(state)
    slots = _replace_slot(state.slots, replace(slot, value=event.digit % 10))
    return Transition(replace(state, slots=slots), (FrameChanged(slots),))


def _stop(state: RevealState, event: Stop) -> Transition:
    if state.phase is not SessionState.REVEALING or not 0 <= event.index < len(state.slots):
        return Transition(state)
    slot = state.slots[event.index]
    if slot.stopped:
        return Transition(state)

    digit = int(state.pending.value[event.index])
    slots = _replace_slot(state.slots, DigitSlot(index=event.index, value=digit, stopped=True))
    effects: Tuple[Effect, ...] = (
        CancelTicking(index=event.index),
        FrameChanged(slots),
        SlotStopped(index=event.index, digit=digit),
    )
    if event.index > 0:
        effects += (ScheduleStop(index=event.index - 1, delay_ms=state.timing.digit_stop_delay_ms),)
    else:
        effects += (ScheduleSettle(delay_ms=state.timing.settle_delay_ms),)
    return Transition(replace(state, slots=slots), effects)


def _settle(state: RevealState) -> Transition:
    if state.phase is not SessionState.REVEALING or not state.all_stopped:
        return Transition(state)
    next_state = replace(state, phase=SessionState.SETTLING, revealed=state.pending)
    return Transition(next_state, (DrawSettled(result=state.pending),))


def _finish(state: RevealState) -> Transition:
    if state.phase is not SessionState.SETTLING:
        return Transition(state)
    return Transition(replace(state, phase=SessionState.IDLE, pending=None, timing=None))


def _replace_slot(slots: Tuple[DigitSlot, ...], slot: DigitSlot) -> Tuple[DigitSlot, ...]:
    return slots[: slot.index] + (slot,) + slots[slot.index + 1 :]
