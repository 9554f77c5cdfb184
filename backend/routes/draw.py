from __future__ import annotations

from flask import Blueprint, current_app, jsonify

from luckydraw.session import DrawSession, SessionSnapshot
from luckydraw.types import DrawOutcome

from ..runtime import current_runtime
from ..schemas import DrawResponse, SessionStateResponse, SlotResponse, WinnerResponse

bp = Blueprint("draw", __name__)

REJECTION_MESSAGES = {
    DrawOutcome.ALREADY_RUNNING: "A draw is already running.",
    DrawOutcome.EXHAUSTED: "All possible lucky numbers in this range have been drawn.",
}


def _state_payload(snapshot: SessionSnapshot) -> dict:
    result = snapshot.result
    response = SessionStateResponse(
        state=snapshot.state.name.lower(),
        slots=[SlotResponse(index=s.index, value=s.value, stopped=s.stopped) for s in snapshot.slots],
        value=result.value if result else None,
        owner=result.owner if result else None,
        roster_size=snapshot.roster_size,
        remaining_entries=snapshot.remaining_entries,
        drawn_values=snapshot.drawn_values,
    )
    return response.dict()


@bp.get("/state")
def get_state():
    snapshot = current_runtime().call(DrawSession.snapshot)
    return jsonify(_state_payload(snapshot))


@bp.post("/draw")
def request_draw():
    def start(session: DrawSession):
        return session.request_draw(), session.state

    outcome, state = current_runtime().call(start)
    if outcome is not DrawOutcome.ACCEPTED:
        current_app.logger.info("Draw request rejected: %s", outcome.value)
        return jsonify({"error": REJECTION_MESSAGES[outcome], "code": outcome.value}), 409

    response = DrawResponse(status=outcome.value, state=state.name.lower())
    return jsonify(response.dict()), 202


@bp.post("/reset")
def reset_session():
    def reset(session: DrawSession) -> SessionSnapshot:
        session.reset()
        return session.snapshot()

    snapshot = current_runtime().call(reset)
    return jsonify(_state_payload(snapshot))


@bp.get("/history")
def list_winners():
    winners = current_runtime().call(lambda session: session.winners)
    response = [WinnerResponse(**record.to_dict()).dict() for record in winners]
    return jsonify(response)


@bp.delete("/history")
def clear_winners():
    current_runtime().call(DrawSession.clear_history)
    return jsonify({"cleared": True})
