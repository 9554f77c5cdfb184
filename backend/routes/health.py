from __future__ import annotations

from flask import Blueprint, jsonify

from ..runtime import current_runtime

bp = Blueprint("health", __name__)


@bp.get("/health")
def health():
    state = current_runtime().call(lambda session: session.state)
    return jsonify({"status": "ok", "state": state.name.lower()})
