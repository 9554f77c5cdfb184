from __future__ import annotations

from flask import Blueprint, jsonify, request

from luckydraw.datasource import parse_csv_text, parse_xlsx_bytes
from luckydraw.session import DrawSession
from luckydraw.types import RosterEntry

from ..runtime import current_runtime
from ..schemas import RosterResponse, RosterUploadRequest

bp = Blueprint("roster", __name__)


def _load(entries, adjust_digits: bool):
    def load(session: DrawSession) -> RosterResponse:
        settings = session.load_roster(entries, adjust_settings=adjust_digits)
        return RosterResponse(
            roster_size=len(session.roster),
            remaining_entries=session.roster.remaining_count,
            digit_count=settings.digit_count,
        )

    return current_runtime().call(load)


@bp.get("")
def get_roster():
    def describe(session: DrawSession) -> dict:
        return {
            "entries": [{"number": e.number, "user": e.owner} for e in session.roster.entries],
            "remaining": [{"number": e.number, "user": e.owner} for e in session.roster.remaining],
        }

    return jsonify(current_runtime().call(describe))


@bp.post("")
def upload_roster():
    payload = request.get_json(force=True, silent=True) or {}
    data = RosterUploadRequest(**payload)
    entries = [RosterEntry(number=row.number, owner=row.user) for row in data.entries]
    response = _load(entries, data.adjust_digits)
    return jsonify(response.dict()), 201


@bp.post("/upload")
def upload_roster_file():
    upload = request.files.get("file")
    if upload is None:
        return jsonify({"error": "missing file field"}), 400

    data = upload.read()
    if (upload.filename or "").lower().endswith(".xlsx"):
        entries = parse_xlsx_bytes(data)
    else:
        entries = parse_csv_text(data.decode("utf-8-sig"))
    if not entries:
        return jsonify({"error": "roster file has no entries"}), 400

    adjust_digits = request.form.get("adjust_digits", "1") not in {"0", "false", "no"}
    response = _load(entries, adjust_digits)
    return jsonify(response.dict()), 201
