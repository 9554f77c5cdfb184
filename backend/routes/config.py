from __future__ import annotations

from flask import Blueprint, jsonify, request

from luckydraw.config import DrawSettings
from luckydraw.session import DrawSession

from ..runtime import current_runtime
from ..schemas import SettingsResponse, SettingsUpdateRequest

bp = Blueprint("config", __name__)

TIMING_FIELDS = ("tick_interval_ms", "generating_time_ms", "digit_stop_delay_ms", "settle_delay_ms")


def _settings_payload(settings: DrawSettings) -> dict:
    timing = settings.timing
    response = SettingsResponse(
        digit_count=settings.digit_count,
        min_value=settings.min_value,
        max_value=settings.max_value,
        tick_interval_ms=timing.tick_interval_ms,
        generating_time_ms=timing.generating_time_ms,
        digit_stop_delay_ms=timing.digit_stop_delay_ms,
        settle_delay_ms=timing.settle_delay_ms,
        default_owner=settings.default_owner,
    )
    return response.dict()


@bp.get("/config")
def get_config():
    settings = current_runtime().call(lambda session: session.settings)
    return jsonify(_settings_payload(settings))


@bp.put("/config")
def update_config():
    payload = request.get_json(force=True, silent=True) or {}
    data = SettingsUpdateRequest(**payload)
    changes = {key: value for key, value in data.dict().items() if value is not None}
    timing_changes = {key: changes.pop(key) for key in TIMING_FIELDS if key in changes}

    def apply(session: DrawSession) -> DrawSettings:
        # a new settings value is built; an in-flight reveal keeps the old one
        settings = session.settings.copy(**changes)
        if timing_changes:
            settings = settings.with_timing(**timing_changes)
        session.update_settings(settings)
        return settings

    settings = current_runtime().call(apply)
    return jsonify(_settings_payload(settings))
