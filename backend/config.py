from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv

from luckydraw.config import DrawSettings, draw_settings_from_environment


@dataclass(frozen=True)
class FlaskSettings:
    secret_key: str = "luckydraw-dev-secret"
    debug: bool = True


@dataclass(frozen=True)
class AppSettings:
    flask: FlaskSettings
    draw: DrawSettings
    max_upload_bytes: int = 2 * 1024 * 1024
    call_timeout_seconds: float = 5.0


@lru_cache(maxsize=1)
def load_settings(dotenv_path: Optional[str] = None) -> AppSettings:
    if dotenv_path:
        load_dotenv(dotenv_path)
    else:
        load_dotenv()

    flask_settings = FlaskSettings(
        secret_key=os.getenv("FLASK_SECRET_KEY", "luckydraw-dev-secret"),
        debug=os.getenv("FLASK_DEBUG", "1") == "1",
    )

    return AppSettings(
        flask=flask_settings,
        draw=draw_settings_from_environment(),
        max_upload_bytes=int(os.getenv("MAX_UPLOAD_BYTES", str(2 * 1024 * 1024))),
        call_timeout_seconds=float(os.getenv("ENGINE_CALL_TIMEOUT_SECONDS", "5")),
    )
