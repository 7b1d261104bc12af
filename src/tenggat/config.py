# src/tenggat/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- No secrets required at import time (Matrix credentials are optional).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

ENV_PREFIX = "TENGGAT"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    """Load .env locally if python-dotenv is installed. Safe no-op otherwise."""
    try:
        from dotenv import load_dotenv  # type: ignore
    except Exception:
        return
    load_dotenv(override=False)


_load_dotenv_if_available()


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_choice(name: str, default: str, choices: set[str]) -> str:
    raw = _env(name, default).strip().lower()
    return raw if raw in choices else default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    locale: str

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    tasks_db_path: Path
    notified_db_path: Path

    # ---- Timers ----
    refresh_interval_seconds: float
    alert_interval_seconds: float
    alert_window_seconds: float

    # ---- Alerts ----
    alert_backend: str
    notification_permission: str

    # ---- Matrix (alert backend) ----
    matrix_homeserver: str
    matrix_user_id: str
    matrix_password: str
    matrix_room: Optional[str]
    matrix_store_path: Path

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "tenggat") or "tenggat"
        log_level = _env(_k("LOG_LEVEL"), "INFO")
        locale = _env_choice(_k("LOCALE"), "en", {"en", "id"})

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/tenggat"))
        tasks_db_path = _env_path(_k("TASKS_DB_PATH"), data_dir / "tasks.sqlite3")
        notified_db_path = _env_path(_k("NOTIFIED_DB_PATH"), data_dir / "notified.sqlite3")

        refresh_interval_seconds = _env_float(_k("REFRESH_INTERVAL_SECONDS"), 1.0)
        alert_interval_seconds = _env_float(_k("ALERT_INTERVAL_SECONDS"), 10.0)
        alert_window_seconds = _env_float(_k("ALERT_WINDOW_SECONDS"), 300.0)

        alert_backend = _env_choice(_k("ALERT_BACKEND"), "console", {"console", "desktop", "matrix"})
        notification_permission = _env_choice(
            _k("NOTIFICATION_PERMISSION"), "default", {"default", "granted", "denied"}
        )

        matrix_homeserver = _env(_k("MATRIX_HOMESERVER"), "").strip()
        matrix_user_id = _env(_k("MATRIX_USER_ID"), "").strip()
        matrix_password = _env(_k("MATRIX_PASSWORD"), "").strip()
        matrix_room = _env(_k("MATRIX_ROOM"), "").strip() or None
        matrix_store_path = _env_path(_k("MATRIX_STORE_PATH"), data_dir / "matrix_store")

        return Settings(
            app_name=app_name,
            log_level=log_level,
            locale=locale,
            data_dir=data_dir,
            tasks_db_path=tasks_db_path,
            notified_db_path=notified_db_path,
            refresh_interval_seconds=refresh_interval_seconds,
            alert_interval_seconds=alert_interval_seconds,
            alert_window_seconds=alert_window_seconds,
            alert_backend=alert_backend,
            notification_permission=notification_permission,
            matrix_homeserver=matrix_homeserver,
            matrix_user_id=matrix_user_id,
            matrix_password=matrix_password,
            matrix_room=matrix_room,
            matrix_store_path=matrix_store_path,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
