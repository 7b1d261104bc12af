# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Do NOT commit real secrets; keep them in .env (local, gitignored).
"""

ENV_VARS = {
    # App / logging
    "TENGGAT_APP_NAME": "App display name (default: tenggat).",
    "TENGGAT_LOG_LEVEL": "Console logging level (default: INFO).",
    "TENGGAT_LOCALE": "Countdown units: en (0h 2m 5s) or id (0j 2m 5d). Default: en.",
    # Paths (gitignored)
    "TENGGAT_DATA_DIR": "Local data directory (default: .local/tenggat).",
    "TENGGAT_TASKS_DB_PATH": "TaskStore SQLite path (default: <data_dir>/tasks.sqlite3).",
    "TENGGAT_NOTIFIED_DB_PATH": "NotifiedStore SQLite path (default: <data_dir>/notified.sqlite3).",
    # Timers
    "TENGGAT_REFRESH_INTERVAL_SECONDS": "Countdown refresh period (default: 1).",
    "TENGGAT_ALERT_INTERVAL_SECONDS": "Near-deadline check period (default: 10).",
    "TENGGAT_ALERT_WINDOW_SECONDS": "Alert when a deadline is closer than this (default: 300).",
    # Alerts
    "TENGGAT_ALERT_BACKEND": "console | desktop | matrix (default: console).",
    "TENGGAT_NOTIFICATION_PERMISSION": "default | granted | denied (default: default).",
    # Matrix alert backend
    "TENGGAT_MATRIX_HOMESERVER": "Matrix homeserver URL.",
    "TENGGAT_MATRIX_USER_ID": "Matrix user ID (bot).",
    "TENGGAT_MATRIX_PASSWORD": "Password for first login (session stored locally).",
    "TENGGAT_MATRIX_ROOM": "Room ID that receives alerts.",
    "TENGGAT_MATRIX_STORE_PATH": "Matrix session directory (default: <data_dir>/matrix_store).",
}
