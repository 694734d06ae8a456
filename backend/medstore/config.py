from __future__ import annotations
import os


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/medstore.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",
        "sqlite:///medstore.sqlite3",
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Default GST applied when a transaction does not carry its own rate.
    # Basis points: 1200 = 12%.
    MEDSTORE_GST_RATE_BPS = int(os.environ.get("MEDSTORE_GST_RATE_BPS", "1200"))

    # Window for the "expiring soon" alert, in days
    MEDSTORE_EXPIRY_ALERT_DAYS = int(os.environ.get("MEDSTORE_EXPIRY_ALERT_DAYS", "30"))

    # Snapshot row the store state is loaded from and saved to
    MEDSTORE_SNAPSHOT_KEY = os.environ.get("MEDSTORE_SNAPSHOT_KEY", "default")

    # Save the state after every successful mutation
    MEDSTORE_PERSIST = _env_bool("MEDSTORE_PERSIST", True)
