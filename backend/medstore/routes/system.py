# backend/medstore/routes/system.py
"""
System health endpoint.

Reports database connectivity and the size of the in-memory store.
"""

import time
from flask import Blueprint, current_app
from sqlalchemy import text

from ..extensions import db
from ..decorators import get_state
from ..time_utils import utcnow, to_utc_z

system_bp = Blueprint("system", __name__)


def check_database_health() -> dict:
    start_time = time.time()
    try:
        db.session.execute(text("SELECT 1"))
        elapsed_ms = (time.time() - start_time) * 1000
        return {"status": "healthy", "latency_ms": round(elapsed_ms, 2)}
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error",
        }


@system_bp.get("/health")
def health():
    database = check_database_health()
    state = get_state()
    with state.locked():
        store = {
            "medicines": len(state.medicines),
            "transactions": len(state.transactions),
        }
    overall = "healthy" if database["status"] == "healthy" else "degraded"
    return {
        "status": overall,
        "checked_at": to_utc_z(utcnow()),
        "database": database,
        "store": store,
    }, 200 if overall == "healthy" else 503
