# Overview: Request helpers and decorators for API routes.

from functools import wraps

from flask import current_app, jsonify

from .errors import MedStoreError
from .services import persistence_service
from .state import StoreState


def get_state() -> StoreState:
    """The StoreState owned by the running application."""
    return current_app.extensions["medstore"]


def error_response(exc: MedStoreError):
    return jsonify({"error": str(exc), "details": exc.details}), exc.status_code


def _restore_state() -> None:
    """Drop an unsaved in-memory change by reloading the last saved snapshot."""
    try:
        current_app.extensions["medstore"] = persistence_service.load_state(
            current_app.config["MEDSTORE_SNAPSHOT_KEY"],
            gst_rate_bps=current_app.config["MEDSTORE_GST_RATE_BPS"],
        )
    except Exception:
        current_app.logger.exception("Failed to reload store state after a failed save")


def persists_state(f):
    """
    Save the store state after the wrapped route succeeds.

    Only 2xx responses trigger a save; a failed operation left the state
    untouched, so there is nothing to write. If the save itself fails, the
    in-memory change is discarded so memory matches the stored snapshot.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        result = f(*args, **kwargs)
        status = result[1] if isinstance(result, tuple) else 200
        if 200 <= status < 300 and current_app.config.get("MEDSTORE_PERSIST", True):
            try:
                persistence_service.save_state(get_state(), current_app.config["MEDSTORE_SNAPSHOT_KEY"])
            except Exception:
                current_app.logger.exception("Failed to persist store state")
                _restore_state()
                return jsonify({"error": "Change could not be saved"}), 500
        return result

    return decorated_function
