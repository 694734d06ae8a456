# Overview: Service-layer operations for persistence; key-value load/save of the whole store state.

from __future__ import annotations

from ..extensions import db
from ..models import StoreSnapshot
from ..state import StoreState


"""
Persistence contract:

- The store is saved whole, as one JSON payload under a key, after every
  successful mutation, and loaded once when the application starts.
- Domain services never call into this module; the HTTP/CLI layer does.
- A save happens only after the in-memory mutation has fully succeeded,
  so a stored snapshot never holds a partially applied transaction.
- If a save fails, the caller reloads the last stored snapshot, so the
  in-memory state never runs ahead of what is stored.
"""


def load_state(key: str, *, gst_rate_bps: int | None = None) -> StoreState:
    """Load the state stored under key, or a fresh empty state."""
    snapshot = db.session.get(StoreSnapshot, key)
    if snapshot is None:
        return StoreState(gst_rate_bps=gst_rate_bps or 0)
    return StoreState.from_dict(snapshot.payload, gst_rate_bps=gst_rate_bps)


def save_state(state: StoreState, key: str) -> StoreSnapshot:
    """Upsert the serialized state under key and commit."""
    payload = state.to_dict()
    snapshot = db.session.get(StoreSnapshot, key)
    if snapshot is None:
        snapshot = StoreSnapshot(key=key, payload=payload, version=1)
        db.session.add(snapshot)
    else:
        snapshot.payload = payload
        snapshot.version = (snapshot.version or 0) + 1
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return snapshot


def delete_state(key: str) -> bool:
    snapshot = db.session.get(StoreSnapshot, key)
    if snapshot is None:
        return False
    db.session.delete(snapshot)
    db.session.commit()
    return True
