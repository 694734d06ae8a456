from __future__ import annotations

from ..extensions import db
from ..time_utils import utcnow, to_utc_z


class StoreSnapshot(db.Model):
    """
    Key-value persistence for a serialized store state.

    One row per key; the payload is the full catalog, ledger and counters
    as produced by StoreState.to_dict(). Rows are upserted after every
    successful mutation and read once at application start.
    """
    __tablename__ = "store_snapshots"

    key = db.Column(db.String(64), primary_key=True)
    payload = db.Column(db.JSON, nullable=False)
    version = db.Column(db.Integer, nullable=False, default=1)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "version": self.version,
            "updated_at": to_utc_z(self.updated_at),
        }
