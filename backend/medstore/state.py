# Overview: Explicitly owned in-memory store state (catalog, ledger, counters).

from __future__ import annotations

import threading
from contextlib import contextmanager

from .models import Medicine, Transaction, TRANSACTION_TYPES


"""
MedStore State Invariants (authoritative)

- One StoreState owns the catalog (medicine id -> Medicine), the ledger
  (append-only list of Transactions, in recording order), per-type invoice
  counters and id counters. There is no process-wide instance; the Flask
  app keeps one in app.extensions and tests build their own.
- For every medicine: stock_quantity == initial stock + purchased - sold,
  counted over transactions currently in the ledger.
- Counters only move forward. Invoice numbers and ids are never reused,
  including after deletions.
- Every mutation and every read that iterates the stores holds `lock`.
  Mutations are all-or-nothing, so no reader sees a partial transaction.
"""


class StoreState:
    def __init__(self, *, gst_rate_bps: int = 0):
        self.medicines: dict[int, Medicine] = {}
        self.transactions: list[Transaction] = []
        self.invoice_counters: dict[str, int] = {t: 0 for t in TRANSACTION_TYPES}
        self.next_medicine_id = 1
        self.next_transaction_id = 1
        self.gst_rate_bps = gst_rate_bps
        self.lock = threading.RLock()

    @contextmanager
    def locked(self):
        """Serialize access; re-entrant so services can nest calls."""
        with self.lock:
            yield self

    def allocate_medicine_id(self) -> int:
        medicine_id = self.next_medicine_id
        self.next_medicine_id += 1
        return medicine_id

    def allocate_transaction_id(self) -> int:
        tx_id = self.next_transaction_id
        self.next_transaction_id += 1
        return tx_id

    def to_dict(self) -> dict:
        with self.lock:
            return {
                "medicines": [m.to_dict() for m in self.medicines.values()],
                "transactions": [tx.to_dict() for tx in self.transactions],
                "invoice_counters": dict(self.invoice_counters),
                "next_medicine_id": self.next_medicine_id,
                "next_transaction_id": self.next_transaction_id,
                "gst_rate_bps": self.gst_rate_bps,
            }

    @classmethod
    def from_dict(cls, data: dict, *, gst_rate_bps: int | None = None) -> "StoreState":
        """
        Rebuild a state from its serialized form.

        gst_rate_bps, when given, overrides the stored default rate
        (configuration wins over a stale snapshot).
        """
        rate = gst_rate_bps if gst_rate_bps is not None else int(data.get("gst_rate_bps") or 0)
        state = cls(gst_rate_bps=rate)
        for raw in data.get("medicines", []):
            medicine = Medicine.from_dict(raw)
            state.medicines[medicine.id] = medicine
        state.transactions = [Transaction.from_dict(raw) for raw in data.get("transactions", [])]

        counters = data.get("invoice_counters") or {}
        for tx_type in TRANSACTION_TYPES:
            state.invoice_counters[tx_type] = int(counters.get(tx_type, 0))

        # Never hand out an id at or below one already present.
        max_med = max(state.medicines, default=0)
        max_tx = max((tx.id for tx in state.transactions), default=0)
        state.next_medicine_id = max(int(data.get("next_medicine_id", 1)), max_med + 1)
        state.next_transaction_id = max(int(data.get("next_transaction_id", 1)), max_tx + 1)
        for tx in state.transactions:
            if tx.invoice_seq > state.invoice_counters[tx.type]:
                state.invoice_counters[tx.type] = tx.invoice_seq
        return state
