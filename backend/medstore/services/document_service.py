# Overview: Service-layer operations for invoice numbering.

from __future__ import annotations

from ..errors import InvalidInputError
from ..models import TRANSACTION_TYPES
from ..state import StoreState


def next_invoice_seq(state: StoreState, tx_type: str) -> int:
    """
    Allocate the next invoice sequence for a transaction type.

    Counters are per type and only move forward; a number handed out is
    never reissued, even if its transaction is later deleted. Callers that
    may still fail after allocating should allocate last (see
    ledger_service.record_transaction), so failed attempts leave no gaps.
    """
    if tx_type not in TRANSACTION_TYPES:
        raise InvalidInputError(f"Unknown transaction type: {tx_type}")

    with state.locked():
        seq = state.invoice_counters[tx_type] + 1
        state.invoice_counters[tx_type] = seq
        return seq

