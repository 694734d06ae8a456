# Overview: Service-layer operations for the transaction ledger; records, reverses and lists sells and purchases.

from __future__ import annotations

from typing import Any, Iterable, Iterator

from ..errors import InsufficientStockError, InvalidInputError, NotFoundError, PrescriptionRequiredError
from ..models import (
    PURCHASE,
    SELL,
    TRANSACTION_TYPES,
    DateRange,
    Medicine,
    Transaction,
    TransactionFilter,
    TransactionItem,
)
from ..state import StoreState
from ..time_utils import normalize_datetime, parse_iso_date
from ..validation import coerce_bool, coerce_int, coerce_str, enforce_rate_bps
from .catalog_service import adjust_stock, get_medicine
from .document_service import next_invoice_seq


"""
MedStore Ledger Invariants (authoritative)

- The ledger is append-only from the reader's point of view: transactions
  are immutable once recorded. Deletion removes a transaction and applies
  the exact inverse of its stock movements.
- A sell subtracts each item's quantity from stock; a purchase adds it.
- Recording and deleting are all-or-nothing. Every check runs before any
  stock moves; if a stock adjustment still fails part-way, the adjustments
  already made in the same call are rolled back before the error escapes.
- Only sells are subject to the Schedule H prescription rule.
- totalAmount = sum(price x quantity) + gstAmount (when a rate applies).
"""

METADATA_FIELDS = {
    "date",
    "customer_name",
    "supplier_name",
    "prescription_files",
    "skip_prescription",
    "gst_rate_bps",
    "note",
}


def compute_gst_paise(subtotal_paise: int, rate_bps: int) -> int | None:
    """GST on a subtotal, nearest paisa (half-up). None when no rate applies."""
    if not rate_bps:
        return None
    return (subtotal_paise * rate_bps + 5_000) // 10_000


def _normalize_items(state: StoreState, items: Any) -> list[tuple[Medicine, int, int | None]]:
    if not isinstance(items, (list, tuple)) or not items:
        raise InvalidInputError("Transaction must contain at least one item")

    normalized = []
    for index, raw in enumerate(items):
        if isinstance(raw, TransactionItem):
            raw = {"medicine_id": raw.medicine_id, "quantity": raw.quantity, "price_paise": raw.price_paise}
        if not isinstance(raw, dict):
            raise InvalidInputError("Invalid item", details={"index": index})
        if "medicine_id" not in raw or "quantity" not in raw:
            raise InvalidInputError("medicine_id and quantity required", details={"index": index})

        medicine_id = coerce_int("medicine_id", raw["medicine_id"])
        quantity = coerce_int("quantity", raw["quantity"])
        if quantity <= 0:
            raise InvalidInputError(
                "quantity must be > 0",
                details={"index": index, "medicine_id": medicine_id, "quantity": quantity},
            )

        price = raw.get("price_paise")
        if price is not None:
            price = coerce_int("price_paise", price)
            if price < 0:
                raise InvalidInputError("price_paise must be >= 0", details={"index": index})

        medicine = get_medicine(state, medicine_id)
        normalized.append((medicine, quantity, price))
    return normalized


def _validate_on_hand(lines: list[tuple[Medicine, int, int | None]]) -> None:
    totals: dict[int, int] = {}
    by_id: dict[int, Medicine] = {}
    for medicine, quantity, _ in lines:
        totals[medicine.id] = totals.get(medicine.id, 0) + quantity
        by_id[medicine.id] = medicine

    insufficient = []
    for medicine_id, requested in totals.items():
        on_hand = by_id[medicine_id].stock_quantity
        if on_hand < requested:
            insufficient.append({
                "medicine_id": medicine_id,
                "name": by_id[medicine_id].name,
                "requested_quantity": requested,
                "on_hand": on_hand,
            })

    if insufficient:
        raise InsufficientStockError(
            "Insufficient stock to record sale",
            details={"items": insufficient},
        )


def _optional_str(key: str, value: Any) -> str | None:
    if value is None:
        return None
    return coerce_str(key, value) or None


def _normalize_metadata(tx_type: str, metadata: Any) -> dict:
    metadata = metadata or {}
    if not isinstance(metadata, dict):
        raise InvalidInputError("Invalid transaction metadata")
    unknown = sorted(set(metadata) - METADATA_FIELDS)
    if unknown:
        raise InvalidInputError(f"Field not allowed: {', '.join(unknown)}")

    try:
        occurred = normalize_datetime(metadata.get("date"))
    except ValueError:
        raise InvalidInputError("date must be an ISO-8601 datetime")

    customer = _optional_str("customer_name", metadata.get("customer_name"))
    supplier = _optional_str("supplier_name", metadata.get("supplier_name"))
    if customer and tx_type != SELL:
        raise InvalidInputError("customer_name is only allowed on sell transactions")
    if supplier and tx_type != PURCHASE:
        raise InvalidInputError("supplier_name is only allowed on purchase transactions")

    files = metadata.get("prescription_files") or []
    if not isinstance(files, (list, tuple)):
        raise InvalidInputError("prescription_files must be a list of file references")
    files = tuple(coerce_str("prescription_files", f) for f in files)
    if any(not f for f in files):
        raise InvalidInputError("prescription_files cannot contain blank references")

    skip = metadata.get("skip_prescription", False)
    skip = coerce_bool("skip_prescription", skip) if skip is not None else False

    rate = metadata.get("gst_rate_bps")
    rate = enforce_rate_bps(rate) if rate is not None else None

    note = _optional_str("note", metadata.get("note"))

    return {
        "date": occurred,
        "customer_name": customer,
        "supplier_name": supplier,
        "prescription_files": files,
        "skip_prescription": skip,
        "gst_rate_bps": rate,
        "note": note,
    }


def _apply_stock_deltas(state: StoreState, deltas: Iterable[tuple[int, int]]) -> None:
    """
    Apply (medicine_id, delta) pairs as one unit.

    If any adjustment fails, every adjustment already applied in this call
    is reversed (in reverse order) before the error propagates.
    """
    applied: list[tuple[int, int]] = []
    try:
        for medicine_id, delta in deltas:
            adjust_stock(state, medicine_id, delta)
            applied.append((medicine_id, delta))
    except Exception:
        for medicine_id, delta in reversed(applied):
            state.medicines[medicine_id].stock_quantity -= delta
        raise


def _stock_delta(tx_type: str, quantity: int) -> int:
    return -quantity if tx_type == SELL else quantity


def record_transaction(
    state: StoreState,
    tx_type: str,
    items: Any,
    metadata: dict | None = None,
) -> Transaction:
    """
    Validate, post and append one sell or purchase.

    Raises:
        InvalidInputError: unknown type, empty items, non-positive quantity,
            malformed metadata
        NotFoundError: an item references an unknown medicine
        InsufficientStockError: a sell exceeds stock on hand (nothing moves)
        PrescriptionRequiredError: a sell contains a Schedule H medicine with
            no prescription_files and skip_prescription not set
    """
    if tx_type not in TRANSACTION_TYPES:
        raise InvalidInputError(
            f"type must be one of: {', '.join(TRANSACTION_TYPES)}",
            details={"type": tx_type},
        )
    meta = _normalize_metadata(tx_type, metadata)

    with state.locked():
        lines = _normalize_items(state, items)

        if tx_type == SELL:
            _validate_on_hand(lines)

        tx_items = tuple(
            TransactionItem(
                medicine_id=medicine.id,
                quantity=quantity,
                price_paise=medicine.price_paise if price is None else price,
                batch_no=medicine.batch_no,
                medicine_name=medicine.name,
            )
            for medicine, quantity, price in lines
        )
        subtotal = sum(item.line_total_paise for item in tx_items)
        rate = state.gst_rate_bps if meta["gst_rate_bps"] is None else meta["gst_rate_bps"]
        gst = compute_gst_paise(subtotal, rate)

        schedule_h = [medicine for medicine, _, _ in lines if medicine.is_schedule_h]
        files = meta["prescription_files"] if schedule_h else ()
        if tx_type == SELL and schedule_h and not files and not meta["skip_prescription"]:
            raise PrescriptionRequiredError(
                "Prescription required for Schedule H medicines",
                details={"medicines": sorted({m.name for m in schedule_h})},
            )

        _apply_stock_deltas(
            state,
            [(item.medicine_id, _stock_delta(tx_type, item.quantity)) for item in tx_items],
        )

        tx = Transaction(
            id=state.allocate_transaction_id(),
            type=tx_type,
            items=tx_items,
            total_amount_paise=subtotal + (gst or 0),
            date=meta["date"],
            invoice_seq=next_invoice_seq(state, tx_type),
            customer_name=meta["customer_name"],
            supplier_name=meta["supplier_name"],
            prescription_files=files,
            gst_amount_paise=gst,
            gst_rate_bps=rate if gst is not None else 0,
            note=meta["note"],
        )
        state.transactions.append(tx)
        return tx


def get_transaction(state: StoreState, tx_id: int) -> Transaction:
    with state.locked():
        for tx in state.transactions:
            if tx.id == tx_id:
                return tx
    raise NotFoundError("Transaction not found", details={"transaction_id": tx_id})


def delete_transaction(state: StoreState, tx_id: int) -> Transaction:
    """
    Remove a transaction and reverse its stock movements.

    Deleting a purchase whose stock has since been sold would drive stock
    negative; that raises InsufficientStockError and changes nothing.
    Invoice counters are untouched, so the number is never reissued.
    """
    with state.locked():
        tx = get_transaction(state, tx_id)

        reversal: dict[int, int] = {}
        for item in tx.items:
            reversal[item.medicine_id] = reversal.get(item.medicine_id, 0) - _stock_delta(tx.type, item.quantity)

        short = []
        for medicine_id, delta in reversal.items():
            medicine = state.medicines.get(medicine_id)
            if medicine is None:
                raise NotFoundError("Medicine not found", details={"medicine_id": medicine_id})
            if medicine.stock_quantity + delta < 0:
                short.append({
                    "medicine_id": medicine_id,
                    "name": medicine.name,
                    "on_hand": medicine.stock_quantity,
                    "required": -delta,
                })
        if short:
            raise InsufficientStockError(
                "Cannot delete transaction: its stock has already been consumed",
                details={"items": short, "invoice_number": tx.invoice_number},
            )

        _apply_stock_deltas(state, reversal.items())
        state.transactions.remove(tx)
        return tx


def build_filter(
    *,
    tx_type: str | None = None,
    start: str | None = None,
    end: str | None = None,
    customer: str | None = None,
) -> TransactionFilter:
    """Build a TransactionFilter from raw (query-string style) values."""
    if tx_type is not None and tx_type not in TRANSACTION_TYPES:
        raise InvalidInputError(f"type must be one of: {', '.join(TRANSACTION_TYPES)}")
    return TransactionFilter(
        type=tx_type,
        date_range=parse_date_range(start, end),
        customer_name=(customer or "").strip() or None,
    )


def parse_date_range(start: str | None, end: str | None) -> DateRange:
    try:
        start_d = parse_iso_date(start)
        end_d = parse_iso_date(end)
    except ValueError:
        raise InvalidInputError("start and end must be ISO-8601 dates")
    return DateRange(start=start_d, end=end_d)


def list_transactions(state: StoreState, tx_filter: TransactionFilter | None = None) -> Iterator[Transaction]:
    """
    Lazily yield matching transactions by date ascending, ties by invoice sequence.

    The ordering snapshot is taken under the state lock, so the sequence
    reflects only fully recorded transactions even if iterated later.
    """
    tx_filter = tx_filter or TransactionFilter()
    with state.locked():
        snapshot = sorted(state.transactions, key=lambda tx: tx.sort_key)
    return (tx for tx in snapshot if tx_filter.matches(tx))
