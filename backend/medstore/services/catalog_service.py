# Overview: Service-layer operations for the medicine catalog; lookup, search and stock mutation.

from __future__ import annotations

from datetime import date
from typing import Iterator

from ..errors import ConflictError, NotFoundError, OutOfStockError
from ..models import InventoryItem, Medicine
from ..state import StoreState
from ..time_utils import today
from ..validation import FieldPolicy, enforce_rules_medicine, validate_payload


MEDICINE_POLICY = FieldPolicy(
    field_types={
        "name": "str",
        "batch_no": "str",
        "supplier": "str",
        "expiry_date": "date",
        "is_schedule_h": "bool",
        "price_paise": "int",
        "stock_quantity": "int",
        "min_stock_level": "int",
        "generic_name": "str",
        "category": "str",
        "manufacturer": "str",
        "rack_number": "str",
    },
    required_on_create=frozenset({"name", "batch_no", "supplier", "expiry_date", "price_paise"}),
    nullable=frozenset({"generic_name", "category", "manufacturer", "rack_number"}),
)

# stock_quantity is set once on create; afterwards only adjust_stock moves it.
MEDICINE_MUTABLE_FIELDS = set(MEDICINE_POLICY.field_types) - {"stock_quantity"}

STATUS_EXPIRED = "expired"
STATUS_OUT_OF_STOCK = "out_of_stock"
STATUS_LOW_STOCK = "low_stock"
STATUS_IN_STOCK = "in_stock"


def get_medicine(state: StoreState, medicine_id: int) -> Medicine:
    with state.locked():
        medicine = state.medicines.get(medicine_id)
        if medicine is None:
            raise NotFoundError("Medicine not found", details={"medicine_id": medicine_id})
        return medicine


def list_medicines(state: StoreState) -> list[Medicine]:
    with state.locked():
        return sorted(state.medicines.values(), key=lambda m: (m.name.casefold(), m.id))


def _relevance(medicine: Medicine, needle: str) -> int | None:
    name = medicine.name.casefold()
    if name == needle:
        return 0
    if name.startswith(needle):
        return 1
    return None


def search_medicines(state: StoreState, prefix: str) -> list[Medicine]:
    """
    Case-insensitive name-prefix search.

    Only names starting with the prefix match. Ranking: exact name first,
    then other prefix matches; ties by name, then id.
    A blank prefix returns the whole catalog by name.
    """
    needle = (prefix or "").strip().casefold()
    if not needle:
        return list_medicines(state)

    with state.locked():
        ranked = []
        for medicine in state.medicines.values():
            rank = _relevance(medicine, needle)
            if rank is not None:
                ranked.append((rank, medicine.name.casefold(), medicine.id, medicine))
    ranked.sort(key=lambda row: row[:3])
    return [row[3] for row in ranked]


def add_medicine(state: StoreState, payload: dict) -> Medicine:
    """Validate a new catalog record and assign it the next medicine id."""
    patch = validate_payload(payload=payload, policy=MEDICINE_POLICY, partial=False)
    enforce_rules_medicine(patch)

    with state.locked():
        medicine = Medicine(id=state.allocate_medicine_id(), **patch)
        state.medicines[medicine.id] = medicine
        return medicine


def update_medicine(state: StoreState, medicine_id: int, payload: dict) -> Medicine:
    patch = validate_payload(payload=payload, policy=MEDICINE_POLICY, partial=True)
    if "stock_quantity" in patch:
        raise ConflictError(
            "stock_quantity cannot be edited directly; record a transaction or an adjustment",
        )
    enforce_rules_medicine(patch)

    with state.locked():
        medicine = get_medicine(state, medicine_id)
        for key, value in patch.items():
            if key in MEDICINE_MUTABLE_FIELDS:
                setattr(medicine, key, value)
        return medicine


def delete_medicine(state: StoreState, medicine_id: int) -> Medicine:
    with state.locked():
        medicine = get_medicine(state, medicine_id)
        referencing = [
            tx.invoice_number
            for tx in state.transactions
            if any(item.medicine_id == medicine_id for item in tx.items)
        ]
        if referencing:
            raise ConflictError(
                "Medicine is referenced by recorded transactions",
                details={"medicine_id": medicine_id, "invoices": referencing},
            )
        del state.medicines[medicine_id]
        return medicine


def adjust_stock(state: StoreState, medicine_id: int, delta: int) -> Medicine:
    """
    Move a medicine's stock by delta, in place.

    Raises NotFoundError for an unknown id and OutOfStockError when the
    result would be negative; in both cases nothing changes.
    """
    with state.locked():
        medicine = get_medicine(state, medicine_id)
        new_quantity = medicine.stock_quantity + delta
        if new_quantity < 0:
            raise OutOfStockError(
                "Insufficient stock",
                details={
                    "medicine_id": medicine_id,
                    "on_hand": medicine.stock_quantity,
                    "delta": delta,
                },
            )
        medicine.stock_quantity = new_quantity
        return medicine


def is_low_stock(medicine: Medicine) -> bool:
    return medicine.stock_quantity < medicine.min_stock_level


def is_expiring_within(medicine: Medicine, days: int, as_of: date) -> bool:
    remaining = (medicine.expiry_date - as_of).days
    return 0 <= remaining <= days


def is_expired(medicine: Medicine, as_of: date) -> bool:
    return medicine.expiry_date < as_of


def stock_status(medicine: Medicine, as_of: date | None = None) -> str:
    as_of = as_of or today()
    if is_expired(medicine, as_of):
        return STATUS_EXPIRED
    if medicine.stock_quantity == 0:
        return STATUS_OUT_OF_STOCK
    if is_low_stock(medicine):
        return STATUS_LOW_STOCK
    return STATUS_IN_STOCK


def to_inventory_item(medicine: Medicine) -> InventoryItem:
    return InventoryItem(
        medicine=medicine,
        quantity=medicine.stock_quantity,
        is_low_stock=is_low_stock(medicine),
    )


def inventory_items(state: StoreState) -> Iterator[InventoryItem]:
    for medicine in list_medicines(state):
        yield to_inventory_item(medicine)
