# Overview: Read-only reports over the catalog and ledger (stock alerts, tax and profit).

from __future__ import annotations

from datetime import date

from ..errors import InvalidInputError
from ..models import PURCHASE, SELL, DateRange, InventoryItem, Medicine, TaxData, TransactionFilter
from ..state import StoreState
from ..time_utils import today
from .catalog_service import (
    is_expired,
    is_expiring_within,
    is_low_stock,
    list_medicines,
    to_inventory_item,
)
from .ledger_service import list_transactions


def _check_window(days: int) -> None:
    if days < 0:
        raise InvalidInputError("days must be >= 0", details={"days": days})


def low_stock_report(state: StoreState) -> list[InventoryItem]:
    """Medicines below their minimum level, most critical (largest shortfall) first."""
    rows = [to_inventory_item(m) for m in list_medicines(state) if is_low_stock(m)]
    rows.sort(key=lambda row: (row.shortfall, row.medicine.name.casefold(), row.medicine.id))
    return rows


def expiring_report(state: StoreState, days: int, as_of: date | None = None) -> list[Medicine]:
    """Medicines expiring within `days` of as_of (inclusive both ends), soonest first."""
    _check_window(days)
    as_of = as_of or today()
    rows = [m for m in list_medicines(state) if is_expiring_within(m, days, as_of)]
    rows.sort(key=lambda m: (m.expiry_date, m.name.casefold(), m.id))
    return rows


def expired_report(state: StoreState, as_of: date | None = None) -> list[Medicine]:
    as_of = as_of or today()
    rows = [m for m in list_medicines(state) if is_expired(m, as_of)]
    rows.sort(key=lambda m: (m.expiry_date, m.name.casefold(), m.id))
    return rows


def tax_report(state: StoreState, date_range: DateRange) -> TaxData:
    """
    Aggregate sales, purchases and GST over an inclusive date range.

    A missing GST amount counts as zero. Because each transaction falls in
    exactly one day, reports over adjacent ranges add up to the report over
    their union.
    """
    totals = {
        "total_sales_paise": 0,
        "total_purchases_paise": 0,
        "gst_collected_paise": 0,
        "gst_paid_paise": 0,
        "sell_count": 0,
        "purchase_count": 0,
    }
    for tx in list_transactions(state, TransactionFilter(date_range=date_range)):
        gst = tx.gst_amount_paise or 0
        if tx.type == SELL:
            totals["total_sales_paise"] += tx.total_amount_paise
            totals["gst_collected_paise"] += gst
            totals["sell_count"] += 1
        elif tx.type == PURCHASE:
            totals["total_purchases_paise"] += tx.total_amount_paise
            totals["gst_paid_paise"] += gst
            totals["purchase_count"] += 1
    return TaxData(date_range=date_range, **totals)


def tax_report_rows(state: StoreState, date_range: DateRange) -> list[dict]:
    """Per-transaction rows behind a tax report, in ledger order."""
    return [
        {
            "invoice_number": tx.invoice_number,
            "type": tx.type,
            "date": tx.date.date().isoformat(),
            "counterparty": tx.counterparty,
            "subtotal_paise": tx.subtotal_paise,
            "gst_amount_paise": tx.gst_amount_paise or 0,
            "total_amount_paise": tx.total_amount_paise,
        }
        for tx in list_transactions(state, TransactionFilter(date_range=date_range))
    ]


def dashboard_summary(state: StoreState, *, as_of: date | None = None, expiry_days: int = 30) -> dict:
    _check_window(expiry_days)
    as_of = as_of or today()
    medicines = list_medicines(state)
    todays = tax_report(state, DateRange(start=as_of, end=as_of))
    return {
        "as_of": as_of.isoformat(),
        "medicine_count": len(medicines),
        "total_units": sum(m.stock_quantity for m in medicines),
        "low_stock_count": sum(1 for m in medicines if is_low_stock(m)),
        "expiring_count": sum(1 for m in medicines if is_expiring_within(m, expiry_days, as_of)),
        "expired_count": sum(1 for m in medicines if is_expired(m, as_of)),
        "expiry_days": expiry_days,
        "today_sales_paise": todays.total_sales_paise,
        "today_sell_count": todays.sell_count,
        "today_purchases_paise": todays.total_purchases_paise,
    }
