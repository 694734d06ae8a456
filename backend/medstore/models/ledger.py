from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..errors import InvalidInputError
from ..time_utils import parse_iso_datetime, to_utc_z


SELL = "sell"
PURCHASE = "purchase"
TRANSACTION_TYPES = (SELL, PURCHASE)

INVOICE_PREFIXES = {SELL: "S", PURCHASE: "P"}


def format_invoice_number(tx_type: str, seq: int, pad: int = 6) -> str:
    return f"{INVOICE_PREFIXES[tx_type]}-{seq:0{pad}d}"


@dataclass(frozen=True)
class TransactionItem:
    medicine_id: int
    quantity: int
    price_paise: int
    batch_no: str
    medicine_name: str = ""

    @property
    def line_total_paise(self) -> int:
        return self.price_paise * self.quantity

    def to_dict(self) -> dict:
        return {
            "medicine_id": self.medicine_id,
            "medicine_name": self.medicine_name,
            "quantity": self.quantity,
            "price_paise": self.price_paise,
            "batch_no": self.batch_no,
            "line_total_paise": self.line_total_paise,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TransactionItem":
        return cls(
            medicine_id=int(data["medicine_id"]),
            quantity=int(data["quantity"]),
            price_paise=int(data["price_paise"]),
            batch_no=data["batch_no"],
            medicine_name=data.get("medicine_name", ""),
        )


@dataclass(frozen=True)
class Transaction:
    """
    One sell or purchase. Created once by the ledger and never mutated;
    deleting it reverses its stock movements.
    """
    id: int
    type: str
    items: tuple[TransactionItem, ...]
    total_amount_paise: int
    date: datetime
    invoice_seq: int
    customer_name: Optional[str] = None
    supplier_name: Optional[str] = None
    prescription_files: tuple[str, ...] = ()
    gst_amount_paise: Optional[int] = None
    gst_rate_bps: int = 0
    note: Optional[str] = None

    @property
    def invoice_number(self) -> str:
        return format_invoice_number(self.type, self.invoice_seq)

    @property
    def subtotal_paise(self) -> int:
        return sum(item.line_total_paise for item in self.items)

    @property
    def sort_key(self) -> tuple:
        return (self.date, self.invoice_seq, self.id)

    @property
    def counterparty(self) -> Optional[str]:
        return self.customer_name if self.type == SELL else self.supplier_name

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type,
            "invoice_number": self.invoice_number,
            "invoice_seq": self.invoice_seq,
            "date": to_utc_z(self.date),
            "items": [item.to_dict() for item in self.items],
            "subtotal_paise": self.subtotal_paise,
            "gst_rate_bps": self.gst_rate_bps,
            "gst_amount_paise": self.gst_amount_paise,
            "total_amount_paise": self.total_amount_paise,
            "customer_name": self.customer_name,
            "supplier_name": self.supplier_name,
            "prescription_files": list(self.prescription_files),
            "note": self.note,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Transaction":
        return cls(
            id=int(data["id"]),
            type=data["type"],
            items=tuple(TransactionItem.from_dict(item) for item in data["items"]),
            total_amount_paise=int(data["total_amount_paise"]),
            date=parse_iso_datetime(data["date"]),
            invoice_seq=int(data["invoice_seq"]),
            customer_name=data.get("customer_name"),
            supplier_name=data.get("supplier_name"),
            prescription_files=tuple(data.get("prescription_files") or ()),
            gst_amount_paise=data.get("gst_amount_paise"),
            gst_rate_bps=int(data.get("gst_rate_bps") or 0),
            note=data.get("note"),
        )


@dataclass(frozen=True)
class DateRange:
    """Inclusive calendar-date range [start, end]; either bound may be open."""
    start: Optional[date] = None
    end: Optional[date] = None

    def __post_init__(self):
        if self.start is not None and self.end is not None and self.start > self.end:
            raise InvalidInputError(
                "start must be on or before end",
                details={"start": self.start.isoformat(), "end": self.end.isoformat()},
            )

    def contains(self, moment: datetime) -> bool:
        day = moment.date()
        if self.start is not None and day < self.start:
            return False
        if self.end is not None and day > self.end:
            return False
        return True

    def to_dict(self) -> dict:
        return {
            "start": self.start.isoformat() if self.start else None,
            "end": self.end.isoformat() if self.end else None,
        }


@dataclass(frozen=True)
class TransactionFilter:
    type: Optional[str] = None
    date_range: DateRange = field(default_factory=DateRange)
    customer_name: Optional[str] = None

    def matches(self, tx: Transaction) -> bool:
        if self.type is not None and tx.type != self.type:
            return False
        if not self.date_range.contains(tx.date):
            return False
        if self.customer_name is not None:
            if tx.customer_name is None:
                return False
            if self.customer_name.casefold() not in tx.customer_name.casefold():
                return False
        return True


@dataclass(frozen=True)
class TaxData:
    date_range: DateRange
    total_sales_paise: int = 0
    total_purchases_paise: int = 0
    gst_collected_paise: int = 0
    gst_paid_paise: int = 0
    sell_count: int = 0
    purchase_count: int = 0

    @property
    def net_profit_paise(self) -> int:
        return self.total_sales_paise - self.total_purchases_paise

    def to_dict(self) -> dict:
        return {
            **self.date_range.to_dict(),
            "total_sales_paise": self.total_sales_paise,
            "total_purchases_paise": self.total_purchases_paise,
            "gst_collected_paise": self.gst_collected_paise,
            "gst_paid_paise": self.gst_paid_paise,
            "net_profit_paise": self.net_profit_paise,
            "sell_count": self.sell_count,
            "purchase_count": self.purchase_count,
        }
