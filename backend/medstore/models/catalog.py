from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass
class Medicine:
    """
    Catalog record for one medicine batch.

    stock_quantity is mutated in place, and only by stock adjustments
    issued through the catalog service (ledger postings or manual
    corrections). Every other field is descriptive.
    """
    id: int
    name: str
    batch_no: str
    supplier: str
    expiry_date: date
    is_schedule_h: bool = False
    price_paise: int = 0
    stock_quantity: int = 0
    min_stock_level: int = 0
    generic_name: Optional[str] = None
    category: Optional[str] = None
    manufacturer: Optional[str] = None
    rack_number: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "batch_no": self.batch_no,
            "supplier": self.supplier,
            "expiry_date": self.expiry_date.isoformat(),
            "is_schedule_h": self.is_schedule_h,
            "price_paise": self.price_paise,
            "stock_quantity": self.stock_quantity,
            "min_stock_level": self.min_stock_level,
            "generic_name": self.generic_name,
            "category": self.category,
            "manufacturer": self.manufacturer,
            "rack_number": self.rack_number,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Medicine":
        return cls(
            id=int(data["id"]),
            name=data["name"],
            batch_no=data["batch_no"],
            supplier=data["supplier"],
            expiry_date=date.fromisoformat(data["expiry_date"]),
            is_schedule_h=bool(data.get("is_schedule_h", False)),
            price_paise=int(data.get("price_paise", 0)),
            stock_quantity=int(data.get("stock_quantity", 0)),
            min_stock_level=int(data.get("min_stock_level", 0)),
            generic_name=data.get("generic_name"),
            category=data.get("category"),
            manufacturer=data.get("manufacturer"),
            rack_number=data.get("rack_number"),
        )


@dataclass(frozen=True)
class InventoryItem:
    """Derived view of a medicine's stock; never stored."""
    medicine: Medicine
    quantity: int
    is_low_stock: bool

    @property
    def shortfall(self) -> int:
        return self.quantity - self.medicine.min_stock_level

    def to_dict(self) -> dict:
        return {
            "medicine": self.medicine.to_dict(),
            "quantity": self.quantity,
            "is_low_stock": self.is_low_stock,
        }
