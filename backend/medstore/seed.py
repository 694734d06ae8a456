# Overview: Demo catalog used by the `flask medstore seed` command.

from __future__ import annotations

from datetime import date, timedelta

from .models import Medicine
from .services.catalog_service import add_medicine, search_medicines
from .state import StoreState
from .time_utils import today


# expiry is expressed in days from the seeding date
DEMO_MEDICINES = [
    {"name": "Paracetamol 500mg", "generic_name": "Acetaminophen", "batch_no": "PCM-2401",
     "supplier": "Cipla Distributors", "category": "tablet", "manufacturer": "Cipla",
     "price_paise": 250, "stock_quantity": 200, "min_stock_level": 50, "expiry_days": 540},
    {"name": "Amoxicillin 250mg", "generic_name": "Amoxicillin", "batch_no": "AMX-1187",
     "supplier": "Sun Pharma Agency", "category": "capsule", "manufacturer": "Sun Pharma",
     "price_paise": 900, "stock_quantity": 40, "min_stock_level": 30, "expiry_days": 20,
     "is_schedule_h": True},
    {"name": "Azithromycin 500mg", "generic_name": "Azithromycin", "batch_no": "AZI-0456",
     "supplier": "Sun Pharma Agency", "category": "tablet", "manufacturer": "Alembic",
     "price_paise": 2400, "stock_quantity": 12, "min_stock_level": 15, "expiry_days": 300,
     "is_schedule_h": True},
    {"name": "Cetirizine 10mg", "generic_name": "Cetirizine", "batch_no": "CTZ-7781",
     "supplier": "Mankind Traders", "category": "tablet", "manufacturer": "Mankind",
     "price_paise": 180, "stock_quantity": 150, "min_stock_level": 40, "expiry_days": 400},
    {"name": "Cough Syrup 100ml", "generic_name": "Dextromethorphan", "batch_no": "CSY-3321",
     "supplier": "Mankind Traders", "category": "syrup", "manufacturer": "Dabur",
     "price_paise": 9500, "stock_quantity": 8, "min_stock_level": 10, "expiry_days": -5},
    {"name": "Insulin Glargine", "generic_name": "Insulin", "batch_no": "INS-0099",
     "supplier": "Biocon Medical", "category": "injection", "manufacturer": "Biocon",
     "price_paise": 68000, "stock_quantity": 6, "min_stock_level": 5, "expiry_days": 90,
     "is_schedule_h": True, "rack_number": "FRIDGE-1"},
]


def seed_catalog(state: StoreState, *, as_of: date | None = None) -> list[Medicine]:
    """Add the demo medicines not already present (matched by exact name)."""
    as_of = as_of or today()
    added = []
    for row in DEMO_MEDICINES:
        fields = dict(row)
        expiry_days = fields.pop("expiry_days")
        if any(m.name == fields["name"] for m in search_medicines(state, fields["name"])):
            continue
        fields["expiry_date"] = as_of + timedelta(days=expiry_days)
        added.append(add_medicine(state, fields))
    return added
