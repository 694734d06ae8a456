# Overview: Pytest coverage for catalog lookup, search and stock mutation.

from datetime import date

import pytest

from medstore.errors import ConflictError, InsufficientStockError, InvalidInputError, NotFoundError, OutOfStockError
from medstore.services import catalog_service, ledger_service


class TestLookup:

    def test_get_medicine(self, state, catalog):
        medicine = catalog_service.get_medicine(state, catalog["cetirizine"].id)
        assert medicine.name == "Cetirizine 10mg"

    def test_get_unknown_medicine(self, state, catalog):
        with pytest.raises(NotFoundError) as exc:
            catalog_service.get_medicine(state, 999)
        assert exc.value.details == {"medicine_id": 999}

    def test_list_is_ordered_by_name(self, state, catalog):
        names = [m.name for m in catalog_service.list_medicines(state)]
        assert names == ["Amoxicillin 250mg", "Cetirizine 10mg", "Paracetamol 500mg"]

    def test_ids_are_sequential(self, state, catalog):
        assert sorted(m.id for m in catalog.values()) == [1, 2, 3]


class TestSearch:

    def test_prefix_is_case_insensitive(self, state, catalog):
        results = catalog_service.search_medicines(state, "para")
        assert [m.name for m in results] == ["Paracetamol 500mg"]

        results = catalog_service.search_medicines(state, "PARA")
        assert [m.name for m in results] == ["Paracetamol 500mg"]

    def test_relevance_then_name(self, state, make_medicine):
        make_medicine(state, name="Vitamin D3", batch_no="V1")
        make_medicine(state, name="Vitamin", batch_no="V2")
        make_medicine(state, name="Calcium with Vitamin D", batch_no="V3")
        make_medicine(state, name="Vitamin B12", batch_no="V4")

        results = catalog_service.search_medicines(state, "vitamin")
        assert [m.name for m in results] == [
            "Vitamin",                 # exact
            "Vitamin B12",             # prefix, by name
            "Vitamin D3",
        ]

    def test_only_name_prefixes_match(self, state, catalog, make_medicine):
        make_medicine(state, name="Dolo", generic_name="Paracetamol", batch_no="DL1")

        assert [m.name for m in catalog_service.search_medicines(state, "para")] == ["Paracetamol 500mg"]
        assert catalog_service.search_medicines(state, "500") == []
        assert catalog_service.search_medicines(state, "10mg") == []

    def test_no_match(self, state, catalog):
        assert catalog_service.search_medicines(state, "zzz") == []

    def test_blank_prefix_returns_catalog(self, state, catalog):
        results = catalog_service.search_medicines(state, "  ")
        assert len(results) == 3

    def test_search_is_restartable(self, state, catalog):
        first = catalog_service.search_medicines(state, "c")
        second = catalog_service.search_medicines(state, "c")
        assert [m.id for m in first] == [m.id for m in second]


class TestAdjustStock:

    def test_adjust_up_and_down(self, state, catalog):
        medicine_id = catalog["paracetamol"].id
        catalog_service.adjust_stock(state, medicine_id, 5)
        updated = catalog_service.adjust_stock(state, medicine_id, -12)
        assert updated.stock_quantity == 3
        assert state.medicines[medicine_id].stock_quantity == 3

    def test_adjust_to_exactly_zero(self, state, catalog):
        updated = catalog_service.adjust_stock(state, catalog["paracetamol"].id, -10)
        assert updated.stock_quantity == 0

    def test_negative_result_is_out_of_stock(self, state, catalog):
        medicine_id = catalog["paracetamol"].id
        with pytest.raises(OutOfStockError) as exc:
            catalog_service.adjust_stock(state, medicine_id, -11)
        assert isinstance(exc.value, InsufficientStockError)
        assert exc.value.details["on_hand"] == 10
        assert state.medicines[medicine_id].stock_quantity == 10

    def test_unknown_id(self, state):
        with pytest.raises(NotFoundError):
            catalog_service.adjust_stock(state, 42, 1)


class TestPredicates:

    def test_low_stock_is_strictly_below_minimum(self, state, make_medicine):
        medicine = make_medicine(state, stock_quantity=5, min_stock_level=5)
        assert catalog_service.is_low_stock(medicine) is False
        medicine.stock_quantity = 4
        assert catalog_service.is_low_stock(medicine) is True

    @pytest.mark.parametrize(
        "expiry, expected",
        [
            (date(2024, 1, 15), True),   # expires today
            (date(2024, 2, 14), True),   # exactly `days` away
            (date(2024, 2, 15), False),  # one day past the window
            (date(2024, 1, 14), False),  # already expired
        ],
    )
    def test_expiring_within_bounds(self, state, make_medicine, expiry, expected):
        medicine = make_medicine(state, expiry_date=expiry)
        assert catalog_service.is_expiring_within(medicine, 30, date(2024, 1, 15)) is expected

    def test_stock_status_precedence(self, state, make_medicine):
        as_of = date(2024, 1, 15)
        expired = make_medicine(state, batch_no="E", expiry_date=date(2024, 1, 1), stock_quantity=0)
        empty = make_medicine(state, batch_no="O", stock_quantity=0)
        low = make_medicine(state, batch_no="L", stock_quantity=2)
        fine = make_medicine(state, batch_no="F", stock_quantity=50)

        assert catalog_service.stock_status(expired, as_of) == catalog_service.STATUS_EXPIRED
        assert catalog_service.stock_status(empty, as_of) == catalog_service.STATUS_OUT_OF_STOCK
        assert catalog_service.stock_status(low, as_of) == catalog_service.STATUS_LOW_STOCK
        assert catalog_service.stock_status(fine, as_of) == catalog_service.STATUS_IN_STOCK

    def test_inventory_items(self, state, catalog):
        catalog["paracetamol"].stock_quantity = 3
        items = {item.medicine.name: item for item in catalog_service.inventory_items(state)}
        assert items["Paracetamol 500mg"].quantity == 3
        assert items["Paracetamol 500mg"].is_low_stock is True
        assert items["Cetirizine 10mg"].is_low_stock is False


class TestCatalogMaintenance:

    def test_add_coerces_strings(self, state):
        medicine = catalog_service.add_medicine(state, {
            "name": " Dolo 650 ",
            "batch_no": "D-1",
            "supplier": "Micro Labs",
            "expiry_date": "2025-03-31",
            "price_paise": "320",
            "stock_quantity": "12",
            "is_schedule_h": "false",
        })
        assert medicine.name == "Dolo 650"
        assert medicine.expiry_date == date(2025, 3, 31)
        assert medicine.price_paise == 320
        assert medicine.stock_quantity == 12
        assert medicine.is_schedule_h is False
        assert medicine.min_stock_level == 0

    def test_add_requires_fields(self, state):
        with pytest.raises(InvalidInputError) as exc:
            catalog_service.add_medicine(state, {"name": "Dolo 650"})
        assert "Missing required fields" in str(exc.value)
        assert state.medicines == {}

    @pytest.mark.parametrize(
        "field, value",
        [
            ("price_paise", -1),
            ("stock_quantity", -3),
            ("min_stock_level", -1),
            ("price_paise", 12.5),
            ("expiry_date", "31/03/2025"),
            ("name", ""),
        ],
    )
    def test_add_rejects_bad_values(self, state, field, value):
        payload = {
            "name": "Dolo 650",
            "batch_no": "D-1",
            "supplier": "Micro Labs",
            "expiry_date": "2025-03-31",
            "price_paise": 320,
        }
        payload[field] = value
        with pytest.raises(InvalidInputError):
            catalog_service.add_medicine(state, payload)

    def test_add_rejects_unknown_field(self, state):
        with pytest.raises(InvalidInputError):
            catalog_service.add_medicine(state, {
                "name": "Dolo 650", "batch_no": "D-1", "supplier": "Micro Labs",
                "expiry_date": "2025-03-31", "price_paise": 320, "colour": "white",
            })

    def test_update_descriptive_fields(self, state, catalog):
        medicine_id = catalog["paracetamol"].id
        updated = catalog_service.update_medicine(state, medicine_id, {"price_paise": 275, "rack_number": "A3"})
        assert updated.price_paise == 275
        assert updated.rack_number == "A3"
        assert updated.stock_quantity == 10

    def test_update_cannot_touch_stock(self, state, catalog):
        with pytest.raises(ConflictError):
            catalog_service.update_medicine(state, catalog["paracetamol"].id, {"stock_quantity": 99})
        assert catalog["paracetamol"].stock_quantity == 10

    def test_delete_unused_medicine(self, state, catalog):
        medicine_id = catalog["cetirizine"].id
        catalog_service.delete_medicine(state, medicine_id)
        assert medicine_id not in state.medicines

    def test_delete_referenced_medicine_conflicts(self, state, catalog):
        medicine_id = catalog["paracetamol"].id
        ledger_service.record_transaction(state, "sell", [{"medicine_id": medicine_id, "quantity": 1}])
        with pytest.raises(ConflictError) as exc:
            catalog_service.delete_medicine(state, medicine_id)
        assert exc.value.details["invoices"] == ["S-000001"]
        assert medicine_id in state.medicines

    def test_deleted_ids_are_not_reused(self, state, catalog, make_medicine):
        catalog_service.delete_medicine(state, catalog["amoxicillin"].id)
        medicine = make_medicine(state, name="Ibuprofen", batch_no="IB-1")
        assert medicine.id == 4
