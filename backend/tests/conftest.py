"""
Pytest fixtures for MedStore backend tests.

Provides isolated store states, a small demo catalog, and a Flask app
backed by an in-memory SQLite snapshot table.
"""

from datetime import date, datetime

import pytest

from medstore import create_app
from medstore.extensions import db
from medstore.services import catalog_service
from medstore.state import StoreState


AS_OF = date(2024, 1, 15)


@pytest.fixture(scope='function')
def state():
    """Fresh store state with no default GST."""
    return StoreState(gst_rate_bps=0)


@pytest.fixture(scope='function')
def gst_state():
    """Fresh store state charging 12% GST by default."""
    return StoreState(gst_rate_bps=1200)


@pytest.fixture(scope='function')
def make_medicine():
    """Factory adding a medicine with sensible defaults to a given state."""
    def _make(state: StoreState, **overrides):
        fields = {
            "name": "Paracetamol 500mg",
            "batch_no": "B-001",
            "supplier": "Acme Pharma",
            "expiry_date": date(2025, 6, 30),
            "price_paise": 250,
            "stock_quantity": 10,
            "min_stock_level": 5,
        }
        fields.update(overrides)
        return catalog_service.add_medicine(state, fields)
    return _make


@pytest.fixture(scope='function')
def catalog(state, make_medicine):
    """A small catalog: two ordinary medicines and one Schedule H antibiotic."""
    return {
        "paracetamol": make_medicine(state),
        "cetirizine": make_medicine(
            state, name="Cetirizine 10mg", batch_no="C-104", price_paise=180,
            stock_quantity=50, min_stock_level=20, expiry_date=date(2024, 2, 10),
        ),
        "amoxicillin": make_medicine(
            state, name="Amoxicillin 250mg", batch_no="AMX-9", price_paise=900,
            stock_quantity=20, min_stock_level=5, is_schedule_h=True,
            expiry_date=date(2024, 1, 25),
        ),
    }


def on(day: int, month: int = 1, year: int = 2024, hour: int = 10) -> datetime:
    """Transaction timestamp helper."""
    return datetime(year, month, day, hour, 0)


@pytest.fixture(scope='function')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'MEDSTORE_GST_RATE_BPS': 0,
        'MEDSTORE_SNAPSHOT_KEY': 'test',
    })

    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()
