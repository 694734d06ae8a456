# Overview: Pytest coverage for the `flask medstore` CLI commands.

from medstore.decorators import get_state
from medstore.seed import DEMO_MEDICINES
from medstore.services import persistence_service


def test_seed_is_idempotent(app):
    runner = app.test_cli_runner()

    result = runner.invoke(args=["medstore", "seed"])
    assert result.exit_code == 0
    assert f"PASS Added {len(DEMO_MEDICINES)} medicines" in result.output

    result = runner.invoke(args=["medstore", "seed"])
    assert "PASS Added 0 medicines" in result.output

    saved = persistence_service.load_state(app.config["MEDSTORE_SNAPSHOT_KEY"])
    assert len(saved.medicines) == len(DEMO_MEDICINES)


def test_low_stock_and_expiring(app):
    runner = app.test_cli_runner()
    runner.invoke(args=["medstore", "seed"])

    result = runner.invoke(args=["medstore", "low-stock"])
    assert result.exit_code == 0
    assert "Azithromycin 500mg" in result.output
    assert "Cough Syrup 100ml" in result.output
    assert "Paracetamol 500mg" not in result.output

    result = runner.invoke(args=["medstore", "expiring", "--days", "30"])
    assert result.exit_code == 0
    assert "Amoxicillin 250mg" in result.output
    assert "Cough Syrup 100ml" not in result.output

    result = runner.invoke(args=["medstore", "expiring", "--days", "-3"])
    assert result.exit_code != 0


def test_tax_report(app):
    runner = app.test_cli_runner()
    result = runner.invoke(args=["medstore", "tax-report", "--start", "2024-01-01", "--end", "2024-01-31"])
    assert result.exit_code == 0
    assert "Total sales:      0.00  (0 invoices)" in result.output

    result = runner.invoke(args=["medstore", "tax-report", "--csv"])
    assert result.output.startswith("metric,value\n")

    result = runner.invoke(args=["medstore", "tax-report", "--start", "2024-02-01", "--end", "2024-01-01"])
    assert result.exit_code != 0


def test_reset(app):
    runner = app.test_cli_runner()
    runner.invoke(args=["medstore", "seed"])

    result = runner.invoke(args=["medstore", "reset"])
    assert result.exit_code == 1
    assert len(get_state().medicines) == len(DEMO_MEDICINES)

    result = runner.invoke(args=["medstore", "reset", "--yes"])
    assert result.exit_code == 0
    assert get_state().medicines == {}
    assert persistence_service.load_state(app.config["MEDSTORE_SNAPSHOT_KEY"]).medicines == {}
