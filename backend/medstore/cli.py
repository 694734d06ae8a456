# Overview: Flask CLI commands for seeding, inspection and maintenance.

# backend/medstore/cli.py
# Commands Legend (run from the backend directory):
# - python -m flask medstore seed
#   Add the demo catalog (idempotent by medicine name).
# - python -m flask medstore low-stock
#   Print medicines below their minimum stock level, most critical first.
# - python -m flask medstore expiring --days 30
#   Print medicines expiring within the window.
# - python -m flask medstore tax-report --start 2024-01-01 --end 2024-01-31 [--csv]
#   Print the GST/profit summary for a date range.
# - python -m flask medstore reset --yes
#   DEV/TEST only: discard the saved store state and start empty.

import click
from flask import current_app
from flask.cli import with_appcontext

from .errors import MedStoreError
from .services import export_service, persistence_service, reporting_service
from .services.export_service import format_rupees
from .services.ledger_service import parse_date_range
from .seed import seed_catalog
from .state import StoreState


def _state() -> StoreState:
    return current_app.extensions["medstore"]


def _save() -> None:
    persistence_service.save_state(_state(), current_app.config["MEDSTORE_SNAPSHOT_KEY"])


@click.group('medstore')
def medstore_group():
    """Medical store catalog, ledger and report commands."""


@medstore_group.command('seed')
@with_appcontext
def seed_command():
    """Load the demo medicine catalog."""
    added = seed_catalog(_state())
    _save()
    click.echo(f"PASS Added {len(added)} medicines")
    for medicine in added:
        click.echo(f"  {medicine.id:>4}  {medicine.name}  (stock {medicine.stock_quantity})")


@medstore_group.command('low-stock')
@with_appcontext
def low_stock_command():
    """List medicines below their minimum stock level."""
    rows = reporting_service.low_stock_report(_state())
    if not rows:
        click.echo("No medicines below minimum stock")
        return
    for row in rows:
        click.echo(
            f"{row.medicine.id:>4}  {row.medicine.name:<30} "
            f"stock={row.quantity:<5} min={row.medicine.min_stock_level:<5} shortfall={-row.shortfall}"
        )


@medstore_group.command('expiring')
@click.option('--days', type=int, default=None, help='Alert window in days')
@with_appcontext
def expiring_command(days):
    """List medicines expiring within the alert window."""
    if days is None:
        days = current_app.config["MEDSTORE_EXPIRY_ALERT_DAYS"]
    try:
        rows = reporting_service.expiring_report(_state(), days)
    except MedStoreError as e:
        raise click.BadParameter(str(e), param_hint="--days")
    if not rows:
        click.echo(f"Nothing expires within {days} days")
        return
    for medicine in rows:
        click.echo(f"{medicine.expiry_date.isoformat()}  {medicine.name:<30} batch={medicine.batch_no}")


@medstore_group.command('tax-report')
@click.option('--start', default=None, help='First day (YYYY-MM-DD), inclusive')
@click.option('--end', default=None, help='Last day (YYYY-MM-DD), inclusive')
@click.option('--csv', 'as_csv', is_flag=True, help='Print the CSV export instead of the summary')
@with_appcontext
def tax_report_command(start, end, as_csv):
    """Print the GST and profit summary for a date range."""
    try:
        date_range = parse_date_range(start, end)
    except MedStoreError as e:
        raise click.BadParameter(str(e))

    if as_csv:
        click.echo(export_service.tax_report_csv(_state(), date_range), nl=False)
        return

    report = reporting_service.tax_report(_state(), date_range)
    click.echo(f"Period:           {start or '-'} .. {end or '-'}")
    click.echo(f"Total sales:      {format_rupees(report.total_sales_paise)}  ({report.sell_count} invoices)")
    click.echo(f"Total purchases:  {format_rupees(report.total_purchases_paise)}  ({report.purchase_count} invoices)")
    click.echo(f"GST collected:    {format_rupees(report.gst_collected_paise)}")
    click.echo(f"GST paid:         {format_rupees(report.gst_paid_paise)}")
    click.echo(f"Net profit:       {format_rupees(report.net_profit_paise)}")


@medstore_group.command('reset')
@click.option('--yes', is_flag=True, help='Confirm discarding all data')
@with_appcontext
def reset_command(yes):
    """DEV/TEST only: discard the saved store state."""
    if not yes:
        click.echo("FAIL Refusing to reset without --yes")
        raise SystemExit(1)
    persistence_service.delete_state(current_app.config["MEDSTORE_SNAPSHOT_KEY"])
    current_app.extensions["medstore"] = StoreState(gst_rate_bps=current_app.config["MEDSTORE_GST_RATE_BPS"])
    click.echo("PASS Store state cleared")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(medstore_group)
