# Overview: Serializes report data to CSV text for download.

from __future__ import annotations

import csv
import io

from ..models import DateRange
from ..state import StoreState
from .reporting_service import tax_report, tax_report_rows


TAX_ROW_COLUMNS = [
    "invoice_number",
    "type",
    "date",
    "counterparty",
    "subtotal_paise",
    "gst_amount_paise",
    "total_amount_paise",
]


def format_rupees(paise: int) -> str:
    sign = "-" if paise < 0 else ""
    rupees, rem = divmod(abs(paise), 100)
    return f"{sign}{rupees}.{rem:02d}"


def tax_report_csv(state: StoreState, date_range: DateRange) -> str:
    """
    Render a tax report as CSV: a summary block, a blank line, then one row
    per transaction. Totals are copied from the report, never recomputed.
    """
    with state.locked():
        summary = tax_report(state, date_range)
        rows = tax_report_rows(state, date_range)

    stream = io.StringIO()
    writer = csv.writer(stream, lineterminator="\n")

    writer.writerow(["metric", "value"])
    writer.writerow(["start", summary.date_range.start.isoformat() if summary.date_range.start else ""])
    writer.writerow(["end", summary.date_range.end.isoformat() if summary.date_range.end else ""])
    writer.writerow(["total_sales", format_rupees(summary.total_sales_paise)])
    writer.writerow(["total_purchases", format_rupees(summary.total_purchases_paise)])
    writer.writerow(["gst_collected", format_rupees(summary.gst_collected_paise)])
    writer.writerow(["gst_paid", format_rupees(summary.gst_paid_paise)])
    writer.writerow(["net_profit", format_rupees(summary.net_profit_paise)])
    writer.writerow([])

    writer.writerow([c.replace("_paise", "") for c in TAX_ROW_COLUMNS])
    for row in rows:
        writer.writerow([
            format_rupees(row[c]) if c.endswith("_paise") else (row[c] if row[c] is not None else "")
            for c in TAX_ROW_COLUMNS
        ])
    return stream.getvalue()
