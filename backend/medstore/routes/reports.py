from flask import Blueprint, Response, current_app, jsonify, request

from ..decorators import error_response, get_state
from ..errors import InvalidInputError, MedStoreError
from ..services import export_service, reporting_service
from ..services.ledger_service import parse_date_range
from ..time_utils import parse_iso_date, today
from ..validation import coerce_int


reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


def _as_of_arg():
    try:
        return parse_iso_date(request.args.get("as_of"))
    except ValueError:
        raise InvalidInputError("as_of must be an ISO-8601 date")


def _days_arg():
    raw = request.args.get("days")
    if raw is None:
        return current_app.config["MEDSTORE_EXPIRY_ALERT_DAYS"]
    return coerce_int("days", raw)


@reports_bp.get("/low-stock")
def low_stock_route():
    rows = reporting_service.low_stock_report(get_state())
    return jsonify({"items": [row.to_dict() for row in rows], "count": len(rows)}), 200


@reports_bp.get("/expiring")
def expiring_route():
    try:
        days = _days_arg()
        as_of = _as_of_arg() or today()
        rows = reporting_service.expiring_report(get_state(), days, as_of)
    except MedStoreError as e:
        return error_response(e)
    return jsonify({
        "days": days,
        "as_of": as_of.isoformat(),
        "items": [m.to_dict() for m in rows],
        "count": len(rows),
    }), 200


@reports_bp.get("/expired")
def expired_route():
    try:
        rows = reporting_service.expired_report(get_state(), _as_of_arg())
    except MedStoreError as e:
        return error_response(e)
    return jsonify({"items": [m.to_dict() for m in rows], "count": len(rows)}), 200


@reports_bp.get("/tax")
def tax_route():
    try:
        date_range = parse_date_range(request.args.get("start"), request.args.get("end"))
        report = reporting_service.tax_report(get_state(), date_range)
    except MedStoreError as e:
        return error_response(e)
    return jsonify(report.to_dict()), 200


@reports_bp.get("/tax.csv")
def tax_csv_route():
    try:
        date_range = parse_date_range(request.args.get("start"), request.args.get("end"))
        body = export_service.tax_report_csv(get_state(), date_range)
    except MedStoreError as e:
        return error_response(e)
    filename = "tax-report-{}-{}.csv".format(
        date_range.start.isoformat() if date_range.start else "all",
        date_range.end.isoformat() if date_range.end else "all",
    )
    return Response(
        body,
        mimetype="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@reports_bp.get("/dashboard")
def dashboard_route():
    try:
        summary = reporting_service.dashboard_summary(
            get_state(),
            as_of=_as_of_arg(),
            expiry_days=_days_arg(),
        )
    except MedStoreError as e:
        return error_response(e)
    return jsonify(summary), 200
