# Overview: Flask API routes for sell/purchase transactions; parses input and returns JSON responses.

# backend/medstore/routes/transactions.py
"""
Transaction routes.

Time semantics:
- API accepts ISO-8601 datetimes with Z/offsets; the ledger normalizes to UTC-naive.
- List filters take calendar dates; start and end are both inclusive.
"""
from flask import Blueprint, current_app, jsonify, request

from ..decorators import error_response, get_state, persists_state
from ..errors import MedStoreError
from ..services import ledger_service
from ..services.ledger_service import METADATA_FIELDS


transactions_bp = Blueprint("transactions", __name__, url_prefix="/api/transactions")


@transactions_bp.post("")
@persists_state
def record_transaction_route():
    """
    Record a sell or purchase.

    Body:
    - type: "sell" | "purchase"
    - items: [{"medicine_id": int, "quantity": int, "price_paise": int?}, ...]
    - date, customer_name, supplier_name, prescription_files,
      skip_prescription, gst_rate_bps, note (all optional)
    """
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({"error": "Invalid payload"}), 400
    tx_type = data.get("type")
    if not tx_type:
        return jsonify({"error": "type required"}), 400

    metadata = {k: v for k, v in data.items() if k in METADATA_FIELDS}
    unknown = sorted(set(data) - METADATA_FIELDS - {"type", "items"})
    if unknown:
        return jsonify({"error": f"Field not allowed: {', '.join(unknown)}"}), 400

    try:
        tx = ledger_service.record_transaction(get_state(), tx_type, data.get("items"), metadata)
        return jsonify({"transaction": tx.to_dict()}), 201
    except MedStoreError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to record transaction")
        return jsonify({"error": "Internal server error"}), 500


@transactions_bp.get("")
def list_transactions_route():
    """
    List transactions by date, ties by invoice number.

    Query params: type, start, end (YYYY-MM-DD, inclusive), customer
    """
    try:
        tx_filter = ledger_service.build_filter(
            tx_type=request.args.get("type"),
            start=request.args.get("start"),
            end=request.args.get("end"),
            customer=request.args.get("customer"),
        )
    except MedStoreError as e:
        return error_response(e)

    rows = [tx.to_dict() for tx in ledger_service.list_transactions(get_state(), tx_filter)]
    return jsonify({"items": rows, "count": len(rows)}), 200


@transactions_bp.get("/<int:tx_id>")
def get_transaction_route(tx_id: int):
    try:
        tx = ledger_service.get_transaction(get_state(), tx_id)
    except MedStoreError as e:
        return error_response(e)
    return jsonify({"transaction": tx.to_dict()}), 200


@transactions_bp.delete("/<int:tx_id>")
@persists_state
def delete_transaction_route(tx_id: int):
    """Delete a transaction and reverse its stock movements."""
    try:
        tx = ledger_service.delete_transaction(get_state(), tx_id)
        return jsonify({"deleted": tx.id, "invoice_number": tx.invoice_number}), 200
    except MedStoreError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to delete transaction")
        return jsonify({"error": "Internal server error"}), 500
