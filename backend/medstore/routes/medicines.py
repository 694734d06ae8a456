# Overview: Flask API routes for the medicine catalog; parses input and returns JSON responses.

# backend/medstore/routes/medicines.py
"""
Catalog routes.

Stock is never edited through PATCH. It moves through transactions, or
through the manual correction endpoint POST /<id>/adjust.
"""
from flask import Blueprint, current_app, jsonify, request

from ..decorators import error_response, get_state, persists_state
from ..errors import MedStoreError
from ..services import catalog_service
from ..validation import coerce_int


medicines_bp = Blueprint("medicines", __name__, url_prefix="/api/medicines")


def _medicine_row(medicine) -> dict:
    row = medicine.to_dict()
    row["stock_status"] = catalog_service.stock_status(medicine)
    row["is_low_stock"] = catalog_service.is_low_stock(medicine)
    return row


@medicines_bp.get("")
def list_medicines_route():
    """
    List the catalog, or search it.

    Query params:
    - q: str (optional) - name prefix, case-insensitive, ranked by relevance
    """
    state = get_state()
    query = request.args.get("q")
    if query is not None:
        medicines = catalog_service.search_medicines(state, query)
    else:
        medicines = catalog_service.list_medicines(state)
    return {"items": [_medicine_row(m) for m in medicines], "count": len(medicines)}


@medicines_bp.get("/inventory")
def inventory_route():
    items = list(catalog_service.inventory_items(get_state()))
    return {
        "items": [
            {**item.to_dict(), "stock_status": catalog_service.stock_status(item.medicine)}
            for item in items
        ],
        "count": len(items),
    }


@medicines_bp.post("")
@persists_state
def create_medicine_route():
    payload = request.get_json(silent=True) or {}
    try:
        medicine = catalog_service.add_medicine(get_state(), payload)
        return jsonify({"medicine": _medicine_row(medicine)}), 201
    except MedStoreError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to create medicine")
        return jsonify({"error": "Internal server error"}), 500


@medicines_bp.get("/<int:medicine_id>")
def get_medicine_route(medicine_id: int):
    try:
        medicine = catalog_service.get_medicine(get_state(), medicine_id)
    except MedStoreError as e:
        return error_response(e)
    return jsonify({"medicine": _medicine_row(medicine)}), 200


@medicines_bp.patch("/<int:medicine_id>")
@persists_state
def update_medicine_route(medicine_id: int):
    payload = request.get_json(silent=True) or {}
    try:
        medicine = catalog_service.update_medicine(get_state(), medicine_id, payload)
        return jsonify({"medicine": _medicine_row(medicine)}), 200
    except MedStoreError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to update medicine")
        return jsonify({"error": "Internal server error"}), 500


@medicines_bp.delete("/<int:medicine_id>")
@persists_state
def delete_medicine_route(medicine_id: int):
    try:
        medicine = catalog_service.delete_medicine(get_state(), medicine_id)
        return jsonify({"deleted": medicine.id}), 200
    except MedStoreError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to delete medicine")
        return jsonify({"error": "Internal server error"}), 500


@medicines_bp.post("/<int:medicine_id>/adjust")
@persists_state
def adjust_stock_route(medicine_id: int):
    """
    Manual stock correction outside any transaction.

    Body: {"delta": int}. Fails with 409 if stock would go negative.
    """
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({"error": "Invalid payload"}), 400
    if "delta" not in data:
        return jsonify({"error": "delta required"}), 400
    try:
        delta = coerce_int("delta", data["delta"])
        medicine = catalog_service.adjust_stock(get_state(), medicine_id, delta)
        return jsonify({"medicine": _medicine_row(medicine)}), 200
    except MedStoreError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to adjust stock")
        return jsonify({"error": "Internal server error"}), 500
