# Overview: Flask API routes for sales operations; parses input and returns JSON responses.

# backend/salesfloor/routes/sales.py
"""Sales and receipt routes"""

from flask import Blueprint, current_app, jsonify, request

from ..extensions import get_store
from ..services.persistence_service import ReceiptNotFoundError, ReceiptPersistenceError
from ..validation import NotFoundError, ValidationError, require_fields, to_int


sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


def _basket_from_items(items) -> list[tuple]:
    if not isinstance(items, list):
        raise ValidationError("items must be a list")
    basket = []
    for item in items:
        if not isinstance(item, dict):
            raise ValidationError("each item needs product_id and quantity")
        require_fields(item, ("product_id", "quantity"))
        basket.append((item["product_id"], item["quantity"]))
    return basket


@sales_bp.post("")
def create_sale_route():
    """
    Ring up a sale.

    Body: {"register_number": 1, "items": [{"product_id": 1, "quantity": 2}]}
    """
    payload = request.get_json(silent=True) or {}
    store = get_store()

    try:
        require_fields(payload, ("register_number",))
        register_number = to_int(payload["register_number"], "register_number")
        basket = _basket_from_items(payload.get("items") or [])
        receipt = store.create_sale(register_number, basket)
    except NotFoundError as e:
        return jsonify({"error": e.message, "details": e.details}), 404
    except ValidationError as e:
        return jsonify({"error": e.message, "details": e.details}), 400
    except Exception:
        current_app.logger.exception("Failed to create sale")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"receipt": receipt.to_dict()}), 201


@sales_bp.get("")
def list_sales():
    store = get_store()
    return jsonify({
        "receipts": [r.to_dict() for r in store.list_receipts()],
        "count": store.receipt_count(),
    }), 200


@sales_bp.get("/<int:receipt_number>")
def get_sale(receipt_number: int):
    receipt = get_store().get_receipt(receipt_number)
    if receipt is None:
        return jsonify({"error": "Receipt not found"}), 404
    return jsonify({"receipt": receipt.to_dict()}), 200


@sales_bp.get("/<int:receipt_number>/text")
def get_sale_text(receipt_number: int):
    """Stored text rendering, read back from disk."""
    try:
        text = get_store().read_receipt_text(receipt_number)
    except ReceiptNotFoundError as e:
        return jsonify({"error": e.message, "details": e.details}), 404
    except ReceiptPersistenceError as e:
        current_app.logger.error("Failed to read receipt #%s: %s", receipt_number, e.message)
        return jsonify({"error": e.message, "details": e.details}), 500

    return current_app.response_class(text, mimetype="text/plain")


@sales_bp.get("/<int:receipt_number>/snapshot")
def get_sale_snapshot(receipt_number: int):
    """Receipt decoded from its stored snapshot."""
    try:
        receipt = get_store().reload_receipt(receipt_number)
    except ReceiptNotFoundError as e:
        return jsonify({"error": e.message, "details": e.details}), 404
    except ReceiptPersistenceError as e:
        current_app.logger.error("Failed to load receipt #%s: %s", receipt_number, e.message)
        return jsonify({"error": e.message, "details": e.details}), 500

    return jsonify({"receipt": receipt.to_dict()}), 200
