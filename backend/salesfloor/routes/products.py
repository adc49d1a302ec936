# Overview: Flask API routes for products operations; parses input and returns JSON responses.

# backend/salesfloor/routes/products.py
"""
Product delivery and stock routes.

POST with an explicit "id" adds (or replaces) that product; without one
the catalog allocates the next id.
"""

from flask import Blueprint, current_app, jsonify, request

from ..extensions import get_store
from ..models import Product
from ..services.inventory_service import ProductNotFoundError, product_is_expired
from ..validation import NotFoundError, ValidationError, require_fields, to_int

products_bp = Blueprint("products", __name__, url_prefix="/api/products")

PRODUCT_FIELDS = ("name", "delivery_price", "category", "expiration_date", "quantity")


def _product_payload(product: Product) -> dict:
    store = get_store()
    data = product.to_dict()
    data["expired"] = product_is_expired(product, store.catalog.today())
    data["near_expiration"] = store.pricing.is_near_expiration(product)
    data["selling_price"] = str(store.selling_price(product))
    return data


@products_bp.get("")
def list_products():
    store = get_store()
    return jsonify({"products": [_product_payload(p) for p in store.delivered_products()]}), 200


@products_bp.post("")
def create_product_route():
    """
    Deliver a product.

    Body: name, delivery_price, category (FOOD | NON_FOOD),
    expiration_date (YYYY-MM-DD), quantity, optional id.
    """
    payload = request.get_json(silent=True) or {}
    store = get_store()

    try:
        require_fields(payload, PRODUCT_FIELDS)
        if payload.get("id") is not None:
            product = store.add_product(Product(
                id=payload["id"],
                **{field: payload[field] for field in PRODUCT_FIELDS},
            ))
        else:
            product = store.receive_product(**{field: payload[field] for field in PRODUCT_FIELDS})
        body = {"product": _product_payload(product)}
    except ValidationError as e:
        return jsonify({"error": e.message, "details": e.details}), 400
    except Exception:
        current_app.logger.exception("Failed to create product")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify(body), 201


@products_bp.get("/<int:product_id>")
def get_product_route(product_id: int):
    product = get_store().get_product(product_id)
    if product is None:
        return jsonify({"error": "Product not found"}), 404
    return jsonify({"product": _product_payload(product)}), 200


@products_bp.put("/<int:product_id>/quantity")
def set_quantity_route(product_id: int):
    """Stock correction: replace the on-hand quantity."""
    payload = request.get_json(silent=True) or {}
    store = get_store()

    try:
        require_fields(payload, ("quantity",))
        quantity = to_int(payload["quantity"], "quantity")
        if not store.catalog.set_quantity(product_id, quantity):
            raise ProductNotFoundError(product_id)
    except NotFoundError as e:
        return jsonify({"error": e.message, "details": e.details}), 404
    except ValidationError as e:
        return jsonify({"error": e.message, "details": e.details}), 400

    return jsonify({"product": _product_payload(store.get_product(product_id))}), 200
