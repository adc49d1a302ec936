from flask import Blueprint, jsonify

from ..extensions import get_store
from ..services import reporting_service


reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


@reports_bp.get("/financials")
def financials_report():
    return jsonify(reporting_service.financial_summary(get_store())), 200


@reports_bp.get("/sold-products")
def sold_products_report():
    return jsonify(reporting_service.sold_products_report(get_store())), 200


@reports_bp.get("/inventory")
def inventory_report():
    return jsonify(reporting_service.inventory_report(get_store())), 200
