# Overview: Service-layer operations for reporting; read-only summaries over a StoreService.

from __future__ import annotations

from decimal import Decimal

from ..time_utils import to_utc_z, utcnow
from ..validation import format_money
from .inventory_service import product_is_expired
from .store_service import StoreService


def financial_summary(store: StoreService) -> dict:
    """
    Revenue and expenses for the store.

    income = revenue - delivery expenses
    profit = income - salary expenses
    """
    revenue = store.total_revenue()
    delivery = store.delivery_expenses()
    salaries = store.salary_expenses()
    income = revenue - delivery
    return {
        "store_name": store.name,
        "currency": store.config.currency,
        "generated_at": to_utc_z(utcnow()),
        "receipt_count": store.receipt_count(),
        "revenue": format_money(revenue),
        "delivery_expenses": format_money(delivery),
        "salary_expenses": format_money(salaries),
        "income": format_money(income),
        "profit": format_money(income - salaries),
    }


def sold_products_report(store: StoreService) -> dict:
    """Sold quantity and revenue per product, across every recorded receipt."""
    rows: dict[int, dict] = {}
    for receipt in store.list_receipts():
        for line in receipt.lines:
            row = rows.setdefault(line.product.id, {
                "product_id": line.product.id,
                "name": line.product.name,
                "quantity_sold": 0,
                "revenue": Decimal("0"),
            })
            row["quantity_sold"] += line.quantity
            row["revenue"] += line.line_total

    ordered = [rows[pid] for pid in sorted(rows)]
    for row in ordered:
        row["revenue"] = format_money(row["revenue"])
    return {
        "currency": store.config.currency,
        "items_sold": sum(r["quantity_sold"] for r in ordered),
        "rows": ordered,
    }


def inventory_report(store: StoreService) -> dict:
    """Current stock with today's selling price and shelf-life flags."""
    today = store.catalog.today()
    rows = []
    for product in store.delivered_products():
        expired = product_is_expired(product, today)
        rows.append({
            "product_id": product.id,
            "name": product.name,
            "category": product.category.value,
            "quantity": product.quantity,
            "expiration_date": product.expiration_date.isoformat(),
            "expired": expired,
            "near_expiration": store.pricing.is_near_expiration(product, today),
            "selling_price": None if expired else format_money(store.selling_price(product)),
        })
    return {
        "as_of": today.isoformat(),
        "currency": store.config.currency,
        "rows": rows,
    }
