# Overview: Flask API routes for cashiers and registers; parses input and returns JSON responses.

# backend/salesfloor/routes/registers.py
"""
Cashier and Register API Routes

WHY: A sale can only be rung up at a register with a cashier bound to it.

DESIGN:
- Cashiers are hired once and keep their id
- Assigning to an occupied register is a 409; the existing binding stays
"""

from flask import Blueprint, current_app, jsonify, request

from ..extensions import get_store
from ..models import Cashier
from ..validation import ConflictError, NotFoundError, ValidationError, require_fields, to_int


cashiers_bp = Blueprint("cashiers", __name__, url_prefix="/api/cashiers")
registers_bp = Blueprint("registers", __name__, url_prefix="/api/registers")


# =============================================================================
# CASHIERS
# =============================================================================

@cashiers_bp.get("")
def list_cashiers():
    store = get_store()
    return jsonify({"cashiers": [c.to_dict() for c in store.cashiers()]}), 200


@cashiers_bp.post("")
def hire_cashier_route():
    """Body: name, monthly_salary, optional id."""
    payload = request.get_json(silent=True) or {}
    store = get_store()

    try:
        require_fields(payload, ("name", "monthly_salary"))
        if payload.get("id") is not None:
            cashier = store.add_cashier(Cashier(
                id=payload["id"],
                name=payload["name"],
                monthly_salary=payload["monthly_salary"],
            ))
        else:
            cashier = store.hire_cashier(payload["name"], payload["monthly_salary"])
    except ValidationError as e:
        return jsonify({"error": e.message, "details": e.details}), 400
    except Exception:
        current_app.logger.exception("Failed to hire cashier")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"cashier": cashier.to_dict()}), 201


# =============================================================================
# REGISTERS
# =============================================================================

@registers_bp.get("")
def list_registers():
    store = get_store()
    registers = []
    for assignment in store.assignments():
        cashier = store.cashier_at_register(assignment.register_number)
        entry = assignment.to_dict()
        entry["cashier"] = cashier.to_dict() if cashier else None
        registers.append(entry)
    return jsonify({"registers": registers}), 200


@registers_bp.get("/<int(signed=True):register_number>")
def get_register(register_number: int):
    cashier = get_store().cashier_at_register(register_number)
    return jsonify({
        "register_number": register_number,
        "assigned": cashier is not None,
        "cashier": cashier.to_dict() if cashier else None,
    }), 200


@registers_bp.post("/<int(signed=True):register_number>/assign")
def assign_register_route(register_number: int):
    """Body: cashier_id."""
    payload = request.get_json(silent=True) or {}

    try:
        require_fields(payload, ("cashier_id",))
        cashier_id = to_int(payload["cashier_id"], "cashier_id")
        assignment = get_store().assign_cashier_to_register(cashier_id, register_number)
    except ConflictError as e:
        return jsonify({"error": e.message, "details": e.details}), 409
    except NotFoundError as e:
        return jsonify({"error": e.message, "details": e.details}), 404
    except ValidationError as e:
        return jsonify({"error": e.message, "details": e.details}), 400

    return jsonify({"assignment": assignment.to_dict()}), 201
