# backend/salesfloor/routes/system.py
"""
System health endpoint.

Reports whether the receipt directory is writable so a broken mount shows
up before the first sale fails to persist.
"""

import os

from flask import Blueprint, jsonify

from ..extensions import get_store
from ..time_utils import to_utc_z, utcnow

system_bp = Blueprint("system", __name__, url_prefix="/api/system")


def check_receipt_storage_health() -> dict:
    store = get_store()
    output_dir = store.persistence.output_dir
    exists = output_dir.is_dir()
    writable = exists and os.access(output_dir, os.W_OK)

    if writable:
        status = "healthy"
    elif not exists and store.config.create_missing_directories:
        # Created on first save
        status = "healthy"
    else:
        status = "unhealthy"

    return {
        "status": status,
        "path": str(output_dir),
        "exists": exists,
        "writable": writable,
        "persistence_failures": len(store.receipts.persistence_failures()),
    }


@system_bp.get("/health")
def health():
    store = get_store()
    storage = check_receipt_storage_health()
    overall = "healthy" if storage["status"] == "healthy" else "degraded"
    return jsonify({
        "status": overall,
        "store_name": store.name,
        "timestamp": to_utc_z(utcnow()),
        "checks": {"receipt_storage": storage},
    }), 200
