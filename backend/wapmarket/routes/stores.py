# Overview: Public store directory.

from flask import Blueprint, jsonify

from ..services import store_service


stores_bp = Blueprint("stores", __name__, url_prefix="/api/stores")


@stores_bp.get("")
def list_stores():
    stores = store_service.list_stores()
    return jsonify({"stores": stores, "count": len(stores)}), 200
