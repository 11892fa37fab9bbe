# Overview: Flask API routes for checkout and order lookups.

# backend/wapmarket/routes/orders.py
"""Checkout (guest or buyer) and order lookups."""

from flask import Blueprint, request, jsonify, g, current_app

from ..models import ROLE_BUYER, ROLE_SELLER, ROLE_ADMIN
from ..services import order_service
from ..services.order_service import (
    EmptyCartError,
    InsufficientStockError,
    OrderNotFoundError,
    OrderAccessError,
)
from ..validation import parse_checkout_payload, ValidationError
from ..decorators import require_auth, require_role, optional_auth, forbid_roles


orders_bp = Blueprint("orders", __name__, url_prefix="/api")


@orders_bp.post("/orders")
@orders_bp.post("/checkout")
@optional_auth
@forbid_roles(ROLE_SELLER, ROLE_ADMIN)
def create_order_route():
    """
    Place an order from a cart.

    Body:
    - items: [{product_id, quantity}]
    - fulfillment_type: "pickup" | "delivery" (default pickup)
    - guest_name, guest_phone, address: optional contact details

    Anonymous callers create guest orders; a buyer token links the order to
    the buyer.
    """
    try:
        req = parse_checkout_payload(request.get_json(silent=True))
        order = order_service.create_order(req, buyer=g.current_user)
        return jsonify({"success": True, "order_id": order["id"], "order": order}), 201

    except (ValidationError, EmptyCartError) as e:
        return jsonify({"error": str(e)}), 400
    except InsufficientStockError as e:
        return jsonify({"error": str(e), "details": e.details}), 409
    except Exception:
        current_app.logger.exception("Failed to create order")
        return jsonify({"error": "Internal server error"}), 500


@orders_bp.get("/orders")
@require_auth
@require_role(ROLE_BUYER)
def list_my_orders_route():
    orders = order_service.list_buyer_orders(g.current_user)
    return jsonify({"orders": orders, "count": len(orders)}), 200


@orders_bp.get("/orders/<int:order_id>")
@require_auth
def get_order_route(order_id: int):
    try:
        order = order_service.get_order(order_id, g.current_user)
    except OrderNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except OrderAccessError as e:
        return jsonify({"error": str(e)}), 403
    return jsonify({"order": order}), 200
