# Overview: Seller dashboard routes: own products and incoming orders.

from flask import Blueprint, request, jsonify, g, current_app

from ..models import Product, ROLE_SELLER
from ..services import products_service, order_service
from ..services.order_service import OrderNotFoundError, OrderAccessError
from ..validation import validate_payload, enforce_rules_product, ValidationError
from ..decorators import require_auth, require_role
from .products import PRODUCT_POLICY


seller_bp = Blueprint("seller", __name__, url_prefix="/api/seller")


@seller_bp.get("/products")
@require_auth
@require_role(ROLE_SELLER)
def list_my_products():
    """Every product in the caller's store, inactive ones included."""
    products = products_service.list_seller_products(g.current_user)
    return jsonify({"products": products, "count": len(products)}), 200


@seller_bp.post("/products")
@require_auth
@require_role(ROLE_SELLER)
def create_product_route():
    """
    Create a product in the caller's store (created on first use).

    Admins may pass store_id to create into a specific store.
    """
    payload = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        return jsonify({"error": "Invalid JSON payload"}), 400

    payload = dict(payload)
    store_id = payload.pop("store_id", None)
    if store_id is not None and not g.current_user.is_admin:
        return jsonify({"error": "Field not allowed: store_id"}), 400

    try:
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=False)
        enforce_rules_product(patch)
        if store_id is not None and not isinstance(store_id, int):
            raise ValidationError("store_id must be an integer")
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    try:
        created = products_service.create_product(patch=patch, owner=g.current_user, store_id=store_id)
    except ValueError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to create product")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"product": created}), 201


@seller_bp.get("/orders")
@require_auth
@require_role(ROLE_SELLER)
def list_orders_route():
    orders = order_service.list_seller_orders(g.current_user)
    return jsonify({"orders": orders, "count": len(orders)}), 200


@seller_bp.put("/orders/<int:order_id>/status")
@require_auth
@require_role(ROLE_SELLER)
def set_order_status_route(order_id: int):
    """
    Overwrite an order's status.

    Body: {status}. The seller must have at least one item in the order.
    """
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({"error": "Invalid JSON payload"}), 400

    try:
        order = order_service.set_order_status(order_id, data.get("status"), g.current_user)
        return jsonify({"success": True, "order": order}), 200

    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except OrderNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except OrderAccessError as e:
        return jsonify({"error": str(e)}), 403
    except Exception:
        current_app.logger.exception("Failed to update order status")
        return jsonify({"error": "Internal server error"}), 500
