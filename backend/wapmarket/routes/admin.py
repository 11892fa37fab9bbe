# Overview: Flask API routes for admin operations; parses input and returns JSON responses.

# backend/wapmarket/routes/admin.py
"""
Admin routes.

Provides endpoints for:
- User listing and seller onboarding
- Product moderation (update, deactivate, delete)
- Order overview

All endpoints require an admin token.
"""

from flask import Blueprint, request, jsonify, current_app

from ..models import Product, ROLE_ADMIN
from ..services import admin_service, products_service, order_service
from ..services.auth_service import PasswordValidationError, DuplicateEmailError
from ..services.products_service import ProductNotFoundError
from ..validation import (
    parse_seller_payload,
    validate_payload,
    enforce_rules_product,
    ValidationError,
    ConflictError,
)
from ..decorators import require_auth, require_role
from .products import PRODUCT_POLICY

admin_bp = Blueprint("admin", __name__, url_prefix="/api/admin")


@admin_bp.get("/users")
@require_auth
@require_role(ROLE_ADMIN)
def list_users():
    """List all users with the store they own, if any."""
    users = admin_service.list_users()
    return jsonify({"users": users, "count": len(users)}), 200


@admin_bp.post("/create-seller")
@require_auth
@require_role(ROLE_ADMIN)
def create_seller():
    """
    Create a seller account together with its store.

    Request body:
    - name, email, password (required: email, password)
    - phone: str (optional)
    - store_name: str (optional, defaults to "<name>'s store")
    """
    try:
        req = parse_seller_payload(request.get_json(silent=True))
        user, store = admin_service.create_seller(req)
    except (ValidationError, PasswordValidationError, DuplicateEmailError) as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to create seller")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"success": True, "user": user.to_dict(), "store": store.to_dict()}), 201


@admin_bp.put("/products/<int:product_id>")
@require_auth
@require_role(ROLE_ADMIN)
def update_product_route(product_id: int):
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=True)
        enforce_rules_product(patch)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    try:
        updated = products_service.update_product(product_id=product_id, patch=patch)
    except ProductNotFoundError as e:
        return jsonify({"error": str(e)}), 404

    return jsonify({"product": updated}), 200


@admin_bp.delete("/products/<int:product_id>")
@require_auth
@require_role(ROLE_ADMIN)
def delete_product_route(product_id: int):
    """
    Deactivate a product; ?hard=true removes the row instead.
    """
    hard = request.args.get("hard", "false").lower() == "true"
    try:
        products_service.delete_product(product_id=product_id, hard=hard)
    except ProductNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409

    return jsonify({"ok": True}), 200


@admin_bp.get("/orders")
@require_auth
@require_role(ROLE_ADMIN)
def list_orders():
    orders = order_service.list_all_orders()
    return jsonify({"orders": orders, "count": len(orders)}), 200
