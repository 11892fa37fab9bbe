# Overview: Flask API routes for products operations; parses input and returns JSON responses.

# backend/wapmarket/routes/products.py
"""
Public product catalog.

Only active products are visible here. Seller and admin writes live in
routes/seller.py and routes/admin.py.
"""
from flask import Blueprint, request, jsonify

from ..models import Product
from ..services import products_service
from ..services.products_service import ProductNotFoundError
from ..validation import ModelValidationPolicy

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={"name", "description", "price", "stock", "image_url", "category", "is_active"},
    required_on_create={"name", "price"},
)

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("")
def list_products():
    """
    List active products.

    Query params:
    - store_id: int (optional) - filter by store
    """
    store_id = request.args.get("store_id")
    if store_id is not None:
        try:
            store_id = int(store_id)
        except ValueError:
            return jsonify({"error": "store_id must be an integer"}), 400

    products = products_service.list_products(store_id=store_id)
    return jsonify({"products": products, "count": len(products)}), 200


@products_bp.get("/<int:product_id>")
def get_product(product_id: int):
    try:
        product: Product = products_service.get_product(product_id)
    except ProductNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify({"product": product.to_dict()}), 200
