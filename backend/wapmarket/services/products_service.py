# backend/wapmarket/services/products_service.py
"""
Products Service

Public reads only ever see active products. Sellers write into their own
store (created lazily on first product); admins may edit or remove any
product.
"""
from __future__ import annotations

from flask import current_app

from ..extensions import db
from ..models import Product, OrderItem, User, Store
from ..validation import ConflictError
from .store_service import get_or_create_seller_store, get_store

PRODUCT_MUTABLE_FIELDS = {"name", "description", "price", "stock", "image_url", "category", "is_active"}


class ProductNotFoundError(Exception):
    pass


def apply_product_patch(p: Product, patch: dict) -> None:
    for k, v in patch.items():
        if k not in PRODUCT_MUTABLE_FIELDS:
            continue
        setattr(p, k, v)


def list_products(store_id: int | None = None) -> list[dict]:
    query = db.session.query(Product).filter(Product.is_active.is_(True))
    if store_id is not None:
        query = query.filter(Product.store_id == store_id)

    products = query.order_by(Product.id.desc()).all()
    return [p.to_dict() for p in products]


def get_product(product_id: int, *, include_inactive: bool = False) -> Product:
    query = db.session.query(Product).filter(Product.id == product_id)
    if not include_inactive:
        query = query.filter(Product.is_active.is_(True))
    product = query.first()
    if not product:
        raise ProductNotFoundError("Product not found")
    return product


def list_seller_products(seller: User) -> list[dict]:
    """All products of the seller's stores, inactive ones included."""
    products = (
        db.session.query(Product)
        .join(Store, Store.id == Product.store_id)
        .filter(Store.owner_id == seller.id)
        .order_by(Product.id.desc())
        .all()
    )
    return [p.to_dict() for p in products]


def create_product(*, patch: dict, owner: User, store_id: int | None = None) -> dict:
    """
    Create a product from a validated patch dict.

    Without store_id the product goes to the owner's store, which is
    created if the seller has none yet. An explicit store_id is only
    passed through for admins.
    """
    if store_id is not None:
        store = get_store(store_id)
        if not store:
            raise ValueError("Store not found")
    else:
        store = get_or_create_seller_store(owner, commit=False)

    p = Product(store_id=store.id)
    apply_product_patch(p, patch)

    db.session.add(p)
    db.session.commit()

    current_app.logger.info("Product %s created in store %s by user %s", p.id, store.id, owner.id)
    return p.to_dict()


def update_product(*, product_id: int, patch: dict) -> dict:
    p = get_product(product_id, include_inactive=True)

    apply_product_patch(p, patch)
    db.session.commit()

    current_app.logger.info("Product %s updated fields: %s", p.id, ", ".join(sorted(patch.keys())))
    return p.to_dict()


def delete_product(*, product_id: int, hard: bool = False) -> None:
    """
    Soft-delete (is_active=False) by default.

    A hard delete removes the row and is refused while order items still
    reference the product, since they hold its price snapshot.
    """
    p = get_product(product_id, include_inactive=True)

    if hard:
        referenced = db.session.query(OrderItem.id).filter(OrderItem.product_id == p.id).first()
        if referenced:
            raise ConflictError("Product has orders; deactivate it instead")
        db.session.delete(p)
    else:
        p.is_active = False

    db.session.commit()
    current_app.logger.info("Product %s deleted (hard=%s)", product_id, hard)
