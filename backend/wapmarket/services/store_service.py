from __future__ import annotations

from flask import current_app
from sqlalchemy import and_, func

from ..extensions import db
from ..models import Store, Product, User


def _default_store_name(owner: User) -> str:
    if owner.name:
        return f"{owner.name}'s store"
    return f"{owner.email.split('@', 1)[0]}'s store"


def create_store(owner: User, name: str | None = None, *, commit: bool = True) -> Store:
    store = Store(name=name or _default_store_name(owner), owner_id=owner.id)
    db.session.add(store)
    db.session.flush()
    if commit:
        db.session.commit()
        current_app.logger.info("Created store %s for user %s", store.id, owner.id)
    return store


def get_store_for_owner(owner_id: int) -> Store | None:
    return (
        db.session.query(Store)
        .filter_by(owner_id=owner_id)
        .order_by(Store.id.asc())
        .first()
    )


def get_or_create_seller_store(owner: User, *, commit: bool = True) -> Store:
    """
    Find the seller's store, creating it on first use.

    Two concurrent first calls can both create a store; the oldest one wins
    on every later lookup.
    """
    store = get_store_for_owner(owner.id)
    if store:
        return store
    return create_store(owner, commit=commit)


def get_store(store_id: int) -> Store | None:
    return db.session.query(Store).filter_by(id=store_id).first()


def list_stores() -> list[dict]:
    """Active stores with the number of active products in each."""
    rows = (
        db.session.query(Store, func.count(Product.id))
        .outerjoin(Product, and_(Product.store_id == Store.id, Product.is_active.is_(True)))
        .filter(Store.is_active.is_(True))
        .group_by(Store.id)
        .order_by(Store.name.asc(), Store.id.asc())
        .all()
    )

    result = []
    for store, product_count in rows:
        store_dict = store.to_dict()
        store_dict["product_count"] = product_count
        result.append(store_dict)
    return result
